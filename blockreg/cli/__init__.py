"""
Click-based CLI for blockreg.

This module provides the main Click command group and serves as the
entry point for the blockreg CLI.

Usage:
    from blockreg.cli import cli
    cli()  # Invokes the CLI
"""

from __future__ import annotations

import click

from .context import BlockregContext

# Version is loaded from package metadata
try:
    from importlib.metadata import version

    __version__ = version("blockreg-cli")
except Exception:
    __version__ = "0.1.0"


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="blockreg")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """blockreg - publish and install versioned block assets

    \b
    Publishing:
        blockreg publish [DIR]     Version, build, test and publish assets
        blockreg push [DIR]        Alias for publish

    \b
    Consuming:
        blockreg view <uri>        Show a registered version
        blockreg pull <uri>        Fetch an artifact into a directory
        blockreg install <uri>...  Install into the local repository
    """
    ctx.ensure_object(dict)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)
    else:
        ctx.obj = BlockregContext.create(verbose=verbose)


def register_commands() -> None:
    """Register all CLI commands with the main group."""
    from .commands import COMMANDS, publish

    for cmd in COMMANDS:
        cli.add_command(cmd)
    cli.add_command(publish, name="push")


# Register commands at module load time
register_commands()


__all__ = [
    "BlockregContext",
    "__version__",
    "cli",
    "register_commands",
]
