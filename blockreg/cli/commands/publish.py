"""
Native Click implementation of the publish command.

Usage: blockreg publish [options] [directory]

Versions, builds, tests and publishes every asset defined in a directory.
"""

from __future__ import annotations

import click

from ...registry_client import RegistryClient
from ...services.publish import PublishOptions, PublishPipeline
from ..context import BlockregContext
from ..decorators import handle_errors


@click.command("publish")
@click.argument("directory", default=".", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--ignore-working-directory",
    is_flag=True,
    help="Publish even if the working directory is dirty or behind its remote",
)
@click.option("--skip-tests", is_flag=True, help="Do not run tests before publishing")
@click.option(
    "--dry-run",
    is_flag=True,
    help="Reserve versions and report them without pushing anything",
)
@click.option(
    "--auto-versioning",
    is_flag=True,
    help="Bump versions that already exist with different content",
)
@click.option(
    "--no-version-check",
    is_flag=True,
    help="Do not check versions against the registry before reserving",
)
@click.option("--registry", metavar="URL", help="Registry URL (overrides config)")
@click.option("--verbose", is_flag=True, help="Show debug output")
@click.pass_obj
@handle_errors
def publish(
    ctx: BlockregContext,
    directory: str,
    ignore_working_directory: bool,
    skip_tests: bool,
    dry_run: bool,
    auto_versioning: bool,
    no_version_check: bool,
    registry: str | None,
    verbose: bool,
) -> None:
    """Publish the assets defined in DIRECTORY.

    DIRECTORY must contain a block.yml definition file and defaults to the
    current directory. Assets referenced with the ``local`` version are
    published first.

    \b
    Examples:

        blockreg publish                          # Publish current directory

        blockreg publish --dry-run                # Preview versions

        blockreg push --auto-versioning ./users   # Bump existing versions
    """
    ctx.set_verbose(verbose)

    options = PublishOptions(
        ignore_working_directory=ignore_working_directory,
        skip_tests=skip_tests,
        dry_run=dry_run,
        auto_versioning=auto_versioning,
        check_version=not no_version_check,
    )
    client = RegistryClient(base_url=registry) if registry else None
    pipeline = PublishPipeline(
        directory, options, registry_client=client, reporter=ctx.reporter
    )
    result = pipeline.run()

    click.echo("")
    if result.dry_run:
        click.echo("Dry run - nothing was published:")
    else:
        click.echo("Published:")
    for name, version in result.references.items():
        suffix = " (already existed)" if name in result.skipped else ""
        click.echo(f"  {name}:{version}{suffix}")

    if result.tags:
        click.echo("")
        click.echo("Tags: " + ", ".join(result.tags))
