"""
Native Click implementation of the pull command.

Usage: blockreg pull [options] <uri>
"""

from __future__ import annotations

import click

from ...registry_client import RegistryClient
from ...services.pull import PullService
from ..context import BlockregContext
from ..decorators import handle_errors


@click.command("pull")
@click.argument("uri")
@click.option(
    "--target",
    "-t",
    default=".",
    type=click.Path(file_okay=False),
    help="Directory to pull into (default: current directory)",
)
@click.option("--registry", metavar="URL", help="Registry URL (overrides config)")
@click.pass_obj
@handle_errors
def pull(ctx: BlockregContext, uri: str, target: str, registry: str | None) -> None:
    """Pull the artifact of a registered asset version.

    URI is ``handle/name[:version]``; the version defaults to ``current``.

    \b
    Examples:

        blockreg pull acme/users:1.2.0

        blockreg pull acme/users -t ./vendor/users
    """
    client = RegistryClient(base_url=registry) if registry else None
    service = PullService(registry_client=client, reporter=ctx.reporter)
    registration = service.pull(uri, target)
    click.echo(f"Pulled {registration.name}:{registration.version} into {target}")
