"""
Native Click implementation of the install command.

Usage: blockreg install <uri>...
"""

from __future__ import annotations

import click

from ...registry_client import RegistryClient
from ...services.pull import PullService
from ..context import BlockregContext
from ..decorators import handle_errors


@click.command("install")
@click.argument("uris", nargs=-1, required=True)
@click.option("--registry", metavar="URL", help="Registry URL (overrides config)")
@click.pass_obj
@handle_errors
def install(ctx: BlockregContext, uris: tuple[str, ...], registry: str | None) -> None:
    """Install asset versions into the local repository.

    Versions already installed are left untouched.
    """
    client = RegistryClient(base_url=registry) if registry else None
    service = PullService(registry_client=client, reporter=ctx.reporter)
    for uri in uris:
        path = service.install(uri)
        click.echo(f"{uri} -> {path}")
