"""
Native Click implementation of the view command.

Usage: blockreg view <uri>
"""

from __future__ import annotations

import click
import yaml

from ...registry_client import RegistryClient
from ...services.pull import PullService
from ..context import BlockregContext
from ..decorators import handle_errors


@click.command("view")
@click.argument("uri")
@click.option("--registry", metavar="URL", help="Registry URL (overrides config)")
@click.pass_obj
@handle_errors
def view(ctx: BlockregContext, uri: str, registry: str | None) -> None:
    """Show the definition of a registered asset version."""
    client = RegistryClient(base_url=registry) if registry else None
    registration = PullService(registry_client=client, reporter=ctx.reporter).lookup(uri)

    click.echo(f"{registration.name}:{registration.version}")
    if registration.checksum:
        click.echo(f"  Checksum: {registration.checksum}")
    if registration.artifact:
        click.echo(f"  Artifact: {registration.artifact.type}")
    if registration.repository and registration.repository.commit:
        click.echo(f"  Commit:   {registration.repository.commit}")
    click.echo("")
    click.echo(yaml.safe_dump(registration.content, sort_keys=False).rstrip())
