"""
Click decorators for blockreg CLI commands.

- handle_errors: Renders BlockregException as ``Error: <message>`` and
  exits with the exception's exit code
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, TypeVar

import click

from ..core.exceptions import BlockregException

F = TypeVar("F", bound=Callable[..., Any])


def _get_logger():
    from ..core.di import resolve_or_default
    from ..core.interfaces.logger import ILogger
    from ..services.logging import NullLogger

    return resolve_or_default(ILogger, NullLogger)


def handle_errors(f: F) -> F:
    """Decorator turning blockreg errors into a message and exit code.

    Usage:
        @click.command()
        @click.pass_obj
        @handle_errors
        def publish(ctx: BlockregContext, ...):
            ...
    """

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except BlockregException as e:
            _get_logger().debug("%s failed: %s", f.__name__, e, exc_info=True)
            click.echo(f"Error: {e.message}", err=True)
            raise SystemExit(e.exit_code) from e

    return wrapper  # type: ignore[return-value]
