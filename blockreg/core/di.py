"""
Lookups against the service container.

Services, handlers and the registry client resolve their logger and reporter
through ``resolve_or_default`` at call time, so they work unchanged whether
or not ``bootstrap()`` has run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")


def resolve_or_default(interface: type[T], default_factory: Callable[[], T]) -> T:
    """
    The registered implementation of ``interface``, else ``default_factory()``.

    Example:
        >>> from blockreg.core.interfaces.reporter import IProgressReporter
        >>> from blockreg.presenters.console import NullReporter
        >>> reporter = resolve_or_default(IProgressReporter, NullReporter)
    """
    from .container import get_container

    instance = get_container().try_resolve(interface)
    return instance if instance is not None else default_factory()
