"""
Application bootstrap for blockreg.

Initializes the DI container with core services and handlers.
Call once at application startup.
"""

from .container import ServiceContainer, get_container
from .interfaces.logger import ILogger
from .interfaces.reporter import IProgressReporter
from .registry import discover_handlers

_initialized = False


def bootstrap(verbose: bool = False) -> ServiceContainer:
    """
    Bootstrap the blockreg application.

    Initializes the DI container with:
    - Core services (logger, progress reporter)
    - Artifact and VCS handlers

    Args:
        verbose: Show debug output from the progress reporter

    Returns:
        Initialized ServiceContainer
    """
    global _initialized

    container = get_container()

    if _initialized:
        return container

    _register_core_services(container, verbose)
    discover_handlers(container)

    _initialized = True
    return container


def _register_core_services(container: ServiceContainer, verbose: bool) -> None:
    """Register core application services."""
    from ..presenters.console import ConsoleReporter
    from ..services.logging import BlockregLogger

    container.register_singleton(
        IProgressReporter,  # type: ignore[type-abstract]
        implementation=ConsoleReporter(verbose=verbose),
    )

    def create_logger() -> ILogger:
        from .settings import load_settings

        return BlockregLogger(load_settings().logging, verbose=verbose)

    container.register_singleton(ILogger, factory=create_logger)  # type: ignore[type-abstract]


def reset() -> None:
    """
    Reset the application state.

    Useful for testing to ensure clean state between tests.
    """
    global _initialized
    ServiceContainer.reset()
    _initialized = False


def is_initialized() -> bool:
    """Check if the application has been bootstrapped."""
    return _initialized
