"""
Dependency injection container for blockreg.

Uses dependency-injector for DI with support for:
- Singleton and transient lifetimes
- Interface-based resolution
- Ordered handler registries for artifact and VCS handlers
"""

from collections.abc import Callable
from typing import Optional, TypeVar

from dependency_injector import providers

from .interfaces.artifact import IArtifactHandler
from .interfaces.vcs import IVCSHandler

T = TypeVar("T")


class ServiceContainer:
    """
    Dependency injection container for blockreg.

    Combines dependency-injector's providers with the handler registries
    the publish pipeline selects from.
    """

    _instance: Optional["ServiceContainer"] = None

    def __init__(self) -> None:
        self._providers: dict[type, providers.Provider] = {}

        # Handler registries keep registration order; selection sorts by priority
        self._artifact_handlers: dict[str, type[IArtifactHandler]] = {}
        self._vcs_handlers: dict[str, type[IVCSHandler]] = {}

    @classmethod
    def get_instance(cls) -> "ServiceContainer":
        """Get the global container instance (singleton)."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the global container (for testing)."""
        cls._instance = None

    # -------------------------------------------------------------------------
    # Core service registration
    # -------------------------------------------------------------------------

    def register_singleton(
        self,
        interface: type[T],
        implementation: T | None = None,
        factory: Callable[[], T] | None = None,
    ) -> None:
        """
        Register a singleton service.

        Args:
            interface: The interface type
            implementation: Optional concrete instance
            factory: Optional factory function (for lazy init)
        """
        if implementation is not None:
            self._providers[interface] = providers.Object(implementation)
        elif factory is not None:
            self._providers[interface] = providers.Singleton(factory)
        else:
            raise ValueError("Must provide either implementation or factory")

    def register_transient(
        self,
        interface: type[T],
        factory: Callable[..., T],
    ) -> None:
        """Register a transient service (new instance per resolve)."""
        self._providers[interface] = providers.Factory(factory)

    def resolve(self, interface: type[T]) -> T:
        """
        Resolve a service by interface.

        Raises:
            KeyError: If no registration found
        """
        if interface not in self._providers:
            raise KeyError(f"No provider registered for: {interface}")
        return self._providers[interface]()

    def try_resolve(self, interface: type[T]) -> T | None:
        """Resolve a service, returning None if not registered."""
        if interface not in self._providers:
            return None
        return self._providers[interface]()

    def override(self, interface: type[T], provider: providers.Provider) -> None:
        """Override a registered provider (useful for testing)."""
        self._providers[interface] = provider

    # -------------------------------------------------------------------------
    # Artifact handler registry
    # -------------------------------------------------------------------------

    def register_artifact_handler(self, handler_class: type[IArtifactHandler]) -> None:
        """
        Register an artifact handler class under its declared type.

        Args:
            handler_class: Class implementing IArtifactHandler
        """
        self._artifact_handlers[handler_class.artifact_type.lower()] = handler_class

    def list_artifact_handlers(self) -> list[type[IArtifactHandler]]:
        """Registered artifact handler classes in selection order."""
        return sorted(self._artifact_handlers.values(), key=lambda cls: cls.priority)

    def get_artifact_handler_class(self, artifact_type: str) -> type[IArtifactHandler] | None:
        """Look up a handler class by declared type (case-insensitive)."""
        return self._artifact_handlers.get(artifact_type.lower())

    # -------------------------------------------------------------------------
    # VCS handler registry
    # -------------------------------------------------------------------------

    def register_vcs_handler(self, name: str, handler_class: type[IVCSHandler]) -> None:
        """
        Register a VCS handler.

        Args:
            name: Handler name (e.g., 'git')
            handler_class: Class implementing IVCSHandler
        """
        self._vcs_handlers[name] = handler_class

    def get_vcs_handler(self, name: str = "git") -> IVCSHandler:
        """
        Get a VCS handler instance.

        Raises:
            KeyError: If no handler registered
        """
        if name not in self._vcs_handlers:
            raise KeyError(f"No VCS handler registered: {name}")
        return self._vcs_handlers[name]()

    def list_vcs_handlers(self) -> list[str]:
        """List registered VCS handler names."""
        return list(self._vcs_handlers.keys())


# -------------------------------------------------------------------------
# Module-level convenience functions
# -------------------------------------------------------------------------


def get_container() -> ServiceContainer:
    """Get the global service container instance."""
    return ServiceContainer.get_instance()


def resolve(interface: type[T]) -> T:
    """Resolve a service from the global container."""
    return get_container().resolve(interface)
