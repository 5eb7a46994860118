"""
Handler registry with auto-discovery.

Registers artifact and VCS handlers from:
1. Built-in handlers in blockreg.plugins.*
2. Entry point handlers from external packages

and selects the handler that matches a directory or a declared type.
"""

import importlib
import pkgutil

from .container import ServiceContainer, get_container
from .di import resolve_or_default
from .exceptions import HandlerNotFoundError
from .interfaces.artifact import IArtifactHandler
from .interfaces.logger import ILogger
from .interfaces.vcs import IVCSHandler

ENTRY_POINT_GROUP = "blockreg.handlers"


def _get_logger() -> ILogger:
    from ..services.logging import NullLogger

    return resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]


def discover_handlers(
    container: ServiceContainer | None = None,
    package_name: str = "blockreg.plugins",
) -> None:
    """
    Auto-discover and register handlers.

    Scans blockreg.plugins.{artifacts,vcs} for concrete handler classes, then
    loads anything registered under the ``blockreg.handlers`` entry point
    group.

    Args:
        container: Container to register into (default: global container)
        package_name: Base package to scan for handlers
    """
    container = container or get_container()
    _discover_builtin_handlers(container, package_name)
    _discover_entrypoint_handlers(container)


def _discover_builtin_handlers(container: ServiceContainer, package_name: str) -> None:
    for subpackage in ("artifacts", "vcs"):
        try:
            subpkg = importlib.import_module(f"{package_name}.{subpackage}")
        except ImportError:
            continue
        _scan_package_for_handlers(container, subpkg)


def _scan_package_for_handlers(container: ServiceContainer, package) -> None:
    """Scan a package for handler classes and register them."""
    package_path = getattr(package, "__path__", None)
    if not package_path:
        return

    for _importer, modname, _ispkg in pkgutil.iter_modules(package_path):
        # Skip private modules and base classes
        if modname.startswith("_") or modname == "base":
            continue

        try:
            module = importlib.import_module(f"{package.__name__}.{modname}")
        except ImportError as e:
            _get_logger().debug("Failed to import handler module %s: %s", modname, e)
            continue

        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if isinstance(attr, type) and attr.__module__ == module.__name__:
                _try_register_handler(container, attr)


def _try_register_handler(container: ServiceContainer, cls: type) -> bool:
    """Register a class if it implements one of the handler interfaces."""
    if _implements(cls, IArtifactHandler):
        container.register_artifact_handler(cls)
        return True
    if _implements(cls, IVCSHandler):
        try:
            instance = cls()
            container.register_vcs_handler(instance.type, cls)
            return True
        except Exception as e:
            _get_logger().debug(
                "Failed to load VCS handler %s.%s: %s",
                cls.__module__,
                cls.__name__,
                e,
            )
    return False


def _implements(cls: type, interface: type) -> bool:
    """
    Check if a class implements an interface.

    Returns True if cls is a concrete subclass of interface
    (not the interface itself and not abstract).
    """
    try:
        return (
            isinstance(cls, type)
            and issubclass(cls, interface)
            and cls is not interface
            and not getattr(cls, "__abstractmethods__", set())
        )
    except TypeError:
        return False


def _discover_entrypoint_handlers(container: ServiceContainer) -> None:
    """
    Discover handlers registered via entry points.

    External packages can register handlers by adding to pyproject.toml:

        [project.entry-points."blockreg.handlers"]
        helm = "my_package.helm:HelmHandler"
    """
    from importlib.metadata import entry_points

    for ep in entry_points(group=ENTRY_POINT_GROUP):
        try:
            handler_cls = ep.load()
        except Exception as e:
            # Don't fail startup due to broken external handlers
            _get_logger().debug("Failed to load entry point handler %s: %s", ep.name, e)
            continue
        if not _try_register_handler(container, handler_cls):
            _get_logger().debug("Entry point %s is not a handler class", ep.name)


def register_handler(cls: type) -> type:
    """
    Decorator to manually register a handler class.

    Usage:
        @register_handler
        class HelmHandler(ArtifactHandler):
            ...
    """
    if not _try_register_handler(get_container(), cls):
        raise TypeError(f"{cls.__name__} does not implement a handler interface")
    return cls


class HandlerRegistry:
    """
    Selects artifact and VCS handlers for the publish and pull flows.

    Artifact handlers are tried in priority order by their directory
    predicate; the definition-only handler accepts any directory and sorts
    last. Lookups by declared type ignore case.
    """

    def __init__(self, container: ServiceContainer | None = None) -> None:
        self._container = container or get_container()

    def artifact_types(self) -> list[str]:
        return [cls.artifact_type for cls in self._container.list_artifact_handlers()]

    def artifact_handler_class_for(self, directory: str) -> type[IArtifactHandler]:
        for handler_cls in self._container.list_artifact_handlers():
            if handler_cls.is_supported(directory):
                _get_logger().debug(
                    "Selected %s handler for %s", handler_cls.artifact_type, directory
                )
                return handler_cls
        raise HandlerNotFoundError(f"Artifact type not found for directory: {directory}")

    def artifact_handler_for(self, directory: str, **kwargs) -> IArtifactHandler:
        """
        Instantiate the first handler that supports ``directory``.

        Raises:
            HandlerNotFoundError: If no handler matches
        """
        return self.artifact_handler_class_for(directory)(directory, **kwargs)

    def artifact_handler_for_type(
        self, artifact_type: str, directory: str = ".", **kwargs
    ) -> IArtifactHandler:
        """
        Instantiate the handler registered for a declared artifact type.

        Raises:
            HandlerNotFoundError: If the type is unknown
        """
        handler_cls = self._container.get_artifact_handler_class(artifact_type)
        if handler_cls is None:
            raise HandlerNotFoundError(
                f"Artifact type not found: {artifact_type}", artifact_type=artifact_type
            )
        return handler_cls(directory, **kwargs)

    def vcs_handler_for(self, directory: str) -> IVCSHandler | None:
        """First available VCS handler whose repository contains ``directory``."""
        for name in self._container.list_vcs_handlers():
            handler = self._container.get_vcs_handler(name)
            if handler.is_available() and handler.is_repo(directory):
                return handler
        return None
