"""
Core infrastructure for blockreg's dependency injection and handler registry.

This module provides:
- ServiceContainer: DI container using dependency-injector
- Handler discovery and selection
- Application bootstrap for initialization
- Custom exception hierarchy
"""

from .bootstrap import bootstrap, is_initialized, reset
from .container import ServiceContainer, get_container, resolve
from .exceptions import (
    ArtifactError,
    AuthenticationError,
    BlockregException,
    BlockregValidationError,
    BuildError,
    DefinitionError,
    DependencyCycleError,
    DependencyResolutionError,
    HandlerNotFoundError,
    PreconditionError,
    RegistryAPIError,
    RegistryConnectionError,
    RegistryError,
    ReservationError,
    TestsFailedError,
    VersionConflictError,
    VersionExistsError,
    VersionIncrementError,
    WorkingDirectoryError,
)
from .registry import HandlerRegistry, discover_handlers

__all__ = [
    "ArtifactError",
    "AuthenticationError",
    "BlockregException",
    "BlockregValidationError",
    "BuildError",
    "DefinitionError",
    "DependencyCycleError",
    "DependencyResolutionError",
    "HandlerNotFoundError",
    "HandlerRegistry",
    "PreconditionError",
    "RegistryAPIError",
    "RegistryConnectionError",
    "RegistryError",
    "ReservationError",
    "ServiceContainer",
    "TestsFailedError",
    "VersionConflictError",
    "VersionExistsError",
    "VersionIncrementError",
    "WorkingDirectoryError",
    "bootstrap",
    "discover_handlers",
    "get_container",
    "is_initialized",
    "reset",
    "resolve",
]
