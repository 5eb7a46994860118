"""
Pydantic models for blockreg.

Re-exports the registry wire models, VCS models and configuration models.
"""

from .base import BlockregBaseModel, ImmutableModel, WireModel
from .config import (
    BlockregConfig,
    DockerConfig,
    LoggingConfig,
    MavenConfig,
    NpmConfig,
    RegistryConfig,
    RepositoryConfig,
    VCSConfig,
)
from .registry import (
    Artifact,
    AssetVersion,
    Readme,
    Repository,
    Reservation,
    ReservedVersion,
)
from .vcs import CheckoutInfo, VCSStatus

__all__ = [
    "Artifact",
    "AssetVersion",
    "BlockregBaseModel",
    "BlockregConfig",
    "CheckoutInfo",
    "DockerConfig",
    "ImmutableModel",
    "LoggingConfig",
    "MavenConfig",
    "NpmConfig",
    "Readme",
    "RegistryConfig",
    "Repository",
    "RepositoryConfig",
    "Reservation",
    "ReservedVersion",
    "VCSConfig",
    "VCSStatus",
    "WireModel",
]
