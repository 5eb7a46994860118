"""Artifact handlers, selected in priority order."""

from .base import ArtifactHandler
from .definition import DefinitionArtifactHandler
from .docker import DockerArtifactHandler
from .maven import MavenArtifactHandler
from .npm import NpmArtifactHandler

__all__ = [
    "ArtifactHandler",
    "DefinitionArtifactHandler",
    "DockerArtifactHandler",
    "MavenArtifactHandler",
    "NpmArtifactHandler",
]
