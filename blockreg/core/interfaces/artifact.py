"""
Artifact handler interface definitions.

An artifact handler wraps one external build/package tool (docker, npm,
maven) or, for definition-only assets, no tool at all. The publish pipeline
drives every handler through the same calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from blockreg.core.models.registry import Artifact

if TYPE_CHECKING:
    from blockreg.registry_client import RegistryClient


class IArtifactHandler(ABC):
    """
    Interface for building, checksumming and shipping one kind of artifact.

    Class attributes:
        artifact_type: Declared type string stored with every pushed artifact
        display_name: Human readable name used in progress output
        priority: Selection order when probing a directory (lower first)
    """

    artifact_type: ClassVar[str]
    display_name: ClassVar[str]
    priority: ClassVar[int] = 100

    @classmethod
    @abstractmethod
    def is_supported(cls, directory: str) -> bool:
        """Check whether ``directory`` contains a project this handler builds."""
        pass

    def get_name(self) -> str:
        return self.display_name

    @abstractmethod
    def verify(self) -> None:
        """
        Check that the underlying tool is available.

        Raises:
            ToolNotFoundError: If the tool is not on PATH
        """
        pass

    @abstractmethod
    def calculate_checksum(self) -> str:
        """Hash identifying the exact artifact payload, independent of version."""
        pass

    @abstractmethod
    def build(self) -> None:
        pass

    @abstractmethod
    def test(self) -> None:
        pass

    @abstractmethod
    def push(self, name: str, version: str, commit_id: str | None = None) -> Artifact:
        """
        Publish the artifact for ``name`` at ``version``.

        Args:
            name: Asset name (``handle/name``)
            version: Version reserved in the registry
            commit_id: VCS commit the version was built from, if known

        Returns:
            Artifact descriptor to embed in the committed version
        """
        pass

    @abstractmethod
    def pull(
        self,
        details: dict[str, Any],
        target_dir: str,
        registry_client: RegistryClient,
    ) -> None:
        """Fetch a previously pushed artifact described by ``details``."""
        pass

    @abstractmethod
    def install(self, source_path: str, target_path: str) -> None:
        """Install a pulled artifact from ``source_path`` into ``target_path``."""
        pass
