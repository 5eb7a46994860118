"""
Definition-only artifact handler.

Fallback for assets that have nothing to build: the definition file itself
is the artifact, so the registry copy is all a pull needs.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any

import yaml

from ...core.exceptions import ArtifactError
from ...core.models.registry import Artifact
from ...services.publish.definitions import (
    DEFINITION_FILENAMES,
    README_FILENAME,
    find_definition_file,
)
from .base import ArtifactHandler


class DefinitionArtifactHandler(ArtifactHandler):
    """Handler for assets that consist of their definition file only."""

    artifact_type = "yaml"
    display_name = "YAML File"
    priority = 1000

    @classmethod
    def is_supported(cls, directory: str) -> bool:
        return find_definition_file(directory) is not None

    def _definition_file(self) -> Path:
        path = find_definition_file(self.directory)
        if path is None:
            raise ArtifactError(f"Failed to find definition file in folder: {self.directory}")
        return path

    def calculate_checksum(self) -> str:
        """SHA-256 of the definition file."""
        return hashlib.sha256(self._definition_file().read_bytes()).hexdigest()

    def build(self) -> None:
        pass

    def test(self) -> None:
        pass

    def push(self, name: str, version: str, commit_id: str | None = None) -> Artifact:
        return Artifact(type=self.artifact_type, details={"name": name, "version": version})

    def pull(self, details: dict[str, Any], target_dir: str, registry_client: Any) -> None:
        """Write the registered definition (and readme) into ``target_dir``."""
        registration = registry_client.get_version(details["name"], details["version"])
        if registration is None:
            raise ArtifactError(f"Version not found: {details['name']}:{details['version']}")

        target = Path(target_dir)
        target.mkdir(parents=True, exist_ok=True)
        with open(target / DEFINITION_FILENAMES[0], "w", encoding="utf-8") as f:
            yaml.safe_dump(registration.content, f, sort_keys=False)
        if registration.readme is not None:
            (target / README_FILENAME).write_text(registration.readme.content, encoding="utf-8")
