"""
Registry domain models.

Shapes exchanged with the asset registry during the reserve / commit / abort
protocol and version lookups.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from .base import WireModel


class Artifact(WireModel):
    """Pushed build output backing a version.

    ``details`` is handler specific, e.g. image name and tags for Docker or
    package coordinates for NPM and Maven.
    """

    type: str
    details: dict[str, Any] = Field(default_factory=dict)


class Repository(WireModel):
    """VCS snapshot captured once per push."""

    type: str
    commit: str | None = None
    branch: str | None = None
    main: bool = False
    details: dict[str, Any] = Field(default_factory=dict)


class Readme(WireModel):
    """Readme attached to a published version."""

    type: str = "markdown"
    content: str


class AssetVersion(WireModel):
    """A committed (or to be committed) version of one asset."""

    content: dict[str, Any]
    checksum: str | None = None
    readme: Readme | None = None
    repository: Repository | None = None
    artifact: Artifact | None = None

    @property
    def name(self) -> str:
        return self.content.get("metadata", {}).get("name", "")

    @property
    def version(self) -> str:
        return self.content.get("metadata", {}).get("version", "")


class ReservedVersion(WireModel):
    """One asset's slot in a reservation."""

    version: str
    content: dict[str, Any]
    exists: bool = False

    @property
    def name(self) -> str:
        return self.content.get("metadata", {}).get("name", "")


class Reservation(WireModel):
    """Server-issued handle consumed by exactly one commit or abort."""

    id: str
    expires: int | str | None = None
    versions: list[ReservedVersion] = Field(default_factory=list)

    def new_versions(self) -> list[ReservedVersion]:
        """Versions that still need an artifact pushed and committed."""
        return [v for v in self.versions if not v.exists]
