"""
Asset references and the local asset repository layout.

References look like ``[scheme://]handle/name[:version]``; a missing version
means ``current``. Installed assets live at ``<repository>/<handle>/<name>/<version>``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from ..core.exceptions import InvalidAssetUriError

DEFAULT_VERSION = "current"

_URI_PATTERN = re.compile(
    r"^(?:[a-z][a-z0-9+.-]*://)?([^/\s:]+)/([^\s:/]+)(?::(\S+))?$", re.IGNORECASE
)


@dataclass(frozen=True)
class AssetUri:
    """Parsed asset reference."""

    handle: str
    name: str
    version: str = DEFAULT_VERSION

    @classmethod
    def parse(cls, uri: str) -> AssetUri:
        """
        Parse an asset reference.

        Raises:
            InvalidAssetUriError: If ``uri`` is not ``[scheme://]handle/name[:version]``
        """
        match = _URI_PATTERN.match(uri.strip())
        if not match:
            raise InvalidAssetUriError(uri)
        handle, name, version = match.groups()
        return cls(handle=handle, name=name, version=version or DEFAULT_VERSION)

    @classmethod
    def matches(cls, value: str) -> bool:
        return bool(_URI_PATTERN.match(value.strip()))

    @property
    def full_name(self) -> str:
        return f"{self.handle}/{self.name}"

    def with_version(self, version: str) -> AssetUri:
        return AssetUri(self.handle, self.name, version)

    def __str__(self) -> str:
        return f"{self.full_name}:{self.version}"


def repository_base() -> Path:
    from ..config import config_get

    return Path(config_get("repository.path")).expanduser()


def repository_path(
    handle: str, name: str, version: str, base: str | Path | None = None
) -> Path:
    """Where ``handle/name:version`` is (or would be) installed locally."""
    root = Path(base).expanduser() if base is not None else repository_base()
    return root / handle / name / version
