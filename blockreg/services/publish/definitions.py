"""
Asset definition files.

An asset source directory holds one definition file with one or more YAML
documents. Each document is an asset definition with ``kind``,
``metadata.name`` (``handle/name``), ``metadata.version`` and an optional
``spec`` tree.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ...core.exceptions import DefinitionError
from ...core.models.registry import Readme

DEFINITION_FILENAMES = ("block.yml", "block.yaml")
README_FILENAME = "README.md"
LOCAL_VERSION = "local"


def find_definition_file(directory: str | Path) -> Path | None:
    """First definition file present in ``directory``."""
    for filename in DEFINITION_FILENAMES:
        candidate = Path(directory) / filename
        if candidate.exists():
            return candidate
    return None


def read_definitions(path: str | Path) -> list[dict[str, Any]]:
    """
    Parse and validate every asset definition in a definition file.

    Args:
        path: Definition file

    Returns:
        One dict per YAML document, in file order

    Raises:
        DefinitionError: If the file is missing, not a regular file, not valid
            YAML, empty, or a document lacks ``metadata.name`` or
            ``metadata.version``
    """
    path = Path(path)
    if not path.exists():
        raise DefinitionError(f"Definition file not found: {path}", file_path=str(path))
    if not path.is_file():
        raise DefinitionError(f"Definition path is not a file: {path}", file_path=str(path))

    try:
        with open(path, encoding="utf-8") as f:
            documents = [doc for doc in yaml.safe_load_all(f) if doc is not None]
    except yaml.YAMLError as e:
        raise DefinitionError(
            f"Failed to parse definition file: {e}", file_path=str(path), cause=e
        ) from e

    if not documents:
        raise DefinitionError(f"Definition file is empty: {path}", file_path=str(path))

    for index, doc in enumerate(documents):
        if not isinstance(doc, dict):
            raise DefinitionError(
                f"Document {index + 1} is not a mapping", file_path=str(path)
            )
        metadata = doc.get("metadata")
        if not isinstance(metadata, dict) or not metadata.get("name"):
            raise DefinitionError(
                f"Document {index + 1} is missing metadata.name", file_path=str(path)
            )
        if not metadata.get("version"):
            raise DefinitionError(
                f"{metadata['name']} is missing metadata.version", file_path=str(path)
            )
        # YAML may load 1.0 as a float
        metadata["version"] = str(metadata["version"])

    return documents


def read_readme(directory: str | Path) -> Readme | None:
    path = Path(directory) / README_FILENAME
    if not path.is_file():
        return None
    return Readme(type="markdown", content=path.read_text(encoding="utf-8"))


def split_name(name: str) -> tuple[str, str]:
    """
    Split ``handle/name`` into its parts.

    Raises:
        DefinitionError: If the name has no handle
    """
    handle, sep, short_name = name.partition("/")
    if not sep or not handle or not short_name:
        raise DefinitionError(f"Asset name must be of the form handle/name: {name}")
    return handle, short_name


@dataclass
class AssetSource:
    """
    A directory with its parsed definition file.

    ``definitions`` is the in-memory copy the pipeline mutates (resolved
    dependency versions, auto-computed versions); the file on disk is never
    rewritten.
    """

    directory: Path
    file: Path
    definitions: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def load(cls, directory: str | Path) -> AssetSource:
        """
        Locate and parse the definition file of ``directory``.

        Raises:
            DefinitionError: If no definition file exists or it is invalid
        """
        directory = Path(directory).resolve()
        path = find_definition_file(directory)
        if path is None:
            raise DefinitionError(
                f"No definition file ({' or '.join(DEFINITION_FILENAMES)}) found in {directory}",
                file_path=str(directory / DEFINITION_FILENAMES[0]),
            )
        return cls(directory=directory, file=path, definitions=read_definitions(path))

    @property
    def names(self) -> list[str]:
        return [d["metadata"]["name"] for d in self.definitions]

    def find(self, name: str) -> dict[str, Any] | None:
        for definition in self.definitions:
            if definition["metadata"]["name"] == name:
                return definition
        return None

    def snapshot(self) -> list[dict[str, Any]]:
        """Deep copy of the current in-memory definitions."""
        return copy.deepcopy(self.definitions)
