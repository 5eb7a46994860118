"""
Local dependency resolution.

A reference anywhere in a definition's ``kind`` or ``spec`` whose version is
``local`` (``handle/name:local``) points at an asset being developed next to
this one. Before the asset is reserved, each such reference is published
from its source directory (once per top-level invocation) and the reference
is rewritten in memory to the version that came out.
"""

from __future__ import annotations

import contextlib
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ...core.di import resolve_or_default
from ...core.exceptions import (
    DefinitionError,
    DependencyCycleError,
    DependencyResolutionError,
)
from ...core.interfaces.logger import ILogger
from ...core.interfaces.reporter import IProgressReporter
from ..repository import AssetUri, repository_path
from .definitions import LOCAL_VERSION, AssetSource, find_definition_file, read_definitions


def _get_logger() -> ILogger:
    from ..logging import NullLogger

    return resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]


class LocalVersionCache:
    """
    Resolved ``local`` versions for one top-level publish.

    Also tracks which assets are being published right now so a reference
    back to one of them is reported as a cycle instead of recursing forever.
    """

    def __init__(self) -> None:
        self._versions: dict[str, str] = {}
        self._in_flight: list[str] = []

    def get(self, name: str) -> str | None:
        return self._versions.get(name)

    def set(self, name: str, version: str) -> None:
        self._versions[name] = version

    def __contains__(self, name: object) -> bool:
        return name in self._versions

    def __len__(self) -> int:
        return len(self._versions)

    def is_in_flight(self, name: str) -> bool:
        return name in self._in_flight

    def cycle_to(self, name: str) -> list[str]:
        """The in-flight chain from ``name`` back to itself."""
        start = self._in_flight.index(name)
        return [*self._in_flight[start:], name]

    @contextlib.contextmanager
    def publishing(self, names: list[str]) -> Iterator[None]:
        """Mark ``names`` as in flight for the duration of the block."""
        for name in names:
            if name in self._in_flight:
                raise DependencyCycleError(self.cycle_to(name))
        self._in_flight.extend(names)
        try:
            yield
        finally:
            del self._in_flight[len(self._in_flight) - len(names) :]


@dataclass
class LocalReference:
    """Where a ``local`` reference sits inside a definition."""

    container: dict | list
    key: Any
    uri: AssetUri

    def rewrite(self, version: str) -> None:
        self.container[self.key] = str(self.uri.with_version(version))


def _is_local_reference(value: str) -> AssetUri | None:
    if not value.endswith(f":{LOCAL_VERSION}") or not AssetUri.matches(value):
        return None
    uri = AssetUri.parse(value)
    return uri if uri.version == LOCAL_VERSION else None


def find_local_references(definition: dict[str, Any]) -> list[LocalReference]:
    """All ``handle/name:local`` strings in ``kind`` and the ``spec`` tree."""
    found: list[LocalReference] = []

    def walk(node: Any) -> None:
        items: Any
        if isinstance(node, dict):
            items = node.items()
        elif isinstance(node, list):
            items = enumerate(node)
        else:
            return
        for key, value in items:
            if isinstance(value, str):
                uri = _is_local_reference(value)
                if uri is not None:
                    found.append(LocalReference(node, key, uri))
            else:
                walk(value)

    kind = definition.get("kind")
    if isinstance(kind, str):
        uri = _is_local_reference(kind)
        if uri is not None:
            found.append(LocalReference(definition, "kind", uri))
    walk(definition.get("spec"))
    return found


@dataclass
class ResolutionResult:
    """What the resolver rewrote."""

    external: dict[str, str] = field(default_factory=dict)
    same_source: list[LocalReference] = field(default_factory=list)


class DependencyResolver:
    """
    Resolves ``local`` references of one asset source.

    Lookup order for a referenced asset: versions already resolved in this
    invocation, assets in the same definition file, sibling directories,
    then the local repository's ``local`` checkout. Anything found outside
    the same file is published through ``publish_local`` first.
    """

    def __init__(
        self,
        source: AssetSource,
        cache: LocalVersionCache,
        publish_local: Callable[[Path], dict[str, str]],
        reporter: IProgressReporter | None = None,
        repository_base: str | Path | None = None,
    ) -> None:
        self.source = source
        self.cache = cache
        self.publish_local = publish_local
        self.reporter = reporter
        self.repository_base = repository_base
        self._siblings: dict[str, Path] | None = None

    def _scan_siblings(self) -> dict[str, Path]:
        """Asset name -> directory for every sibling with a definition file."""
        if self._siblings is not None:
            return self._siblings

        self._siblings = {}
        parent = self.source.directory.parent
        for directory in sorted(p for p in parent.iterdir() if p.is_dir()):
            if directory.resolve() == self.source.directory.resolve():
                continue
            path = find_definition_file(directory)
            if path is None:
                continue
            try:
                definitions = read_definitions(path)
            except DefinitionError as e:
                _get_logger().debug("Ignoring sibling %s: %s", directory, e)
                continue
            for definition in definitions:
                self._siblings.setdefault(definition["metadata"]["name"], directory)
        return self._siblings

    def _locate(self, uri: AssetUri) -> Path | None:
        sibling = self._scan_siblings().get(uri.full_name)
        if sibling is not None:
            return sibling

        installed = repository_path(uri.handle, uri.name, LOCAL_VERSION, self.repository_base)
        if installed.is_dir() and find_definition_file(installed) is not None:
            return installed.resolve()
        return None

    def _resolve_external(self, uri: AssetUri) -> str:
        name = uri.full_name
        cached = self.cache.get(name)
        if cached is not None:
            return cached

        if self.cache.is_in_flight(name):
            raise DependencyCycleError(self.cache.cycle_to(name))

        directory = self._locate(uri)
        if directory is None:
            raise DependencyResolutionError(
                f"Local dependency {name} was not found next to {self.source.directory} "
                "or in the local repository",
                dependency=name,
            )

        _get_logger().debug("Publishing local dependency %s from %s", name, directory)
        if self.reporter is not None:
            self.reporter.info("Publishing local dependency %s from %s", name, directory)

        published = self.publish_local(directory)

        for published_name, version in published.items():
            self.cache.set(published_name, version)

        version = self.cache.get(name)
        if version is None:
            raise DependencyResolutionError(
                f"Publishing {directory} did not produce a version for {name}",
                dependency=name,
            )
        return version

    def resolve(self) -> ResolutionResult:
        """
        Rewrite every ``local`` reference of the source in memory.

        Returns:
            External name -> version mappings and the same-file references,
            which callers re-link once the final versions are known

        Raises:
            DependencyCycleError: If a reference leads back to an asset being published
            DependencyResolutionError: If a dependency cannot be found or published
        """
        result = ResolutionResult()
        for definition in self.source.definitions:
            for ref in find_local_references(definition):
                sibling = self.source.find(ref.uri.full_name)
                if sibling is not None:
                    ref.rewrite(sibling["metadata"]["version"])
                    result.same_source.append(ref)
                    continue

                version = self._resolve_external(ref.uri)
                ref.rewrite(version)
                result.external[ref.uri.full_name] = version
        return result


def relink_same_source(references: list[LocalReference], source: AssetSource) -> None:
    """Point same-file references at the (possibly auto-bumped) current versions."""
    for ref in references:
        definition = source.find(ref.uri.full_name)
        if definition is not None:
            ref.rewrite(definition["metadata"]["version"])
