"""
Semantic version inference for asset definitions.

Compares two definitions of the same asset structurally and reports the
smallest version increment the change requires:

- a different ``kind`` or any removed or modified entity, consumer, provider
  or API method is MAJOR
- a pure addition is MINOR
- anything else (descriptions, untouched specs) is NONE

PATCH never comes out of the structural comparison; it only appears when
two concrete version strings are compared positionally.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from ..core.exceptions import DefinitionError, VersionFormatError


class IncrementType(str, Enum):
    """Version bump severity, ordered NONE < PATCH < MINOR < MAJOR."""

    NONE = "NONE"
    PATCH = "PATCH"
    MINOR = "MINOR"
    MAJOR = "MAJOR"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def __str__(self) -> str:
        return self.value


_RANKS = {
    IncrementType.NONE: 0,
    IncrementType.PATCH: 1,
    IncrementType.MINOR: 2,
    IncrementType.MAJOR: 3,
}

# Resource kinds whose spec is a map of API methods
API_RESOURCE_KINDS = frozenset(
    {
        "rest.kapeta.com/v1/api",
        "rest.kapeta.com/v1/client",
        "grpc.kapeta.com/v1/api",
        "grpc.kapeta.com/v1/client",
        "rest.blockware.com/v1/api",
        "rest.blockware.com/v1/client",
        "grpc.blockware.com/v1/api",
        "grpc.blockware.com/v1/client",
    }
)

_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.-]+))?$")


@dataclass(frozen=True)
class VersionInfo:
    """Parsed ``major.minor.patch[-prerelease]`` version."""

    major: int
    minor: int
    patch: int
    pre_release: str | None = None

    @classmethod
    def parse(cls, version: str) -> VersionInfo:
        """
        Parse a version string.

        Raises:
            VersionFormatError: If the string is not ``x.y.z`` with an optional
                ``-prerelease`` suffix
        """
        match = _VERSION_PATTERN.match(str(version).strip())
        if not match:
            raise VersionFormatError(str(version))
        major, minor, patch, pre_release = match.groups()
        return cls(int(major), int(minor), int(patch), pre_release)

    def _key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __lt__(self, other: VersionInfo) -> bool:
        return self._key() < other._key()

    def __le__(self, other: VersionInfo) -> bool:
        return self._key() <= other._key()

    def _suffix(self) -> str:
        return f"-{self.pre_release}" if self.pre_release else ""

    def to_major_version(self) -> str:
        return f"{self.major}{self._suffix()}"

    def to_minor_version(self) -> str:
        return f"{self.major}.{self.minor}{self._suffix()}"

    def to_full_version(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}{self._suffix()}"

    def __str__(self) -> str:
        return self.to_full_version()


def max_increment(*types: IncrementType) -> IncrementType:
    """Most severe of the given increments (NONE when called without any)."""
    return max(types, key=lambda t: t.rank, default=IncrementType.NONE)


def is_increment_greater_than(type_a: IncrementType, type_b: IncrementType) -> bool:
    """True if ``type_a`` is a bigger bump than ``type_b``."""
    return IncrementType(type_a).rank > IncrementType(type_b).rank


def increment_version_by(version: str, increment: IncrementType) -> str:
    """
    Bump ``version`` by ``increment``.

    MAJOR resets minor and patch, MINOR resets patch, NONE returns the
    version unchanged. A pre-release suffix is carried over.
    """
    info = VersionInfo.parse(version)
    increment = IncrementType(increment)

    if increment is IncrementType.MAJOR:
        info = replace(info, major=info.major + 1, minor=0, patch=0)
    elif increment is IncrementType.MINOR:
        info = replace(info, minor=info.minor + 1, patch=0)
    elif increment is IncrementType.PATCH:
        info = replace(info, patch=info.patch + 1)
    else:
        return version

    return str(info)


def calculate_increment_type(version_a: str, version_b: str) -> IncrementType:
    """Positional difference between two concrete versions."""
    a = VersionInfo.parse(version_a)
    b = VersionInfo.parse(version_b)

    if a.major != b.major:
        return IncrementType.MAJOR
    if a.minor != b.minor:
        return IncrementType.MINOR
    if a.patch != b.patch:
        return IncrementType.PATCH
    return IncrementType.NONE


def calculate_next_version(new_definition: dict, existing_definition: dict) -> str:
    """Version of ``new_definition`` bumped by what the change against ``existing_definition`` requires."""
    required = compare_definitions(new_definition, existing_definition)
    return increment_version_by(new_definition["metadata"]["version"], required)


def compare_definitions(new_definition: dict, existing_definition: dict) -> IncrementType:
    """
    Smallest increment required to go from ``existing_definition`` to ``new_definition``.

    Neither argument is modified.

    Raises:
        DefinitionError: If a consumer or provider list repeats a ``kind:name`` identity
    """
    new_kind = str(new_definition.get("kind", "")).lower()
    old_kind = str(existing_definition.get("kind", "")).lower()
    if new_kind != old_kind:
        return IncrementType.MAJOR

    new_spec = new_definition.get("spec") or {}
    old_spec = existing_definition.get("spec") or {}

    if not new_spec and not old_spec:
        return IncrementType.NONE
    if not new_spec:
        # Spec was removed
        return IncrementType.MAJOR

    entities = compare_entities(new_spec.get("entities"), old_spec.get("entities"))
    if entities is IncrementType.MAJOR:
        return entities

    consumers = compare_resource_maps(
        as_resource_map(new_spec.get("consumers")),
        as_resource_map(old_spec.get("consumers")),
    )
    if consumers is IncrementType.MAJOR:
        return consumers

    providers = compare_resource_maps(
        as_resource_map(new_spec.get("providers")),
        as_resource_map(old_spec.get("providers")),
    )

    return max_increment(entities, consumers, providers)


def compare_entities(
    new_entities: list[dict] | None, old_entities: list[dict] | None
) -> IncrementType:
    """Removed or changed entities are MAJOR, added ones MINOR."""
    new_by_name = {entity.get("name"): entity for entity in new_entities or []}
    old_by_name = {entity.get("name"): entity for entity in old_entities or []}

    for name, old_entity in old_by_name.items():
        if name not in new_by_name:
            return IncrementType.MAJOR
        if new_by_name[name] != old_entity:
            return IncrementType.MAJOR

    if any(name not in old_by_name for name in new_by_name):
        return IncrementType.MINOR

    return IncrementType.NONE


def as_resource_map(resources: list[dict] | None) -> dict[str, dict]:
    """
    Index resources by ``kind:metadata.name``.

    Raises:
        DefinitionError: If two resources share an identity
    """
    out: dict[str, dict] = {}
    for resource in resources or []:
        identity = f"{resource.get('kind')}:{(resource.get('metadata') or {}).get('name')}"
        if identity in out:
            raise DefinitionError(
                f"Found 2 identical resources: {identity}. "
                "Make sure your resources are uniquely named per kind."
            )
        out[identity] = resource
    return out


def compare_resource_maps(
    new_resources: dict[str, dict], old_resources: dict[str, dict]
) -> IncrementType:
    """Compare two identity-keyed resource maps."""
    if new_resources == old_resources:
        return IncrementType.NONE

    out = IncrementType.NONE
    for key, old_resource in old_resources.items():
        if key not in new_resources:
            return IncrementType.MAJOR

        diff = compare_resources(new_resources[key], old_resource)
        if diff is IncrementType.MAJOR:
            return diff
        out = max_increment(out, diff)

    if any(key not in old_resources for key in new_resources):
        out = max_increment(out, IncrementType.MINOR)

    return out


def compare_resources(new_resource: dict, old_resource: dict) -> IncrementType:
    """Compare two resources that share a ``kind:name`` identity."""
    if new_resource == old_resource:
        return IncrementType.NONE

    old_name = (old_resource.get("metadata") or {}).get("name")
    new_name = (new_resource.get("metadata") or {}).get("name")
    if old_name != new_name:
        return IncrementType.MAJOR

    old_spec = old_resource.get("spec") or {}
    new_spec = new_resource.get("spec") or {}

    if not old_spec and not new_spec:
        return IncrementType.NONE
    if bool(old_spec) != bool(new_spec):
        return IncrementType.MAJOR

    if str(new_resource.get("kind", "")).lower() in API_RESOURCE_KINDS:
        return compare_methods(new_spec.get("methods"), old_spec.get("methods"))

    if old_spec != new_spec:
        return IncrementType.MAJOR

    return IncrementType.NONE


_METHOD_FIELDS = ("arguments", "responseType", "method", "path")


def _without_description(method: Any) -> Any:
    if isinstance(method, dict):
        return {k: v for k, v in method.items() if k != "description"}
    return method


def compare_methods(
    new_methods: dict[str, dict] | None, old_methods: dict[str, dict] | None
) -> IncrementType:
    """Compare API method maps keyed by method id, ignoring descriptions."""
    new_methods = new_methods or {}
    old_methods = old_methods or {}

    for method_id, old_method in old_methods.items():
        if method_id not in new_methods:
            return IncrementType.MAJOR

        old = _without_description(old_method)
        new = _without_description(new_methods[method_id])
        if old == new:
            continue

        if not isinstance(old, dict) or not isinstance(new, dict):
            return IncrementType.MAJOR

        for field in _METHOD_FIELDS:
            if old.get(field) != new.get(field):
                return IncrementType.MAJOR

    if any(method_id not in old_methods for method_id in new_methods):
        return IncrementType.MINOR

    return IncrementType.NONE
