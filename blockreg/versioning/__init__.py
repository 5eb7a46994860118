"""Semantic version inference for asset definitions."""

from .calculator import (
    IncrementType,
    VersionInfo,
    as_resource_map,
    calculate_increment_type,
    calculate_next_version,
    compare_definitions,
    compare_entities,
    compare_methods,
    compare_resource_maps,
    compare_resources,
    increment_version_by,
    is_increment_greater_than,
    max_increment,
)

__all__ = [
    "IncrementType",
    "VersionInfo",
    "as_resource_map",
    "calculate_increment_type",
    "calculate_next_version",
    "compare_definitions",
    "compare_entities",
    "compare_methods",
    "compare_resource_maps",
    "compare_resources",
    "increment_version_by",
    "is_increment_greater_than",
    "max_increment",
]
