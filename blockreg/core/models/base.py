"""
Base Pydantic models for blockreg.

Provides common configuration and base classes for all blockreg models.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BlockregBaseModel(BaseModel):
    """Base model for all blockreg Pydantic models.

    Configuration:
        - strict: Strict type coercion (no implicit conversions)
        - validate_assignment: Validate on attribute assignment
        - extra: Reject unknown fields
        - populate_by_name: Allow field aliases
        - use_enum_values: Serialize enums as values
        - revalidate_instances: Trust model instances (performance)
    """

    model_config = ConfigDict(
        strict=True,
        validate_assignment=True,
        extra="forbid",
        populate_by_name=True,
        use_enum_values=True,
        revalidate_instances="never",
    )


class ImmutableModel(BlockregBaseModel):
    """Immutable base model for DTOs that should not change after creation."""

    model_config = ConfigDict(
        frozen=True,
        strict=True,
        extra="forbid",
        populate_by_name=True,
        use_enum_values=True,
        revalidate_instances="never",
    )


class WireModel(BlockregBaseModel):
    """Base model for registry payloads.

    Registry responses may carry fields this client does not know about, and
    numbers may arrive as strings, so validation is relaxed.
    """

    model_config = ConfigDict(
        strict=False,
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
        use_enum_values=True,
        revalidate_instances="never",
    )
