"""
Configuration models.

Provides Pydantic models for blockreg configuration with validation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import ConfigDict, Field, field_validator

from .base import BlockregBaseModel

LogLevel = Literal["debug", "info", "warning", "error"]

DEFAULT_REGISTRY_URL = "https://registry.blockreg.dev"


class ConfigBaseModel(BlockregBaseModel):
    """Base model for config sections with relaxed strict mode for TOML loading."""

    model_config = ConfigDict(
        strict=False,  # Allow coercion from TOML types
        validate_assignment=True,
        extra="ignore",  # Ignore unknown fields in config files
        populate_by_name=True,
        use_enum_values=True,
        revalidate_instances="never",
    )


def _normalize_url(v: str | None) -> str | None:
    if v is None or v == "":
        return None
    if not v.startswith(("http://", "https://")):
        raise ValueError("URL must start with http:// or https://")
    return v.rstrip("/")


class RegistryConfig(ConfigBaseModel):
    """Asset registry configuration section."""

    url: Annotated[str, Field(max_length=2048)] | None = DEFAULT_REGISTRY_URL
    timeout: float = 30.0
    reservation_ttl: int = 600

    @field_validator("url", mode="before")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Validate and normalize registry URL."""
        return _normalize_url(v)


class DockerConfig(ConfigBaseModel):
    """Docker image registry section."""

    registry: str | None = None  # host prefix, e.g. "docker.example.com"


class NpmConfig(ConfigBaseModel):
    """NPM package registry section."""

    registry: str | None = None

    @field_validator("registry", mode="before")
    @classmethod
    def validate_registry(cls, v: str | None) -> str | None:
        return _normalize_url(v)


class MavenConfig(ConfigBaseModel):
    """Maven repository section."""

    registry: str | None = None

    @field_validator("registry", mode="before")
    @classmethod
    def validate_registry(cls, v: str | None) -> str | None:
        return _normalize_url(v)


class RepositoryConfig(ConfigBaseModel):
    """Local asset repository section."""

    path: str = str(Path.home() / ".blockreg" / "repository")


class VCSConfig(ConfigBaseModel):
    """Version control section."""

    main_branches: list[str] = Field(default_factory=lambda: ["main", "master"])

    @field_validator("main_branches", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: Any) -> list[str]:
        """Parse comma-separated string to list."""
        if isinstance(v, str):
            return [x.strip() for x in v.split(",") if x.strip()]
        return v if v else []


class LoggingConfig(ConfigBaseModel):
    """Diagnostic log section. Progress output is not affected."""

    level: LogLevel = "warning"
    console: bool = False
    file: bool = True
    path: str = str(Path.home() / ".blockreg" / "blockreg.log")
    max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    backups: int = Field(default=3, ge=0)


class BlockregConfig(ConfigBaseModel):
    """Complete blockreg configuration.

    This model represents the full configuration with all sections.
    It can be loaded from TOML files or constructed programmatically.
    """

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    docker: DockerConfig = Field(default_factory=DockerConfig)
    npm: NpmConfig = Field(default_factory=NpmConfig)
    maven: MavenConfig = Field(default_factory=MavenConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    vcs: VCSConfig = Field(default_factory=VCSConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def get(self, key: str, default: Any = None) -> Any:
        """Get config value by dot-notation key.

        Args:
            key: Dot-notation key (e.g., 'registry.url')
            default: Default value if key not found

        Returns:
            Config value or default
        """
        parts = key.split(".")
        obj: Any = self
        for part in parts:
            if hasattr(obj, part):
                obj = getattr(obj, part)
            elif isinstance(obj, dict) and part in obj:
                obj = obj[part]
            else:
                return default
        return obj

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return self.model_dump()
