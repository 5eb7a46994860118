"""
Pydantic Settings for blockreg configuration.

Provides settings loading from TOML files, environment variables, and defaults.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from pydantic import model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from .models.config import (
    DockerConfig,
    LoggingConfig,
    MavenConfig,
    NpmConfig,
    RegistryConfig,
    RepositoryConfig,
    VCSConfig,
)


def _get_logger():
    from ..services.logging import NullLogger
    from .di import resolve_or_default
    from .interfaces.logger import ILogger

    return resolve_or_default(ILogger, NullLogger)


def user_config_path() -> Path:
    """Per-user config file used when no project config is found."""
    return Path.home() / ".blockreg" / "config.toml"


def find_config_file(start_dir: str | None = None) -> Path | None:
    """
    Find .blockreg/config.toml by walking up from start_dir (or cwd).

    Falls back to ~/.blockreg/config.toml.

    Returns:
        Path to config file, or None if not found.
    """
    start = Path(start_dir) if start_dir else Path.cwd()

    for parent in [start, *list(start.parents)]:
        config_path = parent / ".blockreg" / "config.toml"
        if config_path.exists():
            return config_path

        # Also check for pyproject.toml with [tool.blockreg] section
        pyproject = parent / "pyproject.toml"
        if pyproject.exists():
            try:
                with open(pyproject, "rb") as f:
                    data = tomllib.load(f)
                if "tool" in data and "blockreg" in data["tool"]:
                    return pyproject
            except tomllib.TOMLDecodeError as e:
                _get_logger().debug("Failed to parse pyproject.toml at %s: %s", pyproject, e)
            except OSError as e:
                _get_logger().debug("Failed to read pyproject.toml at %s: %s", pyproject, e)

    user_path = user_config_path()
    if user_path.exists():
        return user_path

    return None


class TomlConfigSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from TOML config files."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        config_path: Path | None = None,
        start_dir: str | None = None,
    ):
        super().__init__(settings_cls)
        self._config_path = config_path
        self._start_dir = start_dir
        self._data: dict[str, Any] | None = None

    def _load_toml(self) -> dict[str, Any]:
        """Load and cache TOML data."""
        if self._data is not None:
            return self._data

        self._data = {}

        path = self._config_path
        if path is None:
            path = find_config_file(self._start_dir)

        if path is None:
            return self._data

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)

            if path.name == "pyproject.toml":
                data = data.get("tool", {}).get("blockreg", {})

            self._data = data
            self._data["_config_file"] = str(path)

        except tomllib.TOMLDecodeError as e:
            _get_logger().warning("Failed to parse config file %s: %s", path, e)
            self._data["_config_error"] = f"Failed to parse config file: {e}"
        except OSError as e:
            _get_logger().warning("Failed to read config file %s: %s", path, e)
            self._data["_config_error"] = f"Failed to read config file: {e}"

        return self._data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get field value from TOML data."""
        data = self._load_toml()
        field_value = data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all TOML data for settings initialization."""
        return {k: v for k, v in self._load_toml().items() if not k.startswith("_")}


class BlockregSettings(BaseSettings):
    """Blockreg configuration settings with TOML and environment variable support.

    Priority (highest to lowest):
    1. Explicit init values
    2. Environment variables (BLOCKREG_<section>__<field>)
    3. TOML config file (.blockreg/config.toml, pyproject.toml [tool.blockreg]
       or ~/.blockreg/config.toml)
    4. Model defaults
    """

    model_config = {
        "env_prefix": "BLOCKREG_",
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }

    registry: RegistryConfig = RegistryConfig()
    docker: DockerConfig = DockerConfig()
    npm: NpmConfig = NpmConfig()
    maven: MavenConfig = MavenConfig()
    repository: RepositoryConfig = RepositoryConfig()
    vcs: VCSConfig = VCSConfig()
    logging: LoggingConfig = LoggingConfig()

    # Internal fields (not from config)
    _config_file: str | None = None
    _config_error: str | None = None

    @model_validator(mode="before")
    @classmethod
    def handle_legacy_env_vars(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Handle legacy environment variable aliases."""
        # BLOCKREG_REGISTRY_URL -> registry.url
        if "BLOCKREG_REGISTRY_URL" in os.environ:
            registry = data.get("registry", {})
            if isinstance(registry, dict):
                if registry.get("url") is None:
                    registry["url"] = os.environ["BLOCKREG_REGISTRY_URL"]
                data["registry"] = registry
        return data

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to add TOML loading.

        Note: We can't pass config_path/start_dir here easily, so we use
        a module-level variable as a workaround.
        """
        toml_source = TomlConfigSource(
            settings_cls,
            config_path=_current_config_path,
            start_dir=_current_start_dir,
        )
        return (
            init_settings,
            env_settings,
            toml_source,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to a plain nested dict."""
        result: dict[str, Any] = {
            "registry": self.registry.model_dump(),
            "docker": self.docker.model_dump(),
            "npm": self.npm.model_dump(),
            "maven": self.maven.model_dump(),
            "repository": self.repository.model_dump(),
            "vcs": self.vcs.model_dump(),
            "logging": self.logging.model_dump(),
        }
        if self._config_file:
            result["_config_file"] = self._config_file
        if self._config_error:
            result["_config_error"] = self._config_error
        return result


# Module-level variables for passing to settings_customise_sources
_current_config_path: Path | None = None
_current_start_dir: str | None = None


def load_settings(
    config_path: Path | None = None, start_dir: str | None = None
) -> BlockregSettings:
    """Load blockreg settings from config file and environment.

    Args:
        config_path: Explicit path to config file
        start_dir: Directory to start searching from (if config_path not given)

    Returns:
        BlockregSettings instance with all sources merged
    """
    global _current_config_path, _current_start_dir

    _current_config_path = config_path
    _current_start_dir = start_dir

    try:
        settings = BlockregSettings()

        toml_data = TomlConfigSource(BlockregSettings, config_path, start_dir)._load_toml()
        if "_config_file" in toml_data:
            settings._config_file = toml_data["_config_file"]
        if "_config_error" in toml_data:
            settings._config_error = toml_data["_config_error"]

        return settings
    finally:
        _current_config_path = None
        _current_start_dir = None
