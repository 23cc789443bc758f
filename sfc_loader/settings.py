"""Settings for the loader CLI and for callers that want file-based config.

Three scopes, later overriding earlier:
- User global (~/.sfc-loader/settings.yaml)
- Project (.sfc-loader/settings.yaml)
- Local (.sfc-loader/settings.local.yaml)

Merged settings are validated into LoaderSettings.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import Field

from .compiled_cache import DiskCompiledCache
from .context import Options

logger = logging.getLogger(__name__)


class ResolutionSettings(BaseModel):
    """Resolution engine settings."""

    retain_failures: bool = Field(default=False, description="Keep failed resolutions cached instead of retrying")
    builtin_handlers: bool = Field(default=True, description="Register the built-in .json/.yaml/.txt/.css handlers")


class CacheSettings(BaseModel):
    """Compiled-code cache settings."""

    enabled: bool = True
    dir: str = Field(default="~/.sfc-loader/cache", description="Compiled-code cache directory")


class LoggingSettings(BaseModel):
    """Logging settings."""

    level: str | None = Field(default=None, description="Log level; None uses SFC_LOADER_LOG_LEVEL")
    path: str | None = Field(default=None, description="JSONL log file; None disables file logging")


class LoaderSettings(BaseModel):
    """Effective settings after merging all scopes."""

    loader: ResolutionSettings = Field(default_factory=ResolutionSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def create_cache(self) -> DiskCompiledCache | None:
        if not self.cache.enabled:
            return None
        return DiskCompiledCache(self.cache.dir)

    def to_options(self, **collaborators: Any) -> Options:
        """Build loader Options from these settings.

        Args:
            collaborators: Options fields to set directly (get_file, modules,
                module_handlers, ...). They override settings-derived values.
        """
        values: dict[str, Any] = {
            "builtin_handlers": self.loader.builtin_handlers,
            "retain_failures": self.loader.retain_failures,
            "cache": self.create_cache(),
        }
        values.update(collaborators)
        return Options(**values)


class SettingsManager:
    """Manages settings across user/project/local scopes."""

    def __init__(self, config_dir: Path | None = None, user_config_dir: Path | None = None):
        """Initialize settings manager with standard paths.

        Args:
            config_dir: Base directory for project/local settings (for testing).
                If None, uses .sfc-loader in current directory.
            user_config_dir: Base directory for user settings (for testing).
                If None, uses ~/.sfc-loader.
        """
        if config_dir is None:
            config_dir = Path(".sfc-loader")
        if user_config_dir is None:
            user_config_dir = Path.home() / ".sfc-loader"

        self.user_settings_file = user_config_dir / "settings.yaml"
        self.project_settings_file = config_dir / "settings.yaml"
        self.local_settings_file = config_dir / "settings.local.yaml"

    def get_merged_settings(self) -> dict[str, Any]:
        """Get merged settings from all scopes.

        Merge order (later overrides earlier):
        1. User settings
        2. Project settings
        3. Local settings
        """
        merged: dict[str, Any] = {}
        for path in (self.user_settings_file, self.project_settings_file, self.local_settings_file):
            settings = self._read_settings(path)
            if settings:
                merged = deep_merge(merged, settings)
        return merged

    def load(self) -> LoaderSettings:
        """Load and validate effective settings.

        Raises:
            pydantic.ValidationError: Settings files contain invalid values
        """
        return LoaderSettings.model_validate(self.get_merged_settings())

    def _read_settings(self, path: Path) -> dict[str, Any] | None:
        """Read settings from YAML file.

        Returns:
            Settings dict, or None if the file doesn't exist or is unreadable
        """
        if not path.exists():
            return None

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
                return data if data else {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read settings from {path}: {e}")
            return None


def deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries (overlay takes precedence)."""
    result = base.copy()

    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


__all__ = [
    "LoaderSettings",
    "ResolutionSettings",
    "CacheSettings",
    "LoggingSettings",
    "SettingsManager",
    "deep_merge",
]
