"""Centralized configuration for the selection tracker.

Storage locations, logging and scan behavior are read from an optional YAML
file and validated at startup. Paths are project-relative until resolved with
``TrackerConfig.with_project_dir``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from selection_tracker.utils.result import ConfigError, Err, Ok, Result


# State version - increment when the persisted blob format changes
STATE_VERSION = "1.0"

DEFAULT_REGISTRY_PATH = "UserSettings/SelectionTracker.json"
DEFAULT_PREFERENCES_PATH = "UserSettings/SelectionTracker.Preference.json"
CONFIG_FILE_NAME = "tracker.yaml"


@dataclass
class StorageConfig:
    """Where persisted state lives, relative to the project directory."""

    registry_path: str = DEFAULT_REGISTRY_PATH
    preferences_path: str = DEFAULT_PREFERENCES_PATH
    state_version: str = STATE_VERSION


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "info"
    format: str = "text"


@dataclass
class ScanConfig:
    """Scene scan behavior."""

    include_persistent_area: bool = True
    skip_transform: bool = True


@dataclass
class TrackerConfig:
    """
    Complete tracker configuration.

    This is the single source of truth for storage locations and logging.
    """

    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)

    # Set at runtime
    project_dir: Optional[Path] = None

    @property
    def registry_file(self) -> Path:
        """Absolute path of the registry blob."""
        return self._resolve(self.storage.registry_path)

    @property
    def preferences_file(self) -> Path:
        """Absolute path of the preference blob."""
        return self._resolve(self.storage.preferences_path)

    def _resolve(self, relative: str) -> Path:
        base = self.project_dir or Path(".")
        return Path(base) / relative

    @classmethod
    def from_yaml(cls, path: Path) -> Result["TrackerConfig", ConfigError]:
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Result with loaded config or error
        """
        path = Path(path)

        if not path.exists():
            return Err(ConfigError(
                field="path",
                message=f"Configuration file not found: {path}",
            ))

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            return Err(ConfigError(
                field="yaml",
                message=f"Failed to parse YAML: {e}",
            ))
        except OSError as e:
            return Err(ConfigError(
                field="file",
                message=f"Failed to read config file: {e}",
            ))

        if not isinstance(data, dict):
            return Err(ConfigError(
                field="yaml",
                message="Top-level YAML value must be a mapping",
            ))

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Result["TrackerConfig", ConfigError]:
        """
        Create configuration from a dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Result with loaded config or error
        """
        try:
            storage_data = data.get("storage", {}) or {}
            storage = StorageConfig(
                registry_path=storage_data.get("registry_path", DEFAULT_REGISTRY_PATH),
                preferences_path=storage_data.get("preferences_path", DEFAULT_PREFERENCES_PATH),
                state_version=str(storage_data.get("state_version", STATE_VERSION)),
            )

            logging_data = data.get("logging", {}) or {}
            logging_config = LoggingConfig(
                level=logging_data.get("level", "info"),
                format=logging_data.get("format", "text"),
            )

            scan_data = data.get("scan", {}) or {}
            scan = ScanConfig(
                include_persistent_area=bool(scan_data.get("include_persistent_area", True)),
                skip_transform=bool(scan_data.get("skip_transform", True)),
            )

            config = cls(storage=storage, logging=logging_config, scan=scan)

        except (AttributeError, TypeError, ValueError) as e:
            return Err(ConfigError(
                field="unknown",
                message=f"Failed to parse configuration: {e}",
            ))

        return Ok(config)

    def validate(self) -> Result[None, ConfigError]:
        """
        Validate configuration values.

        Returns:
            Result indicating success or validation error
        """
        for name, value in [
            ("storage.registry_path", self.storage.registry_path),
            ("storage.preferences_path", self.storage.preferences_path),
        ]:
            if not value:
                return Err(ConfigError(field=name, message="Must not be empty"))
            if Path(value).is_absolute():
                return Err(ConfigError(
                    field=name,
                    message=f"Must be project-relative, got {value}",
                ))

        if self.storage.registry_path == self.storage.preferences_path:
            return Err(ConfigError(
                field="storage",
                message="Registry and preferences must be stored in different files",
            ))

        if self.logging.level.lower() not in ("debug", "info", "warn", "warning", "error"):
            return Err(ConfigError(
                field="logging.level",
                message=f"Unknown log level: {self.logging.level}",
            ))

        if self.logging.format not in ("json", "text"):
            return Err(ConfigError(
                field="logging.format",
                message=f"Must be 'json' or 'text', got {self.logging.format}",
            ))

        return Ok(None)

    def with_project_dir(self, project_dir: Path) -> "TrackerConfig":
        """Return a new config whose storage paths resolve under ``project_dir``."""
        return replace(self, project_dir=Path(project_dir))


def load_config(
    config_dir: Path = None,
    project_dir: Path = None,
) -> Result[TrackerConfig, ConfigError]:
    """
    Load configuration from the standard location.

    Reads ``<config_dir>/tracker.yaml`` when present, otherwise uses defaults.

    Args:
        config_dir: Configuration directory (defaults to the project directory)
        project_dir: Project directory the storage paths are relative to

    Returns:
        Result with loaded config or error
    """
    project_dir = Path(project_dir) if project_dir else Path(".")
    config_dir = Path(config_dir) if config_dir else project_dir

    config_path = config_dir / CONFIG_FILE_NAME
    if config_path.exists():
        result = TrackerConfig.from_yaml(config_path)
        if result.is_err():
            return result
        config = result.unwrap()
    else:
        config = TrackerConfig()

    validation_result = config.validate()
    if validation_result.is_err():
        return Err(validation_result.unwrap_err())

    return Ok(config.with_project_dir(project_dir))
