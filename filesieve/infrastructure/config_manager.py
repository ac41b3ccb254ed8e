#!/usr/bin/env python3
"""Layered configuration for filesieve engine settings and rule sets.

This module provides:
- 4-level precedence hierarchy for engine settings
- YAML settings files and YAML rule-set files
- Environment variable overrides (FILESIEVE_*)
- Frozen EngineSettings consumed by FilterEngine
- Thread-safe operations

Example:
    >>> config = ConfigManager()
    >>> config.load_file("filesieve.yaml")
    >>> config.get("filesieve.engine.batch_size", default=100)
    >>> settings = EngineSettings.from_config(config)
"""

import copy
import os
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from filesieve.core.constants import DEFAULT_CONFIG, ConfigKey, ErrorCode, Limits
from filesieve.core.validators import (
    ValidationError,
    validate_positive_int,
    validate_threshold,
)
from filesieve.infrastructure.logger import LogLevel

ENV_PREFIX = "FILESIEVE_"


class ConfigSource(Enum):
    """Configuration source precedence levels."""

    COMPILED_DEFAULTS = 1  # Lowest precedence
    USER_CONFIG = 2
    ENVIRONMENT = 3
    RUNTIME = 4  # Highest precedence


class ConfigError(Exception):
    """Configuration error.

    Raised for unusable rule sets (bad patterns, contradictory bounds) and
    for settings files that cannot be loaded.
    """

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


def _read_yaml(file_path: Union[str, Path]) -> Dict[str, Any]:
    path = Path(file_path).expanduser()

    if not path.exists():
        raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML parse error in {file_path}: {e}", ErrorCode.INVALID_INPUT)
    except OSError as e:
        raise ConfigError(f"Error loading config {file_path}: {e}", ErrorCode.PERMISSION_DENIED)

    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config format in {file_path}", ErrorCode.INVALID_INPUT)

    return data


class ConfigManager:
    """Thread-safe layered settings manager.

    Settings are resolved with precedence:
    1. Compiled defaults (lowest)
    2. User config file
    3. Environment variables (FILESIEVE_*)
    4. Runtime updates (highest)
    """

    def __init__(self, config_file: Optional[str] = None, load_environment: bool = True):
        """Initialize configuration manager.

        Args:
            config_file: Optional YAML settings file to load
            load_environment: Whether to read FILESIEVE_* variables
        """
        self._config: Dict[ConfigSource, Dict[str, Any]] = {}
        self._lock = threading.RLock()

        self._config[ConfigSource.COMPILED_DEFAULTS] = copy.deepcopy(DEFAULT_CONFIG)

        if config_file:
            self.load_file(config_file)

        if load_environment:
            self._load_environment()

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG) -> None:
        """Load settings from a YAML file.

        Args:
            file_path: Path to YAML settings file
            source: Configuration source level

        Raises:
            ConfigError: If file cannot be loaded or parsed
        """
        config_data = _read_yaml(file_path)
        with self._lock:
            self._config[source] = config_data

    def load_dict(
        self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.RUNTIME
    ) -> None:
        """Load settings from a dictionary."""
        with self._lock:
            self._config[source] = copy.deepcopy(config_data)

    def _load_environment(self) -> None:
        """Load settings from environment variables.

        Variables use the form FILESIEVE_<SECTION>__<KEY>=value, for example
        FILESIEVE_ENGINE__BATCH_SIZE=500. Setting names contain underscores,
        so sections are separated by a double underscore.
        """
        env_config: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            parts = [part for part in key[len(ENV_PREFIX):].lower().split("__") if part]
            if not parts:
                continue

            current = env_config
            for part in parts[:-1]:
                current = current.setdefault(part, {})
                if not isinstance(current, dict):
                    break
            else:
                current[parts[-1]] = self._parse_env_value(value)

        if env_config:
            with self._lock:
                self._config[ConfigSource.ENVIRONMENT] = {ConfigKey.ROOT: env_config}

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value as bool, int, float or str."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a setting by dot-separated key.

        Args:
            key: Dot-separated key path (e.g., "filesieve.engine.batch_size")
            default: Default value if key not found

        Returns:
            Setting value or default
        """
        with self._lock:
            for source in sorted(self._config.keys(), key=lambda s: s.value, reverse=True):
                value = self._get_nested(self._config[source], key)
                if value is not None:
                    return value

            return default

    def _get_nested(self, config: Dict[str, Any], key: str) -> Optional[Any]:
        current: Any = config
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Set a setting by dot-separated key.

        Args:
            key: Dot-separated key path
            value: Value to set
            source: Configuration source level
        """
        with self._lock:
            current = self._config.setdefault(source, {})
            parts = key.split(".")
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Get merged settings from all sources."""
        with self._lock:
            merged: Dict[str, Any] = {}
            for source in sorted(self._config.keys(), key=lambda s: s.value):
                merged = self._deep_merge(merged, self._config[source])
            return merged

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Clear settings.

        Args:
            source: Specific source to clear, or None for all except defaults
        """
        with self._lock:
            if source:
                if source in self._config and source != ConfigSource.COMPILED_DEFAULTS:
                    del self._config[source]
            else:
                for s in [s for s in self._config if s != ConfigSource.COMPILED_DEFAULTS]:
                    del self._config[s]


@dataclass(frozen=True)
class EngineSettings:
    """Resolved engine and verification settings."""

    batch_size: int = Limits.DEFAULT_BATCH_SIZE
    batch_threshold: int = Limits.DEFAULT_BATCH_THRESHOLD
    max_workers: int = Limits.DEFAULT_MAX_WORKERS
    threshold: float = Limits.DEFAULT_TRUTH_THRESHOLD
    target_rate: float = Limits.TARGET_FILES_PER_SECOND
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        try:
            validate_positive_int(self.batch_size, ConfigKey.BATCH_SIZE)
            validate_positive_int(self.batch_threshold, ConfigKey.BATCH_THRESHOLD)
            validate_positive_int(self.max_workers, ConfigKey.MAX_WORKERS)
            validate_threshold(self.threshold)
        except ValidationError as e:
            raise ConfigError(str(e), e.error_code) from e

        if isinstance(self.target_rate, bool) or not isinstance(self.target_rate, (int, float)):
            raise ConfigError(f"'target_rate' must be numeric: {self.target_rate!r}")
        if self.target_rate <= 0:
            raise ConfigError(f"'target_rate' must be positive: {self.target_rate}")
        levels = LogLevel.__members__
        if not isinstance(self.log_level, str) or self.log_level.upper() not in levels:
            raise ConfigError(
                f"'log_level' must be one of {', '.join(levels)}: {self.log_level!r}"
            )

    @classmethod
    def from_config(cls, config: ConfigManager) -> "EngineSettings":
        """Build settings from a ConfigManager.

        Raises:
            ConfigError: If any resolved value is invalid
        """
        engine = f"{ConfigKey.ROOT}.{ConfigKey.ENGINE}"
        verification = f"{ConfigKey.ROOT}.{ConfigKey.VERIFICATION}"
        return cls(
            batch_size=config.get(f"{engine}.{ConfigKey.BATCH_SIZE}", Limits.DEFAULT_BATCH_SIZE),
            batch_threshold=config.get(
                f"{engine}.{ConfigKey.BATCH_THRESHOLD}", Limits.DEFAULT_BATCH_THRESHOLD
            ),
            max_workers=config.get(f"{engine}.{ConfigKey.MAX_WORKERS}", Limits.DEFAULT_MAX_WORKERS),
            threshold=config.get(
                f"{verification}.{ConfigKey.THRESHOLD}", Limits.DEFAULT_TRUTH_THRESHOLD
            ),
            target_rate=config.get(
                f"{verification}.{ConfigKey.TARGET_RATE}", Limits.TARGET_FILES_PER_SECOND
            ),
            log_level=config.get(f"{ConfigKey.ROOT}.{ConfigKey.LOGGING}.level", "INFO"),
        )


def load_filter_config(file_path: Union[str, Path]):
    """Load a rule set from a YAML file.

    The file holds either a top-level ``filters:`` mapping or the rule set
    itself.

    Args:
        file_path: Path to YAML rule-set file

    Returns:
        FilterConfig

    Raises:
        ConfigError: If the file cannot be read or the rule set is invalid
    """
    from filesieve.rules.models import FilterConfig

    data = _read_yaml(file_path)
    rule_set = data.get("filters", data)
    if not isinstance(rule_set, dict):
        raise ConfigError(f"'filters' must be a mapping in {file_path}")
    return FilterConfig.from_dict(rule_set)


# Global config manager instance
_global_config: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[str] = None) -> ConfigManager:
    """Get or create global configuration manager."""
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager(config_file)
    return _global_config


def set_global_config(config: Optional[ConfigManager]) -> None:
    """Set (or reset, with None) the global configuration manager."""
    global _global_config
    _global_config = config
