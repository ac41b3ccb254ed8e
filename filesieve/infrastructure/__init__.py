"""Filesieve Infrastructure Layer.

Services used by the rules and verification layers:
- ConfigManager: Layered engine settings and YAML rule-set loading
- Logger: Structured logging system
"""

from .config_manager import (
    ConfigError,
    ConfigManager,
    ConfigSource,
    EngineSettings,
    get_config_manager,
    load_filter_config,
    set_global_config,
)
from .logger import LogLevel, Logger, configure_logging, get_logger, set_logger

__all__ = [
    # Logger exports
    "Logger",
    "LogLevel",
    "get_logger",
    "set_logger",
    "configure_logging",
    # ConfigManager exports
    "ConfigSource",
    "ConfigError",
    "ConfigManager",
    "EngineSettings",
    "get_config_manager",
    "set_global_config",
    "load_filter_config",
]
