"""Filesieve - rule-based file classification with truth scoring.

Example:
    >>> from filesieve import FilterEngine, FileMetadata
    >>> files = [FileMetadata("f.ts", 1000, "text/plain")]
    >>> result = FilterEngine().filter({"maxSize": 1000}, files)
    >>> result.included
    ['f.ts']
"""

from filesieve.core.constants import FILESIEVE_VERSION, FilterKind
from filesieve.hooks import FilterHooks, LoggingHooks, NullHooks
from filesieve.infrastructure.config_manager import ConfigError, EngineSettings, load_filter_config
from filesieve.rules import (
    ConfigParser,
    FileMetadata,
    FilterConfig,
    FilterEngine,
    FilterResult,
    GlobMatcher,
)
from filesieve.verification import FilterVerificationService, VerificationReport, render_report

__version__ = FILESIEVE_VERSION

__all__ = [
    "ConfigError",
    "ConfigParser",
    "EngineSettings",
    "FileMetadata",
    "FilterConfig",
    "FilterEngine",
    "FilterHooks",
    "FilterKind",
    "FilterResult",
    "FilterVerificationService",
    "GlobMatcher",
    "LoggingHooks",
    "NullHooks",
    "VerificationReport",
    "load_filter_config",
    "render_report",
]
