"""
Filesieve Foundation: Constants and Type Definitions

This module provides system-wide constants, error codes, reason templates
and enumerations shared by the rules, verification and infrastructure layers.
"""
from enum import Enum, IntEnum
from typing import TypeAlias

# Version information
FILESIEVE_VERSION = "1.0.0"


# Error codes (0-9 range)
class ErrorCode(IntEnum):
    """Standardized error codes for filesieve operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad pattern, invalid configuration
    NOT_FOUND = 2  # Config file doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    CONFLICT = 4  # Contradictory settings (min > max)
    DEPENDENCY_ERROR = 5  # Missing dependency
    INTERNAL_ERROR = 6  # Bug in filesieve
    TIMEOUT = 7  # Operation timed out
    RATE_LIMITED = 8  # Too many operations
    DEGRADED = 9  # Running with reduced functionality


# Type aliases for clarity
FilePath: TypeAlias = str
Pattern: TypeAlias = str
ContentType: TypeAlias = str


class Limits:
    """Engine limits and default values."""

    # Batching
    DEFAULT_BATCH_SIZE = 100
    DEFAULT_BATCH_THRESHOLD = 1000
    DEFAULT_MAX_WORKERS = 1

    # Glob compilation
    MAX_BRACE_EXPANSIONS = 1024
    PATTERN_CACHE_SIZE = 1000
    MAX_PATTERN_LENGTH = 4096

    # Verification
    DEFAULT_TRUTH_THRESHOLD = 0.95
    TARGET_FILES_PER_SECOND = 10000.0


class FilterKind(Enum):
    """Kinds of compiled filters in a pipeline."""

    INCLUDE_GROUP = "include"
    EXCLUDE = "exclude"
    SIZE = "size"
    CONTENT_TYPE = "content_type"


class Reason:
    """Exclusion reason templates, one family per filter kind."""

    INCLUDE_MISMATCH = "File does not match any include pattern"
    EXCLUDE_MATCH = "File matches exclude pattern: {pattern}"
    BELOW_MINIMUM = "File size {size} bytes is below minimum {min_size} bytes"
    ABOVE_MAXIMUM = "File size {size} bytes is above maximum {max_size} bytes"
    NO_CONTENT_TYPES = "No content types allowed"
    CONTENT_TYPE_REJECTED = "Content type {content_type} not in allowed list: {allowed}"
    INVALID_METADATA = "invalid metadata: {detail}"


# Truth score weights, must sum to 1.0
METRIC_WEIGHTS = {
    "config_completeness": 0.2,
    "pattern_accuracy": 0.3,
    "consistency": 0.2,
    "performance": 0.15,
    "coverage": 0.15,
}


class ConfigKey:
    """Configuration key constants."""

    # Rule-set keys (camelCase aliases accepted by FilterConfig.from_dict)
    INCLUDE = "include"
    EXCLUDE = "exclude"
    MIN_SIZE = "min_size"
    MAX_SIZE = "max_size"
    CONTENT_TYPES = "content_types"

    # Settings sections
    ROOT = "filesieve"
    ENGINE = "engine"
    VERIFICATION = "verification"
    LOGGING = "logging"

    # Engine settings
    BATCH_SIZE = "batch_size"
    BATCH_THRESHOLD = "batch_threshold"
    MAX_WORKERS = "max_workers"

    # Verification settings
    THRESHOLD = "threshold"
    TARGET_RATE = "target_rate"


RULE_SET_ALIASES = {
    "include": ConfigKey.INCLUDE,
    "exclude": ConfigKey.EXCLUDE,
    "minSize": ConfigKey.MIN_SIZE,
    "min_size": ConfigKey.MIN_SIZE,
    "maxSize": ConfigKey.MAX_SIZE,
    "max_size": ConfigKey.MAX_SIZE,
    "contentTypes": ConfigKey.CONTENT_TYPES,
    "content_types": ConfigKey.CONTENT_TYPES,
}


# Default settings values
DEFAULT_CONFIG = {
    ConfigKey.ROOT: {
        ConfigKey.ENGINE: {
            ConfigKey.BATCH_SIZE: Limits.DEFAULT_BATCH_SIZE,
            ConfigKey.BATCH_THRESHOLD: Limits.DEFAULT_BATCH_THRESHOLD,
            ConfigKey.MAX_WORKERS: Limits.DEFAULT_MAX_WORKERS,
        },
        ConfigKey.VERIFICATION: {
            ConfigKey.THRESHOLD: Limits.DEFAULT_TRUTH_THRESHOLD,
            ConfigKey.TARGET_RATE: Limits.TARGET_FILES_PER_SECOND,
        },
        ConfigKey.LOGGING: {
            "level": "INFO",
            "file": None,
        },
    }
}
