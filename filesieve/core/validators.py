"""
Filesieve Foundation: Input Validators.

This module provides structural validation for rule sets, glob patterns,
size bounds, content types, file descriptors and engine settings.
"""
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from filesieve.core.constants import RULE_SET_ALIASES, ConfigKey, ErrorCode, Limits


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


def validate_filter_config(config: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate a rule-set mapping and normalize its keys.

    camelCase keys (``minSize``, ``contentTypes``) are folded onto their
    snake_case names. List fields are returned as tuples.

    Args:
        config: Rule-set mapping

    Returns:
        Normalized dictionary keyed by ConfigKey rule-set names

    Raises:
        ValidationError: If the rule set is invalid
    """
    if not isinstance(config, Mapping):
        raise ValidationError("Filter configuration must be a mapping")

    normalized: Dict[str, Any] = {}
    for key, value in config.items():
        if key not in RULE_SET_ALIASES:
            raise ValidationError(f"Unknown filter configuration field: {key}")
        target = RULE_SET_ALIASES[key]
        if target in normalized:
            raise ValidationError(f"Duplicate filter configuration field: {key}")
        normalized[target] = value

    for key in (ConfigKey.INCLUDE, ConfigKey.EXCLUDE):
        if normalized.get(key) is not None:
            normalized[key] = validate_pattern_list(normalized[key], key)

    for key in (ConfigKey.MIN_SIZE, ConfigKey.MAX_SIZE):
        if normalized.get(key) is not None:
            validate_size_bound(normalized[key], key)

    validate_size_range(normalized.get(ConfigKey.MIN_SIZE), normalized.get(ConfigKey.MAX_SIZE))

    if normalized.get(ConfigKey.CONTENT_TYPES) is not None:
        normalized[ConfigKey.CONTENT_TYPES] = validate_content_types(
            normalized[ConfigKey.CONTENT_TYPES]
        )

    return normalized


def validate_pattern_list(patterns: Any, field_name: str) -> Tuple[str, ...]:
    """Validate a list of glob patterns.

    Args:
        patterns: Sequence of pattern strings
        field_name: Name of the field, for error messages

    Returns:
        Patterns as a tuple, in source order

    Raises:
        ValidationError: If the list or any pattern is invalid
    """
    if isinstance(patterns, (str, bytes)) or not isinstance(patterns, Sequence):
        raise ValidationError(f"'{field_name}' must be a list of patterns")

    for pattern in patterns:
        try:
            validate_pattern(pattern)
        except ValidationError as e:
            raise ValidationError(f"Invalid pattern in '{field_name}': {e}", e.error_code) from e

    return tuple(patterns)


def validate_pattern(pattern: str) -> bool:
    """Validate a glob pattern.

    Empty patterns are allowed; they match nothing. A leading ``!`` is
    ignored for validation purposes.

    Args:
        pattern: Pattern to validate

    Returns:
        True if valid

    Raises:
        ValidationError: If pattern is invalid
    """
    if not isinstance(pattern, str):
        raise ValidationError(f"Pattern must be string, got {type(pattern).__name__}")

    # Check length
    if len(pattern) > Limits.MAX_PATTERN_LENGTH:
        raise ValidationError(f"Pattern exceeds maximum length ({Limits.MAX_PATTERN_LENGTH})")

    # Check for null bytes
    if "\0" in pattern:
        raise ValidationError("Invalid pattern: contains null bytes")

    # Check for control characters
    if any(ord(c) < 32 and c not in "\t\n\r" for c in pattern):
        raise ValidationError("Invalid pattern: contains control characters")

    validate_braces(pattern)

    return True


def validate_braces(pattern: str) -> bool:
    """Check that brace groups in a glob pattern are balanced.

    Args:
        pattern: Glob pattern

    Returns:
        True if balanced

    Raises:
        ValidationError: On an unmatched ``{`` or ``}``
    """
    depth = 0
    for index, char in enumerate(pattern):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                raise ValidationError(
                    f"Unbalanced brace at position {index} in pattern: {pattern}"
                )
    if depth != 0:
        raise ValidationError(f"Unclosed brace in pattern: {pattern}")

    return True


def validate_size_bound(size: Any, field_name: str) -> bool:
    """Validate a configured size bound.

    Args:
        size: Bound in bytes
        field_name: Name of the field, for error messages

    Returns:
        True if valid

    Raises:
        ValidationError: If the bound is not a non-negative integer
    """
    # bool is an int subclass
    if isinstance(size, bool) or not isinstance(size, int):
        raise ValidationError(f"'{field_name}' must be an integer, got {type(size).__name__}")

    if size < 0:
        raise ValidationError(f"'{field_name}' cannot be negative: {size}")

    return True


def validate_size_range(min_size: Optional[int], max_size: Optional[int]) -> bool:
    """Validate that size bounds do not contradict each other.

    Raises:
        ValidationError: If min_size exceeds max_size
    """
    if min_size is not None and max_size is not None and min_size > max_size:
        raise ValidationError(
            f"min_size ({min_size}) exceeds max_size ({max_size})", ErrorCode.CONFLICT
        )
    return True


def validate_content_types(content_types: Any) -> Tuple[str, ...]:
    """Validate a content-type allow-list.

    An empty list is valid and means no content type is allowed.

    Returns:
        Content types as a tuple, in source order

    Raises:
        ValidationError: If the list or any entry is invalid
    """
    if isinstance(content_types, (str, bytes)) or not isinstance(
        content_types, (Sequence, set, frozenset)
    ):
        raise ValidationError("'content_types' must be a list of MIME types")

    for content_type in content_types:
        if not isinstance(content_type, str) or not content_type:
            raise ValidationError(f"Invalid content type: {content_type!r}")

    if isinstance(content_types, (set, frozenset)):
        return tuple(sorted(content_types))
    return tuple(content_types)


def validate_file_size(size: Any) -> bool:
    """Validate the size reported by a file descriptor.

    Raises:
        ValidationError: If size is not a non-negative integer
    """
    if isinstance(size, bool) or not isinstance(size, int):
        raise ValidationError(f"size must be an integer, got {type(size).__name__}")

    if size < 0:
        raise ValidationError(f"size cannot be negative: {size}")

    return True


def validate_positive_int(value: Any, field_name: str) -> bool:
    """Validate an engine setting that must be a positive integer.

    Raises:
        ValidationError: If value is not a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"'{field_name}' must be a positive integer: {value!r}")
    return True


def validate_threshold(threshold: Any) -> bool:
    """Validate a truth-score threshold.

    Raises:
        ValidationError: If threshold is not a number in [0, 1]
    """
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise ValidationError(f"Threshold must be numeric, got {type(threshold).__name__}")

    if threshold < 0 or threshold > 1:
        raise ValidationError(f"Threshold must be in range 0-1, got {threshold}")

    return True
