#!/usr/bin/env python3
"""Glob pattern matching for file paths.

This module provides pattern matching for the filter pipeline:
- ``**`` recursive wildcard spanning zero or more path segments
- ``*`` and ``?`` wildcards confined to a single segment
- ``{a,b,c}`` brace alternation, nested groups allowed
- Path normalization for consistent matching
- Case-sensitive and case-insensitive modes
- Multiple pattern support with OR logic

Negation (a leading ``!``) belongs to the rule set, not to the matcher;
callers strip it before compiling.

Example:
    >>> matcher = GlobMatcher.compile("src/**/*.{ts,tsx}")
    >>> matcher.test("src/components/App.tsx")
    True
    >>> PatternMatcher(["**/*.py", "docs/*"]).matches("docs/index.md")
    True
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable, Iterator, List, Optional, Pattern, Tuple

from filesieve.core.constants import ErrorCode, Limits
from filesieve.core.validators import ValidationError, validate_pattern
from filesieve.infrastructure.config_manager import ConfigError


def normalize_path(path: str) -> str:
    """Normalize separators and drop any leading slash."""
    return path.replace("\\", "/").lstrip("/")


def _find_group(pattern: str) -> Optional[Tuple[int, int, List[str]]]:
    """Locate the first top-level brace group.

    Returns:
        (start, end, alternatives) or None when the pattern has no braces
    """
    start = pattern.find("{")
    if start < 0:
        return None

    depth = 0
    alternatives: List[str] = []
    current = start + 1
    for index in range(start, len(pattern)):
        char = pattern[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                alternatives.append(pattern[current:index])
                return start, index, alternatives
        elif char == "," and depth == 1:
            alternatives.append(pattern[current:index])
            current = index + 1

    # validate_braces runs first, so an open group is always closed
    raise ConfigError(f"Unclosed brace in pattern: {pattern}")


def expand_braces(pattern: str, limit: int = Limits.MAX_BRACE_EXPANSIONS) -> List[str]:
    """Expand brace alternation into plain glob patterns.

    Args:
        pattern: Glob pattern with balanced braces
        limit: Maximum number of expansions

    Returns:
        Expanded patterns in left-to-right order

    Raises:
        ConfigError: If the expansion exceeds ``limit``
    """
    group = _find_group(pattern)
    if group is None:
        return [pattern]

    start, end, alternatives = group
    prefix, suffix = pattern[:start], pattern[end + 1:]

    expanded: List[str] = []
    for alternative in alternatives:
        expanded.extend(expand_braces(prefix + alternative + suffix, limit))
        if len(expanded) > limit:
            raise ConfigError(
                f"Brace expansion of '{pattern}' exceeds {limit} alternatives",
                ErrorCode.INVALID_INPUT,
            )
    return expanded


def translate(pattern: str) -> str:
    """Translate one brace-free glob pattern into a regex body.

    ``**/`` at a segment start matches any directory prefix (or none),
    a trailing ``/**`` matches any suffix (or none), any other ``**`` matches
    anything, ``*`` and ``?`` never cross a ``/``.
    """
    parts: List[str] = []
    i = 0
    n = len(pattern)

    while i < n:
        char = pattern[i]

        if pattern.startswith("**", i):
            at_segment_start = i == 0 or pattern[i - 1] == "/"
            after = i + 2
            if at_segment_start and after < n and pattern[after] == "/":
                parts.append("(?:.*/)?")
                i = after + 1
            else:
                parts.append(".*")
                i = after
            continue

        if char == "/" and pattern[i:] == "/**":
            parts.append("(?:/.*)?")
            break

        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(char))
        i += 1

    return "".join(parts)


@lru_cache(maxsize=Limits.PATTERN_CACHE_SIZE)
def _compile_regex(pattern: str, case_sensitive: bool) -> Optional[Pattern[str]]:
    try:
        validate_pattern(pattern)
    except ValidationError as e:
        raise ConfigError(str(e), e.error_code) from e

    normalized = normalize_path(pattern)
    if not normalized:
        return None

    bodies = [translate(expansion) for expansion in expand_braces(normalized)]
    # "**" must span any character a path may hold, newlines included
    flags = re.DOTALL if case_sensitive else re.DOTALL | re.IGNORECASE
    return re.compile("(?:" + "|".join(bodies) + ")", flags)


@dataclass(frozen=True)
class GlobMatcher:
    """A single compiled glob pattern.

    Immutable once built, so one instance can be shared by worker threads.
    An empty pattern matches nothing.
    """

    pattern: str
    case_sensitive: bool = True
    regex: Optional[Pattern[str]] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.pattern, str):
            raise ConfigError(
                f"Pattern must be string, got {type(self.pattern).__name__}",
                ErrorCode.INVALID_INPUT,
            )
        object.__setattr__(self, "regex", _compile_regex(self.pattern, self.case_sensitive))

    @classmethod
    def compile(cls, pattern: str, case_sensitive: bool = True) -> "GlobMatcher":
        """Compile ``pattern``.

        Raises:
            ConfigError: On a non-string pattern, unbalanced braces or an
                oversized brace expansion
        """
        return cls(pattern, case_sensitive)

    def test(self, path: str) -> bool:
        """Return True if ``path`` matches the whole pattern."""
        if self.regex is None:
            return False
        return self.regex.fullmatch(normalize_path(path)) is not None


class PatternMatcher:
    """Ordered group of glob patterns with OR logic.

    Features:
    - Matches if any pattern matches
    - Reports which patterns matched a path
    - Immutable after construction
    """

    def __init__(self, patterns: Iterable[str] = (), case_sensitive: bool = True):
        """Initialize pattern matcher.

        Args:
            patterns: Glob patterns, in priority order
            case_sensitive: Whether patterns are case-sensitive

        Raises:
            ConfigError: If any pattern fails to compile
        """
        self._matchers: Tuple[GlobMatcher, ...] = tuple(
            GlobMatcher.compile(pattern, case_sensitive) for pattern in patterns
        )
        self._case_sensitive = case_sensitive

    @property
    def patterns(self) -> Tuple[str, ...]:
        return tuple(matcher.pattern for matcher in self._matchers)

    def matches(self, path: str) -> bool:
        """Check if path matches any pattern."""
        return any(matcher.test(path) for matcher in self._matchers)

    def first_match(self, path: str) -> Optional[str]:
        """Return the first pattern matching ``path``, if any."""
        for matcher in self._matchers:
            if matcher.test(path):
                return matcher.pattern
        return None

    def get_matching_patterns(self, path: str) -> List[str]:
        """Get all patterns that match the path."""
        return [matcher.pattern for matcher in self._matchers if matcher.test(path)]

    def __iter__(self) -> Iterator[GlobMatcher]:
        return iter(self._matchers)

    def __len__(self) -> int:
        """Return number of patterns."""
        return len(self._matchers)

    def __bool__(self) -> bool:
        """Return True if any patterns are registered."""
        return bool(self._matchers)
