#!/usr/bin/env python3
"""Compiled filters making up a classification pipeline.

The pipeline is a closed set of four filter variants:
- IncludeGroupFilter: file must match at least one positive include pattern
- ExcludeFilter: file must not match one exclude (or negated include) pattern
- SizeFilter: file size must lie within inclusive bounds
- ContentTypeFilter: file content type must be in an allow-list

Each variant is a frozen dataclass exposing ``kind``, ``apply(file)`` (True
when the file passes) and ``explain(file)`` (the exclusion reason). Filters
hold no per-call state, so a pipeline can be shared across worker threads.

Example:
    >>> size = SizeFilter(max_size=1000)
    >>> size.apply(FileMetadata("g.ts", 1001, "text/plain"))
    False
    >>> size.explain(FileMetadata("g.ts", 1001, "text/plain"))
    'File size 1001 bytes is above maximum 1000 bytes'
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union

from filesieve.core.constants import FilterKind, Reason
from filesieve.rules.models import FileMetadata
from filesieve.rules.patterns import GlobMatcher, PatternMatcher


@dataclass(frozen=True)
class IncludeGroupFilter:
    """Logical OR over the positive include patterns."""

    matcher: PatternMatcher

    kind: ClassVar[FilterKind] = FilterKind.INCLUDE_GROUP

    @classmethod
    def from_patterns(cls, patterns, case_sensitive: bool = True) -> "IncludeGroupFilter":
        return cls(PatternMatcher(patterns, case_sensitive))

    @property
    def patterns(self) -> Tuple[str, ...]:
        return self.matcher.patterns

    def apply(self, file: FileMetadata) -> bool:
        # an empty group places no restriction
        if not self.matcher:
            return True
        return self.matcher.matches(file.path)

    def explain(self, file: FileMetadata) -> str:
        return Reason.INCLUDE_MISMATCH


@dataclass(frozen=True)
class ExcludeFilter:
    """Veto for files matching one pattern.

    ``negated`` records that the pattern came from a ``!`` entry in the
    include list; it does not change matching.
    """

    matcher: GlobMatcher
    negated: bool = False

    kind: ClassVar[FilterKind] = FilterKind.EXCLUDE

    @classmethod
    def from_pattern(
        cls, pattern: str, negated: bool = False, case_sensitive: bool = True
    ) -> "ExcludeFilter":
        return cls(GlobMatcher.compile(pattern, case_sensitive), negated)

    @property
    def pattern(self) -> str:
        return self.matcher.pattern

    def apply(self, file: FileMetadata) -> bool:
        return not self.matcher.test(file.path)

    def explain(self, file: FileMetadata) -> str:
        return Reason.EXCLUDE_MATCH.format(pattern=self.matcher.pattern)


@dataclass(frozen=True)
class SizeFilter:
    """Inclusive size bounds; either bound may be absent."""

    min_size: Optional[int] = None
    max_size: Optional[int] = None

    kind: ClassVar[FilterKind] = FilterKind.SIZE

    def apply(self, file: FileMetadata) -> bool:
        if self.min_size is not None and file.size < self.min_size:
            return False
        if self.max_size is not None and file.size > self.max_size:
            return False
        return True

    def explain(self, file: FileMetadata) -> str:
        if self.min_size is not None and file.size < self.min_size:
            return Reason.BELOW_MINIMUM.format(size=file.size, min_size=self.min_size)
        return Reason.ABOVE_MAXIMUM.format(size=file.size, max_size=self.max_size)


@dataclass(frozen=True)
class ContentTypeFilter:
    """MIME type allow-list.

    Entries ending in ``/*`` admit every subtype of that type. An empty
    allow-list rejects every file.
    """

    content_types: Tuple[str, ...]

    kind: ClassVar[FilterKind] = FilterKind.CONTENT_TYPE

    def apply(self, file: FileMetadata) -> bool:
        if file.content_type in self.content_types:
            return True

        for allowed in self.content_types:
            if allowed.endswith("/*") and file.content_type.startswith(allowed[:-1]):
                return True

        return False

    def explain(self, file: FileMetadata) -> str:
        if not self.content_types:
            return Reason.NO_CONTENT_TYPES
        return Reason.CONTENT_TYPE_REJECTED.format(
            content_type=file.content_type, allowed=",".join(self.content_types)
        )


CompiledFilter = Union[IncludeGroupFilter, ExcludeFilter, SizeFilter, ContentTypeFilter]
