"""Filesieve Rules System.

This module provides file classification against declarative rule sets:
- GlobMatcher / PatternMatcher: Glob pattern matching
- Compiled filters: include group, exclude, size and content-type filters
- ConfigParser: Rule set to ordered filter pipeline
- FilterEngine: Batched classification into included/excluded sets
"""

from .engine import FilterEngine, classify, coerce_file, file_key
from .filters import (
    CompiledFilter,
    ContentTypeFilter,
    ExcludeFilter,
    IncludeGroupFilter,
    SizeFilter,
)
from .models import FileMetadata, FilterConfig, FilterResult
from .parser import ConfigParser, configured_kinds
from .patterns import GlobMatcher, PatternMatcher, expand_braces

__all__ = [
    # Data model
    "FileMetadata",
    "FilterConfig",
    "FilterResult",
    # Pattern matching
    "GlobMatcher",
    "PatternMatcher",
    "expand_braces",
    # Filters
    "CompiledFilter",
    "IncludeGroupFilter",
    "ExcludeFilter",
    "SizeFilter",
    "ContentTypeFilter",
    # Pipeline
    "ConfigParser",
    "configured_kinds",
    "FilterEngine",
    "classify",
    "coerce_file",
    "file_key",
]
