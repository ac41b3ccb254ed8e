#!/usr/bin/env python3
"""Rule-set parser building the ordered filter pipeline.

Pipeline order:
1. One IncludeGroupFilter over all positive include patterns (if any)
2. One ExcludeFilter per negated include entry (``!`` stripped), in order
3. One ExcludeFilter per exclude entry, in order
4. One SizeFilter when either bound is set
5. One ContentTypeFilter when an allow-list is configured, even empty

Order decides which reason is reported; membership does not depend on it,
since a file is excluded when any filter rejects it.
"""

from typing import Any, List, Union

from filesieve.core.constants import FilterKind
from filesieve.infrastructure.logger import get_logger
from filesieve.rules.filters import (
    CompiledFilter,
    ContentTypeFilter,
    ExcludeFilter,
    IncludeGroupFilter,
    SizeFilter,
)
from filesieve.rules.models import FilterConfig, coerce_filter_config

logger = get_logger("filesieve.rules.parser")


class ConfigParser:
    """Turns a rule set into an ordered list of compiled filters."""

    def __init__(self, case_sensitive: bool = True):
        """Initialize parser.

        Args:
            case_sensitive: Whether compiled patterns are case-sensitive
        """
        self._case_sensitive = case_sensitive

    @property
    def case_sensitive(self) -> bool:
        return self._case_sensitive

    def parse(self, config: Union[FilterConfig, Any]) -> List[CompiledFilter]:
        """Build the filter pipeline for ``config``.

        Args:
            config: FilterConfig or rule-set mapping

        Returns:
            Ordered list of compiled filters

        Raises:
            ConfigError: If the rule set or any pattern is invalid
        """
        config = coerce_filter_config(config)
        filters: List[CompiledFilter] = []

        positives = config.positive_patterns
        if positives:
            filters.append(IncludeGroupFilter.from_patterns(positives, self._case_sensitive))

        for pattern in config.negated_patterns:
            filters.append(ExcludeFilter.from_pattern(pattern, True, self._case_sensitive))

        for pattern in config.exclude or ():
            filters.append(ExcludeFilter.from_pattern(pattern, False, self._case_sensitive))

        if config.has_size_bounds:
            filters.append(SizeFilter(min_size=config.min_size, max_size=config.max_size))

        if config.content_types is not None:
            filters.append(ContentTypeFilter(tuple(config.content_types)))

        logger.debug(
            "Parsed filter pipeline",
            filters=len(filters),
            kinds=",".join(f.kind.value for f in filters) or "none",
        )
        return filters


def configured_kinds(filters: List[CompiledFilter]) -> List[FilterKind]:
    """Distinct filter kinds present in a pipeline, in pipeline order."""
    kinds: List[FilterKind] = []
    for compiled in filters:
        if compiled.kind not in kinds:
            kinds.append(compiled.kind)
    return kinds


__all__ = ["ConfigParser", "configured_kinds"]
