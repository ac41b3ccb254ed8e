#!/usr/bin/env python3
"""Truth scoring for filter runs.

The verification service grades a configuration/result pair on five
dimensions, each in [0, 1]:
- config_completeness: how many rule dimensions are configured
- pattern_accuracy: independent recheck of pattern decisions
- consistency: structural invariants of the partition
- performance: measured throughput against a target rate
- coverage: share of configured filter kinds that excluded something

The truth score is their fixed weighted sum. A metric whose computation
fails scores 0 and the rest of the report is still produced.

Example:
    >>> service = FilterVerificationService()
    >>> report = service.evaluate(config, files, result)
    >>> report.meets_threshold
    True
"""

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Optional, Set

from filesieve.core.constants import METRIC_WEIGHTS, FilterKind, Limits, Reason
from filesieve.core.validators import ValidationError
from filesieve.infrastructure.logger import get_logger
from filesieve.rules.engine import coerce_file, file_key
from filesieve.rules.models import FilterConfig, FilterResult, coerce_filter_config
from filesieve.rules.parser import ConfigParser, configured_kinds
from filesieve.rules.patterns import PatternMatcher

logger = get_logger("filesieve.verification")

INVALID_METADATA_PREFIX = Reason.INVALID_METADATA.split("{", 1)[0]


@dataclass(frozen=True)
class VerificationMetrics:
    """The five quality dimensions of a filter run."""

    config_completeness: float = 0.0
    pattern_accuracy: float = 0.0
    consistency: float = 0.0
    performance: float = 0.0
    coverage: float = 0.0

    def weighted_sum(self) -> float:
        total = sum(getattr(self, name) * weight for name, weight in METRIC_WEIGHTS.items())
        return max(0.0, min(1.0, total))


@dataclass(frozen=True)
class ConfigurationSummary:
    include_patterns: int
    exclude_patterns: int
    has_size_filters: bool
    has_content_type_filters: bool


@dataclass(frozen=True)
class ReportSummary:
    total_files: int
    included_files: int
    excluded_files: int
    configuration: ConfigurationSummary


@dataclass(frozen=True)
class VerificationReport:
    """Verification outcome for one filter run.

    ``truth_score`` and ``meets_threshold`` are derived from ``metrics`` and
    ``threshold`` and cannot be set independently.
    """

    metrics: VerificationMetrics
    summary: ReportSummary
    threshold: float = Limits.DEFAULT_TRUTH_THRESHOLD
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def truth_score(self) -> float:
        return self.metrics.weighted_sum()

    @property
    def meets_threshold(self) -> bool:
        return self.truth_score >= self.threshold

    def to_dict(self) -> Dict[str, Any]:
        return {
            "truth_score": self.truth_score,
            "meets_threshold": self.meets_threshold,
            "threshold": self.threshold,
            "metrics": asdict(self.metrics),
            "summary": asdict(self.summary),
            "timestamp": self.timestamp,
        }


def _clamp(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, float(value)))


class FilterVerificationService:
    """Computes verification reports for filter runs."""

    def __init__(
        self,
        threshold: float = Limits.DEFAULT_TRUTH_THRESHOLD,
        target_rate: float = Limits.TARGET_FILES_PER_SECOND,
        case_sensitive: bool = True,
    ):
        """Initialize verification service.

        Args:
            threshold: Minimum truth score for ``meets_threshold``
            target_rate: Files per second at which performance scores 1.0
            case_sensitive: Pattern case sensitivity used for rechecks
        """
        self.threshold = threshold
        self.target_rate = target_rate
        self._case_sensitive = case_sensitive

    def evaluate(
        self,
        config: Any,
        files: Iterable[Any],
        result: FilterResult,
        elapsed_seconds: Optional[float] = None,
    ) -> VerificationReport:
        """Grade a configuration/result pair.

        Args:
            config: FilterConfig or rule-set mapping used for the run
            files: The input descriptors
            result: Result produced for them
            elapsed_seconds: Measured run time, if known

        Returns:
            VerificationReport

        Raises:
            ConfigError: If ``config`` is not a usable rule set
        """
        config = coerce_filter_config(config)
        files = list(files)

        metrics = VerificationMetrics(
            config_completeness=self._safe(
                "config_completeness", lambda: self.calculate_config_completeness(config)
            ),
            pattern_accuracy=self._safe(
                "pattern_accuracy", lambda: self.calculate_pattern_accuracy(config, result)
            ),
            consistency=self._safe(
                "consistency", lambda: self.calculate_consistency(files, result)
            ),
            performance=self._safe(
                "performance", lambda: self.calculate_performance(len(files), elapsed_seconds)
            ),
            coverage=self._safe(
                "coverage", lambda: self.calculate_coverage(config, files, result)
            ),
        )

        summary = ReportSummary(
            total_files=len(files),
            included_files=len(result.included),
            excluded_files=len(result.excluded),
            configuration=ConfigurationSummary(
                include_patterns=len(config.include or ()),
                exclude_patterns=len(config.exclude or ()),
                has_size_filters=config.has_size_bounds,
                has_content_type_filters=config.content_types is not None,
            ),
        )

        report = VerificationReport(metrics=metrics, summary=summary, threshold=self.threshold)
        logger.debug(
            "Verification complete",
            truth_score=round(report.truth_score, 4),
            meets_threshold=report.meets_threshold,
        )
        return report

    def calculate_truth_score(
        self,
        config: Any,
        files: Iterable[Any],
        result: FilterResult,
        elapsed_seconds: Optional[float] = None,
    ) -> float:
        """Truth score of a configuration/result pair."""
        return self.evaluate(config, files, result, elapsed_seconds).truth_score

    def meets_threshold(self, score: float, threshold: Optional[float] = None) -> bool:
        """Check a score against ``threshold`` (default: the service threshold)."""
        return score >= (self.threshold if threshold is None else threshold)

    def _safe(self, name: str, compute: Callable[[], float]) -> float:
        try:
            return _clamp(compute())
        except Exception as e:
            logger.warning(
                "Metric computation failed", metric=name, error=f"{type(e).__name__}: {e}"
            )
            return 0.0

    def calculate_config_completeness(self, config: FilterConfig) -> float:
        """Share of rule dimensions configured, halved for a pattern-free rule set."""
        has_include = bool(config.include)
        has_exclude = bool(config.exclude)
        dimensions = [
            has_include,
            has_exclude,
            config.has_size_bounds,
            config.content_types is not None,
        ]
        score = sum(dimensions) / len(dimensions)

        if not has_include and not has_exclude:
            score *= 0.5

        return score

    def calculate_pattern_accuracy(self, config: FilterConfig, result: FilterResult) -> float:
        """Recheck pattern decisions with freshly compiled matchers.

        Included paths must match a positive include pattern (when any
        exist) and no veto pattern. Excluded paths blamed on the include
        group must match no positive pattern; paths blamed on an exclude
        pattern must match that pattern.
        """
        positives = PatternMatcher(config.positive_patterns, self._case_sensitive)
        vetoes = PatternMatcher(
            config.negated_patterns + list(config.exclude or ()), self._case_sensitive
        )

        checked = 0
        correct = 0

        for path in result.included:
            checked += 1
            if (not positives or positives.matches(path)) and not vetoes.matches(path):
                correct += 1

        exclude_prefix = Reason.EXCLUDE_MATCH.split("{", 1)[0]
        for path in result.excluded:
            reason = result.reasons.get(path, "")
            if reason == Reason.INCLUDE_MISMATCH:
                checked += 1
                if positives and not positives.matches(path):
                    correct += 1
            elif reason.startswith(exclude_prefix):
                checked += 1
                pattern = reason[len(exclude_prefix):]
                if pattern in vetoes.patterns and PatternMatcher(
                    [pattern], self._case_sensitive
                ).matches(path):
                    correct += 1

        if checked == 0:
            return 1.0
        return correct / checked

    def calculate_consistency(self, files: list, result: FilterResult) -> float:
        """Mean of three structural checks on the partition."""
        included = set(result.included)
        excluded = set(result.excluded)
        expected = {file_key(file) for file in files}

        disjoint = not (included & excluded)

        reasons_complete = (
            all(result.reasons.get(path) for path in result.excluded)
            and set(result.reasons) == excluded
        )

        counts_match = (
            len(result.included) == len(included)
            and len(result.excluded) == len(excluded)
            and len(included) + len(excluded) == len(expected)
            and (included | excluded) == expected
        )

        checks = [disjoint, reasons_complete, counts_match]
        return sum(checks) / len(checks)

    def calculate_performance(self, total_files: int, elapsed_seconds: Optional[float]) -> float:
        """Throughput relative to the target rate, saturating at 1.0."""
        if total_files == 0 or not elapsed_seconds or elapsed_seconds <= 0:
            return 1.0
        throughput = total_files / elapsed_seconds
        return min(1.0, throughput / self.target_rate)

    def calculate_coverage(
        self, config: FilterConfig, files: list, result: FilterResult
    ) -> float:
        """Share of configured filter kinds that excluded at least one file.

        Each exclusion is attributed by replaying the pipeline on the
        excluded descriptor. Invalid-metadata exclusions are not attributed.
        """
        pipeline = ConfigParser(self._case_sensitive).parse(config)
        kinds = configured_kinds(pipeline)
        if not kinds or not files:
            return 1.0

        by_path = {}
        for file in files:
            by_path.setdefault(file_key(file), file)

        active: Set[FilterKind] = set()
        for path in result.excluded:
            if result.reasons.get(path, "").startswith(INVALID_METADATA_PREFIX):
                continue
            file = by_path.get(path)
            if file is None:
                continue
            try:
                metadata = coerce_file(file)
            except ValidationError:
                continue
            for compiled in pipeline:
                if not compiled.apply(metadata):
                    active.add(compiled.kind)
                    break
            if len(active) == len(kinds):
                break

        return len(active) / len(kinds)
