"""Tests for constants and reason templates."""
import pytest

from filesieve import __version__
from filesieve.core.constants import (
    DEFAULT_CONFIG,
    FILESIEVE_VERSION,
    METRIC_WEIGHTS,
    RULE_SET_ALIASES,
    ConfigKey,
    ErrorCode,
    FilterKind,
    Limits,
    Reason,
)


class TestErrorCodes:
    """Test error code definitions."""

    def test_error_codes_unique(self):
        """All error codes must have unique values."""
        codes = [e.value for e in ErrorCode]
        assert len(codes) == len(set(codes))

    def test_success_is_zero(self):
        assert ErrorCode.SUCCESS == 0

    def test_error_codes_in_range(self):
        for code in ErrorCode:
            assert 0 <= code.value <= 9


class TestVersion:
    """Test version information."""

    def test_package_version(self):
        assert __version__ == FILESIEVE_VERSION

    def test_version_format(self):
        assert len(FILESIEVE_VERSION.split(".")) == 3


class TestReasons:
    """Test exclusion reason templates."""

    def test_kinds_have_distinct_reasons(self):
        reasons = [
            Reason.INCLUDE_MISMATCH,
            Reason.EXCLUDE_MATCH.format(pattern="p"),
            Reason.BELOW_MINIMUM.format(size=1, min_size=2),
            Reason.CONTENT_TYPE_REJECTED.format(content_type="a/b", allowed="c/d"),
            Reason.NO_CONTENT_TYPES,
        ]
        assert len(set(reasons)) == len(reasons)

    def test_required_substrings(self):
        assert "exclude pattern" in Reason.EXCLUDE_MATCH
        assert "above maximum" in Reason.ABOVE_MAXIMUM

    def test_invalid_metadata(self):
        assert Reason.INVALID_METADATA.format(detail="x") == "invalid metadata: x"


class TestMetricWeights:
    """Test truth score weights."""

    def test_sum_to_one(self):
        assert sum(METRIC_WEIGHTS.values()) == pytest.approx(1.0)

    def test_pattern_accuracy_heaviest(self):
        assert max(METRIC_WEIGHTS, key=METRIC_WEIGHTS.get) == "pattern_accuracy"


class TestDefaults:
    """Test default settings."""

    def test_limits(self):
        assert Limits.DEFAULT_BATCH_SIZE == 100
        assert Limits.DEFAULT_BATCH_THRESHOLD == 1000
        assert Limits.DEFAULT_TRUTH_THRESHOLD == 0.95

    def test_default_config_matches_limits(self):
        engine = DEFAULT_CONFIG[ConfigKey.ROOT][ConfigKey.ENGINE]
        assert engine[ConfigKey.BATCH_SIZE] == Limits.DEFAULT_BATCH_SIZE
        assert engine[ConfigKey.BATCH_THRESHOLD] == Limits.DEFAULT_BATCH_THRESHOLD
        assert engine[ConfigKey.MAX_WORKERS] == Limits.DEFAULT_MAX_WORKERS

    def test_rule_set_aliases(self):
        assert RULE_SET_ALIASES["minSize"] == RULE_SET_ALIASES["min_size"] == ConfigKey.MIN_SIZE
        assert set(RULE_SET_ALIASES.values()) == {
            ConfigKey.INCLUDE,
            ConfigKey.EXCLUDE,
            ConfigKey.MIN_SIZE,
            ConfigKey.MAX_SIZE,
            ConfigKey.CONTENT_TYPES,
        }

    def test_filter_kinds(self):
        assert {kind.value for kind in FilterKind} == {"include", "exclude", "size", "content_type"}
