"""Value types exchanged with the filter engine."""

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

from filesieve.core.constants import ConfigKey, ErrorCode
from filesieve.core.validators import ValidationError, validate_filter_config
from filesieve.infrastructure.config_manager import ConfigError

if TYPE_CHECKING:
    from filesieve.verification.service import VerificationReport


def _as_list(values: Any) -> Optional[List[Any]]:
    if values is None:
        return None
    # sets have no stable order
    if isinstance(values, (set, frozenset)):
        return sorted(values)
    return list(values)


@dataclass(frozen=True)
class FileMetadata:
    """Descriptor of one file to classify. Supplied by the caller."""

    path: str
    size: int
    content_type: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FileMetadata":
        """Build from a mapping using ``contentType`` or ``content_type``.

        Values are taken as given; malformed values are reported by the
        engine as invalid metadata rather than here.
        """
        content_type = data.get("content_type", data.get("contentType"))
        return cls(path=data.get("path"), size=data.get("size"), content_type=content_type)


@dataclass(frozen=True)
class FilterConfig:
    """Declarative rule set.

    ``None`` means a dimension is not configured. An empty ``content_types``
    tuple is configured and admits nothing.
    """

    include: Optional[Tuple[str, ...]] = None
    exclude: Optional[Tuple[str, ...]] = None
    min_size: Optional[int] = None
    max_size: Optional[int] = None
    content_types: Optional[Tuple[str, ...]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FilterConfig":
        """Validate a rule-set mapping and build a FilterConfig.

        Raises:
            ConfigError: If the mapping is not a valid rule set
        """
        try:
            normalized = validate_filter_config(data)
        except ValidationError as e:
            raise ConfigError(str(e), e.error_code) from e
        return cls(**normalized)

    def validate(self) -> "FilterConfig":
        """Re-validate the stored fields and return a normalized copy.

        Raises:
            ConfigError: If any field is invalid
        """
        raw = {
            ConfigKey.INCLUDE: self.include,
            ConfigKey.EXCLUDE: self.exclude,
            ConfigKey.MIN_SIZE: self.min_size,
            ConfigKey.MAX_SIZE: self.max_size,
            ConfigKey.CONTENT_TYPES: self.content_types,
        }
        return FilterConfig.from_dict({k: v for k, v in raw.items() if v is not None})

    def to_dict(self, skip_none: bool = False) -> Dict[str, Any]:
        """Plain snapshot of the rule set."""
        data = {
            ConfigKey.INCLUDE: _as_list(self.include),
            ConfigKey.EXCLUDE: _as_list(self.exclude),
            ConfigKey.MIN_SIZE: self.min_size,
            ConfigKey.MAX_SIZE: self.max_size,
            ConfigKey.CONTENT_TYPES: _as_list(self.content_types),
        }
        if skip_none:
            data = {k: v for k, v in data.items() if v is not None}
        return data

    @property
    def positive_patterns(self) -> List[str]:
        return [p for p in self.include or () if not p.startswith("!")]

    @property
    def negated_patterns(self) -> List[str]:
        return [p[1:] for p in self.include or () if p.startswith("!")]

    @property
    def has_size_bounds(self) -> bool:
        return self.min_size is not None or self.max_size is not None


def coerce_filter_config(config: Any) -> FilterConfig:
    """Accept a FilterConfig or a mapping and return a validated FilterConfig.

    Raises:
        ConfigError: If the value is not a usable rule set
    """
    if isinstance(config, FilterConfig):
        return config.validate()
    if isinstance(config, Mapping):
        return FilterConfig.from_dict(config)
    raise ConfigError(
        f"Filter configuration must be a FilterConfig or mapping, got {type(config).__name__}",
        ErrorCode.INVALID_INPUT,
    )


@dataclass
class FilterResult:
    """Partition of the input paths produced by one filter run."""

    included: List[str] = field(default_factory=list)
    excluded: List[str] = field(default_factory=list)
    reasons: Dict[str, str] = field(default_factory=dict)
    verification: Optional["VerificationReport"] = None
    elapsed_seconds: float = 0.0

    @property
    def total(self) -> int:
        return len(self.included) + len(self.excluded)

    def aggregate_reasons(self) -> Dict[str, int]:
        """Count excluded files per reason."""
        return dict(Counter(reason for reason in self.reasons.values() if reason))

    def summary(self) -> Dict[str, Any]:
        """Summary handed to the post-task hook."""
        return {
            "total_files": self.total,
            "included_files": len(self.included),
            "excluded_files": len(self.excluded),
            "reasons": self.aggregate_reasons(),
            "processing_time_ms": round(self.elapsed_seconds * 1000, 3),
        }
