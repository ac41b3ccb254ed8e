#!/usr/bin/env python3
"""Filter engine classifying file descriptors against a rule set.

This module provides the classification run:
- Pipeline built once per call by ConfigParser
- First rejecting filter decides exclusion and its reason
- Malformed descriptors isolated as "invalid metadata" exclusions
- Large inputs split into fixed-size batches, optionally on a thread pool
- Lifecycle hooks and verification report per run

Batched, unbatched and threaded runs over the same input produce the same
partition and the same reasons; only measured timing differs.

Example:
    >>> engine = FilterEngine()
    >>> result = engine.filter(
    ...     {"include": ["**/*.ts"], "exclude": ["**/node_modules/**"]},
    ...     [FileMetadata("src/a.ts", 10, "text/plain"),
    ...      FileMetadata("node_modules/x/a.ts", 10, "text/plain")],
    ... )
    >>> result.included, result.excluded
    (['src/a.ts'], ['node_modules/x/a.ts'])
"""

import json
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from filesieve.core.constants import Reason
from filesieve.core.validators import ValidationError, validate_file_size, validate_positive_int
from filesieve.hooks import FilterHooks, NullHooks, new_session_id
from filesieve.infrastructure.config_manager import ConfigError, EngineSettings
from filesieve.infrastructure.logger import configure_logging, get_logger
from filesieve.rules.filters import CompiledFilter
from filesieve.rules.models import FileMetadata, FilterResult, coerce_filter_config
from filesieve.rules.parser import ConfigParser

logger = get_logger("filesieve.rules.engine")

# (path, reason); reason is None for an included file
Decision = Tuple[str, Optional[str]]
ProgressCallback = Callable[[int, int], None]


def file_key(file: Any) -> str:
    """Path under which a descriptor is reported, even when malformed."""
    if isinstance(file, Mapping):
        path = file.get("path")
    else:
        path = getattr(file, "path", None)
    if isinstance(path, str):
        return path
    # never equal to a real path string
    if path is None:
        return f"<invalid descriptor {file!r}>"
    return f"<invalid path {path!r}>"


def coerce_file(file: Any) -> FileMetadata:
    """Validate one descriptor.

    Raises:
        ValidationError: If path, size or content type is malformed
    """
    if isinstance(file, Mapping):
        file = FileMetadata.from_dict(file)

    path = getattr(file, "path", None)
    if not isinstance(path, str):
        raise ValidationError(f"path must be a string, got {type(path).__name__}")

    validate_file_size(getattr(file, "size", None))

    content_type = getattr(file, "content_type", None)
    if not isinstance(content_type, str):
        raise ValidationError(
            f"content_type must be a string, got {type(content_type).__name__}"
        )

    if not isinstance(file, FileMetadata):
        file = FileMetadata(path=path, size=file.size, content_type=content_type)
    return file


def classify(file: Any, pipeline: Sequence[CompiledFilter]) -> Decision:
    """Run one descriptor through the pipeline.

    Returns:
        (path, reason) where reason is None when every filter passes
    """
    try:
        metadata = coerce_file(file)
    except ValidationError as e:
        return file_key(file), Reason.INVALID_METADATA.format(detail=e)

    try:
        for compiled in pipeline:
            if not compiled.apply(metadata):
                return metadata.path, compiled.explain(metadata)
    except (TypeError, ValueError, AttributeError) as e:
        return metadata.path, Reason.INVALID_METADATA.format(detail=e)

    return metadata.path, None


class FilterEngine:
    """Classifies files into included and excluded sets.

    The engine holds configuration only; every ``filter()`` call builds its
    own pipeline and result, so one engine may serve concurrent callers.
    """

    def __init__(
        self,
        hooks: Optional[FilterHooks] = None,
        verifier: Optional[Any] = None,
        batch_size: Optional[int] = None,
        batch_threshold: Optional[int] = None,
        max_workers: Optional[int] = None,
        settings: Optional[EngineSettings] = None,
        parser: Optional[ConfigParser] = None,
    ):
        """Initialize filter engine.

        Args:
            hooks: Lifecycle hooks (default: NullHooks)
            verifier: FilterVerificationService (default built from settings)
            batch_size: Files per batch for large inputs
            batch_threshold: Inputs larger than this are batched
            max_workers: Threads evaluating batches; 1 runs them inline
            settings: Defaults for the values above; when given, its log level is applied
            parser: ConfigParser to build pipelines with

        Raises:
            ConfigError: If a batching value is not a positive integer
        """
        explicit_settings = settings is not None
        settings = settings or EngineSettings()
        self._batch_size = batch_size if batch_size is not None else settings.batch_size
        self._batch_threshold = (
            batch_threshold if batch_threshold is not None else settings.batch_threshold
        )
        self._max_workers = max_workers if max_workers is not None else settings.max_workers

        try:
            validate_positive_int(self._batch_size, "batch_size")
            validate_positive_int(self._batch_threshold, "batch_threshold")
            validate_positive_int(self._max_workers, "max_workers")
        except ValidationError as e:
            raise ConfigError(str(e), e.error_code) from e

        self._parser = parser or ConfigParser()

        if verifier is None:
            from filesieve.verification.service import FilterVerificationService

            verifier = FilterVerificationService(
                threshold=settings.threshold,
                target_rate=settings.target_rate,
                case_sensitive=self._parser.case_sensitive,
            )

        self._hooks = hooks if hooks is not None else NullHooks()
        self._verifier = verifier

        if explicit_settings:
            configure_logging(settings.log_level)

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def batch_threshold(self) -> int:
        return self._batch_threshold

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def filter(
        self,
        config: Any,
        files: Iterable[Any],
        session_id: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
        verify: bool = True,
    ) -> FilterResult:
        """Classify ``files`` against ``config``.

        Args:
            config: FilterConfig or rule-set mapping
            files: FileMetadata values or mappings
            session_id: Identifier passed to hooks (generated if omitted)
            progress: Called with (processed, total) after each batch
            verify: Whether to attach a verification report

        Returns:
            FilterResult with included/excluded paths and reasons

        Raises:
            ConfigError: If the rule set cannot be compiled
        """
        session_id = session_id or new_session_id()
        files = list(files)
        filter_config = coerce_filter_config(config)
        snapshot = filter_config.to_dict()

        self._emit(
            "emit_pre_task",
            session_id,
            f"Filtering {len(files)} files with config: {json.dumps(snapshot, sort_keys=True)}",
        )

        pipeline = self._parser.parse(filter_config)
        batches = self.create_batches(files)

        result = FilterResult()
        seen = set()
        processed = 0
        # throughput covers per-file evaluation only
        start = time.perf_counter()
        for index, decisions in enumerate(self._evaluate(batches, pipeline, session_id, snapshot)):
            for path, reason in decisions:
                if path in seen:
                    logger.debug("Skipping repeated path", path=path, session_id=session_id)
                    continue
                seen.add(path)
                if reason is None:
                    result.included.append(path)
                else:
                    result.excluded.append(path)
                    result.reasons[path] = reason

            processed += len(batches[index])
            logger.debug(
                "Merged batch",
                batch=index,
                processed=processed,
                total=len(files),
                session_id=session_id,
            )
            if progress is not None:
                self._report_progress(progress, processed, len(files))

        result.elapsed_seconds = time.perf_counter() - start

        truth_score = None
        if verify:
            result.verification = self._verifier.evaluate(
                filter_config, files, result, elapsed_seconds=result.elapsed_seconds
            )
            truth_score = result.verification.truth_score

        self._emit("emit_post_task", session_id, result.summary(), truth_score)

        logger.info(
            "Filter run complete",
            session_id=session_id,
            total=len(files),
            included=len(result.included),
            excluded=len(result.excluded),
            batches=len(batches),
            elapsed_ms=round(result.elapsed_seconds * 1000, 3),
        )
        return result

    def create_batches(self, files: List[Any]) -> List[List[Any]]:
        """Split ``files`` into batches when it exceeds the batch threshold."""
        if len(files) <= self._batch_threshold:
            return [files]
        return [
            files[i : i + self._batch_size] for i in range(0, len(files), self._batch_size)
        ]

    def end_session(self, session_id: str) -> None:
        """Notify hooks that a session of filter runs is over."""
        self._emit("emit_session_end", session_id)

    def _evaluate(
        self,
        batches: List[List[Any]],
        pipeline: List[CompiledFilter],
        session_id: str,
        snapshot: Dict[str, Any],
    ) -> Iterator[List[Decision]]:
        """Yield each batch's decisions in input order."""

        def run(batch: List[Any]) -> List[Decision]:
            return self._process_batch(batch, pipeline, session_id, snapshot)

        if self._max_workers > 1 and len(batches) > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                yield from executor.map(run, batches)
        else:
            for batch in batches:
                yield run(batch)

    def _process_batch(
        self,
        batch: List[Any],
        pipeline: List[CompiledFilter],
        session_id: str,
        snapshot: Dict[str, Any],
    ) -> List[Decision]:
        decisions: List[Decision] = []
        for file in batch:
            decision = classify(file, pipeline)
            decisions.append(decision)
            self._emit("emit_post_edit", session_id, decision[0], snapshot)
        return decisions

    def _emit(self, hook_name: str, *args: Any) -> None:
        """Call a hook, logging and discarding any failure."""
        hook = getattr(self._hooks, hook_name, None)
        if hook is None:
            return
        try:
            hook(*args)
        except Exception as e:
            logger.warning("Hook failed", hook=hook_name, error=f"{type(e).__name__}: {e}")

    def _report_progress(self, progress: ProgressCallback, processed: int, total: int) -> None:
        try:
            progress(processed, total)
        except Exception as e:
            logger.warning("Progress callback failed", error=f"{type(e).__name__}: {e}")
