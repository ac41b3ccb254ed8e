#!/usr/bin/env python3
"""Lifecycle hooks notified by the filter engine.

The engine calls a hooks object at three points of each run:
- ``emit_pre_task`` before filtering starts
- ``emit_post_edit`` after each per-file decision
- ``emit_post_task`` after the run completes, with the truth score

Hooks are observational. The engine logs and discards any exception they
raise. Implementations shared between concurrent runs serialize their own
writes.

Example:
    >>> hooks = LoggingHooks()
    >>> engine = FilterEngine(hooks=hooks)
    >>> engine.filter({"include": ["**/*.py"]}, files)
    >>> [event.type for event in hooks.events][:1]
    ['pre-task']
"""

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from filesieve.infrastructure.logger import Logger, get_logger


def new_session_id() -> str:
    """Generate an identifier for one filter run."""
    return f"filter-session-{uuid.uuid4().hex[:12]}"


@runtime_checkable
class FilterHooks(Protocol):
    """Capability injected into FilterEngine."""

    def emit_pre_task(self, session_id: str, task_description: str) -> None:
        ...

    def emit_post_edit(
        self, session_id: str, file_path: str, config_snapshot: Dict[str, Any]
    ) -> None:
        ...

    def emit_post_task(
        self, session_id: str, result_summary: Dict[str, Any], truth_score: Optional[float]
    ) -> None:
        ...


class NullHooks:
    """Hooks that do nothing."""

    def emit_pre_task(self, session_id: str, task_description: str) -> None:
        pass

    def emit_post_edit(
        self, session_id: str, file_path: str, config_snapshot: Dict[str, Any]
    ) -> None:
        pass

    def emit_post_task(
        self, session_id: str, result_summary: Dict[str, Any], truth_score: Optional[float]
    ) -> None:
        pass

    def emit_session_end(self, session_id: str) -> None:
        pass


@dataclass
class HookEvent:
    """One recorded lifecycle notification."""

    type: str
    session_id: str
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class LoggingHooks:
    """Hooks that log each notification and keep an in-memory event list.

    Per-file notifications are logged at debug level only, and are not kept
    unless ``record_files`` is set, so large runs stay cheap.
    """

    def __init__(self, logger: Optional[Logger] = None, record_files: bool = False):
        """Initialize logging hooks.

        Args:
            logger: Logger to write to (default: ``filesieve.hooks``)
            record_files: Whether to keep post-edit events in ``events``
        """
        self._logger = logger or get_logger("filesieve.hooks")
        self._record_files = record_files
        self._events: List[HookEvent] = []
        self._lock = threading.Lock()

    @property
    def events(self) -> List[HookEvent]:
        with self._lock:
            return list(self._events)

    def _record(self, event: HookEvent) -> None:
        with self._lock:
            self._events.append(event)

    def emit_pre_task(self, session_id: str, task_description: str) -> None:
        self._record(HookEvent("pre-task", session_id, {"task": task_description}))
        self._logger.info("[pre-task] " + task_description, session_id=session_id)

    def emit_post_edit(
        self, session_id: str, file_path: str, config_snapshot: Dict[str, Any]
    ) -> None:
        if self._record_files:
            self._record(
                HookEvent("post-edit", session_id, {"file": file_path, "config": config_snapshot})
            )
        self._logger.debug("[post-edit]", session_id=session_id, file=file_path)

    def emit_post_task(
        self, session_id: str, result_summary: Dict[str, Any], truth_score: Optional[float]
    ) -> None:
        self._record(
            HookEvent(
                "post-task", session_id, {"results": result_summary, "truth_score": truth_score}
            )
        )
        self._logger.info(
            "[post-task]",
            session_id=session_id,
            included=result_summary.get("included_files"),
            excluded=result_summary.get("excluded_files"),
            truth_score=truth_score,
        )

    def emit_session_end(self, session_id: str) -> None:
        self._record(HookEvent("session-end", session_id))
        self._logger.info("[session-end]", session_id=session_id)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
