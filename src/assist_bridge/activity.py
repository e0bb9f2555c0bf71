"""Audit trail of tool activity. Write-only from this package's point of view."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Callable, Optional, Protocol

MAX_RECORDS = 100

_logger = logging.getLogger(__name__)


class ActivityStatus(StrEnum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ActivityRecord:
    category: str
    summary: str
    detail: str
    status: ActivityStatus = ActivityStatus.SUCCESS
    metadata: Optional[dict[str, Any]] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ActivityLog(Protocol):
    def record(
        self,
        category: str,
        summary: str,
        detail: str,
        status: ActivityStatus = ActivityStatus.SUCCESS,
        metadata: Optional[dict[str, Any]] = None,
    ) -> None: ...


class LoggingActivityLog:
    """Sends each activity to a standard logger."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger("assist_bridge.activity")

    def record(
        self,
        category: str,
        summary: str,
        detail: str,
        status: ActivityStatus = ActivityStatus.SUCCESS,
        metadata: Optional[dict[str, Any]] = None,
    ) -> None:
        level = logging.INFO if status == ActivityStatus.SUCCESS else logging.WARNING
        self.logger.log(
            level,
            "[%s] %s -> %s (%s)",
            category,
            summary,
            detail,
            status,
            extra={"activity_metadata": metadata or {}},
        )


class MemoryActivityLog:
    """Keeps the most recent records in memory, newest first."""

    def __init__(self, max_records: int = MAX_RECORDS) -> None:
        self._records: deque[ActivityRecord] = deque(maxlen=max_records)
        self._listeners: list[Callable[[list[ActivityRecord]], None]] = []

    def record(
        self,
        category: str,
        summary: str,
        detail: str,
        status: ActivityStatus = ActivityStatus.SUCCESS,
        metadata: Optional[dict[str, Any]] = None,
    ) -> None:
        self._records.appendleft(
            ActivityRecord(category, summary, detail, ActivityStatus(status), metadata)
        )
        snapshot = self.records
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                _logger.exception("Activity listener %r raised", listener)

    @property
    def records(self) -> list[ActivityRecord]:
        return list(self._records)

    def subscribe(self, listener: Callable[[list[ActivityRecord]], None]) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def clear(self) -> None:
        self._records.clear()


__all__ = [
    "ActivityStatus",
    "ActivityRecord",
    "ActivityLog",
    "LoggingActivityLog",
    "MemoryActivityLog",
]
