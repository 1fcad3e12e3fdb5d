"""Diagnostics event sink.

Cleanup and privilege code reports user-relevant events here. Each event
is forwarded to the standard logging tree under
``reclaim.diagnostics.<category>`` and kept in a bounded in-memory buffer
so front ends can show recent activity.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)

MAX_ENTRIES = 200


class DiagnosticsCategory(str, Enum):
    """Area of the application an event belongs to."""

    CLEANUP = "cleanup"
    PRIVILEGE = "privilege"
    PREFERENCES = "preferences"


class DiagnosticsSeverity(int, Enum):
    """Event severity, ordered from least to most severe."""

    INFO = 0
    WARNING = 1
    ERROR = 2

    @property
    def log_level(self) -> int:
        """Matching standard logging level."""
        return {
            DiagnosticsSeverity.INFO: logging.INFO,
            DiagnosticsSeverity.WARNING: logging.WARNING,
            DiagnosticsSeverity.ERROR: logging.ERROR,
        }[self]


@dataclass(frozen=True, slots=True)
class DiagnosticsEntry:
    """A single recorded diagnostics event.

    Attributes:
        category: Area the event belongs to.
        severity: Event severity.
        message: Human-readable message.
        metadata: String-keyed context values.
        timestamp: When the event was recorded (UTC).
    """

    category: DiagnosticsCategory
    severity: DiagnosticsSeverity
    message: str
    metadata: dict[str, str] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))


class DiagnosticsSink(Protocol):
    """Anything that accepts diagnostics events."""

    def record(
        self,
        category: DiagnosticsCategory,
        severity: DiagnosticsSeverity,
        message: str,
        metadata: dict[str, str] | None = None,
    ) -> None: ...


class Diagnostics:
    """Logging-backed diagnostics sink with a bounded history.

    Thread-safe: events may be recorded from worker threads.

    Attributes:
        max_entries: Number of entries retained in memory.
    """

    def __init__(self, max_entries: int = MAX_ENTRIES) -> None:
        self.max_entries = max_entries
        self._entries: deque[DiagnosticsEntry] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def record(
        self,
        category: DiagnosticsCategory,
        severity: DiagnosticsSeverity,
        message: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Record an event and forward it to the category logger."""
        entry = DiagnosticsEntry(
            category=category,
            severity=severity,
            message=message,
            metadata=dict(metadata or {}),
        )
        with self._lock:
            self._entries.append(entry)

        serialized = " ".join(f"{key}={value}" for key, value in entry.metadata.items())
        logging.getLogger(f"reclaim.diagnostics.{category.value}").log(
            severity.log_level, "%s %s", message, serialized
        )

    def entries(self) -> list[DiagnosticsEntry]:
        """Return retained entries, oldest first."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        """Drop all retained entries."""
        with self._lock:
            self._entries.clear()


def emit(
    sink: DiagnosticsSink | None,
    category: DiagnosticsCategory,
    severity: DiagnosticsSeverity,
    message: str,
    **metadata: str,
) -> None:
    """Send an event to a sink without letting sink failures escape.

    Diagnostics are fire-and-forget: a sink that raises is logged and
    ignored so cleanup logic never observes it.

    Args:
        sink: Destination sink, or None to drop the event.
        category: Area the event belongs to.
        severity: Event severity.
        message: Human-readable message.
        **metadata: String-keyed context values.
    """
    if sink is None:
        return
    try:
        sink.record(category, severity, message, metadata)
    except Exception:
        logger.warning("Diagnostics sink failed to record %r", message, exc_info=True)
