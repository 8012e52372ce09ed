from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .error_record import ImportRowError
from .schedule_item import ValidatedScheduleItem

"""Import result models for the schedule import pipeline.

ImportResult is the deterministic report returned to the transport layer.
ImportRun wraps it with per-invocation metadata (state, timing, validated
items) that must never leak into the report itself.
"""

__all__ = [
    "ImportResult",
    "ImportRun",
    "ImportState",
    "SourceType",
]


class SourceType(Enum):
    CSV = "csv"
    GOOGLE_SHEETS = "google_sheets"


class ImportState(Enum):
    """Orchestrator lifecycle.

    State transitions: reading → (done | failed)
    """
    READING = "reading"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ImportResult:
    """Aggregated row-level outcome of one import.

    Invariant: total == success + failed and failed == len(errors).
    """
    total: int
    success: int
    failed: int
    errors: tuple[ImportRowError, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "success": self.success,
            "failed": self.failed,
            "errors": [e.to_dict() for e in self.errors],
        }

    def to_json(self, *, indent: int | None = None) -> str:
        """Deterministic JSON rendering (same input -> same bytes)."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)


@dataclass(frozen=True)
class ImportRun:
    """Processing context for one import invocation."""
    source_name: str  # ファイル名 or spreadsheet id
    source_type: SourceType
    state: ImportState
    result: ImportResult
    items: tuple[ValidatedScheduleItem, ...] = field(default=())
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def elapsed_seconds(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()
