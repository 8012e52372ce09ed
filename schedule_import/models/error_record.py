from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""Error models for the schedule import pipeline.

ImportRowError is the row-level error carried in the ImportResult and
returned to the caller. ErrorRecord is the audit-log line written by
ErrorLogBuffer; it supports row=-1 for source-level failures where no row
applies.
"""

__all__ = [
    "ImportRowError",
    "ErrorRecord",
    "SOURCE_LEVEL_ROW",
]

SOURCE_LEVEL_ROW = -1


@dataclass(frozen=True)
class ImportRowError:
    """Row-level decode or validation failure.

    Attributes:
        row: Row position as the user sees it (header = 1, first data row = 2)
        error: Human-readable message returned to the caller
        error_type: Classification in UPPER_SNAKE_CASE (not part of the
            transport payload)
    """
    row: int
    error: str
    error_type: str = "ROW_ERROR"

    def to_dict(self) -> dict[str, object]:
        # transport 形式: {row, error} のみ
        return {"row": self.row, "error": self.error}


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines audit logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: File name or spreadsheet id being imported
        row: Row position. Use -1 for source-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Error description
    """
    timestamp: str  # ISO8601 UTC
    source: str
    row: int  # 行番号。ソース全体のエラーは -1
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(source: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            row=row,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_row_error(source: str, err: ImportRowError) -> ErrorRecord:
        return ErrorRecord.create(source, err.row, err.error_type, err.error)

    def to_json_line(self) -> str:
        """Serialize ErrorRecord to JSON Lines format (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)
