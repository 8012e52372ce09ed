"""Domain models for the schedule import pipeline.

This package contains the value types that flow between the source readers,
the row decoder, the referential validator and the result aggregator.
"""

from .config_models import ImportConfig
from .error_record import ErrorRecord, ImportRowError
from .header_schema import HeaderSchema, schedule_header_schema
from .import_result import ImportResult, ImportRun, ImportState, SourceType
from .raw_row import RawRow
from .schedule_item import ScheduleItemCandidate, ValidatedScheduleItem

__all__ = [
    # Configuration models
    "ImportConfig",
    # Pipeline models
    "RawRow",
    "HeaderSchema",
    "schedule_header_schema",
    "ScheduleItemCandidate",
    "ValidatedScheduleItem",
    "ImportRowError",
    "ErrorRecord",
    "ImportResult",
    "ImportRun",
    "ImportState",
    "SourceType",
]
