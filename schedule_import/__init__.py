"""Schedule import pipeline.

Reads class schedules from CSV uploads and Google Sheets ranges, decodes and
validates every row, and reports partial success with per-row errors.
"""

from .models import ImportResult, ImportRowError, ImportRun, ScheduleItemCandidate, ValidatedScheduleItem
from .services.orchestrator import (
    ImportConfigurationError,
    csv_template,
    import_csv,
    import_google_sheet,
    run_import,
)
from .sources.base import ImportFatalError, MissingColumnsError, SourceUnreachable

__version__ = "0.1.0"

__all__ = [
    "ImportConfigurationError",
    "ImportFatalError",
    "ImportResult",
    "ImportRowError",
    "ImportRun",
    "MissingColumnsError",
    "ScheduleItemCandidate",
    "SourceUnreachable",
    "ValidatedScheduleItem",
    "csv_template",
    "import_csv",
    "import_google_sheet",
    "run_import",
]
