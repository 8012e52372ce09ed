"""Pipeline services: validation, aggregation, orchestration and reporting."""

from .aggregator import AggregationError, build_import_result
from .lookup import BulkSubjectLookup, StaticSubjectLookup, SubjectLookup, SubjectLookupError
from .orchestrator import (
    ImportConfigurationError,
    csv_template,
    import_csv,
    import_google_sheet,
    run_import,
    select_header_schema,
)
from .summary import render_summary_line
from .validator import ValidationOutcome, validate_candidates

__all__ = [
    "AggregationError",
    "BulkSubjectLookup",
    "ImportConfigurationError",
    "StaticSubjectLookup",
    "SubjectLookup",
    "SubjectLookupError",
    "ValidationOutcome",
    "build_import_result",
    "csv_template",
    "import_csv",
    "import_google_sheet",
    "render_summary_line",
    "run_import",
    "select_header_schema",
    "validate_candidates",
]
