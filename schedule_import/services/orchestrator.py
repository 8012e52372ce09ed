from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import IO, Any

from ..decoding.row_decoder import RowDecoder
from ..decoding.subjects import SubjectResolver, make_subject_resolver
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import get_logger
from ..models.config_models import TIME_FORMAT_LENIENT, ImportConfig
from ..models.error_record import SOURCE_LEVEL_ROW, ErrorRecord, ImportRowError
from ..models.header_schema import HeaderSchema, MissingHeaderColumnsError, schedule_header_schema
from ..models.import_result import ImportRun, ImportState, SourceType
from ..models.schedule_item import ScheduleItemCandidate
from ..sources.base import (
    ImportConfigurationError,
    ImportFatalError,
    MissingColumnsError,
    SourceUnreachable,
    TabularSource,
)
from ..sources.csv_reader import open_csv_source, render_csv_template
from ..sources.sheets_reader import CredentialsInput, open_sheet_source
from .aggregator import build_import_result
from .lookup import SubjectLookup, SubjectNameLookup
from .progress import ProgressTracker
from .validator import validate_candidates

"""Import orchestration for the schedule import pipeline.

Sequences source reader -> row decoder -> referential validator ->
aggregator for one source. States: reading -> done, or reading -> failed
when the source is unreachable (the exception propagates and no result is
produced). Row-level failures never abort the batch.
"""

__all__ = [
    "ImportConfigurationError",
    "csv_template",
    "import_csv",
    "import_google_sheet",
    "run_import",
    "select_header_schema",
]


def select_header_schema(source_type: SourceType, config: ImportConfig) -> HeaderSchema:
    """Header schema for a source type.

    CSV uploads and spreadsheet ranges share the schedule template; the
    subject strategy decides whether a "Subject ID" column is required.
    """
    resolver = _make_resolver(config)
    schema = schedule_header_schema(
        subject_id_column=resolver.requires_subject_id_column,
        extra_aliases=config.column_aliases,
    )
    return schema if source_type is SourceType.CSV else HeaderSchema(schema.columns, name="google_sheets")


def _make_resolver(config: ImportConfig) -> SubjectResolver:
    try:
        return make_subject_resolver(config.subjects)
    except ValueError as e:
        raise ImportConfigurationError(str(e)) from e


def _fail(
    source_name: str,
    error: ImportFatalError,
    logger: logging.Logger,
    error_log: ErrorLogBuffer | None,
) -> None:
    logger.error("import failed source=%s state=%s: %s", source_name, ImportState.FAILED.value, error)
    if error_log is not None:
        error_log.append(
            ErrorRecord.create(
                source=source_name,
                row=SOURCE_LEVEL_ROW,
                error_type="SOURCE_UNREACHABLE",
                message=str(error),
            )
        )


def run_import(
    source: TabularSource,
    lookup: SubjectLookup | None,
    *,
    config: ImportConfig | None = None,
    logger: logging.Logger | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ImportRun:
    """Run decode/validate/aggregate over an opened source.

    The source is closed on return, including when the import fails before
    any row is read.

    Args:
        source: Opened source (header + lazy rows)
        lookup: Subject existence capability (required)
        config: Import configuration (None = defaults)
        logger: Logger for progress/audit messages (None = application logger)
        error_log: Optional audit buffer; row errors and fatal errors are appended

    Returns:
        ImportRun in state DONE with the aggregated result and validated items

    Raises:
        ImportConfigurationError: lookup missing, strategy unknown, or the
            lookup cannot resolve subject names for the ``name`` strategy
        SourceUnreachable: source failed while reading, or header unusable
    """
    with source:
        return _run_import(source, lookup, config or ImportConfig(), logger or get_logger(), error_log)


def _run_import(
    source: TabularSource,
    lookup: SubjectLookup | None,
    cfg: ImportConfig,
    log: logging.Logger,
    error_log: ErrorLogBuffer | None,
) -> ImportRun:
    if lookup is None:
        raise ImportConfigurationError("subject lookup is required for schedule import")

    start_time = datetime.now(UTC)
    schema = select_header_schema(source.source_type, cfg)
    resolver = _make_resolver(cfg)
    if resolver.resolves_by_name and not isinstance(lookup, SubjectNameLookup):
        raise ImportConfigurationError(
            f"subject resolution '{cfg.subjects.resolution}' needs a lookup that resolves subject names"
        )
    log.info("import started source=%s type=%s", source.name, source.source_type.value)

    try:
        binding = schema.bind(source.header)
    except MissingHeaderColumnsError as e:
        err = MissingColumnsError(str(e))
        _fail(source.name, err, log, error_log)
        raise err from e

    decoder = RowDecoder(
        schema,
        binding,
        resolver=resolver,
        lenient=cfg.validation.time_format == TIME_FORMAT_LENIENT,
    )

    total = 0
    candidates: list[ScheduleItemCandidate] = []
    decode_errors: list[ImportRowError] = []
    with ProgressTracker(description=f"Decoding {source.name}") as progress:
        try:
            for row in source.rows:
                total += 1
                decoded = decoder.decode(row)
                if isinstance(decoded, ImportRowError):
                    decode_errors.append(decoded)
                    progress.advance(success=False)
                else:
                    candidates.append(decoded)
                    progress.advance(success=True)
        except SourceUnreachable as e:
            _fail(source.name, e, log, error_log)
            raise

    log.debug(
        "decoded source=%s rows=%d candidates=%d decode_errors=%d",
        source.name,
        total,
        len(candidates),
        len(decode_errors),
    )

    validation = validate_candidates(
        candidates,
        lookup,
        check_time_order=cfg.validation.check_time_order,
    )
    result = build_import_result(total, validation.items, [*decode_errors, *validation.errors])

    if error_log is not None:
        for row_error in result.errors:
            error_log.append(ErrorRecord.from_row_error(source.name, row_error))

    end_time = datetime.now(UTC)
    log.info(
        "import finished source=%s total=%d success=%d failed=%d",
        source.name,
        result.total,
        result.success,
        result.failed,
    )
    return ImportRun(
        source_name=source.name,
        source_type=source.source_type,
        state=ImportState.DONE,
        result=result,
        items=validation.items,
        start_time=start_time,
        end_time=end_time,
    )


def import_csv(
    csv_source: str | Path | IO[bytes],
    lookup: SubjectLookup | None,
    *,
    config: ImportConfig | None = None,
    name: str | None = None,
    logger: logging.Logger | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ImportRun:
    """Import a CSV upload (file path or binary stream)."""
    cfg = config or ImportConfig()
    log = logger or get_logger()
    if lookup is None:
        raise ImportConfigurationError("subject lookup is required for schedule import")
    try:
        source = open_csv_source(csv_source, config=cfg.csv, name=name)
    except SourceUnreachable as e:
        _fail(name or str(csv_source), e, log, error_log)
        raise
    return run_import(source, lookup, config=cfg, logger=log, error_log=error_log)


def import_google_sheet(
    spreadsheet_id: str,
    lookup: SubjectLookup | None,
    *,
    cell_range: str | None = None,
    credentials: CredentialsInput | None = None,
    service: Any = None,
    config: ImportConfig | None = None,
    logger: logging.Logger | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ImportRun:
    """Import a Google Sheets range (fetched with one API call)."""
    cfg = config or ImportConfig()
    log = logger or get_logger()
    if lookup is None:
        raise ImportConfigurationError("subject lookup is required for schedule import")
    rng = cell_range or cfg.google_sheets.range
    creds = credentials if credentials is not None else cfg.google_sheets.credentials_file
    try:
        source = open_sheet_source(spreadsheet_id, rng, credentials=creds, service=service)
    except SourceUnreachable as e:
        _fail(spreadsheet_id, e, log, error_log)
        raise
    return run_import(source, lookup, config=cfg, logger=log, error_log=error_log)


def csv_template(config: ImportConfig | None = None) -> str:
    """Downloadable CSV template matching the configured header schema."""
    return render_csv_template(select_header_schema(SourceType.CSV, config or ImportConfig()))
