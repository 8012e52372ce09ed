from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the schedule import pipeline.

Populated by schedule_import.config.loader from YAML; every field has a
default so that an import can run without a config file.
"""

__all__ = [
    "CsvConfig",
    "DatabaseConfig",
    "GoogleSheetsConfig",
    "ImportConfig",
    "SubjectConfig",
    "ValidationConfig",
]

SUBJECT_RESOLUTION_HASH = "hash"
SUBJECT_RESOLUTION_COLUMN = "column"
SUBJECT_RESOLUTION_NAME = "name"

TIME_FORMAT_STRICT = "strict"
TIME_FORMAT_LENIENT = "lenient"


@dataclass(frozen=True)
class CsvConfig:
    """CSV reading options.

    ``encoding`` / ``delimiter`` of "auto" enable detection on the leading
    bytes of the file.
    """
    encoding: str = "auto"
    encodings: tuple[str, ...] = ("utf-8-sig", "cp1251")  # auto 検出時の候補 (順序優先)
    delimiter: str = "auto"
    chunk_size: int = 500


@dataclass(frozen=True)
class GoogleSheetsConfig:
    range: str = "Sheet1!A1:I"
    credentials_file: str | None = None  # service account JSON


@dataclass(frozen=True)
class SubjectConfig:
    resolution: str = SUBJECT_RESOLUTION_HASH  # hash | column | name
    hash_modulus: int = 1_000_000
    known: tuple[str, ...] = ()  # 静的 lookup 用の既知科目名


@dataclass(frozen=True)
class ValidationConfig:
    time_format: str = TIME_FORMAT_STRICT  # strict | lenient
    check_time_order: bool = False


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection fallback for the subject lookup.

    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None
    subjects_table: str = "subjects"


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for the import process."""
    csv: CsvConfig = field(default_factory=CsvConfig)
    google_sheets: GoogleSheetsConfig = field(default_factory=GoogleSheetsConfig)
    subjects: SubjectConfig = field(default_factory=SubjectConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    column_aliases: dict[str, tuple[str, ...]] = field(default_factory=dict)
    logs_dir: str = "./logs"
