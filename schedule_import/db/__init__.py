"""PostgreSQL-backed collaborators (subject lookup, connection helper)."""

from .subject_lookup import PostgresSubjectLookup, build_dsn, db_connection

__all__ = [
    "PostgresSubjectLookup",
    "build_dsn",
    "db_connection",
]
