from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any

import psycopg2

from ..decoding.subjects import subject_name_key
from ..models.config_models import DatabaseConfig
from ..services.lookup import SubjectLookupError

"""Subject existence lookup backed by PostgreSQL.

One ``SELECT id FROM <table> WHERE id = ANY(%s)`` per import batch; the
validator calls ``exists_all`` with the distinct subject ids it collected.
Under the ``name`` strategy ``ids_for_names`` resolves subject names with one
``SELECT id, name ... WHERE lower(name) = ANY(%s)`` instead.

接続情報の解決優先順位:
    1. DATABASE_URL / PGDSN (DSN 全体)
    2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. config の database セクション (不足分のフォールバック)
"""

__all__ = [
    "PostgresSubjectLookup",
    "build_dsn",
    "db_connection",
]

_TABLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


class PostgresSubjectLookup:
    """Bulk subject lookup over an open psycopg2 cursor."""

    def __init__(self, cursor: Any, table: str = "subjects") -> None:
        if not _TABLE_NAME_RE.match(table):
            raise ValueError(f"invalid subjects table name: {table!r}")
        self._cursor = cursor
        self._table = table

    @property
    def table(self) -> str:
        return self._table

    def exists_all(self, subject_ids: Iterable[int]) -> set[int]:
        ids = sorted({int(i) for i in subject_ids})
        if not ids:
            return set()
        sql = f"SELECT id FROM {self._table} WHERE id = ANY(%s)"
        try:
            self._cursor.execute(sql, (ids,))
            rows = self._cursor.fetchall()
        except psycopg2.Error as e:
            raise SubjectLookupError(f"subject lookup failed: {e}") from e
        return {int(r[0]) for r in rows}

    def exists(self, subject_id: int) -> bool:
        return int(subject_id) in self.exists_all([subject_id])

    def ids_for_names(self, names: Iterable[str]) -> dict[str, int]:
        """Stored ids for subject names, matched case-insensitively.

        When several rows share a name the lowest id wins.
        """
        keys = sorted({subject_name_key(n) for n in names if n and n.strip()})
        if not keys:
            return {}
        sql = f"SELECT id, name FROM {self._table} WHERE lower(name) = ANY(%s) ORDER BY id"
        try:
            self._cursor.execute(sql, (keys,))
            rows = self._cursor.fetchall()
        except psycopg2.Error as e:
            raise SubjectLookupError(f"subject lookup failed: {e}") from e
        found: dict[str, int] = {}
        for subject_id, name in rows:
            found.setdefault(subject_name_key(name), int(subject_id))
        return found


def build_dsn(db_cfg: DatabaseConfig) -> str:
    """Resolve a libpq DSN from the environment, falling back to config."""
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def db_connection(db_cfg: DatabaseConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Yield a read-only psycopg2 cursor; the connection is closed on exit."""
    try:
        conn = psycopg2.connect(build_dsn(db_cfg))
    except psycopg2.Error as e:
        raise SubjectLookupError(f"database connection failed: {e}") from e
    try:
        conn.set_session(readonly=True, autocommit=True)
        with conn.cursor() as cur:
            yield cur
    finally:
        conn.close()
