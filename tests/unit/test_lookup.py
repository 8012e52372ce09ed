from __future__ import annotations

from unittest.mock import MagicMock

import psycopg2
import pytest

from schedule_import.db.subject_lookup import PostgresSubjectLookup, build_dsn
from schedule_import.decoding.subjects import derive_subject_id
from schedule_import.models.config_models import DatabaseConfig
from schedule_import.services.lookup import (
    BulkSubjectLookup,
    StaticSubjectLookup,
    SubjectLookup,
    SubjectLookupError,
    SubjectNameLookup,
)


def test_static_lookup():
    lookup = StaticSubjectLookup([1, 2])
    assert lookup.exists(1)
    assert not lookup.exists(3)
    assert lookup.exists_all([1, 3]) == {1}
    assert len(lookup) == 2
    assert isinstance(lookup, BulkSubjectLookup)


def test_static_lookup_from_names():
    lookup = StaticSubjectLookup.from_names(["Математика", " ", "Физика"])
    assert len(lookup) == 2
    assert lookup.exists(derive_subject_id("математика"))


def test_static_lookup_resolves_names():
    lookup = StaticSubjectLookup([3], names={"Математика": 7})
    assert lookup.exists(7) and lookup.exists(3)
    assert lookup.ids_for_names(["математика", "история"]) == {"математика": 7}
    assert isinstance(lookup, SubjectNameLookup)


def test_postgres_name_lookup_matches_case_insensitively():
    cur = MagicMock()
    cur.fetchall.return_value = [(1, "Математика"), (4, "математика"), (2, "Физика")]
    lookup = PostgresSubjectLookup(cur)
    assert lookup.ids_for_names(["МАТЕМАТИКА", " Физика ", "математика"]) == {
        "математика": 1,
        "физика": 2,
    }
    cur.execute.assert_called_once_with(
        "SELECT id, name FROM subjects WHERE lower(name) = ANY(%s) ORDER BY id",
        (["математика", "физика"],),
    )
    assert isinstance(lookup, SubjectNameLookup)


def test_postgres_name_lookup_skips_empty_query():
    cur = MagicMock()
    assert PostgresSubjectLookup(cur).ids_for_names(["", "  "]) == {}
    cur.execute.assert_not_called()


def test_postgres_name_lookup_wraps_driver_errors():
    cur = MagicMock()
    cur.execute.side_effect = psycopg2.ProgrammingError('column "name" does not exist')
    with pytest.raises(SubjectLookupError, match='column "name" does not exist'):
        PostgresSubjectLookup(cur).ids_for_names(["Физика"])


def test_postgres_lookup_queries_once():
    cur = MagicMock()
    cur.fetchall.return_value = [(5,)]
    lookup = PostgresSubjectLookup(cur, "portal.subjects")
    assert lookup.exists_all([7, 5, 5]) == {5}
    cur.execute.assert_called_once_with("SELECT id FROM portal.subjects WHERE id = ANY(%s)", ([5, 7],))
    assert isinstance(lookup, SubjectLookup)


def test_postgres_lookup_skips_empty_query():
    cur = MagicMock()
    assert PostgresSubjectLookup(cur).exists_all([]) == set()
    cur.execute.assert_not_called()


def test_postgres_lookup_wraps_driver_errors():
    cur = MagicMock()
    cur.execute.side_effect = psycopg2.OperationalError("server closed the connection")
    with pytest.raises(SubjectLookupError, match="server closed the connection"):
        PostgresSubjectLookup(cur).exists(1)


def test_postgres_lookup_rejects_unsafe_table_name():
    with pytest.raises(ValueError):
        PostgresSubjectLookup(MagicMock(), "subjects; DROP TABLE x")


def test_build_dsn_prefers_environment(monkeypatch):
    for var in ("DATABASE_URL", "PGDSN", "PGHOST", "PGPORT", "PGUSER", "PGPASSWORD", "PGDATABASE"):
        monkeypatch.delenv(var, raising=False)
    cfg = DatabaseConfig(host="db", port=5433, user="portal", password="pw", database="portal")
    assert build_dsn(cfg) == "host=db port=5433 user=portal dbname=portal password=pw"
    monkeypatch.setenv("PGHOST", "envhost")
    assert build_dsn(cfg).startswith("host=envhost port=5433")
    monkeypatch.setenv("DATABASE_URL", "postgresql://u@h/d")
    assert build_dsn(cfg) == "postgresql://u@h/d"
