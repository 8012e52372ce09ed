# Shared pytest fixtures
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from schedule_import.logging.init import reset_logging
from schedule_import.services.lookup import StaticSubjectLookup

KNOWN_SUBJECTS = ("Математика", "Физика", "Программирование")


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    monkeypatch.chdir(tmp_path)
    # 実環境の DB / Google 認証情報がテストに混入しないように
    for var in ("DATABASE_URL", "PGDSN", "GOOGLE_APPLICATION_CREDENTIALS"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture()
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    def _write(text: str, name: str = "schedule.csv", encoding: str = "utf-8") -> Path:
        path = tmp_path / name
        path.write_bytes(text.encode(encoding))
        return path

    return _write


@pytest.fixture()
def lookup() -> StaticSubjectLookup:
    return StaticSubjectLookup.from_names(KNOWN_SUBJECTS)


@pytest.fixture()
def sample_config_yaml() -> str:
    return """csv:
  encodings: [utf-8-sig, cp1251]
  chunk_size: 100
subjects:
  resolution: hash
  known:
    - Математика
    - Физика
validation:
  time_format: strict
  check_time_order: false
database:
  host: localhost
  port: 5432
  user: portal
  database: portal
  subjects_table: subjects
logs_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
