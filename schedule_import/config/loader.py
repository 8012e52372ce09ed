from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    CsvConfig,
    DatabaseConfig,
    GoogleSheetsConfig,
    ImportConfig,
    SubjectConfig,
    ValidationConfig,
)

"""Config loader.

Responsibilities:
- Load YAML (e.g. config/import.yml)
- Validate against config_schema.json (unknown keys rejected)
- Apply defaults for every omitted section / key
"""

__all__ = [
    "SCHEMA_PATH",
    "ConfigError",
    "default_config",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: schema file missing or broken, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def default_config() -> ImportConfig:
    return ImportConfig()


def _build(data: dict[str, Any]) -> ImportConfig:
    csv_raw = data.get("csv") or {}
    csv_defaults = CsvConfig()
    csv_cfg = CsvConfig(
        encoding=csv_raw.get("encoding", csv_defaults.encoding),
        encodings=tuple(csv_raw.get("encodings", csv_defaults.encodings)),
        delimiter=csv_raw.get("delimiter", csv_defaults.delimiter),
        chunk_size=csv_raw.get("chunk_size", csv_defaults.chunk_size),
    )

    gs_raw = data.get("google_sheets") or {}
    gs_cfg = GoogleSheetsConfig(
        range=gs_raw.get("range", GoogleSheetsConfig.range),
        credentials_file=gs_raw.get("credentials_file"),
    )

    subj_raw = data.get("subjects") or {}
    subj_cfg = SubjectConfig(
        resolution=subj_raw.get("resolution", SubjectConfig.resolution),
        hash_modulus=subj_raw.get("hash_modulus", SubjectConfig.hash_modulus),
        known=tuple(subj_raw.get("known", ())),
    )

    val_raw = data.get("validation") or {}
    val_cfg = ValidationConfig(
        time_format=val_raw.get("time_format", ValidationConfig.time_format),
        check_time_order=val_raw.get("check_time_order", ValidationConfig.check_time_order),
    )

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
        subjects_table=db_raw.get("subjects_table", DatabaseConfig.subjects_table),
    )

    aliases = {str(k): tuple(v) for k, v in (data.get("column_aliases") or {}).items()}
    return ImportConfig(
        csv=csv_cfg,
        google_sheets=gs_cfg,
        subjects=subj_cfg,
        validation=val_cfg,
        database=db,
        column_aliases=aliases,
        logs_dir=data.get("logs_dir", ImportConfig.logs_dir),
    )


def load_config(path: Path | str) -> ImportConfig:
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)
    return _build(data)
