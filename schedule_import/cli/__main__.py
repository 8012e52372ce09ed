from __future__ import annotations

import argparse
import logging
import os
import sys
from contextlib import ExitStack
from pathlib import Path

from dotenv import load_dotenv

from schedule_import.config.loader import ConfigError, default_config, load_config
from schedule_import.db.subject_lookup import PostgresSubjectLookup, db_connection
from schedule_import.logging.error_log import ErrorLogBuffer
from schedule_import.logging.init import log_summary, setup_logging
from schedule_import.models.config_models import (
    SUBJECT_RESOLUTION_COLUMN,
    SUBJECT_RESOLUTION_HASH,
    SUBJECT_RESOLUTION_NAME,
    ImportConfig,
)
from schedule_import.services.lookup import StaticSubjectLookup, SubjectLookup, SubjectLookupError
from schedule_import.services.orchestrator import (
    ImportConfigurationError,
    csv_template,
    import_csv,
    import_google_sheet,
)
from schedule_import.services.summary import render_summary_line
from schedule_import.sources.base import ImportFatalError

"""CLI entrypoint.

Flow:
- Load .env (python-dotenv, overrides existing variables)
- Load config (config/import.yml when present, defaults otherwise)
- Build the subject lookup (--db -> PostgreSQL, else known subject names);
  --db needs the name or column strategy, known names need hash or column
- Run one import, print the JSON result, log SUMMARY, flush the error log

Exit codes: 0 every row imported, 2 some/all rows rejected, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

DEFAULT_CONFIG_PATH = Path("config/import.yml")


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True により .env の値で既存環境変数を上書き (DB / Google 認証情報を最優先化)。
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="schedule_import", description="Class schedule importer (CSV / Google Sheets)"
    )
    p.add_argument("--config", type=Path, default=None, help="YAML config (default: config/import.yml)")
    p.add_argument("--subjects", type=Path, default=None, help="File with known subjects, one per line")
    p.add_argument("--db", action="store_true", help="Check subjects against PostgreSQL")
    p.add_argument("--output", type=Path, default=None, help="Write the JSON result here instead of stdout")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    csv_p = sub.add_parser("csv", help="Import a CSV file")
    csv_p.add_argument("file", type=Path)

    sheet_p = sub.add_parser("sheet", help="Import a Google Sheets range")
    sheet_p.add_argument("--spreadsheet-id", required=True)
    sheet_p.add_argument("--range", dest="cell_range", default=None)
    sheet_p.add_argument("--credentials", default=None, help="Service account JSON file")

    sub.add_parser("template", help="Print the CSV template")
    return p.parse_args(argv)


def _load_cfg(path: Path | None) -> ImportConfig:
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return default_config()


def _known_subjects(cfg: ImportConfig, subjects_file: Path | None) -> list[str]:
    names = list(cfg.subjects.known)
    if subjects_file is not None:
        try:
            text = subjects_file.read_text(encoding="utf-8")
        except OSError as e:
            raise ImportConfigurationError(f"cannot read subjects file: {subjects_file}: {e}") from e
        names.extend(line.strip() for line in text.splitlines() if line.strip())
    return names


def _static_lookup(cfg: ImportConfig, names: list[str]) -> StaticSubjectLookup:
    if cfg.subjects.resolution == SUBJECT_RESOLUTION_NAME:
        raise ImportConfigurationError("subject resolution 'name' requires --db")
    if cfg.subjects.resolution == SUBJECT_RESOLUTION_COLUMN:
        try:
            return StaticSubjectLookup(int(n) for n in names)
        except ValueError as e:
            raise ImportConfigurationError(f"known subjects must be integer ids: {e}") from e
    return StaticSubjectLookup.from_names(names, cfg.subjects.hash_modulus)


def _check_db_resolution(cfg: ImportConfig) -> None:
    # hash で導出した ID は DB の連番 ID と一致しないため併用不可
    if cfg.subjects.resolution == SUBJECT_RESOLUTION_HASH:
        raise ImportConfigurationError(
            "subject resolution 'hash' cannot be checked against the database; use 'name' or 'column'"
        )


def _write_output(text: str, output: Path | None) -> None:
    if output is None:
        print(text)
    else:
        output.write_text(text + "\n", encoding="utf-8")


def _run(args: argparse.Namespace, cfg: ImportConfig, logger: logging.Logger, error_log: ErrorLogBuffer) -> int:
    with ExitStack() as stack:
        lookup: SubjectLookup | None = None
        if args.db:
            _check_db_resolution(cfg)
            cursor = stack.enter_context(db_connection(cfg.database))
            lookup = PostgresSubjectLookup(cursor, cfg.database.subjects_table)
            logger.debug(
                "subject lookup: postgres table=%s resolution=%s",
                cfg.database.subjects_table,
                cfg.subjects.resolution,
            )
        else:
            names = _known_subjects(cfg, args.subjects)
            if names:
                lookup = _static_lookup(cfg, names)
                logger.debug("subject lookup: static known=%d", len(lookup))

        if args.command == "csv":
            run = import_csv(args.file, lookup, config=cfg, name=args.file.name, logger=logger, error_log=error_log)
        else:
            credentials = (
                args.credentials
                or os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
                or cfg.google_sheets.credentials_file
            )
            run = import_google_sheet(
                args.spreadsheet_id,
                lookup,
                cell_range=args.cell_range,
                credentials=credentials,
                config=cfg,
                logger=logger,
                error_log=error_log,
            )

    _write_output(run.result.to_json(indent=2), args.output)
    # render_summary_line の "SUMMARY " はフォーマッタ側のラベルと重複するため除去
    log_summary(render_summary_line(run)[len("SUMMARY "):], logger)
    return EXIT_PARTIAL_FAILURE if run.result.failed > 0 else EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (テストで main([]) を渡すケース)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = _load_cfg(args.config)
    except ConfigError as e:
        logger.error("config: %s", e)
        return EXIT_FATAL

    if args.debug:
        for h in logger.handlers:
            h.setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
        logger.debug("debug mode enabled")

    if args.command == "template":
        _write_output(csv_template(cfg).rstrip("\n"), args.output)
        return EXIT_SUCCESS_ALL

    error_log = ErrorLogBuffer(cfg.logs_dir)
    try:
        return _run(args, cfg, logger, error_log)
    except ImportFatalError as e:
        logger.error("import: %s", e)
        return EXIT_FATAL
    except SubjectLookupError as e:
        logger.error("subject lookup: %s", e)
        return EXIT_FATAL
    finally:
        path = error_log.flush()
        if path is not None:
            logger.info("error log written: %s", path)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
