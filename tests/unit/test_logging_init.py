from __future__ import annotations

import logging
from io import StringIO

from schedule_import.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    setup_logging,
)


def test_setup_logging_configures_named_logger():
    logger = setup_logging()
    assert logger.name == LOGGER_NAME == "schedule_import"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_is_idempotent():
    first = setup_logging()
    assert setup_logging() is first
    assert get_logger() is first
    assert len(first.handlers) == 1


def test_labeled_prefixes():
    stream = StringIO()
    logger = logging.getLogger("tests.labeled")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    handler = logging.StreamHandler(stream)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    try:
        logger.info("info message")
        logger.warning("warn message")
        logger.error("error message")
        logger.log(SUMMARY_LEVEL, "source=x total=1")
    finally:
        logger.removeHandler(handler)
    assert stream.getvalue().splitlines() == [
        "INFO info message",
        "WARN warn message",
        "ERROR error message",
        "SUMMARY source=x total=1",
    ]


def test_log_summary_goes_to_stdout(capsys):
    setup_logging()
    log_summary("source=a.csv type=csv total=0 success=0 failed=0 elapsed_sec=0")
    out = capsys.readouterr().out
    assert "SUMMARY source=a.csv type=csv total=0" in out
