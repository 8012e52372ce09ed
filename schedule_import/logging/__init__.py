"""Application logging (labeled formatter, SUMMARY level) and the JSON Lines error log."""

from .error_log import ErrorLogBuffer
from .init import LOGGER_NAME, SUMMARY_LEVEL, get_logger, log_summary, reset_logging, setup_logging

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "ErrorLogBuffer",
    "get_logger",
    "log_summary",
    "reset_logging",
    "setup_logging",
]
