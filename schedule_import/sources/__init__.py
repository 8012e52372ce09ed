"""Source readers: CSV files/streams and Google Sheets ranges."""

from .base import (
    ImportConfigurationError,
    ImportFatalError,
    MissingColumnsError,
    SourceUnreachable,
    TabularSource,
)
from .csv_reader import open_csv_source, render_csv_template
from .sheets_reader import open_sheet_source

__all__ = [
    "ImportConfigurationError",
    "ImportFatalError",
    "MissingColumnsError",
    "SourceUnreachable",
    "TabularSource",
    "open_csv_source",
    "open_sheet_source",
    "render_csv_template",
]
