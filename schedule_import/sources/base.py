from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass

from ..models.import_result import SourceType
from ..models.raw_row import RawRow

"""Common source reader types.

Every reader returns a TabularSource: the header row (consumed separately)
plus a lazy, single-pass iterator of RawRow in source order. Any failure to
reach or read the source is reported as SourceUnreachable, never as a
row-level error.
"""

__all__ = [
    "ImportConfigurationError",
    "ImportFatalError",
    "SourceUnreachable",
    "MissingColumnsError",
    "TabularSource",
    "to_cells",
]


class ImportFatalError(Exception):
    """Base for batch-level failures: nothing from the batch is imported."""


class ImportConfigurationError(ImportFatalError):
    """Raised when the import is wired incorrectly (e.g. no subject lookup)."""


class SourceUnreachable(ImportFatalError):
    """Raised when the source cannot be opened, read, or holds no data."""


class MissingColumnsError(SourceUnreachable):
    """Raised when the header row lacks mandatory columns."""


@dataclass
class TabularSource:
    name: str  # ファイル名 / spreadsheet id (ログ・監査用)
    source_type: SourceType
    header: tuple[str, ...] | None
    rows: Iterator[RawRow]  # 1回のみ走査可能
    on_close: Callable[[], None] | None = None  # 開いたストリームの解放

    def close(self) -> None:
        """Release the underlying stream, whether or not rows were read."""
        close_rows = getattr(self.rows, "close", None)
        if callable(close_rows):
            close_rows()
        if self.on_close is not None:
            self.on_close()

    def __enter__(self) -> TabularSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def to_cells(values: list[object] | tuple[object, ...]) -> tuple[str, ...]:
    """Convert raw source values to text cells.

    Missing values (None / NaN) at the end of the row are dropped so that the
    row width reflects what the source actually supplied; missing values in
    the middle become empty strings.
    """
    cells: list[str | None] = []
    for v in values:
        if v is None or (isinstance(v, float) and v != v):  # NaN
            cells.append(None)
        else:
            cells.append(str(v))
    while cells and cells[-1] is None:
        cells.pop()
    return tuple("" if c is None else c for c in cells)
