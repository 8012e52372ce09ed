from __future__ import annotations

from dataclasses import dataclass

"""RawRow model for the schedule import pipeline.

A RawRow is one data row exactly as the source delivered it: an ordered tuple
of text cells plus the row position the user sees in their spreadsheet/CSV
editor (header row = 1, first data row = 2).
"""

__all__ = [
    "HEADER_POSITION",
    "FIRST_DATA_POSITION",
    "RawRow",
]

HEADER_POSITION = 1
FIRST_DATA_POSITION = 2


@dataclass(frozen=True)
class RawRow:
    """Single data row before decoding.

    Produced by a source reader, consumed once by the row decoder.
    """
    position: int  # 1-based, header excluded (first data row = 2)
    cells: tuple[str, ...]  # 生セル値 (文字列化済)

    def __len__(self) -> int:
        return len(self.cells)

    def cell(self, index: int) -> str | None:
        """Return the cell at ``index`` or None when the row is shorter."""
        if 0 <= index < len(self.cells):
            return self.cells[index]
        return None

    def is_blank(self) -> bool:
        return all(not c.strip() for c in self.cells)
