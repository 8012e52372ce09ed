from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

"""HeaderSchema model: recognized columns and their binding to a header row.

A schema is an ordered sequence of columns. Each column has a canonical name
(used in error messages), a mandatory flag and case-insensitive aliases. The
schema binds to an actual header row by name (column order in the file does
not matter) or positionally when the source has no usable header names.
"""

__all__ = [
    "COURSE",
    "SPECIALTY",
    "GROUP",
    "DAY",
    "START_TIME",
    "END_TIME",
    "SUBJECT",
    "TEACHER",
    "ROOM",
    "SUBJECT_ID",
    "Column",
    "ColumnBinding",
    "HeaderSchema",
    "MissingHeaderColumnsError",
    "schedule_header_schema",
]

COURSE = "Course"
SPECIALTY = "Specialty"
GROUP = "Group"
DAY = "Day"
START_TIME = "Start Time"
END_TIME = "End Time"
SUBJECT = "Subject"
TEACHER = "Teacher"
ROOM = "Room"
SUBJECT_ID = "Subject ID"

# ロシア語テンプレートのヘッダ名
_DEFAULT_ALIASES: dict[str, tuple[str, ...]] = {
    COURSE: ("Курс",),
    SPECIALTY: ("Специальность",),
    GROUP: ("Группа",),
    DAY: ("День", "День недели"),
    START_TIME: ("Время начала",),
    END_TIME: ("Время конца", "Время окончания"),
    SUBJECT: ("Предмет", "Дисциплина"),
    TEACHER: ("Преподаватель",),
    ROOM: ("Кабинет", "Аудитория"),
    SUBJECT_ID: ("ID предмета", "subjectId"),
}


class MissingHeaderColumnsError(Exception):
    """Raised when a header row lacks one or more mandatory columns."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(f"header is missing required columns: {', '.join(self.missing)}")


def _key(name: str) -> str:
    return " ".join(name.split()).casefold()


@dataclass(frozen=True)
class Column:
    name: str
    mandatory: bool = True
    aliases: tuple[str, ...] = ()

    def matches(self, header_cell: str) -> bool:
        key = _key(header_cell)
        return key == _key(self.name) or any(key == _key(a) for a in self.aliases)


@dataclass(frozen=True)
class ColumnBinding:
    """Column name -> cell index for one concrete source."""
    indices: Mapping[str, int]
    required_width: int  # mandatory 列を全て含むのに必要なセル数

    def index_of(self, name: str) -> int | None:
        return self.indices.get(name)


@dataclass(frozen=True)
class HeaderSchema:
    """Ordered, immutable set of recognized columns for one import type."""
    columns: tuple[Column, ...]
    name: str = "schedule"
    _by_name: dict[str, Column] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_name", {c.name: c for c in self.columns})

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    @property
    def mandatory_columns(self) -> tuple[Column, ...]:
        return tuple(c for c in self.columns if c.mandatory)

    def column(self, name: str) -> Column:
        return self._by_name[name]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def positional_binding(self) -> ColumnBinding:
        indices = {c.name: i for i, c in enumerate(self.columns)}
        return ColumnBinding(indices=indices, required_width=len(self.mandatory_columns))

    def bind(self, header: Sequence[str] | None) -> ColumnBinding:
        """Bind the schema to a header row.

        With no header (or a header without a single recognized name) the
        schema falls back to positional binding. Otherwise every mandatory
        column must be found by name; the first matching header cell wins.

        Raises:
            MissingHeaderColumnsError: header names are recognized but some
                mandatory columns are absent
        """
        if not header:
            return self.positional_binding()
        indices: dict[str, int] = {}
        for col in self.columns:
            for idx, cell in enumerate(header):
                if cell is not None and col.matches(str(cell)):
                    indices[col.name] = idx
                    break
        if not indices:
            return self.positional_binding()
        missing = [c.name for c in self.mandatory_columns if c.name not in indices]
        if missing:
            raise MissingHeaderColumnsError(missing)
        width = max(indices[c.name] for c in self.mandatory_columns) + 1
        return ColumnBinding(indices=indices, required_width=width)


def schedule_header_schema(
    *,
    subject_id_column: bool = False,
    extra_aliases: Mapping[str, Iterable[str]] | None = None,
) -> HeaderSchema:
    """Build the schedule import schema.

    Column order follows the spreadsheet template: Course, Specialty, Group,
    Day, Start Time, End Time, Subject, Teacher, Room (optional). When
    ``subject_id_column`` is set a mandatory "Subject ID" column is inserted
    before Room for sources that carry pre-resolved subject ids.
    """
    names = [COURSE, SPECIALTY, GROUP, DAY, START_TIME, END_TIME, SUBJECT, TEACHER]
    if subject_id_column:
        names.append(SUBJECT_ID)
    extra = extra_aliases or {}
    columns = [
        Column(name=n, mandatory=True, aliases=_DEFAULT_ALIASES.get(n, ()) + tuple(extra.get(n, ())))
        for n in names
    ]
    columns.append(
        Column(name=ROOM, mandatory=False, aliases=_DEFAULT_ALIASES[ROOM] + tuple(extra.get(ROOM, ())))
    )
    return HeaderSchema(columns=tuple(columns))
