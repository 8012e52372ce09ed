from __future__ import annotations

from ..models.error_record import ImportRowError
from ..models.header_schema import (
    COURSE,
    DAY,
    END_TIME,
    GROUP,
    ROOM,
    SPECIALTY,
    START_TIME,
    SUBJECT,
    TEACHER,
    ColumnBinding,
    HeaderSchema,
)
from ..models.raw_row import RawRow
from ..models.schedule_item import ScheduleItemCandidate
from .errors import RowDecodeError
from .subjects import HashSubjectResolver, SubjectResolver
from .times import normalize_time
from .weekdays import parse_weekday

"""Row decoder: (HeaderSchema, RawRow) -> ScheduleItemCandidate | ImportRowError.

Pure and deterministic: no I/O, no logging, no clock. Malformed data never
raises out of ``decode``; each check raises RowDecodeError internally and the
first failure becomes the row's single ImportRowError.

Check order:
1. row width covers every mandatory column
2. every mandatory field is non-empty
3. Day is a known weekday name
4. Start Time / End Time are well-formed
5. Room (optional) is copied
6. subject id from the resolver strategy
"""

__all__ = [
    "RowDecoder",
    "decode_row",
    "normalize_value",
]


def normalize_value(value: str | None) -> str | None:
    """Trim whitespace and one pair of surrounding quotes; empty -> None."""
    if value is None:
        return None
    text = value.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        text = text[1:-1].strip()
    return text or None


class RowDecoder:
    """Decoder bound to one schema and one header binding.

    The binding is computed once per source by the orchestrator; decoding a
    row only reads cells through it.
    """

    def __init__(
        self,
        schema: HeaderSchema,
        binding: ColumnBinding | None = None,
        *,
        resolver: SubjectResolver | None = None,
        lenient: bool = False,
    ) -> None:
        self.schema = schema
        self.binding = binding or schema.positional_binding()
        self.resolver = resolver or HashSubjectResolver()
        self.lenient = lenient

    def decode(self, row: RawRow) -> ScheduleItemCandidate | ImportRowError:
        try:
            return self._decode(row)
        except RowDecodeError as e:
            return ImportRowError(row=row.position, error=str(e), error_type=e.error_type)

    def _fields(self, row: RawRow) -> dict[str, str | None]:
        return {
            name: normalize_value(row.cell(index))
            for name, index in self.binding.indices.items()
        }

    def _decode(self, row: RawRow) -> ScheduleItemCandidate:
        if len(row) < self.binding.required_width:
            raise RowDecodeError("row is missing required columns", "MISSING_COLUMNS")

        fields = self._fields(row)
        for column in self.schema.mandatory_columns:
            if not fields.get(column.name):
                raise RowDecodeError(f"missing required field: {column.name}", "MISSING_FIELD")

        day_raw = fields[DAY] or ""
        day = parse_weekday(day_raw, allow_numeric=self.lenient)
        if day is None:
            raise RowDecodeError(f"unrecognized weekday: {day_raw}", "UNRECOGNIZED_WEEKDAY")

        times: dict[str, str] = {}
        for name in (START_TIME, END_TIME):
            raw = fields[name] or ""
            value = normalize_time(raw, lenient=self.lenient)
            if value is None:
                raise RowDecodeError(f"invalid time format for {name}: {raw}", "INVALID_TIME_FORMAT")
            times[name] = value

        subject_id = self.resolver.resolve(fields)

        return ScheduleItemCandidate(
            row=row.position,
            day_of_week=day,
            start_time=times[START_TIME],
            end_time=times[END_TIME],
            subject_id=subject_id,
            subject_name=fields.get(SUBJECT),
            room_number=fields.get(ROOM),
            teacher_name=fields.get(TEACHER),
            course=fields.get(COURSE),
            specialty=fields.get(SPECIALTY),
            group=fields.get(GROUP),
        )


def decode_row(
    schema: HeaderSchema,
    row: RawRow,
    *,
    binding: ColumnBinding | None = None,
    resolver: SubjectResolver | None = None,
    lenient: bool = False,
) -> ScheduleItemCandidate | ImportRowError:
    """Decode a single row; see RowDecoder for the rules."""
    return RowDecoder(schema, binding, resolver=resolver, lenient=lenient).decode(row)
