"""Row decoding: weekday/time parsing, subject identity and the row decoder."""

from .row_decoder import RowDecoder, decode_row, normalize_value
from .subjects import (
    ColumnSubjectResolver,
    HashSubjectResolver,
    NameSubjectResolver,
    SubjectResolver,
    derive_subject_id,
    make_subject_resolver,
    subject_name_key,
)
from .times import normalize_time
from .weekdays import parse_weekday

__all__ = [
    "ColumnSubjectResolver",
    "HashSubjectResolver",
    "NameSubjectResolver",
    "RowDecoder",
    "SubjectResolver",
    "decode_row",
    "derive_subject_id",
    "make_subject_resolver",
    "normalize_time",
    "normalize_value",
    "parse_weekday",
    "subject_name_key",
]
