from __future__ import annotations

import zlib
from abc import ABC, abstractmethod
from collections.abc import Mapping

from ..models.config_models import (
    SUBJECT_RESOLUTION_COLUMN,
    SUBJECT_RESOLUTION_HASH,
    SUBJECT_RESOLUTION_NAME,
    SubjectConfig,
)
from ..models.header_schema import SUBJECT, SUBJECT_ID
from .errors import RowDecodeError

"""Subject identity strategies.

How a row's subject becomes a subject id is pluggable:

- ``hash``: the id is derived from the subject name (stable CRC-32 of the
  case-folded name reduced into ``[1, modulus]``). Never fails; whether the
  subject exists is decided later by the referential validator.
- ``column``: the source carries pre-resolved ids in a "Subject ID" column.
- ``name``: the decoder leaves the id unset and the validator resolves the
  subject name (case-insensitive) to a stored id through the lookup.
"""

__all__ = [
    "ColumnSubjectResolver",
    "HashSubjectResolver",
    "NameSubjectResolver",
    "SubjectResolver",
    "derive_subject_id",
    "make_subject_resolver",
    "subject_name_key",
]


def subject_name_key(name: str) -> str:
    """Comparison key for subject names: whitespace runs collapsed, lower-cased."""
    return " ".join(name.split()).lower()


def derive_subject_id(name: str, modulus: int = 1_000_000) -> int:
    """Deterministic positive id for a subject name.

    Whitespace runs are collapsed and case is folded before hashing, so
    "Математика" and " математика " map to the same id.
    """
    if modulus < 1:
        raise ValueError(f"modulus must be positive: {modulus}")
    key = " ".join(name.split()).casefold()
    return zlib.crc32(key.encode("utf-8")) % modulus + 1


def _subject_name(fields: Mapping[str, str | None]) -> str:
    name = fields.get(SUBJECT)
    if not name:
        raise RowDecodeError(f"missing required field: {SUBJECT}", "MISSING_FIELD")
    return name


class SubjectResolver(ABC):
    """Base strategy: map decoded row fields to a subject id."""

    requires_subject_id_column = False
    resolves_by_name = False

    @abstractmethod
    def resolve(self, fields: Mapping[str, str | None]) -> int | None:
        """Subject id for the row, or None when the validator resolves it."""


class HashSubjectResolver(SubjectResolver):
    def __init__(self, modulus: int = 1_000_000) -> None:
        if modulus < 1:
            raise ValueError(f"modulus must be positive: {modulus}")
        self.modulus = modulus

    def resolve(self, fields: Mapping[str, str | None]) -> int:
        return derive_subject_id(_subject_name(fields), self.modulus)


class ColumnSubjectResolver(SubjectResolver):
    requires_subject_id_column = True

    def resolve(self, fields: Mapping[str, str | None]) -> int:
        raw = fields.get(SUBJECT_ID)
        if not raw:
            raise RowDecodeError(f"missing required field: {SUBJECT_ID}", "MISSING_FIELD")
        try:
            value = int(raw)
        except ValueError:
            value = 0
        if value < 1:
            raise RowDecodeError(f"invalid subject ID: {raw}", "INVALID_SUBJECT_ID")
        return value


class NameSubjectResolver(SubjectResolver):
    resolves_by_name = True

    def resolve(self, fields: Mapping[str, str | None]) -> None:
        _subject_name(fields)
        return None


def make_subject_resolver(config: SubjectConfig) -> SubjectResolver:
    if config.resolution == SUBJECT_RESOLUTION_HASH:
        return HashSubjectResolver(config.hash_modulus)
    if config.resolution == SUBJECT_RESOLUTION_COLUMN:
        return ColumnSubjectResolver()
    if config.resolution == SUBJECT_RESOLUTION_NAME:
        return NameSubjectResolver()
    raise ValueError(f"unknown subject resolution strategy: {config.resolution}")
