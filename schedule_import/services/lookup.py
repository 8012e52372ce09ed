from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol, runtime_checkable

from ..decoding.subjects import derive_subject_id, subject_name_key

"""Subject lookup capability.

The validator never queries storage itself; it is handed an object with
``exists(subject_id)`` and, preferably, the bulk ``exists_all(ids)``.
Lookups used with the ``name`` strategy also offer ``ids_for_names(names)``,
returning stored ids keyed by ``subject_name_key``.
"""

__all__ = [
    "BulkSubjectLookup",
    "StaticSubjectLookup",
    "SubjectLookup",
    "SubjectLookupError",
    "SubjectNameLookup",
]


class SubjectLookupError(Exception):
    """Raised by lookup implementations when the backing store fails."""


@runtime_checkable
class SubjectLookup(Protocol):
    def exists(self, subject_id: int) -> bool: ...


@runtime_checkable
class BulkSubjectLookup(SubjectLookup, Protocol):
    def exists_all(self, subject_ids: Iterable[int]) -> set[int]: ...


@runtime_checkable
class SubjectNameLookup(SubjectLookup, Protocol):
    def ids_for_names(self, names: Iterable[str]) -> dict[str, int]: ...


class StaticSubjectLookup:
    """In-memory lookup over a fixed set of subject ids.

    ``names`` (subject name -> id) enables name resolution.
    """

    def __init__(self, subject_ids: Iterable[int], names: Mapping[str, int] | None = None) -> None:
        self._names = {subject_name_key(n): int(i) for n, i in (names or {}).items()}
        self._ids = frozenset(int(i) for i in subject_ids) | frozenset(self._names.values())

    @classmethod
    def from_names(cls, names: Iterable[str], modulus: int = 1_000_000) -> StaticSubjectLookup:
        """Known subject names, hashed the same way the decoder hashes them."""
        return cls(derive_subject_id(n, modulus) for n in names if n and n.strip())

    def __len__(self) -> int:
        return len(self._ids)

    def exists(self, subject_id: int) -> bool:
        return subject_id in self._ids

    def exists_all(self, subject_ids: Iterable[int]) -> set[int]:
        return {i for i in subject_ids if i in self._ids}

    def ids_for_names(self, names: Iterable[str]) -> dict[str, int]:
        keys = {subject_name_key(n) for n in names}
        return {k: self._names[k] for k in keys if k in self._names}
