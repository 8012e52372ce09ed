from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from ..decoding.subjects import subject_name_key
from ..decoding.times import time_to_minutes
from ..models.error_record import ImportRowError
from ..models.schedule_item import ScheduleItemCandidate, ValidatedScheduleItem
from .lookup import SubjectLookup

"""Referential validator.

Re-checks each candidate (does not trust the decoder blindly) and confirms
that the referenced subject exists through the injected lookup. Existence is
resolved with a single batched ``exists_all`` call when the lookup offers it,
otherwise with one ``exists`` call per distinct id. Subject names left
unresolved by the decoder (``name`` strategy) are resolved with one
``ids_for_names`` call. Output keeps candidate order.
"""

__all__ = [
    "ValidationOutcome",
    "existing_subject_ids",
    "resolve_subject_names",
    "validate_candidates",
]


@dataclass(frozen=True)
class ValidationOutcome:
    items: tuple[ValidatedScheduleItem, ...]
    errors: tuple[ImportRowError, ...]


def existing_subject_ids(lookup: SubjectLookup, subject_ids: Iterable[int]) -> set[int]:
    """Return the subset of ``subject_ids`` known to the lookup."""
    wanted = sorted(set(subject_ids))
    if not wanted:
        return set()
    bulk = getattr(lookup, "exists_all", None)
    if callable(bulk):
        return set(bulk(wanted)) & set(wanted)
    return {i for i in wanted if lookup.exists(i)}


def resolve_subject_names(lookup: SubjectLookup, names: Iterable[str]) -> dict[str, int]:
    """Stored ids for subject names, keyed by ``subject_name_key``.

    One ``ids_for_names`` call for the distinct names of the batch.
    """
    wanted = sorted({subject_name_key(n) for n in names})
    if not wanted:
        return {}
    resolve = getattr(lookup, "ids_for_names", None)
    if not callable(resolve):
        raise TypeError(f"{type(lookup).__name__} cannot resolve subject names")
    return dict(resolve(wanted))


def _by_name(candidate: ScheduleItemCandidate) -> bool:
    return candidate.subject_id is None and bool(candidate.subject_name)


def _local_error(candidate: ScheduleItemCandidate, check_time_order: bool) -> ImportRowError | None:
    if (
        candidate.day_of_week is None
        or not candidate.start_time
        or not candidate.end_time
        or (candidate.subject_id is None and not candidate.subject_name)
    ):
        return ImportRowError(candidate.row, "missing required fields", "MISSING_FIELDS")
    if not 0 <= candidate.day_of_week <= 6:
        return ImportRowError(
            candidate.row, f"invalid day of week: {candidate.day_of_week}", "INVALID_DAY_OF_WEEK"
        )
    if check_time_order and time_to_minutes(candidate.start_time) >= time_to_minutes(candidate.end_time):
        return ImportRowError(
            candidate.row,
            f"start time must be before end time: {candidate.start_time}-{candidate.end_time}",
            "INVALID_TIME_RANGE",
        )
    return None


def validate_candidates(
    candidates: Sequence[ScheduleItemCandidate],
    lookup: SubjectLookup,
    *,
    check_time_order: bool = False,
) -> ValidationOutcome:
    """Split candidates into validated items and row errors.

    Candidates without a subject id but with a subject name are resolved by
    name first; ids obtained that way come from the store and are not
    re-checked.

    Parameters:
        candidates: decoder output, in row order
        lookup: subject existence capability
        check_time_order: reject rows whose start time is not before end time
    """
    local_errors: dict[int, ImportRowError] = {}
    for idx, candidate in enumerate(candidates):
        err = _local_error(candidate, check_time_order)
        if err is not None:
            local_errors[idx] = err

    pending = [(i, c) for i, c in enumerate(candidates) if i not in local_errors]
    by_name = resolve_subject_names(lookup, (c.subject_name or "" for _, c in pending if _by_name(c)))
    known = existing_subject_ids(lookup, (c.subject_id for _, c in pending if c.subject_id is not None))

    items: list[ValidatedScheduleItem] = []
    errors: list[ImportRowError] = []
    for idx, candidate in enumerate(candidates):
        if idx in local_errors:
            errors.append(local_errors[idx])
            continue
        if _by_name(candidate):
            subject_id = by_name.get(subject_name_key(candidate.subject_name or ""))
            if subject_id is None:
                errors.append(
                    ImportRowError(
                        candidate.row,
                        f"subject {candidate.subject_name} does not exist",
                        "SUBJECT_NOT_FOUND",
                    )
                )
                continue
            candidate = replace(candidate, subject_id=subject_id)
        elif candidate.subject_id not in known:
            errors.append(
                ImportRowError(
                    candidate.row,
                    f"subject with ID {candidate.subject_id} does not exist",
                    "SUBJECT_NOT_FOUND",
                )
            )
            continue
        items.append(ValidatedScheduleItem.from_candidate(candidate))
    return ValidationOutcome(items=tuple(items), errors=tuple(errors))
