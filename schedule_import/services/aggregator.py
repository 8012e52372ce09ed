from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models.error_record import ImportRowError
from ..models.import_result import ImportResult
from ..models.schedule_item import ValidatedScheduleItem

"""Import result aggregation.

Decode-phase and validate-phase errors come from disjoint row subsets; the
union is sorted by row position (stable) before it is emitted.
"""

__all__ = [
    "AggregationError",
    "build_import_result",
]


class AggregationError(Exception):
    """Raised when counts do not reconcile (programming error upstream)."""


def build_import_result(
    total: int,
    items: Sequence[ValidatedScheduleItem],
    errors: Iterable[ImportRowError],
) -> ImportResult:
    """Build the ImportResult for one import.

    Args:
        total: Number of data rows read from the source
        items: Validated items
        errors: Row errors from both phases, any order

    Returns:
        ImportResult with errors sorted ascending by row

    Raises:
        AggregationError: total != success + failed
    """
    ordered = tuple(sorted(errors, key=lambda e: e.row))
    success = len(items)
    failed = len(ordered)
    if total != success + failed:
        raise AggregationError(
            f"row counts do not reconcile: total={total} success={success} failed={failed}"
        )
    return ImportResult(total=total, success=success, failed=failed, errors=ordered)
