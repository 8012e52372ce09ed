from __future__ import annotations

from ..models.import_result import ImportRun

"""Summary line rendering for the schedule import audit log.

Format:
SUMMARY source={name} type={csv|google_sheets} total={n} success={n}
failed={n} elapsed_sec={s}
"""


def _format_number(value: float) -> str:
    # 整数値は小数点なし、極小値は指数表記を避ける
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(run: ImportRun) -> str:
    """Render the SUMMARY line for one finished import.

    Examples:
        >>> from schedule_import.models.import_result import (
        ...     ImportResult, ImportRun, ImportState, SourceType)
        >>> run = ImportRun(
        ...     source_name="schedule.csv", source_type=SourceType.CSV,
        ...     state=ImportState.DONE,
        ...     result=ImportResult(total=3, success=2, failed=1))
        >>> render_summary_line(run)
        'SUMMARY source=schedule.csv type=csv total=3 success=2 failed=1 elapsed_sec=0'
    """
    result = run.result
    return (
        f"SUMMARY source={run.source_name} "
        f"type={run.source_type.value} "
        f"total={result.total} "
        f"success={result.success} "
        f"failed={result.failed} "
        f"elapsed_sec={_format_number(run.elapsed_seconds)}"
    )
