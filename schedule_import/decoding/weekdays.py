from __future__ import annotations

"""Weekday name -> weekday code table (Sunday = 0 ... Saturday = 6).

Names are matched after case folding, so "Понедельник", "понедельник" and
"ПОНЕДЕЛЬНИК" are the same key.
"""

__all__ = [
    "WEEKDAY_CODES",
    "parse_weekday",
]

_RUSSIAN = {
    "воскресенье": 0, "вс": 0,
    "понедельник": 1, "пн": 1,
    "вторник": 2, "вт": 2,
    "среда": 3, "ср": 3,
    "четверг": 4, "чт": 4,
    "пятница": 5, "пт": 5,
    "суббота": 6, "сб": 6,
}

_ENGLISH = {
    "sunday": 0, "sun": 0,
    "monday": 1, "mon": 1,
    "tuesday": 2, "tue": 2,
    "wednesday": 3, "wed": 3,
    "thursday": 4, "thu": 4,
    "friday": 5, "fri": 5,
    "saturday": 6, "sat": 6,
}

WEEKDAY_CODES: dict[str, int] = {**_RUSSIAN, **_ENGLISH}


def parse_weekday(value: str, *, allow_numeric: bool = False) -> int | None:
    """Return the weekday code for ``value`` or None when unrecognized.

    With ``allow_numeric`` a bare code "0".."6" is accepted as well.
    """
    key = value.strip().casefold()
    code = WEEKDAY_CODES.get(key)
    if code is not None:
        return code
    if allow_numeric and key.isdigit() and len(key) == 1 and int(key) <= 6:
        return int(key)
    return None
