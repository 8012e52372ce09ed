from __future__ import annotations

import re

"""Time-of-day parsing for schedule cells.

Strict mode accepts ``H:MM`` and ``HH:MM`` (hours 0-23, minutes 00-59).
Lenient mode additionally accepts ``H.MM`` / ``HH.MM`` and ``HMM`` / ``HHMM``.
Output is always zero-padded ``HH:MM``.
"""

__all__ = [
    "normalize_time",
    "time_to_minutes",
]

_STRICT = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")
_DOT = re.compile(r"^(\d{1,2})\.(\d{2})$")
_COMPACT = re.compile(r"^(\d{1,2})(\d{2})$")


def normalize_time(value: str, *, lenient: bool = False) -> str | None:
    """Canonicalize ``value`` to "HH:MM" or return None if malformed."""
    text = value.strip()
    if lenient:
        m = _DOT.match(text) or _COMPACT.match(text)
        if m:
            text = f"{m.group(1)}:{m.group(2)}"
    m = _STRICT.match(text)
    if m is None:
        return None
    return f"{int(m.group(1)):02d}:{m.group(2)}"


def time_to_minutes(value: str) -> int:
    """Minutes since midnight for a canonical "HH:MM" string."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)
