from __future__ import annotations

__all__ = [
    "RowDecodeError",
]


class RowDecodeError(Exception):
    """Raised by a single field check; converted to ImportRowError by the decoder."""

    def __init__(self, message: str, error_type: str) -> None:
        super().__init__(message)
        self.error_type = error_type
