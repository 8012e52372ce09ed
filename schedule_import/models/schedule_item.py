from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""Schedule item models for the schedule import pipeline.

ScheduleItemCandidate is the decoder's output; ValidatedScheduleItem is the
only shape allowed to reach the persistence collaborator.
"""

__all__ = [
    "ScheduleItemCandidate",
    "ValidatedScheduleItem",
]


@dataclass(frozen=True)
class ScheduleItemCandidate:
    """Decoded but not yet referentially validated schedule row.

    Never mutated; use dataclasses.replace for corrections.
    """
    row: int  # source row position (header = 1)
    day_of_week: int | None  # 0 = Sunday ... 6 = Saturday
    start_time: str | None  # "HH:MM"
    end_time: str | None  # "HH:MM"
    subject_id: int | None
    subject_name: str | None = None
    room_number: str | None = None
    teacher_name: str | None = None
    course: str | None = None
    specialty: str | None = None
    group: str | None = None


@dataclass(frozen=True)
class ValidatedScheduleItem:
    """Candidate confirmed to reference an existing subject."""
    row: int
    day_of_week: int
    start_time: str
    end_time: str
    subject_id: int
    subject_name: str | None = None
    room_number: str | None = None
    teacher_name: str | None = None
    course: str | None = None
    specialty: str | None = None
    group: str | None = None

    @classmethod
    def from_candidate(cls, candidate: ScheduleItemCandidate) -> ValidatedScheduleItem:
        if (
            candidate.day_of_week is None
            or candidate.start_time is None
            or candidate.end_time is None
            or candidate.subject_id is None
        ):
            raise ValueError(f"row {candidate.row}: candidate is incomplete")
        return cls(
            row=candidate.row,
            day_of_week=candidate.day_of_week,
            start_time=candidate.start_time,
            end_time=candidate.end_time,
            subject_id=candidate.subject_id,
            subject_name=candidate.subject_name,
            room_number=candidate.room_number,
            teacher_name=candidate.teacher_name,
            course=candidate.course,
            specialty=candidate.specialty,
            group=candidate.group,
        )

    def to_record(self) -> dict[str, Any]:
        """Persistence payload (schedule_items table columns)."""
        return {
            "subject_id": self.subject_id,
            "day_of_week": self.day_of_week,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "room_number": self.room_number,
            "teacher_name": self.teacher_name,
        }
