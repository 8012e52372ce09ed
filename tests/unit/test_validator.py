from __future__ import annotations

from unittest.mock import MagicMock

from schedule_import.models.schedule_item import ScheduleItemCandidate, ValidatedScheduleItem
from schedule_import.services.lookup import StaticSubjectLookup
from schedule_import.services.validator import existing_subject_ids, validate_candidates


def _cand(row, subject_id=1, day=1, start="09:00", end="10:30", **kw):
    return ScheduleItemCandidate(
        row=row, day_of_week=day, start_time=start, end_time=end, subject_id=subject_id, **kw
    )


def test_valid_candidates_pass_in_order():
    outcome = validate_candidates([_cand(2, 1), _cand(3, 2)], StaticSubjectLookup([1, 2]))
    assert [i.row for i in outcome.items] == [2, 3]
    assert outcome.errors == ()
    assert isinstance(outcome.items[0], ValidatedScheduleItem)


def test_unknown_subject_rejected():
    outcome = validate_candidates([_cand(2, 1), _cand(3, 99)], StaticSubjectLookup([1]))
    assert [i.row for i in outcome.items] == [2]
    assert len(outcome.errors) == 1
    err = outcome.errors[0]
    assert err.row == 3
    assert err.error == "subject with ID 99 does not exist"
    assert err.error_type == "SUBJECT_NOT_FOUND"


def test_missing_fields_rejected_before_lookup():
    lookup = MagicMock()
    lookup.exists_all.return_value = set()
    outcome = validate_candidates([_cand(5, subject_id=None)], lookup)
    assert outcome.errors[0].error == "missing required fields"
    lookup.exists_all.assert_not_called()


def test_day_out_of_range():
    outcome = validate_candidates([_cand(2, day=7)], StaticSubjectLookup([1]))
    assert outcome.errors[0].error == "invalid day of week: 7"


def test_time_order_check_is_opt_in():
    cands = [_cand(2, start="11:00", end="10:00")]
    assert validate_candidates(cands, StaticSubjectLookup([1])).errors == ()
    outcome = validate_candidates(cands, StaticSubjectLookup([1]), check_time_order=True)
    assert outcome.errors[0].error == "start time must be before end time: 11:00-10:00"


def test_bulk_lookup_called_once_with_distinct_ids():
    lookup = MagicMock()
    lookup.exists_all.return_value = {1, 2}
    validate_candidates([_cand(2, 1), _cand(3, 2), _cand(4, 1)], lookup)
    lookup.exists_all.assert_called_once_with([1, 2])
    lookup.exists.assert_not_called()


def test_single_lookup_fallback_once_per_distinct_id():
    lookup = MagicMock(spec=["exists"])
    lookup.exists.side_effect = lambda i: i == 1
    outcome = validate_candidates([_cand(2, 1), _cand(3, 5), _cand(4, 1)], lookup)
    assert lookup.exists.call_count == 2
    assert [i.row for i in outcome.items] == [2, 4]
    assert outcome.errors[0].row == 3


def test_existing_subject_ids_ignores_extra_ids_from_lookup():
    lookup = MagicMock()
    lookup.exists_all.return_value = {1, 2, 3}
    assert existing_subject_ids(lookup, [1]) == {1}
    assert existing_subject_ids(lookup, []) == set()


def test_to_record_payload():
    item = ValidatedScheduleItem.from_candidate(_cand(2, 7, room_number="305", teacher_name="Иванов"))
    assert item.to_record() == {
        "subject_id": 7,
        "day_of_week": 1,
        "start_time": "09:00",
        "end_time": "10:30",
        "room_number": "305",
        "teacher_name": "Иванов",
    }


def test_subject_names_resolved_in_one_call():
    lookup = MagicMock()
    lookup.ids_for_names.return_value = {"математика": 7}
    cands = [
        _cand(2, subject_id=None, subject_name="Математика"),
        _cand(3, subject_id=None, subject_name="История"),
        _cand(4, subject_id=None, subject_name=" МАТЕМАТИКА"),
    ]
    outcome = validate_candidates(cands, lookup)
    lookup.ids_for_names.assert_called_once_with(["история", "математика"])
    lookup.exists_all.assert_not_called()
    assert [(i.row, i.subject_id) for i in outcome.items] == [(2, 7), (4, 7)]
    assert outcome.errors[0].to_dict() == {"row": 3, "error": "subject История does not exist"}
    assert outcome.errors[0].error_type == "SUBJECT_NOT_FOUND"


def test_name_resolution_skips_locally_invalid_rows():
    lookup = MagicMock()
    outcome = validate_candidates([_cand(2, subject_id=None, subject_name="Физика", day=9)], lookup)
    assert outcome.errors[0].error == "invalid day of week: 9"
    lookup.ids_for_names.assert_not_called()
