from __future__ import annotations

import json

from schedule_import.models.error_record import ImportRowError
from schedule_import.models.import_result import ImportResult

"""Transport contract: {total, success, failed, errors: [{row, error}]}."""


def _result():
    return ImportResult(
        total=3,
        success=1,
        failed=2,
        errors=(
            ImportRowError(2, "unrecognized weekday: Funday", "UNRECOGNIZED_WEEKDAY"),
            ImportRowError(4, "subject with ID 9 does not exist", "SUBJECT_NOT_FOUND"),
        ),
    )


def test_top_level_keys():
    data = _result().to_dict()
    assert list(data) == ["total", "success", "failed", "errors"]
    assert data["total"] == data["success"] + data["failed"]
    assert data["failed"] == len(data["errors"])


def test_error_entries_have_only_row_and_error():
    for entry in _result().to_dict()["errors"]:
        assert set(entry) == {"row", "error"}
        assert isinstance(entry["row"], int) and entry["row"] >= 2


def test_json_is_byte_identical_across_calls():
    assert _result().to_json() == _result().to_json()
    assert json.loads(_result().to_json(indent=2)) == _result().to_dict()


def test_json_keeps_non_ascii():
    text = ImportResult(1, 0, 1, (ImportRowError(2, "unrecognized weekday: Пнд"),)).to_json()
    assert "Пнд" in text
