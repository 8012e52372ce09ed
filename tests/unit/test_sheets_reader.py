from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from google.auth.credentials import AnonymousCredentials
from googleapiclient.errors import HttpError

from schedule_import.models.import_result import SourceType
from schedule_import.sources.base import ImportConfigurationError, SourceUnreachable
from schedule_import.sources.sheets_reader import (
    SCOPES,
    build_sheets_service,
    fetch_sheet_values,
    load_credentials,
    open_sheet_source,
)

HEADER = ["Course", "Specialty", "Group", "Day", "Start Time", "End Time", "Subject", "Teacher", "Room"]
ROW_A = ["1", "ИС", "ИС-101", "Понедельник", "09:00", "10:30", "Математика", "Иванов И.И.", "305"]


def _service(values):
    service = MagicMock()
    service.spreadsheets.return_value.values.return_value.get.return_value.execute.return_value = (
        {"values": values} if values is not None else {}
    )
    return service


def test_open_sheet_source_rows_and_positions():
    service = _service([HEADER, ROW_A, [], ROW_A[:8]])
    source = open_sheet_source("sheet-1", "Sheet1!A1:I", service=service)
    assert source.name == "sheet-1"
    assert source.source_type is SourceType.GOOGLE_SHEETS
    assert source.header == tuple(HEADER)
    rows = list(source.rows)
    # 空行はスキップしても行番号は詰めない
    assert [r.position for r in rows] == [2, 4]
    assert len(rows[1].cells) == 8
    service.spreadsheets.return_value.values.return_value.get.assert_called_once_with(
        spreadsheetId="sheet-1", range="Sheet1!A1:I"
    )


def test_non_string_cells_become_text():
    service = _service([HEADER, [1, "ИС", "ИС-101", "Среда", "09:00", "10:30", "Физика", "X", 305]])
    row = next(open_sheet_source("s", "A1:I", service=service).rows)
    assert row.cells[0] == "1"
    assert row.cells[8] == "305"


@pytest.mark.parametrize("values", [None, [], [HEADER]])
def test_no_data_rows_is_unreachable(values):
    with pytest.raises(SourceUnreachable, match=r"no data found in range Sheet1!A1:I"):
        open_sheet_source("s", "Sheet1!A1:I", service=_service(values))


def test_http_error_is_unreachable():
    resp = MagicMock(status=403, reason="Forbidden")
    service = MagicMock()
    service.spreadsheets.return_value.values.return_value.get.return_value.execute.side_effect = HttpError(
        resp, b'{"error": {"message": "The caller does not have permission"}}'
    )
    with pytest.raises(SourceUnreachable, match="failed to fetch data from Google Sheets"):
        fetch_sheet_values(service, "s", "A1:I")


def test_network_error_is_unreachable():
    service = MagicMock()
    service.spreadsheets.return_value.values.return_value.get.return_value.execute.side_effect = OSError(
        "connection reset"
    )
    with pytest.raises(SourceUnreachable, match="connection reset"):
        fetch_sheet_values(service, "s", "A1:I")


def test_credentials_required_without_service():
    # 設定不備であり接続エラーではない
    with pytest.raises(ImportConfigurationError, match="Google API credentials are required") as exc:
        open_sheet_source("s", "A1:I")
    assert not isinstance(exc.value, SourceUnreachable)


def test_load_credentials_passthrough():
    creds = AnonymousCredentials()
    assert load_credentials(creds) is creds


def test_load_credentials_invalid_info():
    with pytest.raises(SourceUnreachable, match="invalid Google API credentials"):
        load_credentials({"type": "service_account"})


def test_load_credentials_missing_file(tmp_path):
    with pytest.raises(SourceUnreachable, match="invalid Google API credentials"):
        load_credentials(tmp_path / "missing.json")


def test_load_credentials_uses_readonly_scope():
    with patch(
        "schedule_import.sources.sheets_reader.service_account.Credentials.from_service_account_info"
    ) as from_info:
        load_credentials('{"type": "service_account"}')
    from_info.assert_called_once_with({"type": "service_account"}, scopes=SCOPES)


def test_build_sheets_service():
    creds = AnonymousCredentials()
    with patch("schedule_import.sources.sheets_reader.build") as build:
        build_sheets_service(creds)
    build.assert_called_once_with("sheets", "v4", credentials=creds, cache_discovery=False)
