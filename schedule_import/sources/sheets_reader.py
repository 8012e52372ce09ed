from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from google.auth.credentials import Credentials as BaseCredentials
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..models.import_result import SourceType
from ..models.raw_row import RawRow
from .base import ImportConfigurationError, SourceUnreachable, TabularSource, to_cells

"""Google Sheets source reader.

The whole range is fetched with a single ``spreadsheets.values.get`` call;
row 1 of the range is the header, row 2 onwards are data rows. The API omits
trailing empty cells, so a short row means the user left those cells blank.
"""

__all__ = [
    "SCOPES",
    "build_sheets_service",
    "fetch_sheet_values",
    "load_credentials",
    "open_sheet_source",
]

SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]

CredentialsInput = Mapping[str, Any] | str | Path | BaseCredentials


def load_credentials(credentials: CredentialsInput) -> BaseCredentials:
    """Build read-only service account credentials.

    Accepts a service account info mapping, a path to its JSON file, a JSON
    string, or ready-made google-auth credentials.

    Raises:
        SourceUnreachable: credentials are malformed or the file is unreadable
    """
    if isinstance(credentials, BaseCredentials):
        return credentials
    try:
        if isinstance(credentials, Mapping):
            return service_account.Credentials.from_service_account_info(dict(credentials), scopes=SCOPES)
        text = str(credentials)
        if text.lstrip().startswith("{"):
            return service_account.Credentials.from_service_account_info(json.loads(text), scopes=SCOPES)
        return service_account.Credentials.from_service_account_file(text, scopes=SCOPES)
    except (ValueError, KeyError, OSError, GoogleAuthError) as e:
        raise SourceUnreachable(f"invalid Google API credentials: {e}") from e


def build_sheets_service(credentials: CredentialsInput) -> Any:
    creds = load_credentials(credentials)
    try:
        return build("sheets", "v4", credentials=creds, cache_discovery=False)
    except (HttpError, GoogleAuthError, OSError) as e:
        raise SourceUnreachable(f"failed to connect to Google Sheets: {e}") from e


def fetch_sheet_values(service: Any, spreadsheet_id: str, cell_range: str) -> list[list[Any]]:
    """Fetch the cell values of ``cell_range`` in one API call.

    Raises:
        SourceUnreachable: HTTP, auth or network failure
    """
    try:
        response = (
            service.spreadsheets()
            .values()
            .get(spreadsheetId=spreadsheet_id, range=cell_range)
            .execute()
        )
    except (HttpError, GoogleAuthError, OSError) as e:
        raise SourceUnreachable(f"failed to fetch data from Google Sheets: {e}") from e
    return list(response.get("values", []) or [])


def open_sheet_source(
    spreadsheet_id: str,
    cell_range: str,
    *,
    credentials: CredentialsInput | None = None,
    service: Any = None,
) -> TabularSource:
    """Open a spreadsheet range as a TabularSource.

    Either ``credentials`` or a prebuilt ``service`` must be given.

    Raises:
        ImportConfigurationError: neither credentials nor service given
        SourceUnreachable: connection/auth failure, or the range holds no
            data rows
    """
    if service is None:
        if credentials is None:
            raise ImportConfigurationError("Google API credentials are required")
        service = build_sheets_service(credentials)
    values = fetch_sheet_values(service, spreadsheet_id, cell_range)
    # ヘッダのみ or 空 → データなし (致命的エラー扱い)
    if len(values) <= 1:
        raise SourceUnreachable(f"no data found in range {cell_range}")
    header = to_cells(list(values[0]))
    return TabularSource(
        name=spreadsheet_id,
        source_type=SourceType.GOOGLE_SHEETS,
        header=header,
        rows=_iter_rows(values[1:]),
    )


def _iter_rows(data: list[list[Any]]) -> Iterator[RawRow]:
    for offset, values in enumerate(data):
        row = RawRow(position=offset + 2, cells=to_cells(list(values or [])))
        if row.is_blank():
            continue
        yield row
