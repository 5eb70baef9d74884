"""Tabular backends for the response store.

`TabularBackend` is the narrow positional interface the store needs from a
spreadsheet: read the full grid, append a row, overwrite cells of a row and
delete a row. Row numbers are 1-based sheet rows, so row 1 is the header.

`GoogleSheetsBackend` implements it over the Sheets v4 API using service
account credentials. The client is built lazily on first use.
"""

from __future__ import annotations

import abc
import logging
from typing import Any, List, Optional, Sequence

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
import httplib2

from response_cms.logic.errors import upstream

logger = logging.getLogger(__name__)

SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"
TOKEN_URI = "https://oauth2.googleapis.com/token"
COLUMN_LETTERS = "ABCD"


class TabularBackend(abc.ABC):
    """Positional access to a sheet with a header row and four columns."""

    @abc.abstractmethod
    def read_rows(self) -> List[List[str]]:
        """Return every row of the sheet, header included."""

    @abc.abstractmethod
    def append_row(self, values: Sequence[str]) -> None:
        """Append a full A..D row after the last non-empty row."""

    @abc.abstractmethod
    def update_row(self, row_number: int, values: Sequence[str], *, first_column: int = 0) -> None:
        """Overwrite cells of `row_number` starting at zero-based `first_column`."""

    @abc.abstractmethod
    def delete_row(self, row_number: int) -> None:
        """Remove `row_number`, shifting later rows up."""


def _a1(sheet_name: str, cells: str) -> str:
    if sheet_name.replace("_", "").isalnum():
        return f"{sheet_name}!{cells}"
    quoted = sheet_name.replace("'", "''")
    return f"'{quoted}'!{cells}"


class GoogleSheetsBackend(TabularBackend):
    def __init__(
        self,
        sheet_id: str,
        *,
        service_account_email: str = "",
        private_key: str = "",
        sheet_name: str = "Sheet1",
        sheet_gid: int = 0,
        service: Optional[Any] = None,
    ) -> None:
        self.sheet_id = sheet_id
        self.service_account_email = service_account_email
        self.private_key = private_key
        self.sheet_name = sheet_name
        self.sheet_gid = sheet_gid
        self._sheets = service

    @classmethod
    def from_config(cls, sheets_cfg) -> "GoogleSheetsBackend":  # type: ignore[no-untyped-def]
        return cls(
            sheets_cfg.sheet_id,
            service_account_email=sheets_cfg.service_account_email,
            private_key=sheets_cfg.private_key,
            sheet_name=sheets_cfg.sheet_name,
            sheet_gid=sheets_cfg.sheet_gid,
        )

    def _build_creds(self) -> service_account.Credentials:
        info = {
            "type": "service_account",
            "client_email": self.service_account_email,
            "private_key": self.private_key,
            "token_uri": TOKEN_URI,
        }
        return service_account.Credentials.from_service_account_info(info, scopes=[SHEETS_SCOPE])

    def _service(self) -> Any:
        if self._sheets is None:
            try:
                creds = self._build_creds()
                self._sheets = build("sheets", "v4", credentials=creds, cache_discovery=False)
            except (GoogleAuthError, ValueError, OSError) as e:
                logger.error("Failed to initialize Google Sheets API: %s", e)
                raise upstream("Failed to initialize Google Sheets API", cause=e) from e
            logger.info("Google Sheets API initialized", extra={"sheet_id": self.sheet_id})
        return self._sheets

    def _execute(self, request: Any, action: str) -> Any:
        # httplib2 transport failures (DNS, refused connections) are not OSErrors
        try:
            return request.execute()
        except (HttpError, httplib2.HttpLib2Error, GoogleAuthError, OSError) as e:
            logger.error("Google Sheets %s failed: %s", action, e, exc_info=True)
            raise upstream(f"Failed to {action} Google Sheet", cause=e) from e

    def read_rows(self) -> List[List[str]]:
        values = self._service().spreadsheets().values()
        result = self._execute(
            values.get(spreadsheetId=self.sheet_id, range=_a1(self.sheet_name, "A:D")),
            "read",
        )
        rows = (result or {}).get("values") or []
        if not isinstance(rows, list):
            raise upstream("Malformed response from Google Sheet")
        return [[str(cell) for cell in row] for row in rows]

    def append_row(self, values: Sequence[str]) -> None:
        api = self._service().spreadsheets().values()
        self._execute(
            api.append(
                spreadsheetId=self.sheet_id,
                range=_a1(self.sheet_name, "A:D"),
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": [list(values)]},
            ),
            "append to",
        )

    def update_row(self, row_number: int, values: Sequence[str], *, first_column: int = 0) -> None:
        start = COLUMN_LETTERS[first_column]
        end = COLUMN_LETTERS[first_column + len(values) - 1]
        api = self._service().spreadsheets().values()
        self._execute(
            api.update(
                spreadsheetId=self.sheet_id,
                range=_a1(self.sheet_name, f"{start}{row_number}:{end}{row_number}"),
                valueInputOption="RAW",
                body={"values": [list(values)]},
            ),
            "update",
        )

    def delete_row(self, row_number: int) -> None:
        request = {
            "deleteDimension": {
                "range": {
                    "sheetId": self.sheet_gid,
                    "dimension": "ROWS",
                    "startIndex": row_number - 1,
                    "endIndex": row_number,
                }
            }
        }
        self._execute(
            self._service().spreadsheets().batchUpdate(
                spreadsheetId=self.sheet_id,
                body={"requests": [request]},
            ),
            "delete from",
        )


__all__ = ["TabularBackend", "GoogleSheetsBackend", "SHEETS_SCOPE"]
