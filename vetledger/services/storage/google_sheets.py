"""
Google Sheets Record Store

DESIGN DECISION: Google Sheets is a supported backend because:
1. A practice owner can look at their books directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (fine for a single practice)
- No transactions (the reconciler surfaces partial failures instead)
- Limited query capabilities (we filter in Python)

One worksheet per table, header row first, one row per record.
Every cell is stored as text; empty cells read back as None.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from vetledger.config import get_settings
from vetledger.config.settings import GoogleSheetsSettings
from vetledger.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    NotFoundError,
    RecordStoreInterface,
    RowFilter,
    StorageError,
    TABLE_COLUMNS,
    apply_query,
    to_cell,
)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication (with retry) and worksheet lookup.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(self, table: str) -> gspread.Worksheet:
        """Get or create the worksheet backing a table."""
        if table not in TABLE_COLUMNS:
            raise StorageError(f"Unknown table: {table}")

        spreadsheet = self.get_spreadsheet()
        name = self._settings.sheet_name_for(table)
        try:
            sheet = spreadsheet.worksheet(name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            columns = TABLE_COLUMNS[table]
            sheet = spreadsheet.add_worksheet(
                title=name,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet


class GoogleSheetsRecordStore(RecordStoreInterface):
    """
    Google Sheets implementation of the record store.

    Owner scoping is enforced here by the `user_id` column, since the
    spreadsheet itself has no notion of row ownership.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_values(self, table: str, row: dict[str, Any]) -> list[str]:
        """Convert a row dict to spreadsheet cells in column order."""
        values = []
        for column in TABLE_COLUMNS[table]:
            value = to_cell(row.get(column))
            values.append("" if value is None else str(value))
        return values

    def _values_to_row(self, table: str, values: list[str]) -> dict[str, Any]:
        """Convert spreadsheet cells to a row dict."""
        row = {}
        for index, column in enumerate(TABLE_COLUMNS[table]):
            try:
                cell = values[index]
            except IndexError:
                cell = ""
            row[column] = cell if cell != "" else None
        return row

    def _find_owned(
        self,
        sheet: gspread.Worksheet,
        table: str,
        owner_id: UUID,
        record_id: UUID,
    ) -> tuple[int, dict[str, Any]]:
        """Locate a row; returns its 1-based sheet index and contents."""
        all_rows = sheet.get_all_values()

        # Start from 2 (row 1 is header)
        for idx, values in enumerate(all_rows[1:], start=2):
            if values and values[0] == str(record_id):
                row = self._values_to_row(table, values)
                if row["user_id"] != str(owner_id):
                    break
                return idx, row

        raise NotFoundError(f"Row not found in {table}: {record_id}")

    async def insert(
        self,
        table: str,
        owner_id: UUID,
        row: dict[str, Any],
    ) -> dict[str, Any]:
        columns = TABLE_COLUMNS.get(table)
        if columns is None:
            raise StorageError(f"Unknown table: {table}")
        unknown = set(row) - set(columns)
        if unknown:
            raise StorageError(
                f"Unknown columns for {table}: {', '.join(sorted(unknown))}"
            )

        now = datetime.utcnow().isoformat()
        stored = {column: None for column in columns}
        stored.update({key: to_cell(value) for key, value in row.items()})
        stored["id"] = str(row.get("id") or uuid4())
        stored["user_id"] = str(owner_id)
        stored["created_at"] = now
        if "updated_at" in stored:
            stored["updated_at"] = now

        try:
            sheet = self._client.get_worksheet(table)
            existing_ids = sheet.col_values(1)[1:]
            if stored["id"] in existing_ids:
                raise DuplicateError(f"Row already exists in {table}: {stored['id']}")
            sheet.append_row(self._row_to_values(table, stored), value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to insert into {table}: {e}")

        return stored

    async def update(
        self,
        table: str,
        owner_id: UUID,
        record_id: UUID,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        columns = TABLE_COLUMNS.get(table)
        if columns is None:
            raise StorageError(f"Unknown table: {table}")
        protected = {"id", "user_id", "created_at"} & set(changes)
        if protected:
            raise StorageError(
                f"Cannot update store-managed columns: {', '.join(sorted(protected))}"
            )
        unknown = set(changes) - set(columns)
        if unknown:
            raise StorageError(
                f"Unknown columns for {table}: {', '.join(sorted(unknown))}"
            )

        try:
            sheet = self._client.get_worksheet(table)
            idx, row = self._find_owned(sheet, table, owner_id, record_id)

            updates = {key: to_cell(value) for key, value in changes.items()}
            if "updated_at" in row:
                updates["updated_at"] = datetime.utcnow().isoformat()
            row.update(updates)

            # Only touch the cells that changed
            for column in updates:
                col_idx = columns.index(column) + 1
                value = row[column]
                sheet.update_cell(idx, col_idx, "" if value is None else str(value))
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update {table}: {e}")

        return row

    async def delete(
        self,
        table: str,
        owner_id: UUID,
        record_id: UUID,
    ) -> None:
        try:
            sheet = self._client.get_worksheet(table)
            idx, _ = self._find_owned(sheet, table, owner_id, record_id)
            sheet.delete_rows(idx)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete from {table}: {e}")

    async def select(
        self,
        table: str,
        owner_id: UUID,
        filters: Optional[list[RowFilter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        try:
            sheet = self._client.get_worksheet(table)
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to select from {table}: {e}")

        owned = []
        for values in all_rows:
            if not values or not values[0]:  # Skip empty rows
                continue
            row = self._values_to_row(table, values)
            if row["user_id"] == str(owner_id):
                owned.append(row)

        return apply_query(owned, filters, order_by, descending)
