"""
In-Memory Record Store

Keeps every table as a dict of rows keyed by id. Used by the test suite
and for running the ledger locally without a backend.

Rows are copied on the way in and on the way out so callers can never
mutate stored state behind the store's back.
"""

from copy import deepcopy
from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

from vetledger.services.storage.interface import (
    DuplicateError,
    NotFoundError,
    RecordStoreInterface,
    RowFilter,
    StorageError,
    TABLE_COLUMNS,
    apply_query,
    to_cell,
)


class InMemoryRecordStore(RecordStoreInterface):
    """Dict-backed implementation of the record store."""

    def __init__(self):
        self._tables: dict[str, dict[str, dict[str, Any]]] = {
            table: {} for table in TABLE_COLUMNS
        }

    def _table(self, table: str) -> dict[str, dict[str, Any]]:
        try:
            return self._tables[table]
        except KeyError:
            raise StorageError(f"Unknown table: {table}")

    def _owned_row(
        self,
        table: str,
        owner_id: UUID,
        record_id: UUID,
    ) -> dict[str, Any]:
        row = self._table(table).get(str(record_id))
        if row is None or row.get("user_id") != str(owner_id):
            raise NotFoundError(f"Row not found in {table}: {record_id}")
        return row

    async def insert(
        self,
        table: str,
        owner_id: UUID,
        row: dict[str, Any],
    ) -> dict[str, Any]:
        rows = self._table(table)
        columns = TABLE_COLUMNS[table]

        unknown = set(row) - set(columns)
        if unknown:
            raise StorageError(
                f"Unknown columns for {table}: {', '.join(sorted(unknown))}"
            )

        record_id = str(row.get("id") or uuid4())
        if record_id in rows:
            raise DuplicateError(f"Row already exists in {table}: {record_id}")

        now = datetime.utcnow().isoformat()
        stored = {column: None for column in columns}
        stored.update({key: to_cell(value) for key, value in row.items()})
        stored["id"] = record_id
        stored["user_id"] = str(owner_id)
        stored["created_at"] = now
        if "updated_at" in stored:
            stored["updated_at"] = now

        rows[record_id] = stored
        return deepcopy(stored)

    async def update(
        self,
        table: str,
        owner_id: UUID,
        record_id: UUID,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        row = self._owned_row(table, owner_id, record_id)

        protected = {"id", "user_id", "created_at"} & set(changes)
        if protected:
            raise StorageError(
                f"Cannot update store-managed columns: {', '.join(sorted(protected))}"
            )
        unknown = set(changes) - set(TABLE_COLUMNS[table])
        if unknown:
            raise StorageError(
                f"Unknown columns for {table}: {', '.join(sorted(unknown))}"
            )

        row.update({key: to_cell(value) for key, value in changes.items()})
        if "updated_at" in row:
            row["updated_at"] = datetime.utcnow().isoformat()
        return deepcopy(row)

    async def delete(
        self,
        table: str,
        owner_id: UUID,
        record_id: UUID,
    ) -> None:
        self._owned_row(table, owner_id, record_id)
        del self._table(table)[str(record_id)]

    async def select(
        self,
        table: str,
        owner_id: UUID,
        filters: Optional[list[RowFilter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        owned = [
            deepcopy(row) for row in self._table(table).values()
            if row.get("user_id") == str(owner_id)
        ]
        return apply_query(owned, filters, order_by, descending)
