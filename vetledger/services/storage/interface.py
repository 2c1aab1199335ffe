"""
Abstract Record Store Interface

DESIGN DECISION: The ledger talks to persistence through a small,
row-oriented contract addressed by table name. This allows us to:
1. Back the ledger with Google Sheets or any hosted table store
2. Use in-memory storage for testing
3. Keep reconciliation logic decoupled from the storage implementation

Every operation takes the owning user's id. A row that belongs to another
owner is treated exactly like a row that does not exist.

Rows are JSON-compatible dicts. The store assigns `id` and `created_at`
on insert and refreshes `updated_at` on update where the table has it.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Literal, Optional
from uuid import UUID

from pydantic import BaseModel


INCOME_TABLE = "income_records"
PAYMENTS_TABLE = "payment_transactions"
EXPENSES_TABLE = "expenses"

# Columns per table, in sheet order
TABLE_COLUMNS: dict[str, list[str]] = {
    INCOME_TABLE: [
        "id",
        "user_id",
        "visit_id",
        "client_id",
        "service_description",
        "amount",
        "currency",
        "income_date",
        "payment_status",
        "notes",
        "created_at",
        "updated_at",
    ],
    PAYMENTS_TABLE: [
        "id",
        "user_id",
        "income_record_id",
        "client_id",
        "amount_paid",
        "payment_method",
        "payment_date",
        "check_number",
        "check_due_date",
        "bank_reference",
        "created_at",
    ],
    EXPENSES_TABLE: [
        "id",
        "user_id",
        "category",
        "description",
        "amount",
        "currency",
        "expense_date",
        "supplier",
        "invoice_number",
        "payment_method",
        "notes",
        "created_at",
    ],
}


def to_cell(value: Any) -> Any:
    """Normalize a Python value to the form rows are stored in."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class RowFilter(BaseModel):
    """
    One condition of a select.

    Range operators compare ISO-formatted values, so they are meant for
    date and timestamp columns.
    """

    column: str
    operator: Literal["eq", "gte", "lte"] = "eq"
    value: Any

    def matches(self, row: dict[str, Any]) -> bool:
        actual = row.get(self.column)
        expected = to_cell(self.value)

        if self.operator == "eq":
            return actual == expected
        if actual is None:
            return False
        if self.operator == "gte":
            return str(actual) >= str(expected)
        return str(actual) <= str(expected)


def apply_query(
    rows: list[dict[str, Any]],
    filters: Optional[list[RowFilter]] = None,
    order_by: Optional[str] = None,
    descending: bool = False,
) -> list[dict[str, Any]]:
    """Filter and order already owner-scoped rows."""
    selected = [
        row for row in rows
        if all(f.matches(row) for f in (filters or []))
    ]

    if order_by:
        # Rows without a value sort last in either direction
        present = [row for row in selected if row.get(order_by) is not None]
        missing = [row for row in selected if row.get(order_by) is None]
        present.sort(key=lambda r: str(r[order_by]), reverse=descending)
        selected = present + missing

    return selected


class RecordStoreInterface(ABC):
    """
    Abstract interface for owner-scoped table storage.

    Any storage implementation (Google Sheets, hosted Postgres, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def insert(
        self,
        table: str,
        owner_id: UUID,
        row: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Insert a row owned by `owner_id`.

        Args:
            table: Table name
            owner_id: Owning user
            row: Column values (store-managed columns are assigned here)

        Returns:
            The stored row including `id` and `created_at`

        Raises:
            StorageError: If the insert fails
        """
        pass

    @abstractmethod
    async def update(
        self,
        table: str,
        owner_id: UUID,
        record_id: UUID,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Apply a partial update to one row.

        Returns:
            The full row after the update

        Raises:
            NotFoundError: If no row with this id belongs to the owner
            StorageError: If the update fails
        """
        pass

    @abstractmethod
    async def delete(
        self,
        table: str,
        owner_id: UUID,
        record_id: UUID,
    ) -> None:
        """
        Delete one row.

        Raises:
            NotFoundError: If no row with this id belongs to the owner
            StorageError: If the delete fails
        """
        pass

    @abstractmethod
    async def select(
        self,
        table: str,
        owner_id: UUID,
        filters: Optional[list[RowFilter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        """
        Select the owner's rows.

        Args:
            table: Table name
            owner_id: Owning user
            filters: Conditions all rows must satisfy
            order_by: Column to sort by
            descending: Sort newest/largest first

        Returns:
            Matching rows (possibly empty)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage (or owned by someone else)."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
