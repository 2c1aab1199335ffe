"""
Storage Services Package

Provides the abstract record store interface and concrete implementations.
Google Sheets and in-memory backends are included; others can be swapped in.
"""

from vetledger.services.storage.interface import (
    EXPENSES_TABLE,
    INCOME_TABLE,
    PAYMENTS_TABLE,
    TABLE_COLUMNS,
    ConnectionError,
    DuplicateError,
    NotFoundError,
    RecordStoreInterface,
    RowFilter,
    StorageError,
)
from vetledger.services.storage.memory import InMemoryRecordStore
from vetledger.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
)

__all__ = [
    # Interface
    "RecordStoreInterface",
    "RowFilter",
    "EXPENSES_TABLE",
    "INCOME_TABLE",
    "PAYMENTS_TABLE",
    "TABLE_COLUMNS",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryRecordStore",
]
