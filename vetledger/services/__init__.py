"""Services package."""

from vetledger.services.auth import (
    AuthError,
    AuthProviderInterface,
    InvalidCredentialsError,
    LocalAuthProvider,
    NotAuthenticatedError,
    require_owner,
)
from vetledger.services.storage import (
    ConnectionError,
    DuplicateError,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    NotFoundError,
    RecordStoreInterface,
    RowFilter,
    StorageError,
)

__all__ = [
    # Auth services
    "AuthError",
    "AuthProviderInterface",
    "InvalidCredentialsError",
    "LocalAuthProvider",
    "NotAuthenticatedError",
    "require_owner",
    # Storage services
    "ConnectionError",
    "DuplicateError",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryRecordStore",
    "NotFoundError",
    "RecordStoreInterface",
    "RowFilter",
    "StorageError",
]
