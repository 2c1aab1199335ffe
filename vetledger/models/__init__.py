"""
Data Models Package

This package contains all Pydantic models used in Vet Ledger.
All rows flowing through the ledger must conform to these schemas.
"""

from vetledger.models.ledger import (
    Expense,
    ExpenseCategory,
    IncomeDetailsUpdate,
    IncomeRecord,
    LedgerSnapshot,
    LedgerSummary,
    PaymentApplication,
    PaymentMethod,
    PaymentStatus,
    PaymentTransaction,
    ValidationIssue,
    ValidationResult,
)
from vetledger.models.events import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
    LedgerSeverity,
)
from vetledger.models.auth import UserSession

__all__ = [
    # Ledger models
    "Expense",
    "ExpenseCategory",
    "IncomeDetailsUpdate",
    "IncomeRecord",
    "LedgerSnapshot",
    "LedgerSummary",
    "PaymentApplication",
    "PaymentMethod",
    "PaymentStatus",
    "PaymentTransaction",
    "ValidationIssue",
    "ValidationResult",
    # Event models
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
    "LedgerSeverity",
    # Session
    "UserSession",
]
