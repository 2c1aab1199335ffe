"""
Core Ledger Models for Vet Ledger

These models define the schemas for every financial row the practice keeps:
1. Income records (invoices owed by a client)
2. Payment transactions applied against one income record
3. Expenses (standalone outflows)

Rows travel to and from the record store as JSON-compatible dicts.
`to_row()` produces the insert payload; `model_validate()` parses what the
store returns (strings for decimals, dates and UUIDs are accepted).

DESIGN DECISION: payment_status on IncomeRecord is a cached, derived value.
Only the PaymentReconciler writes it after a payment is recorded.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# Store-managed columns, never part of an insert payload
SERVER_FIELDS = {"id", "user_id", "created_at", "updated_at"}

# Editable income fields that must always hold a value
REQUIRED_INCOME_DETAILS = {"service_description", "income_date"}


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class PaymentStatus(str, Enum):
    """
    Payment status of an income record.

    Ordered: Pending < Partial < Paid. A record only ever moves forward.
    """
    PENDING = "Pending"
    PARTIAL = "Partial"
    PAID = "Paid"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {
    PaymentStatus.PENDING: 0,
    PaymentStatus.PARTIAL: 1,
    PaymentStatus.PAID: 2,
}


class PaymentMethod(str, Enum):
    """How a payment or expense was settled."""
    CASH = "Cash"
    CHECK = "Check"
    BANK_TRANSFER = "Bank Transfer"
    CREDIT_CARD = "Credit Card"


class ExpenseCategory(str, Enum):
    """
    Known expense categories.

    Expense.category is free-form text; these are the labels the practice
    normally uses.
    """
    MEDICATIONS = "Medications"
    EQUIPMENT = "Equipment"
    SUPPLIES = "Supplies"
    UTILITIES = "Utilities"
    SALARY = "Salary"
    RENT = "Rent"
    OTHER = "Other"


# =============================================================================
# BASE
# =============================================================================

class LedgerRow(BaseModel):
    """Shared behaviour for rows persisted through the record store."""

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Empty cells and empty form fields mean 'not set'."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_row(self) -> dict[str, Any]:
        """Insert payload: JSON-compatible, without store-managed columns."""
        return self.model_dump(mode="json", exclude=SERVER_FIELDS)


# =============================================================================
# CORE LEDGER MODELS
# =============================================================================

class IncomeRecord(LedgerRow):
    """
    One billable event owed by one client.

    CRITICAL: payment_status must always equal the status derived from the
    sum of this record's payments.
    """

    # Identity (assigned by the store)
    id: Optional[UUID] = None
    user_id: Optional[UUID] = None

    visit_id: Optional[UUID] = Field(
        default=None,
        description="Visit this income was billed from, if any"
    )
    client_id: UUID = Field(
        ...,
        description="Client who owes this amount"
    )
    service_description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="What was billed"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Billed amount"
    )
    currency: str = Field(
        default="TRY",
        min_length=3,
        max_length=3,
        description="ISO currency code (not reconciled across records)"
    )
    income_date: date
    payment_status: PaymentStatus = Field(
        default=PaymentStatus.PENDING,
        description="Derived from payments; written only by the reconciler"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=1000
    )

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class IncomeDetailsUpdate(LedgerRow):
    """
    The descriptive fields of an income record that may be edited.

    Amount and payment_status are deliberately absent.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    visit_id: Optional[UUID] = None
    service_description: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=500
    )
    income_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def required_columns_not_cleared(self) -> "IncomeDetailsUpdate":
        """Optional here means 'not changed', never 'set to empty'."""
        cleared = sorted(
            name for name in REQUIRED_INCOME_DETAILS
            if name in self.model_fields_set and getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"Cannot clear required fields: {', '.join(cleared)}")
        return self


class PaymentTransaction(LedgerRow):
    """
    One payment applied against exactly one income record.

    Immutable once created.
    """

    id: Optional[UUID] = None
    user_id: Optional[UUID] = None

    income_record_id: UUID = Field(
        ...,
        description="Income record this payment settles"
    )
    client_id: Optional[UUID] = Field(
        default=None,
        description="Copied from the income record when the payment is created"
    )
    amount_paid: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2
    )
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_date: date

    # Check payments
    check_number: Optional[str] = Field(default=None, max_length=50)
    check_due_date: Optional[date] = None

    bank_reference: Optional[str] = Field(default=None, max_length=100)

    created_at: Optional[datetime] = None


class Expense(LedgerRow):
    """A standalone outflow. Not linked to income or payments."""

    id: Optional[UUID] = None
    user_id: Optional[UUID] = None

    category: str = Field(
        default=ExpenseCategory.OTHER.value,
        min_length=1,
        max_length=100
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=500
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2
    )
    currency: str = Field(default="TRY", min_length=3, max_length=3)
    expense_date: date
    supplier: Optional[str] = Field(default=None, max_length=200)
    invoice_number: Optional[str] = Field(default=None, max_length=50)
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: Optional[str] = Field(default=None, max_length=1000)

    created_at: Optional[datetime] = None

    @field_validator("category", mode="before")
    @classmethod
    def category_label(cls, v: Any) -> Any:
        if isinstance(v, ExpenseCategory):
            return v.value
        return v


# =============================================================================
# DERIVED MODELS
# =============================================================================

class LedgerSummary(BaseModel):
    """Read-only financial summary over one loaded snapshot."""

    generated_at: datetime = Field(default_factory=datetime.utcnow)

    total_income: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    outstanding_debt: Decimal
    expenses_by_category: dict[str, Decimal] = Field(default_factory=dict)


class PaymentApplication(BaseModel):
    """Outcome of applying one payment to one income record."""

    payment: PaymentTransaction
    income_record: IncomeRecord
    previous_status: PaymentStatus
    total_paid: Decimal = Field(
        ...,
        description="Paid total for the record including this payment"
    )

    @property
    def status_changed(self) -> bool:
        return self.previous_status != self.income_record.payment_status


class LedgerSnapshot(BaseModel):
    """
    The three collections loaded for one owner.

    Income and expenses may be limited to a date range; payments are always
    loaded in full so debt is correct for every loaded invoice.
    """

    loaded_at: datetime = Field(default_factory=datetime.utcnow)
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    income_records: list[IncomeRecord] = Field(default_factory=list)
    payments: list[PaymentTransaction] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)

    def find_income_record(self, record_id: UUID) -> Optional[IncomeRecord]:
        for record in self.income_records:
            if record.id == record_id:
                return record
        return None

    def replace_income_record(self, record: IncomeRecord) -> None:
        self.income_records = [
            record if existing.id == record.id else existing
            for existing in self.income_records
        ]

    @property
    def pending_income_records(self) -> list[IncomeRecord]:
        """Invoices that can still receive payments."""
        return [
            record for record in self.income_records
            if record.payment_status != PaymentStatus.PAID
        ]


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'overpayment', 'currency_mismatch')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of validating one record before it is written.

    Errors block the write. Warnings and info are reported, never corrected.
    """

    subject: str = Field(
        ...,
        description="What was validated (e.g., 'income_record', 'payment')"
    )
    validated_at: datetime = Field(default_factory=datetime.utcnow)
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [
            issue.message for issue in self.issues
            if issue.severity == "warning"
        ]
