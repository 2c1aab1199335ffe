"""
Ledger Event Models

Every write and every failure in the ledger produces a LedgerEvent that is
emitted to the structured log. Events are not stored anywhere; the log is
for debugging and for surfacing failures to whoever runs the practice.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """Types of events the ledger emits."""
    # Loading
    LEDGER_LOADED = "ledger_loaded"

    # Writes
    INCOME_RECORDED = "income_recorded"
    INCOME_UPDATED = "income_updated"
    EXPENSE_RECORDED = "expense_recorded"
    PAYMENT_RECORDED = "payment_recorded"
    PAYMENT_STATUS_UPDATED = "payment_status_updated"
    PAYMENT_STATUS_REDERIVED = "payment_status_rederived"

    # Failures
    PAYMENT_REJECTED = "payment_rejected"
    PAYMENT_STATUS_UPDATE_FAILED = "payment_status_update_failed"
    VALIDATION_WARNINGS = "validation_warnings"
    VALIDATION_FAILED = "validation_failed"
    STORAGE_ERROR = "storage_error"

    # Sessions
    SIGNED_UP = "signed_up"
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    AUTH_FAILED = "auth_failed"


class LedgerSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class LedgerEvent(BaseModel):
    """A single ledger event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: LedgerEventType
    severity: LedgerSeverity = LedgerSeverity.INFO

    owner_id: Optional[UUID] = Field(
        default=None,
        description="User whose rows the event concerns"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Table of the entity (e.g., 'income_records')"
    )
    entity_id: Optional[UUID] = None

    # Ties the payment insert and status update of one reconciliation together
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "owner_id": str(self.owner_id) if self.owner_id else None,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.payment_recorded(owner_id, payment_id, ...)
        event = LedgerEventBuilder.status_update_failed(owner_id, record_id, ...)
    """

    @staticmethod
    def ledger_loaded(
        owner_id: UUID,
        income_count: int,
        payment_count: int,
        expense_count: int,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEDGER_LOADED,
            severity=LedgerSeverity.DEBUG,
            owner_id=owner_id,
            description=(
                f"Loaded {income_count} income records, {payment_count} payments, "
                f"{expense_count} expenses"
            ),
            details={
                "income_count": income_count,
                "payment_count": payment_count,
                "expense_count": expense_count,
            },
        )

    @staticmethod
    def income_recorded(
        owner_id: UUID,
        record_id: UUID,
        amount: Decimal,
        currency: str,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.INCOME_RECORDED,
            owner_id=owner_id,
            entity_type="income_records",
            entity_id=record_id,
            description=f"Income recorded: {amount} {currency}",
            details={"amount": str(amount), "currency": currency},
        )

    @staticmethod
    def income_updated(
        owner_id: UUID,
        record_id: UUID,
        fields: list[str],
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.INCOME_UPDATED,
            owner_id=owner_id,
            entity_type="income_records",
            entity_id=record_id,
            description=f"Income record updated: {', '.join(fields)}",
            details={"fields": fields},
        )

    @staticmethod
    def expense_recorded(
        owner_id: UUID,
        expense_id: UUID,
        category: str,
        amount: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_RECORDED,
            owner_id=owner_id,
            entity_type="expenses",
            entity_id=expense_id,
            description=f"Expense recorded: {category} {amount}",
            details={"category": category, "amount": str(amount)},
        )

    @staticmethod
    def payment_recorded(
        owner_id: UUID,
        payment_id: UUID,
        income_record_id: UUID,
        amount_paid: Decimal,
        method: str,
        correlation_id: UUID,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PAYMENT_RECORDED,
            owner_id=owner_id,
            entity_type="payment_transactions",
            entity_id=payment_id,
            correlation_id=correlation_id,
            description=f"Payment of {amount_paid} recorded ({method})",
            details={
                "income_record_id": str(income_record_id),
                "amount_paid": str(amount_paid),
                "payment_method": method,
            },
        )

    @staticmethod
    def status_updated(
        owner_id: UUID,
        record_id: UUID,
        previous: str,
        current: str,
        total_paid: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PAYMENT_STATUS_UPDATED,
            owner_id=owner_id,
            entity_type="income_records",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Payment status {previous} -> {current}",
            details={
                "previous_status": previous,
                "payment_status": current,
                "total_paid": str(total_paid),
            },
        )

    @staticmethod
    def status_rederived(
        owner_id: UUID,
        record_id: UUID,
        stored: str,
        derived: str,
        written: bool,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PAYMENT_STATUS_REDERIVED,
            severity=LedgerSeverity.INFO if written else LedgerSeverity.WARNING,
            owner_id=owner_id,
            entity_type="income_records",
            entity_id=record_id,
            description=(
                f"Payment status re-derived: stored {stored}, derived {derived}"
            ),
            details={
                "stored_status": stored,
                "derived_status": derived,
                "written": written,
            },
        )

    @staticmethod
    def payment_rejected(
        owner_id: UUID,
        income_record_id: UUID,
        reason: str,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PAYMENT_REJECTED,
            severity=LedgerSeverity.WARNING,
            owner_id=owner_id,
            entity_type="income_records",
            entity_id=income_record_id,
            description=f"Payment rejected: {reason}",
            details={"reason": reason},
        )

    @staticmethod
    def status_update_failed(
        owner_id: UUID,
        record_id: UUID,
        payment_id: UUID,
        intended_status: str,
        error_message: str,
        correlation_id: UUID,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PAYMENT_STATUS_UPDATE_FAILED,
            severity=LedgerSeverity.ERROR,
            owner_id=owner_id,
            entity_type="income_records",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=(
                "Payment was recorded but the income record status could not "
                f"be updated to {intended_status}"
            ),
            details={
                "payment_id": str(payment_id),
                "intended_status": intended_status,
            },
            error_message=error_message,
        )

    @staticmethod
    def validation_issues(
        owner_id: UUID,
        subject: str,
        issues: list[dict],
        blocking: bool,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=(
                LedgerEventType.VALIDATION_FAILED
                if blocking
                else LedgerEventType.VALIDATION_WARNINGS
            ),
            severity=LedgerSeverity.WARNING,
            owner_id=owner_id,
            description=f"{subject} validation reported {len(issues)} issues",
            details={"subject": subject, "issues": issues},
        )

    @staticmethod
    def storage_error(
        operation: str,
        table: str,
        error_message: str,
        owner_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STORAGE_ERROR,
            severity=LedgerSeverity.ERROR,
            owner_id=owner_id,
            entity_type=table,
            description=f"Storage {operation} failed on {table}",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def session_event(
        event_type: LedgerEventType,
        email: str,
        user_id: Optional[UUID] = None,
        error_message: Optional[str] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=event_type,
            severity=(
                LedgerSeverity.WARNING
                if event_type == LedgerEventType.AUTH_FAILED
                else LedgerSeverity.INFO
            ),
            owner_id=user_id,
            description=f"{event_type.value.replace('_', ' ').capitalize()}: {email}",
            details={"email": email},
            error_message=error_message,
        )
