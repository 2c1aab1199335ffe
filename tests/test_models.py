"""
Tests for Vet Ledger models

Test strategy:
1. Unit tests for individual components (models, aggregation, validation)
2. Flow tests against the in-memory store
3. No real API calls in tests
"""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import UUID, uuid4

from vetledger.models import (
    Expense,
    ExpenseCategory,
    IncomeDetailsUpdate,
    IncomeRecord,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
    LedgerSeverity,
    LedgerSnapshot,
    PaymentMethod,
    PaymentStatus,
    PaymentTransaction,
    UserSession,
    ValidationIssue,
    ValidationResult,
)


class TestIncomeRecord:
    """Tests for the IncomeRecord model."""

    def test_income_record_defaults(self, make_income):
        """New income records start Pending in the default currency."""
        record = make_income("250.50")
        assert record.payment_status == PaymentStatus.PENDING
        assert record.currency == "TRY"
        assert record.id is None
        assert record.amount == Decimal("250.50")

    def test_income_record_rejects_zero_amount(self, make_income):
        with pytest.raises(ValueError):
            make_income("0")

    def test_income_record_rejects_negative_amount(self, make_income):
        with pytest.raises(ValueError):
            make_income("-10")

    def test_blank_strings_become_none(self, make_income):
        """Empty form fields mean 'not set'."""
        record = make_income(notes="   ", visit_id="")
        assert record.notes is None
        assert record.visit_id is None

    def test_to_row_excludes_store_managed_columns(self, make_income):
        record = make_income("1000", id=uuid4(), user_id=uuid4())
        row = record.to_row()
        assert "id" not in row
        assert "user_id" not in row
        assert "created_at" not in row
        assert "updated_at" not in row

    def test_to_row_is_json_compatible(self, make_income):
        record = make_income("1000")
        row = record.to_row()
        assert row["amount"] == "1000"
        assert row["income_date"] == "2024-05-10"
        assert row["payment_status"] == "Pending"
        assert isinstance(row["client_id"], str)

    def test_parses_store_row(self):
        """Rows come back from the store as strings."""
        record_id = uuid4()
        record = IncomeRecord.model_validate({
            "id": str(record_id),
            "user_id": str(uuid4()),
            "client_id": str(uuid4()),
            "service_description": "Surgery",
            "amount": "1500.00",
            "currency": "TRY",
            "income_date": "2024-06-01",
            "payment_status": "Partial",
            "notes": None,
            "created_at": "2024-06-01T10:00:00",
        })
        assert record.id == record_id
        assert record.amount == Decimal("1500.00")
        assert record.payment_status == PaymentStatus.PARTIAL
        assert record.created_at == datetime(2024, 6, 1, 10, 0)


class TestIncomeDetailsUpdate:
    """Tests for the editable subset of an income record."""

    def test_only_given_fields_are_set(self):
        update = IncomeDetailsUpdate.model_validate({"notes": "Follow-up in May"})
        assert update.model_dump(exclude_unset=True) == {"notes": "Follow-up in May"}

    def test_rejects_payment_status(self):
        with pytest.raises(ValueError):
            IncomeDetailsUpdate.model_validate({"payment_status": "Paid"})

    def test_rejects_amount(self):
        with pytest.raises(ValueError):
            IncomeDetailsUpdate.model_validate({"amount": "10"})

    def test_rejects_blank_service_description(self):
        with pytest.raises(ValueError, match="service_description"):
            IncomeDetailsUpdate.model_validate({"service_description": "  "})

    def test_rejects_cleared_income_date(self):
        with pytest.raises(ValueError, match="income_date"):
            IncomeDetailsUpdate.model_validate({"income_date": None})

    def test_optional_fields_can_be_cleared(self):
        update = IncomeDetailsUpdate.model_validate({"notes": "", "visit_id": None})
        assert update.model_dump(exclude_unset=True) == {"notes": None, "visit_id": None}


class TestPaymentTransaction:
    """Tests for the PaymentTransaction model."""

    def test_payment_creation(self, make_payment):
        payment = make_payment(uuid4(), "400")
        assert payment.amount_paid == Decimal("400")
        assert payment.payment_method == PaymentMethod.CASH
        assert payment.client_id is None

    def test_payment_rejects_zero_amount(self, make_payment):
        with pytest.raises(ValueError):
            make_payment(uuid4(), "0")

    def test_check_payment_with_blank_due_date(self, make_payment):
        """Forms send empty strings for unused check fields."""
        payment = make_payment(
            uuid4(),
            "100",
            payment_method="Check",
            check_number="CH-0042",
            check_due_date="",
        )
        assert payment.payment_method == PaymentMethod.CHECK
        assert payment.check_number == "CH-0042"
        assert payment.check_due_date is None

    def test_payment_method_values(self):
        assert PaymentMethod("Bank Transfer") == PaymentMethod.BANK_TRANSFER
        assert PaymentMethod.CREDIT_CARD.value == "Credit Card"


class TestExpense:
    """Tests for the Expense model."""

    def test_expense_accepts_category_enum(self, make_expense):
        expense = make_expense(ExpenseCategory.MEDICATIONS, "150")
        assert expense.category == "Medications"

    def test_expense_accepts_free_form_category(self, make_expense):
        expense = make_expense("Continuing education", "300")
        assert expense.category == "Continuing education"

    def test_expense_allows_zero_amount(self, make_expense):
        expense = make_expense("Other", "0")
        assert expense.amount == Decimal("0")

    def test_expense_rejects_negative_amount(self, make_expense):
        with pytest.raises(ValueError):
            make_expense("Other", "-1")


class TestPaymentStatus:
    """Tests for the payment status enum."""

    def test_status_values(self):
        assert PaymentStatus.PENDING.value == "Pending"
        assert PaymentStatus.PARTIAL.value == "Partial"
        assert PaymentStatus.PAID.value == "Paid"

    def test_status_order(self):
        assert PaymentStatus.PENDING.rank < PaymentStatus.PARTIAL.rank
        assert PaymentStatus.PARTIAL.rank < PaymentStatus.PAID.rank


class TestLedgerSnapshot:
    """Tests for snapshot helpers."""

    def test_find_and_replace_income_record(self, make_income):
        record = make_income("1000", id=uuid4())
        snapshot = LedgerSnapshot(income_records=[record])

        assert snapshot.find_income_record(record.id) is record
        assert snapshot.find_income_record(uuid4()) is None

        paid = record.model_copy(update={"payment_status": PaymentStatus.PAID})
        snapshot.replace_income_record(paid)
        assert snapshot.income_records[0].payment_status == PaymentStatus.PAID

    def test_pending_income_records(self, make_income):
        pending = make_income("100", id=uuid4())
        partial = make_income("100", id=uuid4(), payment_status=PaymentStatus.PARTIAL)
        paid = make_income("100", id=uuid4(), payment_status=PaymentStatus.PAID)
        snapshot = LedgerSnapshot(income_records=[pending, partial, paid])

        assert snapshot.pending_income_records == [pending, partial]


class TestUserSession:
    """Tests for the session context value."""

    def test_session_without_expiry_never_expires(self):
        session = UserSession(user_id=uuid4(), email="a@b.co", access_token="t")
        assert session.is_expired is False

    def test_expired_session(self):
        session = UserSession(
            user_id=uuid4(),
            email="a@b.co",
            access_token="t",
            expires_at=datetime.utcnow() - timedelta(minutes=1),
        )
        assert session.is_expired is True


class TestLedgerEvents:
    """Tests for ledger event models."""

    def test_event_creation(self):
        event = LedgerEvent(
            event_type=LedgerEventType.EXPENSE_RECORDED,
            description="Expense recorded",
        )
        assert event.severity == LedgerSeverity.INFO

    def test_event_to_log_dict(self):
        owner_id = uuid4()
        event = LedgerEventBuilder.income_recorded(
            owner_id=owner_id,
            record_id=uuid4(),
            amount=Decimal("1000"),
            currency="TRY",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "income_recorded"
        assert log_dict["owner_id"] == str(owner_id)
        assert log_dict["details"]["amount"] == "1000"

    def test_status_update_failed_is_error(self):
        correlation_id = uuid4()
        event = LedgerEventBuilder.status_update_failed(
            owner_id=uuid4(),
            record_id=uuid4(),
            payment_id=uuid4(),
            intended_status="Paid",
            error_message="network unreachable",
            correlation_id=correlation_id,
        )
        assert event.severity == LedgerSeverity.ERROR
        assert event.correlation_id == correlation_id
        assert event.error_message == "network unreachable"

    def test_auth_failed_is_warning(self):
        event = LedgerEventBuilder.session_event(
            event_type=LedgerEventType.AUTH_FAILED,
            email="vet@example.com",
        )
        assert event.severity == LedgerSeverity.WARNING
        assert event.owner_id is None


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        result = ValidationResult(
            subject="payment",
            issues=[
                ValidationIssue(
                    field="amount_paid",
                    issue_type="suspicious_value",
                    message="Amount too large",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.is_valid is False
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        result = ValidationResult(
            subject="payment",
            issues=[
                ValidationIssue(
                    field="amount_paid",
                    issue_type="overpayment",
                    message="Payment exceeds remaining balance",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.warnings == ["Payment exceeds remaining balance"]

    def test_issue_severity_is_constrained(self):
        with pytest.raises(ValueError):
            ValidationIssue(
                field="x",
                issue_type="y",
                message="z",
                severity="fatal",
            )


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
