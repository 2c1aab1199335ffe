"""
Ledger Validation

DESIGN DECISION: Schema checks (types, required fields, positive amounts)
live in the Pydantic models. This module adds the ledger-level checks that
need context: the invoice a payment settles, the payments already applied,
the practice's configured currency and limits.

Severities:
- error: blocks the write (LedgerValidationError)
- warning: logged, the write proceeds
- info: noted only

IMPORTANT: Validation NEVER silently fixes issues.
Overpayments and foreign currencies are reported, not adjusted.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from vetledger.config import get_settings
from vetledger.config.settings import AppSettings
from vetledger.ledger.aggregator import paid_total
from vetledger.models.ledger import (
    Expense,
    IncomeDetailsUpdate,
    IncomeRecord,
    PaymentMethod,
    PaymentStatus,
    PaymentTransaction,
    ValidationIssue,
    ValidationResult,
)


class LedgerValidationError(Exception):
    """Validation produced error-level issues; nothing was written."""

    def __init__(self, result: ValidationResult, summary: Optional[str] = None):
        self.result = result
        self.summary = summary
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(f"Invalid {result.subject}: {messages}")


class LedgerValidator:
    """Context-aware checks run before a ledger row is written."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _check_amount(
        self,
        field: str,
        amount: Decimal,
    ) -> list[ValidationIssue]:
        if amount > self._settings.max_record_amount:
            return [ValidationIssue(
                field=field,
                issue_type="suspicious_value",
                message=(
                    f"Amount ({amount:,.2f}) exceeds the configured maximum "
                    f"({self._settings.max_record_amount:,.2f})"
                ),
                severity="error",
                suggested_fix="Please verify this amount is correct",
            )]
        return []

    def _check_currency(self, currency: str) -> list[ValidationIssue]:
        expected = self._settings.default_currency
        if currency.upper() != expected.upper():
            return [ValidationIssue(
                field="currency",
                issue_type="currency_mismatch",
                message=(
                    f"Currency {currency} differs from {expected}; "
                    "totals add amounts without conversion"
                ),
                severity="warning",
                suggested_fix=f"Record the amount in {expected} if possible",
            )]
        return []

    def _check_date(self, field: str, value: date) -> list[ValidationIssue]:
        tolerance = timedelta(days=self._settings.future_date_tolerance_days)
        if value > date.today() + tolerance:
            return [ValidationIssue(
                field=field,
                issue_type="future_date",
                message=f"Date ({value}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            )]
        return []

    def validate_income(self, record: IncomeRecord) -> ValidationResult:
        """Checks for a new income record."""
        issues = []
        issues.extend(self._check_amount("amount", record.amount))
        issues.extend(self._check_currency(record.currency))
        issues.extend(self._check_date("income_date", record.income_date))
        return ValidationResult(subject="income_record", issues=issues)

    def validate_income_details(self, update: IncomeDetailsUpdate) -> ValidationResult:
        """Checks for an edit to an existing income record."""
        issues = []
        if update.income_date is not None:
            issues.extend(self._check_date("income_date", update.income_date))
        return ValidationResult(subject="income_record", issues=issues)

    def validate_payment(
        self,
        payment: PaymentTransaction,
        record: Optional[IncomeRecord],
        existing_payments: list[PaymentTransaction],
    ) -> ValidationResult:
        """
        Checks for a new payment against its invoice.

        A missing invoice is left to the reconciler, which refuses it
        before writing anything.
        """
        issues = []
        issues.extend(self._check_amount("amount_paid", payment.amount_paid))
        issues.extend(self._check_date("payment_date", payment.payment_date))

        # Check details
        if payment.payment_method == PaymentMethod.CHECK:
            if not payment.check_number:
                issues.append(ValidationIssue(
                    field="check_number",
                    issue_type="missing",
                    message="Check payment has no check number",
                    severity="warning",
                    suggested_fix="Add the check number so the check can be traced",
                ))
        elif payment.check_number or payment.check_due_date:
            issues.append(ValidationIssue(
                field="payment_method",
                issue_type="inconsistent",
                message=(
                    f"Check details given for a {payment.payment_method.value} payment"
                ),
                severity="warning",
                suggested_fix="Set the payment method to Check or drop the check details",
            ))

        if record is None:
            return ValidationResult(subject="payment", issues=issues)

        if record.payment_status == PaymentStatus.PAID:
            issues.append(ValidationIssue(
                field="income_record_id",
                issue_type="already_paid",
                message="Income record is already paid in full",
                severity="warning",
            ))
        else:
            remaining = record.amount - paid_total(existing_payments, record.id)
            if payment.amount_paid > remaining:
                issues.append(ValidationIssue(
                    field="amount_paid",
                    issue_type="overpayment",
                    message=(
                        f"Payment ({payment.amount_paid:,.2f}) exceeds the remaining "
                        f"balance ({remaining:,.2f}); the excess is not tracked as credit"
                    ),
                    severity="warning",
                    suggested_fix="Verify the amount received",
                ))

        if payment.payment_date < record.income_date:
            issues.append(ValidationIssue(
                field="payment_date",
                issue_type="inconsistent",
                message="Payment is dated before the income record",
                severity="warning",
                suggested_fix="Please verify both dates",
            ))

        return ValidationResult(subject="payment", issues=issues)

    def validate_expense(self, expense: Expense) -> ValidationResult:
        """Checks for a new expense."""
        issues = []
        issues.extend(self._check_amount("amount", expense.amount))
        issues.extend(self._check_currency(expense.currency))
        issues.extend(self._check_date("expense_date", expense.expense_date))

        if expense.amount == 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message="Expense amount is zero",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        if expense.category not in self._settings.expense_categories_list:
            issues.append(ValidationIssue(
                field="category",
                issue_type="unknown_category",
                message=f"Category '{expense.category}' is not one of the usual categories",
                severity="info",
            ))

        return ValidationResult(subject="expense", issues=issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Short text for a toast or status line.
        """
        if not result.issues:
            return "All checks passed."

        lines = []
        errors = [i for i in result.issues if i.severity == "error"]
        if errors:
            lines.append("Cannot save:")
            for issue in errors:
                lines.append(f"  - {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"    {issue.suggested_fix}")

        if result.warnings:
            lines.append("Please verify:")
            for warning in result.warnings:
                lines.append(f"  - {warning}")

        if not lines:
            return "All checks passed."
        return "\n".join(lines)
