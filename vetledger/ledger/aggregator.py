"""
Ledger Aggregation

Pure functions over already-loaded collections. No I/O, no side effects.

Amounts are summed with plain Decimal addition. The per-record `currency`
field is not reconciled: everything is assumed to be in one currency.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from vetledger.models.ledger import (
    Expense,
    IncomeRecord,
    LedgerSummary,
    PaymentStatus,
    PaymentTransaction,
)


ZERO = Decimal("0")


def total_income(records: Iterable[IncomeRecord]) -> Decimal:
    """Sum of every income record's amount, whatever its payment status."""
    return sum((record.amount for record in records), ZERO)


def total_expenses(expenses: Iterable[Expense]) -> Decimal:
    return sum((expense.amount for expense in expenses), ZERO)


def net_profit(
    records: Iterable[IncomeRecord],
    expenses: Iterable[Expense],
) -> Decimal:
    """Income minus expenses. Negative when the practice ran at a loss."""
    return total_income(records) - total_expenses(expenses)


def paid_total(
    payments: Iterable[PaymentTransaction],
    income_record_id: UUID,
) -> Decimal:
    """Sum of payments applied to one income record."""
    return sum(
        (p.amount_paid for p in payments if p.income_record_id == income_record_id),
        ZERO,
    )


def _paid_by_record(payments: Iterable[PaymentTransaction]) -> dict[UUID, Decimal]:
    paid: dict[UUID, Decimal] = defaultdict(lambda: ZERO)
    for payment in payments:
        paid[payment.income_record_id] += payment.amount_paid
    return paid


def outstanding_debt(
    records: Iterable[IncomeRecord],
    payments: Iterable[PaymentTransaction],
) -> Decimal:
    """
    What clients still owe.

    For every record whose *stored* status is not Paid, add
    `amount - paid`. A Paid record is excluded even if its payments
    would say otherwise; the stored status decides inclusion.
    """
    paid = _paid_by_record(payments)
    return sum(
        (
            record.amount - paid.get(record.id, ZERO)
            for record in records
            if record.payment_status != PaymentStatus.PAID
        ),
        ZERO,
    )


def expenses_by_category(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    """Category label -> summed amount. Only categories that occur."""
    totals: dict[str, Decimal] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
    return totals


def monthly_income(records: Iterable[IncomeRecord]) -> dict[str, Decimal]:
    """Income per calendar month, keyed "YYYY-MM", oldest month first."""
    months: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for record in records:
        months[record.income_date.strftime("%Y-%m")] += record.amount
    return dict(sorted(months.items()))


def income_by_status(records: Iterable[IncomeRecord]) -> dict[PaymentStatus, Decimal]:
    totals: dict[PaymentStatus, Decimal] = {}
    for record in records:
        totals[record.payment_status] = (
            totals.get(record.payment_status, ZERO) + record.amount
        )
    return totals


def summarize(
    records: list[IncomeRecord],
    payments: list[PaymentTransaction],
    expenses: list[Expense],
) -> LedgerSummary:
    """Build the dashboard summary for one snapshot."""
    income = total_income(records)
    spent = total_expenses(expenses)
    return LedgerSummary(
        total_income=income,
        total_expenses=spent,
        net_profit=income - spent,
        outstanding_debt=outstanding_debt(records, payments),
        expenses_by_category=expenses_by_category(expenses),
    )
