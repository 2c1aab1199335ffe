"""Ledger aggregation and payment reconciliation package."""

from vetledger.ledger.aggregator import (
    expenses_by_category,
    income_by_status,
    monthly_income,
    net_profit,
    outstanding_debt,
    paid_total,
    summarize,
    total_expenses,
    total_income,
)
from vetledger.ledger.reconciler import (
    InvoiceNotFoundError,
    PartialApplicationError,
    PaymentReconciler,
    ReconciliationError,
    derive_payment_status,
)

__all__ = [
    # Aggregation
    "expenses_by_category",
    "income_by_status",
    "monthly_income",
    "net_profit",
    "outstanding_debt",
    "paid_total",
    "summarize",
    "total_expenses",
    "total_income",
    # Reconciliation
    "InvoiceNotFoundError",
    "PartialApplicationError",
    "PaymentReconciler",
    "ReconciliationError",
    "derive_payment_status",
]
