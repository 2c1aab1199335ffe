"""
Tests for ledger aggregation.

All functions are pure, so these tests build collections in memory and
never touch a store.
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from vetledger.ledger import (
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
from vetledger.models import LedgerSummary, PaymentStatus


class TestEmptyInputs:
    """Every total is zero for an empty ledger."""

    def test_totals_are_zero(self):
        assert total_income([]) == Decimal("0")
        assert total_expenses([]) == Decimal("0")
        assert outstanding_debt([], []) == Decimal("0")
        assert net_profit([], []) == Decimal("0")

    def test_breakdowns_are_empty(self):
        assert expenses_by_category([]) == {}
        assert monthly_income([]) == {}
        assert income_by_status([]) == {}

    def test_summary_of_nothing(self):
        summary = summarize([], [], [])
        assert isinstance(summary, LedgerSummary)
        assert summary.total_income == Decimal("0")
        assert summary.outstanding_debt == Decimal("0")
        assert summary.expenses_by_category == {}


class TestTotals:
    """Tests for income, expense and profit totals."""

    def test_total_income_ignores_status(self, make_income):
        records = [
            make_income("100"),
            make_income("250.50", payment_status=PaymentStatus.PARTIAL),
            make_income("49.50", payment_status=PaymentStatus.PAID),
        ]
        assert total_income(records) == Decimal("400.00")

    def test_total_expenses(self, make_expense):
        expenses = [make_expense("Rent", "500"), make_expense("Other", "0")]
        assert total_expenses(expenses) == Decimal("500")

    def test_net_profit_is_income_minus_expenses(self, make_income, make_expense):
        records = [make_income("300"), make_income("200")]
        expenses = [make_expense("Rent", "120"), make_expense("Supplies", "30")]
        assert net_profit(records, expenses) == (
            total_income(records) - total_expenses(expenses)
        )
        assert net_profit(records, expenses) == Decimal("350")

    def test_net_profit_can_be_negative(self, make_income, make_expense):
        records = [make_income("100")]
        expenses = [make_expense("Rent", "500")]
        assert net_profit(records, expenses) == Decimal("-400")

    def test_amounts_summed_regardless_of_currency(self, make_income):
        """Currencies are not reconciled; amounts are added as-is."""
        records = [make_income("100", currency="TRY"), make_income("100", currency="EUR")]
        assert total_income(records) == Decimal("200")


class TestPaidTotal:
    """Tests for per-record payment totals."""

    def test_sums_only_matching_record(self, make_payment):
        record_id = uuid4()
        payments = [
            make_payment(record_id, "400"),
            make_payment(record_id, "100"),
            make_payment(uuid4(), "999"),
        ]
        assert paid_total(payments, record_id) == Decimal("500")

    def test_no_payments(self):
        assert paid_total([], uuid4()) == Decimal("0")


class TestOutstandingDebt:
    """Tests for outstanding debt."""

    def test_unpaid_record_contributes_full_amount(self, make_income):
        record = make_income("750", id=uuid4())
        assert outstanding_debt([record], []) == Decimal("750")

    def test_partial_record_contributes_remainder(self, make_income, make_payment):
        record = make_income("1000", id=uuid4(), payment_status=PaymentStatus.PARTIAL)
        payments = [make_payment(record.id, "400")]
        assert outstanding_debt([record], payments) == Decimal("600")

    def test_paid_record_excluded(self, make_income, make_payment):
        record = make_income("1000", id=uuid4(), payment_status=PaymentStatus.PAID)
        payments = [make_payment(record.id, "1000")]
        assert outstanding_debt([record], payments) == Decimal("0")

    def test_overpaid_record_never_goes_negative(self, make_income, make_payment):
        """Once marked Paid, an overpaid record is simply excluded."""
        record = make_income("1000", id=uuid4(), payment_status=PaymentStatus.PAID)
        payments = [make_payment(record.id, "1500")]
        assert outstanding_debt([record], payments) == Decimal("0")

    def test_stored_status_decides_inclusion(self, make_income, make_payment):
        """A stale Paid status excludes the record even if payments fall short."""
        record = make_income("1000", id=uuid4(), payment_status=PaymentStatus.PAID)
        payments = [make_payment(record.id, "100")]
        assert outstanding_debt([record], payments) == Decimal("0")

    def test_payments_for_other_records_ignored(self, make_income, make_payment):
        first = make_income("500", id=uuid4())
        second = make_income("300", id=uuid4(), payment_status=PaymentStatus.PARTIAL)
        payments = [make_payment(second.id, "100")]
        assert outstanding_debt([first, second], payments) == Decimal("700")


class TestBreakdowns:
    """Tests for grouped totals."""

    def test_expenses_by_category(self, make_expense):
        expenses = [
            make_expense("Medications", "150"),
            make_expense("Rent", "500"),
            make_expense("Medications", "25.50"),
        ]
        assert expenses_by_category(expenses) == {
            "Medications": Decimal("175.50"),
            "Rent": Decimal("500"),
        }

    def test_expenses_by_category_omits_unused(self, make_expense):
        totals = expenses_by_category([make_expense("Utilities", "80")])
        assert "Rent" not in totals
        assert list(totals) == ["Utilities"]

    def test_monthly_income_sorted_by_month(self, make_income):
        records = [
            make_income("200", income_date=date(2024, 6, 3)),
            make_income("100", income_date=date(2024, 5, 10)),
            make_income("50", income_date=date(2024, 6, 28)),
        ]
        months = monthly_income(records)
        assert list(months) == ["2024-05", "2024-06"]
        assert months["2024-06"] == Decimal("250")

    def test_income_by_status(self, make_income):
        records = [
            make_income("100"),
            make_income("200", payment_status=PaymentStatus.PAID),
            make_income("300", payment_status=PaymentStatus.PAID),
        ]
        totals = income_by_status(records)
        assert totals[PaymentStatus.PENDING] == Decimal("100")
        assert totals[PaymentStatus.PAID] == Decimal("500")
        assert PaymentStatus.PARTIAL not in totals


class TestSummary:
    """Tests for the combined dashboard summary."""

    def test_summary_matches_individual_functions(
        self, make_income, make_payment, make_expense
    ):
        record = make_income("1000", id=uuid4(), payment_status=PaymentStatus.PARTIAL)
        payments = [make_payment(record.id, "400")]
        expenses = [make_expense("Medications", "150"), make_expense("Rent", "500")]

        summary = summarize([record], payments, expenses)

        assert summary.total_income == Decimal("1000")
        assert summary.total_expenses == Decimal("650")
        assert summary.net_profit == Decimal("350")
        assert summary.outstanding_debt == Decimal("600")
        assert summary.expenses_by_category == {
            "Medications": Decimal("150"),
            "Rent": Decimal("500"),
        }


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
