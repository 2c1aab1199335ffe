"""
Shared fixtures.

All tests run against the in-memory record store. Async operations are
driven with asyncio.run; no real API calls are made.
"""

import asyncio
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from vetledger.models import (
    Expense,
    IncomeRecord,
    PaymentMethod,
    PaymentTransaction,
    UserSession,
)
from vetledger.services.storage import INCOME_TABLE, InMemoryRecordStore


@pytest.fixture
def session():
    return UserSession(
        user_id=uuid4(),
        email="clinic@example.com",
        access_token="test-token",
    )


@pytest.fixture
def other_session():
    return UserSession(
        user_id=uuid4(),
        email="other-clinic@example.com",
        access_token="other-token",
    )


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def make_income():
    def _make(amount="1000", **overrides):
        fields = dict(
            client_id=uuid4(),
            service_description="Vaccination and checkup",
            amount=Decimal(amount),
            income_date=date(2024, 5, 10),
        )
        fields.update(overrides)
        return IncomeRecord(**fields)
    return _make


@pytest.fixture
def make_payment():
    def _make(income_record_id, amount, **overrides):
        fields = dict(
            income_record_id=income_record_id,
            amount_paid=Decimal(amount),
            payment_method=PaymentMethod.CASH,
            payment_date=date(2024, 5, 20),
        )
        fields.update(overrides)
        return PaymentTransaction(**fields)
    return _make


@pytest.fixture
def make_expense():
    def _make(category, amount, **overrides):
        fields = dict(
            category=category,
            description=f"{category} purchase",
            amount=Decimal(amount),
            expense_date=date(2024, 5, 15),
        )
        fields.update(overrides)
        return Expense(**fields)
    return _make


@pytest.fixture
def stored_income(store, session, make_income):
    """Insert an income record into the store and return it as loaded."""
    def _store(amount="1000", **overrides):
        record = make_income(amount, **overrides)
        row = asyncio.run(store.insert(INCOME_TABLE, session.user_id, record.to_row()))
        return IncomeRecord.model_validate(row)
    return _store
