"""
Main Orchestrator for Vet Ledger

Ties the record store, the validator and the reconciler together into the
flows an outer surface (web panel, script) calls:
1. Load a snapshot (income, payments, expenses) for a date range
2. Add income records and expenses
3. Record a payment (validate -> reconcile -> update snapshot)
4. Summarize a snapshot

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every call carries the signed-in session explicitly
- payment_status is never written here, only through the reconciler
- Failures propagate to the caller; nothing is retried
"""

from datetime import date
from typing import Any, Optional
from uuid import UUID

import structlog

from vetledger.config import get_settings
from vetledger.events import LedgerLogger, configure_logging, create_correlation_id
from vetledger.ledger import PartialApplicationError, PaymentReconciler, summarize
from vetledger.models.auth import UserSession
from vetledger.models.events import LedgerEventBuilder
from vetledger.models.ledger import (
    Expense,
    IncomeDetailsUpdate,
    IncomeRecord,
    LedgerSnapshot,
    LedgerSummary,
    PaymentApplication,
    PaymentStatus,
    PaymentTransaction,
    ValidationResult,
)
from vetledger.services.auth import (
    AuthProviderInterface,
    LocalAuthProvider,
    require_owner,
)
from vetledger.services.storage import (
    EXPENSES_TABLE,
    INCOME_TABLE,
    PAYMENTS_TABLE,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    RecordStoreInterface,
    RowFilter,
    StorageError,
)
from vetledger.validation import LedgerValidationError, LedgerValidator


# Income fields that may be edited after creation
EDITABLE_INCOME_FIELDS = set(IncomeDetailsUpdate.model_fields)


class FinancialLedger:
    """
    Orchestrates the financial flows for one practice.

    The snapshot returned by `load` is the caller's in-memory state;
    `record_payment` keeps it consistent with what was written.
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        reconciler: Optional[PaymentReconciler] = None,
        validator: Optional[LedgerValidator] = None,
        logger: Optional[LedgerLogger] = None,
    ):
        self._store = store
        self._logger = logger
        self._reconciler = reconciler or PaymentReconciler(store, logger)
        self._validator = validator or LedgerValidator()

    async def _check(self, owner_id: UUID, result: ValidationResult) -> None:
        """Log issues; raise if any of them blocks the write."""
        if not result.issues:
            return

        if self._logger:
            await self._logger.log_validation_issues(
                owner_id=owner_id,
                subject=result.subject,
                issues=[issue.model_dump() for issue in result.issues],
                blocking=result.has_errors,
            )

        if result.has_errors:
            raise LedgerValidationError(
                result, self._validator.get_user_friendly_summary(result)
            )

    async def _insert(
        self,
        table: str,
        owner_id: UUID,
        row: dict[str, Any],
    ) -> dict[str, Any]:
        try:
            return await self._store.insert(table, owner_id, row)
        except StorageError as e:
            if self._logger:
                await self._logger.log_storage_error(
                    operation="insert",
                    table=table,
                    error_message=str(e),
                    owner_id=owner_id,
                )
            raise

    async def _update(
        self,
        table: str,
        owner_id: UUID,
        record_id: UUID,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        try:
            return await self._store.update(table, owner_id, record_id, changes)
        except StorageError as e:
            if self._logger:
                await self._logger.log_storage_error(
                    operation="update",
                    table=table,
                    error_message=str(e),
                    owner_id=owner_id,
                )
            raise

    async def load(
        self,
        session: Optional[UserSession],
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> LedgerSnapshot:
        """
        Load the owner's income, payments and expenses, newest first.

        The date range limits income records and expenses. Payments are
        always loaded in full.
        """
        owner_id = require_owner(session)

        def date_filters(column: str) -> list[RowFilter]:
            filters = []
            if date_from:
                filters.append(RowFilter(column=column, operator="gte", value=date_from))
            if date_to:
                filters.append(RowFilter(column=column, operator="lte", value=date_to))
            return filters

        income_rows = await self._store.select(
            INCOME_TABLE,
            owner_id,
            filters=date_filters("income_date"),
            order_by="income_date",
            descending=True,
        )
        expense_rows = await self._store.select(
            EXPENSES_TABLE,
            owner_id,
            filters=date_filters("expense_date"),
            order_by="expense_date",
            descending=True,
        )
        payment_rows = await self._store.select(
            PAYMENTS_TABLE,
            owner_id,
            order_by="payment_date",
            descending=True,
        )

        snapshot = LedgerSnapshot(
            date_from=date_from,
            date_to=date_to,
            income_records=[IncomeRecord.model_validate(r) for r in income_rows],
            payments=[PaymentTransaction.model_validate(r) for r in payment_rows],
            expenses=[Expense.model_validate(r) for r in expense_rows],
        )

        if self._logger:
            await self._logger.log(
                LedgerEventBuilder.ledger_loaded(
                    owner_id=owner_id,
                    income_count=len(snapshot.income_records),
                    payment_count=len(snapshot.payments),
                    expense_count=len(snapshot.expenses),
                )
            )

        return snapshot

    async def add_income_record(
        self,
        session: Optional[UserSession],
        record: IncomeRecord,
        snapshot: Optional[LedgerSnapshot] = None,
    ) -> IncomeRecord:
        """
        Create an income record. It must start Pending.

        If a snapshot is given, the stored record is prepended to it.
        """
        owner_id = require_owner(session)

        if record.payment_status != PaymentStatus.PENDING:
            raise ValueError(
                "Income records are created Pending; payment status is set "
                "by recording payments"
            )
        await self._check(owner_id, self._validator.validate_income(record))

        stored = IncomeRecord.model_validate(
            await self._insert(INCOME_TABLE, owner_id, record.to_row())
        )

        if self._logger:
            await self._logger.log(
                LedgerEventBuilder.income_recorded(
                    owner_id=owner_id,
                    record_id=stored.id,
                    amount=stored.amount,
                    currency=stored.currency,
                )
            )

        if snapshot is not None:
            snapshot.income_records.insert(0, stored)
        return stored

    async def add_expense(
        self,
        session: Optional[UserSession],
        expense: Expense,
        snapshot: Optional[LedgerSnapshot] = None,
    ) -> Expense:
        """Create an expense."""
        owner_id = require_owner(session)

        await self._check(owner_id, self._validator.validate_expense(expense))

        stored = Expense.model_validate(
            await self._insert(EXPENSES_TABLE, owner_id, expense.to_row())
        )

        if self._logger:
            await self._logger.log(
                LedgerEventBuilder.expense_recorded(
                    owner_id=owner_id,
                    expense_id=stored.id,
                    category=stored.category,
                    amount=stored.amount,
                )
            )

        if snapshot is not None:
            snapshot.expenses.insert(0, stored)
        return stored

    async def record_payment(
        self,
        session: Optional[UserSession],
        payment: PaymentTransaction,
        snapshot: LedgerSnapshot,
    ) -> PaymentApplication:
        """
        Validate and apply a payment, then update the snapshot.

        On PartialApplicationError the payment is still added to the
        snapshot (it exists in the store) and the error is re-raised.
        """
        owner_id = require_owner(session)
        correlation_id = create_correlation_id()

        record = snapshot.find_income_record(payment.income_record_id)
        await self._check(
            owner_id,
            self._validator.validate_payment(payment, record, snapshot.payments),
        )

        try:
            application = await self._reconciler.apply_payment(
                session,
                payment,
                snapshot.income_records,
                snapshot.payments,
                correlation_id=correlation_id,
            )
        except PartialApplicationError as e:
            snapshot.payments.insert(0, e.payment)
            raise

        snapshot.payments.insert(0, application.payment)
        snapshot.replace_income_record(application.income_record)
        return application

    async def update_income_details(
        self,
        session: Optional[UserSession],
        record_id: UUID,
        changes: dict[str, Any],
        snapshot: Optional[LedgerSnapshot] = None,
    ) -> IncomeRecord:
        """
        Edit descriptive fields of an income record.

        payment_status and amount cannot be changed here: status belongs
        to the reconciler and changing the amount would leave it stale.
        """
        owner_id = require_owner(session)

        rejected = set(changes) - EDITABLE_INCOME_FIELDS
        if rejected:
            raise ValueError(
                f"Cannot update income record fields: {', '.join(sorted(rejected))}"
            )
        if not changes:
            raise ValueError("No changes given")

        update = IncomeDetailsUpdate.model_validate(changes)
        await self._check(owner_id, self._validator.validate_income_details(update))
        payload = update.model_dump(mode="json", exclude_unset=True)

        updated = IncomeRecord.model_validate(
            await self._update(INCOME_TABLE, owner_id, record_id, payload)
        )

        if self._logger:
            await self._logger.log(
                LedgerEventBuilder.income_updated(
                    owner_id=owner_id,
                    record_id=record_id,
                    fields=sorted(payload),
                )
            )

        if snapshot is not None:
            snapshot.replace_income_record(updated)
        return updated

    def summarize(self, snapshot: LedgerSnapshot) -> LedgerSummary:
        """Totals, profit, debt and expense breakdown for a snapshot."""
        return summarize(snapshot.income_records, snapshot.payments, snapshot.expenses)


def create_app_components(
    use_storage: bool = True,
) -> tuple[FinancialLedger, AuthProviderInterface, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to back the ledger with Google Sheets.
                    Set to False (or leave Sheets unconfigured) to run
                    against the in-memory store.

    Returns:
        (ledger, auth_provider, sheets_client)
    """
    settings = get_settings().app
    configure_logging(settings.log_level)
    logger = LedgerLogger()

    sheets_client = None
    store: RecordStoreInterface

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            store = GoogleSheetsRecordStore(sheets_client)
        except Exception as e:
            # Storage not configured - continue without it
            structlog.get_logger(__name__).warning(
                "sheets_not_configured", error=str(e)
            )
            sheets_client = None
            store = InMemoryRecordStore()
    else:
        store = InMemoryRecordStore()

    ledger = FinancialLedger(
        store=store,
        validator=LedgerValidator(settings),
        logger=logger,
    )
    auth_provider = LocalAuthProvider(logger=logger)

    return ledger, auth_provider, sheets_client
