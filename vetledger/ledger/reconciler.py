"""
Payment Reconciliation

The reconciler is the ONLY writer of IncomeRecord.payment_status.

Applying a payment is two writes against the record store:
1. Insert the payment (append-only)
2. Update the income record's derived status

The store offers no transaction spanning both. If the second write fails
the payment stays recorded and the status is stale. That state is raised
as PartialApplicationError, never retried or repaired silently.
`rederive_status` is the manual recovery for it.

The new status is computed from the caller's pre-write payments snapshot
plus the new amount, so the outcome is deterministic from in-memory state
and no extra read is needed.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from vetledger.events import LedgerLogger, create_correlation_id
from vetledger.ledger.aggregator import paid_total
from vetledger.models.auth import UserSession
from vetledger.models.events import LedgerEventBuilder
from vetledger.models.ledger import (
    IncomeRecord,
    PaymentApplication,
    PaymentStatus,
    PaymentTransaction,
)
from vetledger.services.auth import require_owner
from vetledger.services.storage import (
    INCOME_TABLE,
    PAYMENTS_TABLE,
    RecordStoreInterface,
    StorageError,
)


class ReconciliationError(Exception):
    """Base exception for payment reconciliation."""
    pass


class InvoiceNotFoundError(ReconciliationError, LookupError):
    """The payment references an income record that is not loaded."""

    def __init__(self, income_record_id: UUID):
        self.income_record_id = income_record_id
        super().__init__(f"Invoice not found: {income_record_id}")


class PartialApplicationError(ReconciliationError):
    """
    The payment was written but the status update was not.

    Carries everything needed to report or repair the stale record.
    """

    def __init__(
        self,
        payment: PaymentTransaction,
        income_record: IncomeRecord,
        intended_status: PaymentStatus,
        cause: Exception,
    ):
        self.payment = payment
        self.income_record = income_record
        self.intended_status = intended_status
        self.cause = cause
        super().__init__(
            f"Payment {payment.id} recorded but status of income record "
            f"{income_record.id} could not be set to {intended_status.value}: {cause}"
        )


def derive_payment_status(total_paid: Decimal, amount: Decimal) -> PaymentStatus:
    """
    Status implied by a paid total.

    Overpayment is Paid. The excess is neither rejected nor tracked.
    """
    if total_paid >= amount:
        return PaymentStatus.PAID
    if total_paid > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.PENDING


class PaymentReconciler:
    """Applies payments to income records and keeps their status in step."""

    def __init__(
        self,
        store: RecordStoreInterface,
        logger: Optional[LedgerLogger] = None,
    ):
        self._store = store
        self._logger = logger

    async def apply_payment(
        self,
        session: Optional[UserSession],
        payment: PaymentTransaction,
        records: list[IncomeRecord],
        existing_payments: list[PaymentTransaction],
        correlation_id: Optional[UUID] = None,
    ) -> PaymentApplication:
        """
        Record `payment` and update its income record's status.

        Args:
            session: The signed-in user
            payment: New payment (amount_paid > 0)
            records: Loaded income records; must contain the referenced one
            existing_payments: Payments loaded BEFORE this one was added

        Raises:
            NotAuthenticatedError: No valid session. Nothing written.
            InvoiceNotFoundError: Unknown income record. Nothing written.
            StorageError: The payment insert failed. Nothing written.
            PartialApplicationError: Payment written, status not updated.
        """
        owner_id = require_owner(session)
        correlation_id = correlation_id or create_correlation_id()

        record = next(
            (r for r in records if r.id == payment.income_record_id),
            None,
        )
        if record is None:
            if self._logger:
                await self._logger.log_payment_rejected(
                    owner_id=owner_id,
                    income_record_id=payment.income_record_id,
                    reason="invoice not found",
                )
            raise InvoiceNotFoundError(payment.income_record_id)

        # Step 1: append the payment, client copied from the invoice
        row = payment.model_copy(update={"client_id": record.client_id}).to_row()
        try:
            created_row = await self._store.insert(PAYMENTS_TABLE, owner_id, row)
        except StorageError as e:
            if self._logger:
                await self._logger.log_storage_error(
                    operation="insert",
                    table=PAYMENTS_TABLE,
                    error_message=str(e),
                    owner_id=owner_id,
                )
            raise
        created = PaymentTransaction.model_validate(created_row)

        if self._logger:
            await self._logger.log_payment_recorded(
                owner_id=owner_id,
                payment_id=created.id,
                income_record_id=record.id,
                amount_paid=created.amount_paid,
                method=created.payment_method.value,
                correlation_id=correlation_id,
            )

        # Step 2: derive from the pre-write snapshot plus this payment
        prior_paid = paid_total(existing_payments, record.id)
        new_total = prior_paid + created.amount_paid
        status = derive_payment_status(new_total, record.amount)

        # Step 3: persist the derived status
        try:
            updated_row = await self._store.update(
                INCOME_TABLE,
                owner_id,
                record.id,
                {"payment_status": status.value},
            )
        except StorageError as e:
            if self._logger:
                await self._logger.log_status_update_failed(
                    owner_id=owner_id,
                    record_id=record.id,
                    payment_id=created.id,
                    intended_status=status.value,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise PartialApplicationError(
                payment=created,
                income_record=record,
                intended_status=status,
                cause=e,
            ) from e
        updated = IncomeRecord.model_validate(updated_row)

        if self._logger:
            await self._logger.log_status_updated(
                owner_id=owner_id,
                record_id=record.id,
                previous=record.payment_status.value,
                current=updated.payment_status.value,
                total_paid=new_total,
                correlation_id=correlation_id,
            )

        return PaymentApplication(
            payment=created,
            income_record=updated,
            previous_status=record.payment_status,
            total_paid=new_total,
        )

    async def rederive_status(
        self,
        session: Optional[UserSession],
        record: IncomeRecord,
        payments: list[PaymentTransaction],
    ) -> IncomeRecord:
        """
        Recompute a record's status from its full payment history.

        Recovery for PartialApplicationError. `payments` must hold every
        payment for the record. The status is written only when it moves
        forward; a derived status lower than the stored one is logged and
        left alone, since there is no payment reversal path.
        """
        owner_id = require_owner(session)

        derived = derive_payment_status(paid_total(payments, record.id), record.amount)
        stored = record.payment_status
        written = derived.rank > stored.rank

        if self._logger:
            await self._logger.log(
                LedgerEventBuilder.status_rederived(
                    owner_id=owner_id,
                    record_id=record.id,
                    stored=stored.value,
                    derived=derived.value,
                    written=written,
                )
            )

        if not written:
            return record

        updated_row = await self._store.update(
            INCOME_TABLE,
            owner_id,
            record.id,
            {"payment_status": derived.value},
        )
        return IncomeRecord.model_validate(updated_row)
