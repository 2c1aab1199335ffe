"""
Ledger Event Logger

Every write and every failure in the ledger is logged as a structured
event. The logger:
- Is async so call sites read the same as storage calls
- Never persists events (the log is the only sink)
- Supports correlation IDs to tie a payment insert to its status update
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from vetledger.models.events import LedgerEvent, LedgerEventBuilder, LedgerSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class LedgerLogger:
    """Central structured logger for ledger events."""

    def __init__(self, name: str = "vetledger"):
        self._logger = structlog.get_logger(name)

    async def log(self, event: LedgerEvent) -> None:
        """Log an event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity in (LedgerSeverity.ERROR, LedgerSeverity.CRITICAL):
            self._logger.error("ledger_event", **log_dict)
        elif event.severity == LedgerSeverity.WARNING:
            self._logger.warning("ledger_event", **log_dict)
        elif event.severity == LedgerSeverity.DEBUG:
            self._logger.debug("ledger_event", **log_dict)
        else:
            self._logger.info("ledger_event", **log_dict)

    async def log_payment_recorded(
        self,
        owner_id: UUID,
        payment_id: UUID,
        income_record_id: UUID,
        amount_paid: Decimal,
        method: str,
        correlation_id: UUID,
    ) -> None:
        """Log a payment insert."""
        event = LedgerEventBuilder.payment_recorded(
            owner_id=owner_id,
            payment_id=payment_id,
            income_record_id=income_record_id,
            amount_paid=amount_paid,
            method=method,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_status_updated(
        self,
        owner_id: UUID,
        record_id: UUID,
        previous: str,
        current: str,
        total_paid: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a payment status write."""
        event = LedgerEventBuilder.status_updated(
            owner_id=owner_id,
            record_id=record_id,
            previous=previous,
            current=current,
            total_paid=total_paid,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_status_update_failed(
        self,
        owner_id: UUID,
        record_id: UUID,
        payment_id: UUID,
        intended_status: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a partially applied payment."""
        event = LedgerEventBuilder.status_update_failed(
            owner_id=owner_id,
            record_id=record_id,
            payment_id=payment_id,
            intended_status=intended_status,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_payment_rejected(
        self,
        owner_id: UUID,
        income_record_id: UUID,
        reason: str,
    ) -> None:
        """Log a payment refused before any write."""
        event = LedgerEventBuilder.payment_rejected(
            owner_id=owner_id,
            income_record_id=income_record_id,
            reason=reason,
        )
        await self.log(event)

    async def log_validation_issues(
        self,
        owner_id: UUID,
        subject: str,
        issues: list[dict],
        blocking: bool,
    ) -> None:
        """Log validation findings."""
        event = LedgerEventBuilder.validation_issues(
            owner_id=owner_id,
            subject=subject,
            issues=issues,
            blocking=blocking,
        )
        await self.log(event)

    async def log_storage_error(
        self,
        operation: str,
        table: str,
        error_message: str,
        owner_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed storage call."""
        event = LedgerEventBuilder.storage_error(
            operation=operation,
            table=table,
            error_message=error_message,
            owner_id=owner_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a multi-write operation (e.g., a payment).
    Pass it through all subsequent operations.
    """
    return uuid4()
