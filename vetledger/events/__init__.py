"""Structured event logging package."""

from vetledger.events.logger import LedgerLogger, configure_logging, create_correlation_id

__all__ = ["LedgerLogger", "configure_logging", "create_correlation_id"]
