"""Ledger event logging package."""

from gathering_ledger.events.logger import EventLogger, configure_logging, get_logger
from gathering_ledger.events.models import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
    LedgerSeverity,
)

__all__ = [
    "EventLogger",
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
    "LedgerSeverity",
    "configure_logging",
    "get_logger",
]
