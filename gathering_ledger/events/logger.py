"""
Ledger Event Logger

DESIGN DECISION: Every store mutation is logged as a structured event.
This provides:
1. Traceability while debugging
2. Visible warnings for risky-but-allowed operations
   (removing an unsettled member, joining a closed gathering)
"""

import logging
from typing import Optional

import structlog

from gathering_ledger.config import get_settings
from gathering_ledger.events.models import LedgerEvent, LedgerSeverity

_configured = False


def configure_logging(level: Optional[str] = None, json: Optional[bool] = None) -> None:
    """
    Configure structlog for local logging.

    Defaults come from LedgerSettings. Safe to call more than once; the
    last call wins.
    """
    global _configured

    settings = get_settings().ledger
    level = level or settings.log_level
    json = settings.log_json if json is None else json

    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger("gathering_ledger").setLevel(level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer()
    )
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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str = "gathering_ledger"):
    """Return a structlog logger, configuring logging on first use."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)


class EventLogger:
    """
    Central ledger event logging service.

    Routes each LedgerEvent to the structured log at its severity.
    """

    def __init__(self, name: str = "gathering_ledger.ledger"):
        self._logger = get_logger(name)

    def log(self, event: LedgerEvent) -> None:
        """Log a ledger event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity == LedgerSeverity.ERROR:
            self._logger.error("ledger_event", **log_dict)
        elif event.severity == LedgerSeverity.WARNING:
            self._logger.warning("ledger_event", **log_dict)
        elif event.severity == LedgerSeverity.DEBUG:
            self._logger.debug("ledger_event", **log_dict)
        else:
            self._logger.info("ledger_event", **log_dict)
