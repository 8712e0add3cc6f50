"""
Ledger Event Models

Significant ledger operations are described by a LedgerEvent and written
to the structured log. Events are log output only: nothing here is
persisted, and the store keeps no history of edits or deletions.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from gathering_ledger.models.gathering import utc_now


class LedgerEventType(str, Enum):
    """
    Types of events we log.

    Every mutation of the store has its own event type.
    """
    # Global members
    MEMBER_CREATED = "member_created"

    # Gatherings
    GATHERING_CREATED = "gathering_created"
    GATHERING_DELETED = "gathering_deleted"
    GATHERING_CLOSED = "gathering_closed"

    # Membership
    MEMBER_JOINED = "member_joined"
    MEMBER_REMOVED = "member_removed"

    # Ledger entries
    EXPENSE_ADDED = "expense_added"
    PAYMENT_RECORDED = "payment_recorded"
    SETTLEMENT_RECORDED = "settlement_recorded"

    # Transport
    DATA_EXPORTED = "data_exported"
    DATA_IMPORTED = "data_imported"

    # Failures
    OPERATION_REJECTED = "operation_rejected"
    STORE_LOAD_FAILED = "store_load_failed"
    STORE_SAVE_FAILED = "store_save_failed"


class LedgerSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """A single ledger event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=utc_now)

    event_type: LedgerEventType
    severity: LedgerSeverity = LedgerSeverity.INFO

    # What the event is about
    gathering_id: Optional[str] = None
    member_id: Optional[str] = None

    # Unbounded: it embeds user-chosen names and ids
    description: str
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "gathering_id": self.gathering_id,
            "member_id": self.member_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.expense_added(gathering_id, member_id, amount)
        event = LedgerEventBuilder.gathering_closed(gathering_id, settlements)
    """

    @staticmethod
    def member_created(member_id: str, name: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.MEMBER_CREATED,
            member_id=member_id,
            description=f"Member created: {name}",
            details={"name": name},
        )

    @staticmethod
    def gathering_created(gathering_id: str, description: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.GATHERING_CREATED,
            gathering_id=gathering_id,
            description=f"Gathering created: {gathering_id}",
            details={"description": description},
        )

    @staticmethod
    def gathering_deleted(gathering_id: str, existed: bool) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.GATHERING_DELETED,
            gathering_id=gathering_id,
            description=(
                f"Gathering deleted: {gathering_id}"
                if existed
                else f"Delete skipped, no gathering {gathering_id}"
            ),
            details={"existed": existed},
        )

    @staticmethod
    def member_joined(
        gathering_id: str,
        member_id: str,
        gathering_closed: bool,
    ) -> LedgerEvent:
        # Joining a closed gathering is allowed but unusual
        return LedgerEvent(
            event_type=LedgerEventType.MEMBER_JOINED,
            severity=(
                LedgerSeverity.WARNING if gathering_closed else LedgerSeverity.INFO
            ),
            gathering_id=gathering_id,
            member_id=member_id,
            description=(
                "Member added to a closed gathering"
                if gathering_closed
                else "Member added to gathering"
            ),
            details={"gathering_closed": gathering_closed},
        )

    @staticmethod
    def member_removed(
        gathering_id: str,
        member_id: str,
        balance: Optional[Decimal],
        settled: bool,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.MEMBER_REMOVED,
            severity=LedgerSeverity.INFO if settled else LedgerSeverity.WARNING,
            gathering_id=gathering_id,
            member_id=member_id,
            description=(
                "Member removed from gathering"
                if settled
                else "Member removed with an unsettled balance"
            ),
            details={"balance": str(balance) if balance is not None else None},
        )

    @staticmethod
    def expense_added(
        gathering_id: str,
        member_id: str,
        expense_id: str,
        amount: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_ADDED,
            gathering_id=gathering_id,
            member_id=member_id,
            description=f"Expense added: {amount}",
            details={"expense_id": expense_id, "amount": str(amount)},
        )

    @staticmethod
    def payment_recorded(
        gathering_id: str,
        member_id: str,
        payment_id: str,
        amount: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PAYMENT_RECORDED,
            gathering_id=gathering_id,
            member_id=member_id,
            description=f"Payment recorded: {amount}",
            details={"payment_id": payment_id, "amount": str(amount)},
        )

    @staticmethod
    def settlement_recorded(
        gathering_id: str,
        member_id: str,
        payment_id: str,
        amount: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.SETTLEMENT_RECORDED,
            gathering_id=gathering_id,
            member_id=member_id,
            description=f"Settlement payment: {amount}",
            details={"payment_id": payment_id, "amount": str(amount)},
        )

    @staticmethod
    def gathering_closed(gathering_id: str, settlements: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.GATHERING_CLOSED,
            gathering_id=gathering_id,
            description=f"Gathering closed with {settlements} settlement payments",
            details={"settlements": settlements},
        )

    @staticmethod
    def data_exported(gathering_count: int, member_count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.DATA_EXPORTED,
            description="Store exported",
            details={"gatherings": gathering_count, "members": member_count},
        )

    @staticmethod
    def data_imported(gathering_count: int, member_count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.DATA_IMPORTED,
            severity=LedgerSeverity.WARNING,
            description="Store replaced by imported data",
            details={"gatherings": gathering_count, "members": member_count},
        )

    @staticmethod
    def operation_rejected(
        operation: str,
        error_type: str,
        error_message: str,
        gathering_id: Optional[str] = None,
        member_id: Optional[str] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.OPERATION_REJECTED,
            severity=LedgerSeverity.WARNING,
            gathering_id=gathering_id,
            member_id=member_id,
            description=f"{operation} rejected: {error_type}",
            error_message=error_message,
            details={"operation": operation, "error_type": error_type},
        )

    @staticmethod
    def store_failed(operation: str, error_message: str) -> LedgerEvent:
        event_type = (
            LedgerEventType.STORE_LOAD_FAILED
            if operation == "load"
            else LedgerEventType.STORE_SAVE_FAILED
        )
        return LedgerEvent(
            event_type=event_type,
            severity=LedgerSeverity.ERROR,
            description=f"Store {operation} failed",
            error_message=error_message,
            details={"operation": operation},
        )
