"""
Gathering Repository

The only component that mutates the store. Every write is one
read-modify-write cycle through StoreInterface.transact:

1. Load the latest store (never a cached copy)
2. Validate the request completely
3. Mutate the loaded copy
4. Save the whole store back

If validation fails, the error is raised from inside the transform and
nothing is written. A rejected operation is never partially applied.

CLOSING A GATHERING settles it: every member whose balance is not
within SETTLED_THRESHOLD of zero receives a payment of -balance tagged
PaymentSource.SETTLEMENT, after which every balance is zero and the
gathering is CLOSED for good.

KNOWN GAPS (kept deliberately, and logged when they happen):
- Members can still be added to a closed gathering
- A member can be removed with an unsettled balance; their expenses and
  payments leave the totals with them. Pass on_unsettled_removal to be
  told when this happens.
"""

from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, TypeVar, Union
from uuid import uuid4

from gathering_ledger.events import EventLogger, LedgerEventBuilder
from gathering_ledger.ledger import (
    SETTLED_THRESHOLD,
    gathering_totals,
    global_member_balances,
    member_balances,
    name_sort_key,
)
from gathering_ledger.models import (
    AppData,
    BalanceStatus,
    Expense,
    Gathering,
    GatheringMember,
    GatheringStatus,
    GatheringTotals,
    GlobalMember,
    GlobalMemberBalance,
    MemberBalance,
    Payment,
    PaymentSource,
)
from gathering_ledger.services.codec import decode_token, encode_store
from gathering_ledger.services.errors import (
    AlreadyMemberError,
    DuplicateIdError,
    DuplicateNameError,
    GatheringClosedError,
    InvalidAmountError,
    InvalidNameError,
    LedgerError,
    NotFoundError,
)
from gathering_ledger.services.storage import StoreInterface

T = TypeVar("T")

AmountLike = Union[Decimal, int, float, str]
UnsettledRemovalHook = Callable[[str, MemberBalance], None]


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex}"


def to_amount(value: AmountLike) -> Decimal:
    """
    Convert user input to a finite Decimal.

    Floats go through their shortest repr, so 0.1 becomes Decimal("0.1").

    Raises:
        InvalidAmountError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Amount must be a number, got {value!r}")
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(f"Amount must be a number, got {value!r}")
    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be a finite number, got {value!r}")
    return amount


def _require_gathering(data: AppData, gathering_id: str) -> Gathering:
    gathering = data.find_gathering(gathering_id)
    if gathering is None:
        raise NotFoundError(f"Gathering not found: {gathering_id}")
    return gathering


def _require_member(gathering: Gathering, member_id: str) -> GatheringMember:
    member = gathering.find_member(member_id)
    if member is None:
        raise NotFoundError(
            f"Member {member_id} not found in gathering {gathering.id}"
        )
    return member


class GatheringRepository:
    """
    CRUD over gatherings, global members and membership.

    Queries return fresh copies loaded from the store. Mutating them has
    no effect on the store; go through the repository instead.
    """

    def __init__(
        self,
        store: StoreInterface,
        event_logger: Optional[EventLogger] = None,
        on_unsettled_removal: Optional[UnsettledRemovalHook] = None,
    ):
        """
        Initialize repository.

        Args:
            store: Backend holding the AppData aggregate
            event_logger: Where ledger events go. Defaults to a new EventLogger.
            on_unsettled_removal: Called with (gathering_id, balance) after a
                member with an unsettled balance has been removed
        """
        self._store = store
        self._events = event_logger or EventLogger()
        self._on_unsettled_removal = on_unsettled_removal

    @property
    def store(self) -> StoreInterface:
        return self._store

    def _transact(
        self,
        operation: str,
        transform: Callable[[AppData], T],
        gathering_id: Optional[str] = None,
        member_id: Optional[str] = None,
    ) -> T:
        """Run transform through the store, logging rejected operations."""
        try:
            return self._store.transact(transform)
        except LedgerError as e:
            self._events.log(LedgerEventBuilder.operation_rejected(
                operation=operation,
                error_type=type(e).__name__,
                error_message=str(e),
                gathering_id=gathering_id,
                member_id=member_id,
            ))
            raise

    # =========================================================================
    # QUERIES
    # =========================================================================

    def list_gatherings(self, open_only: bool = False) -> list[Gathering]:
        """All gatherings, newest first. open_only drops closed ones."""
        gatherings = self._store.load().gatherings
        if open_only:
            gatherings = [g for g in gatherings if g.status == GatheringStatus.OPEN]
        # Reversed first so equal timestamps list the later insert first
        return sorted(reversed(gatherings), key=lambda g: g.created_at, reverse=True)

    def get_gathering(self, gathering_id: str) -> Optional[Gathering]:
        return self._store.load().find_gathering(gathering_id)

    def list_global_members(self) -> list[GlobalMember]:
        """All global members sorted by name."""
        return sorted(
            self._store.load().global_members,
            key=lambda m: name_sort_key(m.name),
        )

    def get_global_member_balances(self) -> list[GlobalMemberBalance]:
        return global_member_balances(self._store.load())

    def get_totals(self, gathering_id: str) -> GatheringTotals:
        """
        Raises:
            NotFoundError: If the gathering does not exist
        """
        return gathering_totals(_require_gathering(self._store.load(), gathering_id))

    def get_member_balances(self, gathering_id: str) -> list[MemberBalance]:
        """
        Raises:
            NotFoundError: If the gathering does not exist
        """
        data = self._store.load()
        return member_balances(
            _require_gathering(data, gathering_id),
            data.global_members,
        )

    def member_balances(self, gathering: Gathering) -> list[MemberBalance]:
        """Balances for a gathering snapshot, with names from the store."""
        return member_balances(gathering, self._store.load().global_members)

    # =========================================================================
    # GLOBAL MEMBERS
    # =========================================================================

    def create_global_member(self, name: str) -> GlobalMember:
        """
        Create a member known to the whole store.

        Raises:
            InvalidNameError: If the name is blank
            DuplicateNameError: If the name is taken, ignoring case
        """
        name = (name or "").strip()

        def transform(data: AppData) -> GlobalMember:
            if not name:
                raise InvalidNameError("Member name cannot be empty.")
            wanted = name.casefold()
            if any(m.name.casefold() == wanted for m in data.global_members):
                raise DuplicateNameError(f"A member named '{name}' already exists.")
            member = GlobalMember(id=_new_id("global"), name=name)
            data.global_members.append(member)
            return member

        member = self._transact("create_global_member", transform)
        self._events.log(LedgerEventBuilder.member_created(member.id, member.name))
        return member

    # =========================================================================
    # GATHERINGS
    # =========================================================================

    def create_gathering(self, gathering_id: str, description: str = "") -> Gathering:
        """
        Create an OPEN gathering with no members.

        Raises:
            InvalidNameError: If the id is blank
            DuplicateIdError: If the id is already used
        """
        gathering_id = (gathering_id or "").strip()

        def transform(data: AppData) -> Gathering:
            if not gathering_id:
                raise InvalidNameError("Gathering ID cannot be empty.")
            if data.find_gathering(gathering_id) is not None:
                raise DuplicateIdError(
                    f"Gathering with ID '{gathering_id}' already exists"
                )
            gathering = Gathering(id=gathering_id, description=description)
            data.gatherings.append(gathering)
            return gathering

        gathering = self._transact(
            "create_gathering", transform, gathering_id=gathering_id
        )
        self._events.log(
            LedgerEventBuilder.gathering_created(gathering.id, description)
        )
        return gathering

    def delete_gathering(self, gathering_id: str) -> None:
        """Remove a gathering. Deleting a missing gathering is a no-op."""

        def transform(data: AppData) -> bool:
            before = len(data.gatherings)
            data.gatherings = [g for g in data.gatherings if g.id != gathering_id]
            return len(data.gatherings) != before

        existed = self._transact(
            "delete_gathering", transform, gathering_id=gathering_id
        )
        self._events.log(LedgerEventBuilder.gathering_deleted(gathering_id, existed))

    def close_gathering(self, gathering_id: str) -> Gathering:
        """
        Settle every balance and close the gathering.

        Already closed gatherings are returned unchanged.

        Raises:
            NotFoundError: If the gathering does not exist
        """

        def transform(data: AppData) -> tuple[Gathering, list[tuple[str, Payment]], bool]:
            gathering = _require_gathering(data, gathering_id)
            if gathering.is_closed:
                return gathering, [], False

            settlements = []
            for balance in member_balances(gathering, data.global_members):
                if abs(balance.balance) < SETTLED_THRESHOLD:
                    continue
                payment = Payment(
                    id=_new_id("settle"),
                    amount=-balance.balance,
                    source=PaymentSource.SETTLEMENT,
                )
                gathering.find_member(balance.member_id).payments.append(payment)
                settlements.append((balance.member_id, payment))

            gathering.status = GatheringStatus.CLOSED
            return gathering, settlements, True

        gathering, settlements, changed = self._transact(
            "close_gathering", transform, gathering_id=gathering_id
        )
        if changed:
            for member_id, payment in settlements:
                self._events.log(LedgerEventBuilder.settlement_recorded(
                    gathering_id, member_id, payment.id, payment.amount
                ))
            self._events.log(
                LedgerEventBuilder.gathering_closed(gathering_id, len(settlements))
            )
        return gathering

    # =========================================================================
    # MEMBERSHIP
    # =========================================================================

    def add_member_to_gathering(self, gathering_id: str, member_id: str) -> Gathering:
        """
        Add a global member to a gathering with empty expenses and payments.

        Closed gatherings are not blocked; a warning is logged instead.

        Raises:
            NotFoundError: If the gathering does not exist
            AlreadyMemberError: If the member already belongs to it
        """

        def transform(data: AppData) -> Gathering:
            gathering = _require_gathering(data, gathering_id)
            if gathering.find_member(member_id) is not None:
                raise AlreadyMemberError(
                    f"Member {member_id} is already in gathering {gathering_id}"
                )
            gathering.members.append(GatheringMember(member_id=member_id))
            return gathering

        gathering = self._transact(
            "add_member_to_gathering",
            transform,
            gathering_id=gathering_id,
            member_id=member_id,
        )
        self._events.log(LedgerEventBuilder.member_joined(
            gathering_id, member_id, gathering.is_closed
        ))
        return gathering

    def remove_member_from_gathering(self, gathering_id: str, member_id: str) -> Gathering:
        """
        Remove a member from a gathering, whatever their balance.

        Removing someone who is not a member is a no-op. If the removed
        member was not settled, a warning is logged and the
        on_unsettled_removal hook is called.

        Raises:
            NotFoundError: If the gathering does not exist
        """

        def transform(data: AppData) -> tuple[Gathering, Optional[MemberBalance]]:
            gathering = _require_gathering(data, gathering_id)
            if gathering.find_member(member_id) is None:
                return gathering, None

            removed = next(
                b for b in member_balances(gathering, data.global_members)
                if b.member_id == member_id
            )
            gathering.members = [
                m for m in gathering.members if m.member_id != member_id
            ]
            return gathering, removed

        gathering, removed = self._transact(
            "remove_member_from_gathering",
            transform,
            gathering_id=gathering_id,
            member_id=member_id,
        )
        if removed is not None:
            settled = removed.status == BalanceStatus.SETTLED
            self._events.log(LedgerEventBuilder.member_removed(
                gathering_id, member_id, removed.balance, settled
            ))
            if not settled and self._on_unsettled_removal is not None:
                self._on_unsettled_removal(gathering_id, removed)
        return gathering

    # =========================================================================
    # EXPENSES AND PAYMENTS
    # =========================================================================

    def add_expense(
        self,
        gathering_id: str,
        member_id: str,
        amount: AmountLike,
    ) -> Gathering:
        """
        Log an expense for a member of an open gathering.

        Raises:
            NotFoundError: If the gathering or the member is missing
            GatheringClosedError: If the gathering is closed
            InvalidAmountError: If the amount is not a positive number
        """

        def transform(data: AppData) -> tuple[Gathering, Expense]:
            gathering = _require_gathering(data, gathering_id)
            if gathering.is_closed:
                raise GatheringClosedError("Cannot add expense to closed gathering")
            value = to_amount(amount)
            if value <= 0:
                raise InvalidAmountError("Expense amount must be positive")
            member = _require_member(gathering, member_id)

            expense = Expense(id=_new_id("exp"), amount=value)
            member.expenses.append(expense)
            return gathering, expense

        gathering, expense = self._transact(
            "add_expense", transform, gathering_id=gathering_id, member_id=member_id
        )
        self._events.log(LedgerEventBuilder.expense_added(
            gathering_id, member_id, expense.id, expense.amount
        ))
        return gathering

    def record_payment(
        self,
        gathering_id: str,
        member_id: str,
        amount: AmountLike,
    ) -> Gathering:
        """
        Record a payment of any sign for a member of an open gathering.

        Zero is accepted here; rejecting it is a presentation-layer rule.

        Raises:
            NotFoundError: If the gathering or the member is missing
            GatheringClosedError: If the gathering is closed
            InvalidAmountError: If the amount is not a finite number
        """

        def transform(data: AppData) -> tuple[Gathering, Payment]:
            gathering = _require_gathering(data, gathering_id)
            if gathering.is_closed:
                raise GatheringClosedError("Cannot record payment in closed gathering")
            value = to_amount(amount)
            member = _require_member(gathering, member_id)

            payment = Payment(id=_new_id("pay"), amount=value)
            member.payments.append(payment)
            return gathering, payment

        gathering, payment = self._transact(
            "record_payment", transform, gathering_id=gathering_id, member_id=member_id
        )
        self._events.log(LedgerEventBuilder.payment_recorded(
            gathering_id, member_id, payment.id, payment.amount
        ))
        return gathering

    def settle_member(self, gathering_id: str, member_id: str) -> Gathering:
        """
        Bring one member of an open gathering to a zero balance.

        Records a user payment of -balance. Members already settled are
        left alone.

        Raises:
            NotFoundError: If the gathering or the member is missing
            GatheringClosedError: If the gathering is closed
        """

        def transform(data: AppData) -> tuple[Gathering, Optional[Payment]]:
            gathering = _require_gathering(data, gathering_id)
            if gathering.is_closed:
                raise GatheringClosedError("Cannot record payment in closed gathering")
            member = _require_member(gathering, member_id)

            balance = next(
                b for b in member_balances(gathering, data.global_members)
                if b.member_id == member_id
            )
            if balance.status == BalanceStatus.SETTLED:
                return gathering, None

            payment = Payment(id=_new_id("pay"), amount=-balance.balance)
            member.payments.append(payment)
            return gathering, payment

        gathering, payment = self._transact(
            "settle_member", transform, gathering_id=gathering_id, member_id=member_id
        )
        if payment is not None:
            self._events.log(LedgerEventBuilder.payment_recorded(
                gathering_id, member_id, payment.id, payment.amount
            ))
        return gathering

    # =========================================================================
    # IMPORT / EXPORT
    # =========================================================================

    def export_data(self) -> str:
        """Encode the whole store as a transport token."""
        data = self._store.load()
        token = encode_store(data)
        self._events.log(LedgerEventBuilder.data_exported(
            len(data.gatherings), len(data.global_members)
        ))
        return token

    def import_data(self, token: str) -> AppData:
        """
        Replace the whole store with the contents of a token.

        There is no merge: everything stored before is overwritten.

        Raises:
            InvalidFormatError: If the token cannot be decoded
        """
        try:
            data = decode_token(token)
        except LedgerError as e:
            self._events.log(LedgerEventBuilder.operation_rejected(
                operation="import_data",
                error_type=type(e).__name__,
                error_message=str(e.__cause__ or e),
            ))
            raise

        self._store.save(data)
        self._events.log(LedgerEventBuilder.data_imported(
            len(data.gatherings), len(data.global_members)
        ))
        return data
