"""
Ledger API

The function-call surface consumed by a presentation layer. Every
function delegates to one process-wide GatheringRepository, built
lazily from settings on first use.

Usage:
    from gathering_ledger import api

    api.create_gathering("bbq-2024", "Summer BBQ")
    alice = api.create_global_member("Alice")
    api.add_member_to_gathering("bbq-2024", alice.id)
    api.add_expense("bbq-2024", alice.id, "45.50")
"""

from datetime import date
from typing import Optional

from gathering_ledger.config import get_settings
from gathering_ledger.ledger import gathering_totals
from gathering_ledger.models import (
    AppData,
    Gathering,
    GatheringTotals,
    GlobalMember,
    GlobalMemberBalance,
    MemberBalance,
)
from gathering_ledger.services import (
    GatheringRepository,
    JsonFileStore,
    MemoryStore,
    StoreInterface,
    build_balance_report,
)
from gathering_ledger.services.repository import AmountLike

_repository: Optional[GatheringRepository] = None


def build_store() -> StoreInterface:
    """Create the store backend selected by StorageSettings."""
    settings = get_settings().storage
    if settings.backend == "memory":
        return MemoryStore(strict=settings.strict)
    return JsonFileStore(
        settings.data_path,
        key=settings.store_key,
        strict=settings.strict,
    )


def get_repository() -> GatheringRepository:
    """Return the process-wide repository, creating it on first use."""
    global _repository
    if _repository is None:
        _repository = GatheringRepository(build_store())
    return _repository


def set_repository(repository: Optional[GatheringRepository]) -> None:
    """Swap the process-wide repository. None rebuilds it from settings."""
    global _repository
    _repository = repository


# =============================================================================
# QUERIES
# =============================================================================

def list_gatherings(open_only: bool = False) -> list[Gathering]:
    return get_repository().list_gatherings(open_only=open_only)


def get_gathering(gathering_id: str) -> Optional[Gathering]:
    return get_repository().get_gathering(gathering_id)


def list_global_members() -> list[GlobalMember]:
    return get_repository().list_global_members()


def get_global_member_balances() -> list[GlobalMemberBalance]:
    return get_repository().get_global_member_balances()


def totals(gathering: Gathering) -> GatheringTotals:
    return gathering_totals(gathering)


def member_balances(gathering: Gathering) -> list[MemberBalance]:
    return get_repository().member_balances(gathering)


# =============================================================================
# MUTATIONS
# =============================================================================

def create_global_member(name: str) -> GlobalMember:
    return get_repository().create_global_member(name)


def create_gathering(gathering_id: str, description: str = "") -> Gathering:
    return get_repository().create_gathering(gathering_id, description)


def delete_gathering(gathering_id: str) -> None:
    get_repository().delete_gathering(gathering_id)


def add_member_to_gathering(gathering_id: str, member_id: str) -> Gathering:
    return get_repository().add_member_to_gathering(gathering_id, member_id)


def remove_member_from_gathering(gathering_id: str, member_id: str) -> Gathering:
    return get_repository().remove_member_from_gathering(gathering_id, member_id)


def add_expense(gathering_id: str, member_id: str, amount: AmountLike) -> Gathering:
    return get_repository().add_expense(gathering_id, member_id, amount)


def record_payment(gathering_id: str, member_id: str, amount: AmountLike) -> Gathering:
    return get_repository().record_payment(gathering_id, member_id, amount)


def settle_member(gathering_id: str, member_id: str) -> Gathering:
    return get_repository().settle_member(gathering_id, member_id)


def close_gathering(gathering_id: str) -> Gathering:
    return get_repository().close_gathering(gathering_id)


# =============================================================================
# TRANSPORT AND REPORTS
# =============================================================================

def export_data() -> str:
    return get_repository().export_data()


def import_data(token: str) -> AppData:
    return get_repository().import_data(token)


def generate_report(start: Optional[date] = None, end: Optional[date] = None) -> str:
    """CSV balance report for gatherings created between start and end."""
    return build_balance_report(get_repository().store.load(), start, end)
