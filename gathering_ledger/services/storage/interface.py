"""
Abstract Store Interface

DESIGN DECISION: The whole application state is one aggregate (AppData)
that is always read and written as a unit. There are no partial updates.
This allows us to:
1. Swap the JSON file for another backend without touching the repository
2. Use in-memory storage for testing
3. Express every mutation as a single transform over the latest store

Loading never fails: a missing or unreadable store degrades to the empty
default, and a failed save is logged rather than raised. Callers cannot
tell "no data" from "corrupt data" from "write failed". Backends built
with strict=True raise StorageError instead.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional, TypeVar

from gathering_ledger.events import EventLogger, LedgerEventBuilder
from gathering_ledger.models import AppData

T = TypeVar("T")


class StoreInterface(ABC):
    """
    Abstract interface for the persisted store.

    Any backend (JSON file, memory, ...) must implement load and save.
    Every load returns a fresh copy, so no caller ever holds a reference
    into the persisted state.
    """

    def __init__(
        self,
        strict: bool = False,
        event_logger: Optional[EventLogger] = None,
    ):
        self._strict = strict
        self._events = event_logger or EventLogger("gathering_ledger.storage")

    @abstractmethod
    def load(self) -> AppData:
        """
        Load the full store.

        Returns:
            The persisted AppData, or an empty AppData if nothing usable
            is stored.

        Raises:
            StorageError: Only in strict mode, if the store is unreadable
        """
        pass

    @abstractmethod
    def save(self, data: AppData) -> None:
        """
        Persist the full store, replacing prior content.

        Raises:
            StorageError: Only in strict mode, if the write fails
        """
        pass

    def transact(self, transform: Callable[[AppData], T]) -> T:
        """
        Apply a read-modify-write cycle against the latest store.

        The transform receives a freshly loaded AppData, mutates it and
        returns a result. The mutated store is saved only if the transform
        returns normally; if it raises, nothing is written.
        """
        data = self.load()
        result = transform(data)
        self.save(data)
        return result

    def _handle_failure(self, operation: str, error: Exception) -> None:
        """Log a storage failure, and raise it in strict mode."""
        self._events.log(LedgerEventBuilder.store_failed(operation, str(error)))
        if self._strict:
            raise StorageError(f"Failed to {operation} store: {error}") from error


def parse_store(raw: object) -> AppData:
    """
    Build AppData from a decoded JSON value.

    Missing top-level keys default to empty lists.

    Raises:
        ValueError: If the value is not a JSON object or fails validation
    """
    if raw is None:
        return AppData()
    if not isinstance(raw, dict):
        raise ValueError(f"Store must be a JSON object, got {type(raw).__name__}")
    return AppData.model_validate(raw)


class StorageError(Exception):
    """Base exception for storage operations."""
    pass
