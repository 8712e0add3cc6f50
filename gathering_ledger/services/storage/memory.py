"""
In-Memory Store Implementation

Keeps the store as a serialized JSON string, exactly as a backend would
hold it on disk. Every load parses a fresh copy, so objects handed to
callers are never shared with the stored state.

Used by the tests and by callers embedding the ledger without a file.
"""

from typing import Optional

from pydantic import ValidationError

from gathering_ledger.events import EventLogger
from gathering_ledger.models import AppData
from gathering_ledger.services.storage.interface import StoreInterface


class MemoryStore(StoreInterface):
    """In-process store holding one serialized AppData record."""

    def __init__(
        self,
        initial: Optional[AppData] = None,
        strict: bool = False,
        event_logger: Optional[EventLogger] = None,
    ):
        super().__init__(strict=strict, event_logger=event_logger)
        self._raw: Optional[str] = None
        if initial is not None:
            self._raw = initial.model_dump_json(by_alias=True)

    @property
    def raw(self) -> Optional[str]:
        """The serialized record, or None if nothing was saved yet."""
        return self._raw

    def load(self) -> AppData:
        if self._raw is None:
            return AppData()
        try:
            return AppData.model_validate_json(self._raw)
        except ValidationError as e:
            self._handle_failure("load", e)
            return AppData()

    def save(self, data: AppData) -> None:
        self._raw = data.model_dump_json(by_alias=True)
