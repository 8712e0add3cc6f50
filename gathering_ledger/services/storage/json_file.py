"""
JSON File Store Implementation

DESIGN DECISION: The store is one JSON document on disk. The AppData
record lives under a single namespaced key, like an entry in a browser
key/value store, so the same file can hold other keys side by side.

TRADEOFFS:
- Whole-file rewrite on every save (fine for a personal ledger)
- No locking: two processes saving concurrently means last write wins
- Writes go through a temporary sibling file and os.replace, so a crash
  mid-write leaves the previous version intact
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from gathering_ledger.events import EventLogger
from gathering_ledger.models import AppData
from gathering_ledger.services.storage.interface import StoreInterface, parse_store

DEFAULT_STORE_KEY = "gatheringsDB_v2"


class JsonFileStore(StoreInterface):
    """
    JSON file implementation of the store.

    File layout: {"<store_key>": {"gatherings": [...], "globalMembers": [...]}}
    """

    def __init__(
        self,
        path: Union[str, Path],
        key: str = DEFAULT_STORE_KEY,
        strict: bool = False,
        event_logger: Optional[EventLogger] = None,
    ):
        super().__init__(strict=strict, event_logger=event_logger)
        self._path = Path(path)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    @property
    def key(self) -> str:
        return self._key

    def _read_document(self) -> dict:
        """Read the whole file. A missing file is an empty document."""
        if not self._path.exists():
            return {}
        document = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(document, dict):
            raise ValueError("Store file does not hold a JSON object")
        return document

    def load(self) -> AppData:
        """Load the store from the file, or the empty default."""
        try:
            return parse_store(self._read_document().get(self._key))
        except (OSError, ValueError) as e:
            # json.JSONDecodeError and pydantic.ValidationError are ValueErrors
            self._handle_failure("load", e)
            return AppData()

    def save(self, data: AppData) -> None:
        """Write the store under its key, keeping any other keys."""
        try:
            try:
                document = self._read_document()
            except (OSError, ValueError):
                document = {}
            document[self._key] = data.to_wire()

            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(document, handle, ensure_ascii=False)
                os.replace(tmp_name, self._path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as e:
            self._handle_failure("save", e)
