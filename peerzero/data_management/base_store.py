"""Shared machinery for the async in-memory record stores.

Every store follows the same pattern:
- One asyncio.Lock per store; every read-modify-write happens under it
- Records keyed by id in insertion order (used for "most recent" queries)
- Callers receive deep copies, never the stored instance
- Optional JSON persistence, rewritten after each mutation
"""

import asyncio
import json
from pathlib import Path
from typing import Any, ClassVar, Generic, Optional, TypeVar

import structlog
from pydantic import BaseModel

RecordT = TypeVar("RecordT", bound=BaseModel)


class RecordStore(Generic[RecordT]):
    """Base class for id-keyed pydantic record stores."""

    record_type: ClassVar[type[BaseModel]]
    id_field: ClassVar[str]

    def __init__(self, persistence_path: Optional[str] = None) -> None:
        """Initialize the store.

        Args:
            persistence_path: Optional path to JSON file for persistence.
                            If None, storage is memory-only.
        """
        self._records: dict[str, RecordT] = {}
        self._lock = asyncio.Lock()
        self._persistence_path = Path(persistence_path) if persistence_path else None
        self._logger = structlog.get_logger().bind(component=self.__class__.__name__)

        if self._persistence_path:
            self._load_from_file()

    async def get(self, record_id: str) -> Optional[RecordT]:
        """Get a record by id (copy), or None."""
        async with self._lock:
            record = self._records.get(record_id)
            return record.model_copy(deep=True) if record else None

    async def list_all(self) -> list[RecordT]:
        """All records in insertion order."""
        async with self._lock:
            return [r.model_copy(deep=True) for r in self._records.values()]

    async def count(self) -> int:
        async with self._lock:
            return len(self._records)

    def _insert(self, record: RecordT) -> RecordT:
        """Store a record. Caller must hold the lock."""
        record_id = getattr(record, self.id_field)
        self._records[record_id] = record.model_copy(deep=True)
        self._persist()
        return record.model_copy(deep=True)

    def _update(self, record_id: str, **fields: Any) -> Optional[RecordT]:
        """Replace fields on a stored record. Caller must hold the lock."""
        record = self._records.get(record_id)
        if record is None:
            return None
        updated = record.model_copy(update=fields, deep=True)
        self._records[record_id] = updated
        self._persist()
        return updated.model_copy(deep=True)

    def _persist(self) -> None:
        if self._persistence_path:
            self._save_to_file()

    def _save_to_file(self) -> None:
        """Save to JSON file (synchronous)."""
        if not self._persistence_path:
            return
        try:
            self._persistence_path.parent.mkdir(parents=True, exist_ok=True)
            data = {
                record_id: record.model_dump(mode="json")
                for record_id, record in self._records.items()
            }
            with open(self._persistence_path, "w") as f:
                json.dump(data, f, indent=2, default=str)
        except OSError as e:
            self._logger.error("persistence_failed", error=str(e))

    def _load_from_file(self) -> None:
        """Load records from JSON file (synchronous)."""
        if not self._persistence_path or not self._persistence_path.exists():
            return

        try:
            with open(self._persistence_path, "r") as f:
                data = json.load(f)
            self._records = {
                record_id: self.record_type.model_validate(payload)
                for record_id, payload in data.items()
            }
            self._logger.info(
                "store_loaded",
                path=str(self._persistence_path),
                records=len(self._records),
            )
        except (OSError, ValueError) as e:
            self._logger.error("load_failed", path=str(self._persistence_path), error=str(e))
            self._records = {}
