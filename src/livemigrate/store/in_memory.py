"""
In-memory host store implementation.

Useful for testing and development. Not suitable for production
as all records are lost when the process terminates.
"""

import asyncio
import copy
from typing import Any
from uuid import uuid4

from livemigrate.observability import Tracer
from livemigrate.records import Record
from livemigrate.store.base import TriggeringHostStore


class InMemoryHostStore(TriggeringHostStore):
    """
    In-memory implementation of the host store.

    Records are kept as plain dicts per class, keyed by identifier.
    Loaded records are deep copies, so mutating a Record never changes
    stored data until it is saved.

    Thread-safety:
        Table access is guarded by an asyncio.Lock. Triggers run outside
        the lock, so an after_save trigger may save again.

    Example:
        >>> store = InMemoryHostStore()
        >>> record = await store.save(Record("Order", {"total": 10}))
        >>> record.id is not None
        True
    """

    def __init__(
        self,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        super().__init__(tracer=tracer, enable_tracing=enable_tracing)
        self._tables: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    async def _persist(self, record: Record) -> str:
        async with self._lock:
            table = self._tables.setdefault(record.class_name, {})
            record_id = record.id or uuid4().hex
            table[record_id] = record.fields
            return record_id

    async def _remove(self, record: Record) -> None:
        async with self._lock:
            self._tables.get(record.class_name, {}).pop(record.id, None)

    async def _load_class(self, class_name: str) -> list[Record]:
        async with self._lock:
            table = self._tables.get(class_name, {})
            return [
                Record.from_stored(class_name, record_id, data)
                for record_id, data in table.items()
            ]

    async def _load_one(self, class_name: str, record_id: str) -> Record | None:
        async with self._lock:
            data = self._tables.get(class_name, {}).get(record_id)
            if data is None:
                return None
            return Record.from_stored(class_name, record_id, data)

    def raw(self, class_name: str, record_id: str) -> dict[str, Any] | None:
        """Get a copy of the stored fields of a record, bypassing triggers."""
        data = self._tables.get(class_name, {}).get(record_id)
        return copy.deepcopy(data) if data is not None else None

    def count(self, class_name: str) -> int:
        return len(self._tables.get(class_name, {}))

    def clear(self) -> None:
        """Remove all records. Registrations are kept."""
        self._tables.clear()


__all__ = ["InMemoryHostStore"]
