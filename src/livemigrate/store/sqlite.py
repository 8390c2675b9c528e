"""
SQLite host store implementation.

Provides lightweight, embedded persistence for records using aiosqlite.
Suitable for development, testing, and embedded deployments.

SQLite-specific adaptations:
- All classes share one table, keyed by (class_name, id)
- Record fields are stored as a JSON document in a TEXT column
- Datetimes stored as TEXT (ISO 8601 format)
- Uses UPSERT with ON CONFLICT syntax (SQLite 3.24+)
- Query filters are evaluated in Python after a class-scoped SELECT,
  which is fine for small to medium tables
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from livemigrate.observability import (
    ATTR_CLASS_NAME,
    ATTR_DB_OPERATION,
    ATTR_DB_SYSTEM,
    ATTR_RECORD_ID,
    Tracer,
)
from livemigrate.records import Record
from livemigrate.store.base import TriggeringHostStore

if TYPE_CHECKING:
    import aiosqlite

RECORDS_SCHEMA = """
CREATE TABLE IF NOT EXISTS records (
    class_name TEXT NOT NULL,
    id TEXT NOT NULL,
    data TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    PRIMARY KEY (class_name, id)
)
"""


class SQLiteHostStore(TriggeringHostStore):
    """
    SQLite implementation of the host store.

    Example:
        >>> import aiosqlite
        >>> async with aiosqlite.connect("host.db") as db:
        ...     store = SQLiteHostStore(db)
        ...     await store.initialize()
        ...     record = await store.save(Record("Order", {"total": 10}))
    """

    def __init__(
        self,
        connection: aiosqlite.Connection,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        super().__init__(tracer=tracer, enable_tracing=enable_tracing)
        self._connection = connection

    async def initialize(self) -> None:
        """Create the records table if it does not exist."""
        await self._connection.execute(RECORDS_SCHEMA)
        await self._connection.commit()

    async def _persist(self, record: Record) -> str:
        record_id = record.id or uuid4().hex
        with self._tracer.span(
            "livemigrate.sqlite.persist",
            {
                ATTR_CLASS_NAME: record.class_name,
                ATTR_RECORD_ID: record_id,
                ATTR_DB_SYSTEM: "sqlite",
                ATTR_DB_OPERATION: "UPSERT",
            },
        ):
            now = datetime.now(UTC).isoformat()
            await self._connection.execute(
                """
                INSERT INTO records (class_name, id, data, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (class_name, id)
                DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at
                """,
                (record.class_name, record_id, json.dumps(record.fields), now, now),
            )
            await self._connection.commit()
            return record_id

    async def _remove(self, record: Record) -> None:
        with self._tracer.span(
            "livemigrate.sqlite.remove",
            {
                ATTR_CLASS_NAME: record.class_name,
                ATTR_RECORD_ID: record.id or "",
                ATTR_DB_SYSTEM: "sqlite",
                ATTR_DB_OPERATION: "DELETE",
            },
        ):
            await self._connection.execute(
                "DELETE FROM records WHERE class_name = ? AND id = ?",
                (record.class_name, record.id),
            )
            await self._connection.commit()

    async def _load_class(self, class_name: str) -> list[Record]:
        with self._tracer.span(
            "livemigrate.sqlite.load_class",
            {
                ATTR_CLASS_NAME: class_name,
                ATTR_DB_SYSTEM: "sqlite",
                ATTR_DB_OPERATION: "SELECT",
            },
        ):
            cursor = await self._connection.execute(
                "SELECT id, data FROM records WHERE class_name = ? ORDER BY id",
                (class_name,),
            )
            rows = await cursor.fetchall()
            return [Record.from_stored(class_name, row[0], json.loads(row[1])) for row in rows]

    async def _load_one(self, class_name: str, record_id: str) -> Record | None:
        cursor = await self._connection.execute(
            "SELECT data FROM records WHERE class_name = ? AND id = ?",
            (class_name, record_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return Record.from_stored(class_name, record_id, json.loads(row[0]))


__all__ = ["SQLiteHostStore", "RECORDS_SCHEMA"]
