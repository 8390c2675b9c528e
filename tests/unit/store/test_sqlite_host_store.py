"""Unit tests for SQLiteHostStore."""

import aiosqlite
import pytest

from livemigrate.exceptions import RecordNotFoundError, TriggerRejectedError
from livemigrate.records import Record, TriggerRequest
from livemigrate.status import MIGRATION_KEY
from livemigrate.store import ID_FIELD, Filter, Query, SQLiteHostStore, TriggerKind


class TestSQLiteHostStore:
    """Tests for SQLiteHostStore persistence."""

    @pytest.mark.asyncio
    async def test_save_and_get(self, sqlite_store: SQLiteHostStore) -> None:
        record = await sqlite_store.save(
            Record("Order", {"total": 10, "items": [{"sku": "a"}], "paid": True})
        )

        loaded = await sqlite_store.get("Order", record.id)

        assert loaded.id == record.id
        assert loaded.fields == {"total": 10, "items": [{"sku": "a"}], "paid": True}
        assert loaded.existed
        assert not loaded.is_dirty()

    @pytest.mark.asyncio
    async def test_update_is_upsert(self, sqlite_store: SQLiteHostStore) -> None:
        record = await sqlite_store.save(Record("Order", {"total": 10}))
        record.set("total", 20)

        await sqlite_store.save(record)

        records = await sqlite_store.find("Order")
        assert len(records) == 1
        assert records[0].get("total") == 20

    @pytest.mark.asyncio
    async def test_get_missing_raises(self, sqlite_store: SQLiteHostStore) -> None:
        with pytest.raises(RecordNotFoundError):
            await sqlite_store.get("Order", "missing")

    @pytest.mark.asyncio
    async def test_classes_are_isolated(self, sqlite_store: SQLiteHostStore) -> None:
        await sqlite_store.save(Record("Order", {"n": 1}))
        await sqlite_store.save(Record("Customer", {"n": 2}))

        orders = await sqlite_store.find("Order")

        assert [r.get("n") for r in orders] == [1]

    @pytest.mark.asyncio
    async def test_find_sweep_query(self, sqlite_store: SQLiteHostStore) -> None:
        await sqlite_store.save(Record("Order", {"n": 1}))
        await sqlite_store.save(Record("Order", {"n": 2, MIGRATION_KEY: 1}))
        await sqlite_store.save(Record("Order", {"n": 3}))
        query = Query(
            filters=[Filter.not_in(MIGRATION_KEY, [1, 2, 3, 4])],
            order_by=ID_FIELD,
            limit=10,
        )

        found = await sqlite_store.find("Order", query)

        assert sorted(r.get("n") for r in found) == [1, 3]
        assert [r.id for r in found] == sorted(r.id for r in found)

    @pytest.mark.asyncio
    async def test_delete(self, sqlite_store: SQLiteHostStore) -> None:
        record = await sqlite_store.save(Record("Order"))

        await sqlite_store.delete(record)

        assert await sqlite_store.find("Order") == []

    @pytest.mark.asyncio
    async def test_triggers_run(self, sqlite_store: SQLiteHostStore) -> None:
        async def before_save(request: TriggerRequest) -> Record:
            raise ValueError("read only")

        sqlite_store.register_trigger(TriggerKind.BEFORE_SAVE, "Order", before_save)

        with pytest.raises(TriggerRejectedError):
            await sqlite_store.save(Record("Order"))

        assert await sqlite_store.find("Order") == []

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(
        self, sqlite_connection: aiosqlite.Connection
    ) -> None:
        store = SQLiteHostStore(sqlite_connection, enable_tracing=False)

        await store.initialize()
        await store.initialize()
        await store.save(Record("Order"))

        assert len(await store.find("Order")) == 1
