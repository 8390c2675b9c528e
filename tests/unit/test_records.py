"""
Unit tests for records and hook results.

Tests cover:
- Record change tracking and persistence state
- class_name_of resolution
- LegacyResponse misuse detection
- resolve_hook_result / apply_hook_result / call_hook
- chunked
"""

import pytest

from livemigrate.exceptions import CallbackMisuseError
from livemigrate.records import (
    NOT_A_RESPONSE,
    UNCHANGED,
    Record,
    Replaced,
    Unchanged,
    apply_hook_result,
    call_hook,
    chunked,
    class_name_of,
    resolve_hook_result,
)
from livemigrate.status import MIGRATION_KEY, MigrationStatus


class TestRecord:
    """Tests for Record."""

    def test_new_record_is_dirty(self) -> None:
        record = Record("Order", {"total": 10, "currency": "EUR"})

        assert record.is_new
        assert not record.existed
        assert record.dirty_keys == frozenset({"total", "currency"})
        assert record.is_dirty()
        assert record.is_dirty("total")

    def test_from_stored_is_clean(self) -> None:
        record = Record.from_stored("Order", "o1", {"total": 10})

        assert record.id == "o1"
        assert not record.is_new
        assert record.existed
        assert not record.is_dirty()
        assert record.get("total") == 10

    def test_set_and_unset_mark_dirty(self) -> None:
        record = Record.from_stored("Order", "o1", {"total": 10, "note": "x"})

        record.set("total", 11)
        record.unset("note")

        assert record.dirty_keys == frozenset({"total", "note"})
        assert not record.has("note")

    def test_unset_missing_key_is_noop(self) -> None:
        record = Record.from_stored("Order", "o1", {})

        record.unset("missing")

        assert not record.is_dirty()

    def test_id_is_reserved(self) -> None:
        with pytest.raises(ValueError):
            Record("Order", {"id": "x"})

    def test_fields_is_a_copy(self) -> None:
        record = Record.from_stored("Order", "o1", {"items": [1, 2]})

        record.fields["items"].append(3)

        assert record.get("items") == [1, 2]

    def test_from_stored_copies_data(self) -> None:
        data = {"items": [1]}
        record = Record.from_stored("Order", "o1", data)

        data["items"].append(2)

        assert record.get("items") == [1]

    def test_migration_status_stored_as_int(self) -> None:
        record = Record.from_stored("Order", "o1", {})

        record.set_migration_status(MigrationStatus.NEEDS_SECOND_PASS)

        assert record.get(MIGRATION_KEY) == 3
        assert type(record.get(MIGRATION_KEY)) is int
        assert record.migration_status is MigrationStatus.NEEDS_SECOND_PASS
        assert record.is_dirty(MIGRATION_KEY)

    def test_unknown_status_reads_as_none(self) -> None:
        record = Record.from_stored("Order", "o1", {MIGRATION_KEY: 99})

        assert record.migration_status is None

    def test_mark_persisted(self) -> None:
        record = Record("Order", {"total": 1})

        record.mark_persisted("o1", existed=False)

        assert record.id == "o1"
        assert not record.existed
        assert not record.is_dirty()

    def test_restore_field_reverts_value_and_change_flag(self) -> None:
        record = Record.from_stored("Order", "o1", {MIGRATION_KEY: 2})
        state = record.field_state(MIGRATION_KEY)

        record.set_migration_status(MigrationStatus.IS_MIGRATED)
        record.restore_field(MIGRATION_KEY, state)

        assert record.get(MIGRATION_KEY) == 2
        assert not record.is_dirty()

    def test_restore_field_removes_absent_field(self) -> None:
        record = Record("Order", {"total": 1})
        state = record.field_state(MIGRATION_KEY)

        record.set_migration_status(MigrationStatus.IS_MIGRATED)
        record.restore_field(MIGRATION_KEY, state)

        assert not record.has(MIGRATION_KEY)
        assert record.dirty_keys == frozenset({"total"})

    def test_to_dict_includes_id(self) -> None:
        record = Record.from_stored("Order", "o1", {"total": 1})

        assert record.to_dict() == {"total": 1, "id": "o1"}
        assert Record("Order", {"total": 1}).to_dict() == {"total": 1}


class TestClassNameOf:
    def test_string(self) -> None:
        assert class_name_of("Order") == "Order"

    def test_object_with_class_name(self) -> None:
        class Order:
            class_name = "Order"

        assert class_name_of(Order) == "Order"
        assert class_name_of(Order()) == "Order"

    def test_invalid(self) -> None:
        with pytest.raises(TypeError):
            class_name_of(object())


class TestLegacyResponse:
    """Hooks must return or raise instead of calling the response."""

    def test_success_raises(self) -> None:
        with pytest.raises(CallbackMisuseError) as exc_info:
            NOT_A_RESPONSE.success()

        assert exc_info.value.method == "success"

    def test_error_raises(self) -> None:
        with pytest.raises(CallbackMisuseError, match="return"):
            NOT_A_RESPONSE.error("bad")


class TestHookResults:
    """Tests for resolving hook return values."""

    def test_none_is_unchanged(self) -> None:
        assert resolve_hook_result(None) is UNCHANGED

    def test_record_is_replacement(self) -> None:
        record = Record("Order")

        assert resolve_hook_result(record) == Replaced(record)

    def test_explicit_results_pass_through(self) -> None:
        record = Record("Order")

        assert resolve_hook_result(Unchanged()) == Unchanged()
        assert resolve_hook_result(Replaced(record)).record is record

    def test_other_values_are_ignored(self) -> None:
        assert resolve_hook_result({"ok": True}) is UNCHANGED

    def test_apply(self) -> None:
        current = Record("Order")
        replacement = Record("Order")

        assert apply_hook_result(UNCHANGED, current) is current
        assert apply_hook_result(Replaced(replacement), current) is replacement

    @pytest.mark.asyncio
    async def test_call_hook_sync_and_async(self) -> None:
        async def async_hook(value: int) -> int:
            return value * 2

        assert await call_hook(lambda value: value + 1, 1) == 2
        assert await call_hook(async_hook, 2) == 4


class TestChunked:
    def test_chunks(self) -> None:
        records = [Record("Order") for _ in range(5)]

        chunks = chunked(records, 2)

        assert [len(chunk) for chunk in chunks] == [2, 2, 1]
        assert [r for chunk in chunks for r in chunk] == records

    def test_empty(self) -> None:
        assert chunked([], 3) == []
