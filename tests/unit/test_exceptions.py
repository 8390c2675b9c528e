"""Unit tests for the livemigrate exception hierarchy."""

import pytest

from livemigrate.exceptions import (
    AfterTriggerError,
    CallbackMisuseError,
    DestinationError,
    DuplicateHookError,
    LiveMigrateError,
    MaintenanceModeError,
    MigrationRequestError,
    RecordNotFoundError,
    SweepError,
    TriggerRejectedError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_class",
        [
            DuplicateHookError,
            CallbackMisuseError,
            TriggerRejectedError,
            AfterTriggerError,
            SweepError,
            DestinationError,
            MigrationRequestError,
            RecordNotFoundError,
            MaintenanceModeError,
        ],
    )
    def test_subclasses_base(self, exc_class: type) -> None:
        assert issubclass(exc_class, LiveMigrateError)

    def test_builtin_bases(self) -> None:
        assert issubclass(DuplicateHookError, ValueError)
        assert issubclass(MigrationRequestError, ValueError)
        assert issubclass(RecordNotFoundError, LookupError)


class TestMessages:
    def test_trigger_rejected_for_new_record(self) -> None:
        error = TriggerRejectedError("Order", "save", None, "invalid")

        assert str(error) == "save of new Order rejected: invalid"
        assert error.record_id is None

    def test_trigger_rejected_for_existing_record(self) -> None:
        error = TriggerRejectedError("Order", "delete", "o1", "locked")

        assert str(error) == "delete of Order/o1 rejected: locked"

    def test_after_trigger_error_joins_causes(self) -> None:
        error = AfterTriggerError("Order", "after_save", [RuntimeError("a"), ValueError("b")])

        assert str(error) == "after_save for Order failed: a; b"
        assert len(error.errors) == 2

    def test_sweep_error(self) -> None:
        error = SweepError("Order", 2000, "timeout")

        assert error.class_name == "Order"
        assert error.migrated_before_failure == 2000
        assert "Order" in str(error)
        assert "2000" in str(error)

    def test_destination_error_with_status(self) -> None:
        error = DestinationError("PUT", "https://x/a.json", "Permission denied", 401)

        assert error.status == 401
        assert str(error) == "PUT https://x/a.json failed (HTTP 401): Permission denied"

    def test_destination_error_without_status(self) -> None:
        error = DestinationError("GET", "https://x/a.json", "connection refused")

        assert error.status is None
        assert "HTTP" not in str(error)

    def test_record_not_found(self) -> None:
        error = RecordNotFoundError("Order", "o1")

        assert str(error) == "Record not found: Order/o1"
