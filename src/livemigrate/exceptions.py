"""
Exceptions raised by livemigrate.

Exception Hierarchy:
    LiveMigrateError (base)
    +-- DuplicateHookError
    +-- CallbackMisuseError
    +-- TriggerRejectedError
    +-- AfterTriggerError
    +-- SweepError
    +-- DestinationError
    +-- MigrationRequestError
    +-- RecordNotFoundError
    +-- MaintenanceModeError
"""

from __future__ import annotations


class LiveMigrateError(Exception):
    """Base exception for livemigrate."""

    pass


class DuplicateHookError(LiveMigrateError, ValueError):
    """
    Raised when a hook kind is registered twice for the same class.

    This is a programmer error and is raised at registration time,
    before any trigger is exported.
    """

    def __init__(self, hook_kind: str, class_name: str) -> None:
        self.hook_kind = hook_kind
        self.class_name = class_name
        super().__init__(f"Already registered a {hook_kind} hook for {class_name}")


class CallbackMisuseError(LiveMigrateError):
    """
    Raised when a hook calls the legacy response object.

    Hooks signal success by returning and failure by raising; the
    ``response`` argument only exists to fail loudly when used.
    """

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(
            f"response.{method}() was called. The migration tool expects hooks to "
            "return (or raise), not to use response callbacks."
        )


class TriggerRejectedError(LiveMigrateError):
    """
    Raised by the host store when a before-trigger vetoes an operation.

    Attributes:
        class_name: Class of the record being written or deleted
        operation: "save" or "delete"
        record_id: Identifier of the record, None for new records
    """

    def __init__(
        self,
        class_name: str,
        operation: str,
        record_id: str | None,
        message: str,
    ) -> None:
        self.class_name = class_name
        self.operation = operation
        self.record_id = record_id
        target = f"{class_name}/{record_id}" if record_id else f"new {class_name}"
        super().__init__(f"{operation} of {target} rejected: {message}")


class AfterTriggerError(LiveMigrateError):
    """
    Raised when an after-save or after-delete hook fails.

    The underlying write is already committed; callers log this error
    and never roll back.
    """

    def __init__(self, class_name: str, trigger: str, errors: list[BaseException]) -> None:
        self.class_name = class_name
        self.trigger = trigger
        self.errors = errors
        details = "; ".join(str(e) for e in errors)
        super().__init__(f"{trigger} for {class_name} failed: {details}")


class SweepError(LiveMigrateError):
    """Raised when a sweep page fails to import."""

    def __init__(self, class_name: str, migrated_before_failure: int, message: str) -> None:
        self.class_name = class_name
        self.migrated_before_failure = migrated_before_failure
        super().__init__(
            f"Import of class {class_name} failed after "
            f"{migrated_before_failure} records: {message}"
        )


class DestinationError(LiveMigrateError):
    """
    Raised when a destination request fails at the transport level.

    Attributes:
        method: HTTP method of the request
        url: Request URL with any secret redacted
        status: HTTP status code, None if no response was received
    """

    def __init__(
        self,
        method: str,
        url: str,
        message: str,
        status: int | None = None,
    ) -> None:
        self.method = method
        self.url = url
        self.status = status
        status_info = f" (HTTP {status})" if status is not None else ""
        super().__init__(f"{method} {url} failed{status_info}: {message}")


class MigrationRequestError(LiveMigrateError, ValueError):
    """Raised for an invalid ad-hoc migration request."""

    pass


class RecordNotFoundError(LiveMigrateError, LookupError):
    """Raised when a record cannot be found in the host store."""

    def __init__(self, class_name: str, record_id: str) -> None:
        self.class_name = class_name
        self.record_id = record_id
        super().__init__(f"Record not found: {class_name}/{record_id}")


class MaintenanceModeError(LiveMigrateError):
    """Raised by the read-only guard for every write during maintenance."""

    pass


__all__ = [
    "LiveMigrateError",
    "DuplicateHookError",
    "CallbackMisuseError",
    "TriggerRejectedError",
    "AfterTriggerError",
    "SweepError",
    "DestinationError",
    "MigrationRequestError",
    "RecordNotFoundError",
    "MaintenanceModeError",
]
