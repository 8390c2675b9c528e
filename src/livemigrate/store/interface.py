"""
Host store interface.

The host store is the data store of record that is being migrated away
from. livemigrate only needs a narrow capability from it:

- register callbacks around create/update/delete for a record class
- register named jobs and functions that an operator can invoke
- query records and save one or many of them

This module provides:
- TriggerKind: The lifecycle points a host can call back into
- JobStatus: Status-reporting handle passed to long-running jobs
- HostStore: Abstract base class for host store implementations
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from livemigrate.records import Record, TriggerRequest
from livemigrate.store.query import Query


class TriggerKind(Enum):
    """Lifecycle points at which the host invokes registered triggers."""

    BEFORE_SAVE = "before_save"
    AFTER_SAVE = "after_save"
    BEFORE_DELETE = "before_delete"
    AFTER_DELETE = "after_delete"


# A before_save trigger returns the record to persist; raising vetoes the write.
BeforeSaveTrigger = Callable[[TriggerRequest], Awaitable[Record]]
# Other triggers return nothing; raising from before_delete vetoes the delete.
Trigger = Callable[[TriggerRequest], Awaitable[Any]]


@runtime_checkable
class JobStatus(Protocol):
    """
    Status-reporting handle for host jobs.

    ``message`` reports incremental progress; ``success`` and ``error``
    report the final outcome of the job invocation.
    """

    def message(self, text: str) -> None: ...

    def success(self, text: str) -> None: ...

    def error(self, text: str) -> None: ...


Job = Callable[[JobStatus], Awaitable[Any]]
HostFunction = Callable[[dict[str, Any]], Awaitable[Any]]


class HostStore(ABC):
    """
    Abstract base class for host stores.

    Implementations own persistence and the trigger-invocation runtime:
    ``save`` must run the class's before_save trigger (which may replace
    the record or veto the write), persist, and then run after_save with
    ``record.existed`` reflecting whether the record existed before.
    """

    @abstractmethod
    def register_trigger(
        self,
        kind: TriggerKind,
        class_name: str,
        callback: BeforeSaveTrigger | Trigger,
    ) -> None:
        """Register the trigger callback for ``kind`` on ``class_name``."""
        pass

    @abstractmethod
    def register_job(self, name: str, callback: Job) -> None:
        """Register a named, long-running job."""
        pass

    @abstractmethod
    def register_function(self, name: str, callback: HostFunction) -> None:
        """Register a named, directly invokable function."""
        pass

    @abstractmethod
    async def run_job(self, name: str, status: JobStatus) -> Any:
        """Invoke a registered job."""
        pass

    @abstractmethod
    async def call_function(self, name: str, params: dict[str, Any]) -> Any:
        """Invoke a registered function."""
        pass

    @abstractmethod
    async def find(self, class_name: str, query: Query | None = None) -> list[Record]:
        """
        Find records of a class matching a query.

        Returns:
            Fresh, clean Record instances (no dirty keys).
        """
        pass

    @abstractmethod
    async def get(self, class_name: str, record_id: str) -> Record:
        """
        Load a single record.

        Raises:
            RecordNotFoundError: If no such record exists
        """
        pass

    @abstractmethod
    async def save(self, record: Record, *, request: TriggerRequest | None = None) -> Record:
        """
        Save a record, running before/after save triggers.

        Args:
            record: The record to save
            request: Optional request context (installation, user); the
                record inside it is ignored in favor of ``record``

        Returns:
            The record that was persisted (the before_save trigger may
            have replaced it).

        Raises:
            TriggerRejectedError: If before_save vetoed the write
        """
        pass

    @abstractmethod
    async def save_all(self, records: list[Record]) -> list[Record]:
        """Save a list of records in one call."""
        pass

    @abstractmethod
    async def delete(self, record: Record, *, request: TriggerRequest | None = None) -> None:
        """
        Delete a record, running before/after delete triggers.

        Raises:
            TriggerRejectedError: If before_delete vetoed the delete
        """
        pass


__all__ = [
    "TriggerKind",
    "BeforeSaveTrigger",
    "Trigger",
    "JobStatus",
    "Job",
    "HostFunction",
    "HostStore",
]
