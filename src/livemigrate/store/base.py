"""
Trigger-invocation runtime shared by the bundled host stores.

TriggeringHostStore implements registration, job/function dispatch and
the save/delete trigger pipeline once. Concrete stores only provide the
persistence primitives (``_persist``, ``_remove``, ``_load_class``,
``_load_one``).
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Any

from livemigrate.exceptions import RecordNotFoundError, TriggerRejectedError
from livemigrate.observability import (
    ATTR_BATCH_SIZE,
    ATTR_CLASS_NAME,
    ATTR_JOB_NAME,
    ATTR_QUERY_FILTER_COUNT,
    ATTR_QUERY_LIMIT,
    ATTR_RECORD_ID,
    ATTR_TRIGGER_KIND,
    Tracer,
    create_tracer,
)
from livemigrate.records import Record, TriggerRequest
from livemigrate.store.interface import (
    BeforeSaveTrigger,
    HostFunction,
    HostStore,
    Job,
    JobStatus,
    Trigger,
    TriggerKind,
)
from livemigrate.store.query import Query

logger = logging.getLogger(__name__)


class TriggeringHostStore(HostStore):
    """
    Host store base class with an in-process trigger runtime.

    Save pipeline:
        1. before_save(request) -> record to persist; raising rejects the write
        2. persist (new records receive an identifier)
        3. after_save(request); failures are logged, the write stays committed

    Delete pipeline:
        1. before_delete(request); raising rejects the delete
        2. remove
        3. after_delete(request); failures are logged

    Registering a trigger for a (kind, class) pair that already has one
    replaces it, the way hosted trigger runtimes behave on redeploy.
    """

    def __init__(
        self,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._triggers: dict[tuple[TriggerKind, str], BeforeSaveTrigger | Trigger] = {}
        self._jobs: dict[str, Job] = {}
        self._functions: dict[str, HostFunction] = {}

    # =========================================================================
    # Registration
    # =========================================================================

    def register_trigger(
        self,
        kind: TriggerKind,
        class_name: str,
        callback: BeforeSaveTrigger | Trigger,
    ) -> None:
        key = (kind, class_name)
        if key in self._triggers:
            logger.warning("Replacing %s trigger for class %s", kind.value, class_name)
        self._triggers[key] = callback
        logger.debug("Registered %s trigger for class %s", kind.value, class_name)

    def register_job(self, name: str, callback: Job) -> None:
        self._jobs[name] = callback
        logger.debug("Registered job %s", name)

    def register_function(self, name: str, callback: HostFunction) -> None:
        self._functions[name] = callback
        logger.debug("Registered function %s", name)

    def trigger_for(self, kind: TriggerKind, class_name: str) -> BeforeSaveTrigger | Trigger | None:
        """Get the registered trigger for a (kind, class) pair, if any."""
        return self._triggers.get((kind, class_name))

    @property
    def job_names(self) -> list[str]:
        return list(self._jobs)

    @property
    def function_names(self) -> list[str]:
        return list(self._functions)

    async def run_job(self, name: str, status: JobStatus) -> Any:
        if name not in self._jobs:
            raise KeyError(f"No job registered under {name!r}")
        with self._tracer.span("livemigrate.host.run_job", {ATTR_JOB_NAME: name}):
            return await self._jobs[name](status)

    async def call_function(self, name: str, params: dict[str, Any]) -> Any:
        if name not in self._functions:
            raise KeyError(f"No function registered under {name!r}")
        return await self._functions[name](params)

    # =========================================================================
    # Queries
    # =========================================================================

    async def find(self, class_name: str, query: Query | None = None) -> list[Record]:
        if query is None:
            query = Query()

        with self._tracer.span(
            "livemigrate.host.find",
            {
                ATTR_CLASS_NAME: class_name,
                ATTR_QUERY_FILTER_COUNT: len(query.filters),
                ATTR_QUERY_LIMIT: query.limit if query.limit is not None else -1,
            },
        ):
            return query.apply(await self._load_class(class_name))

    async def get(self, class_name: str, record_id: str) -> Record:
        record = await self._load_one(class_name, record_id)
        if record is None:
            raise RecordNotFoundError(class_name, record_id)
        return record

    # =========================================================================
    # Writes
    # =========================================================================

    async def save(self, record: Record, *, request: TriggerRequest | None = None) -> Record:
        class_name = record.class_name
        existed = not record.is_new

        with self._tracer.span(
            "livemigrate.host.save",
            {ATTR_CLASS_NAME: class_name, ATTR_RECORD_ID: record.id or ""},
        ):
            before = self._triggers.get((TriggerKind.BEFORE_SAVE, class_name))
            if before is not None:
                before_request = self._request_for(record, request)
                try:
                    result = await before(before_request)
                except Exception as e:
                    logger.info(
                        "before_save rejected write of %s/%s: %s",
                        class_name,
                        record.id,
                        e,
                    )
                    raise TriggerRejectedError(class_name, "save", record.id, str(e)) from e
                if isinstance(result, Record) and result is not record:
                    if result.id is None:
                        result.id = record.id
                    record = result

            record_id = await self._persist(record)
            record.mark_persisted(record_id, existed)

            await self._run_after(TriggerKind.AFTER_SAVE, record, request)
            return record

    async def save_all(self, records: list[Record]) -> list[Record]:
        with self._tracer.span(
            "livemigrate.host.save_all",
            {ATTR_BATCH_SIZE: len(records)},
        ):
            saved = []
            for record in records:
                saved.append(await self.save(record))
            return saved

    async def delete(self, record: Record, *, request: TriggerRequest | None = None) -> None:
        class_name = record.class_name
        if record.id is None:
            raise ValueError("Cannot delete a record that was never saved")

        with self._tracer.span(
            "livemigrate.host.delete",
            {ATTR_CLASS_NAME: class_name, ATTR_RECORD_ID: record.id},
        ):
            before = self._triggers.get((TriggerKind.BEFORE_DELETE, class_name))
            if before is not None:
                try:
                    await before(self._request_for(record, request))
                except Exception as e:
                    raise TriggerRejectedError(class_name, "delete", record.id, str(e)) from e

            await self._remove(record)
            await self._run_after(TriggerKind.AFTER_DELETE, record, request)

    async def _run_after(
        self,
        kind: TriggerKind,
        record: Record,
        request: TriggerRequest | None,
    ) -> None:
        after = self._triggers.get((kind, record.class_name))
        if after is None:
            return
        with self._tracer.span(
            "livemigrate.host.after_trigger",
            {ATTR_CLASS_NAME: record.class_name, ATTR_TRIGGER_KIND: kind.value},
        ):
            try:
                await after(self._request_for(record, request))
            except Exception:
                # The write is committed; after-triggers have no failure mode.
                logger.exception(
                    "%s trigger failed for %s/%s",
                    kind.value,
                    record.class_name,
                    record.id,
                )

    @staticmethod
    def _request_for(record: Record, request: TriggerRequest | None) -> TriggerRequest:
        if request is None:
            return TriggerRequest(record=record)
        return TriggerRequest(
            record=record,
            installation_id=request.installation_id,
            user=request.user,
            master=request.master,
            context=request.context,
        )

    # =========================================================================
    # Persistence primitives
    # =========================================================================

    @abstractmethod
    async def _persist(self, record: Record) -> str:
        """Write the record's fields, assigning an identifier if new. Returns the id."""
        pass

    @abstractmethod
    async def _remove(self, record: Record) -> None:
        pass

    @abstractmethod
    async def _load_class(self, class_name: str) -> list[Record]:
        """Load every record of a class as clean Record instances."""
        pass

    @abstractmethod
    async def _load_one(self, class_name: str, record_id: str) -> Record | None:
        pass


__all__ = ["TriggeringHostStore"]
