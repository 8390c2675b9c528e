"""
Trigger composer.

Builds the host-store triggers for a record class out of the user hooks
in a TriggerRegistry. The composed triggers run the user's before/after
hooks, call the migrate hooks between them, and drive the migration
status state machine described in ``livemigrate.status``.

Failure semantics:
    - before_save / before_delete: any failure propagates, so the host
      rejects the write and no status transition is committed.
    - after_save / after_delete: the write is already committed. Failures
      surface as AfterTriggerError for the host to log.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from livemigrate.exceptions import AfterTriggerError
from livemigrate.observability import (
    ATTR_CLASS_NAME,
    ATTR_MIGRATION_STATUS,
    ATTR_RECORD_ID,
    ATTR_TRIGGER_KIND,
    Tracer,
    create_tracer,
)
from livemigrate.records import (
    NOT_A_RESPONSE,
    Record,
    TriggerRequest,
    apply_hook_result,
    call_hook,
    class_name_of,
    resolve_hook_result,
)
from livemigrate.registry import TriggerRegistry
from livemigrate.status import MIGRATION_KEY, MigrationStatus
from livemigrate.store.interface import BeforeSaveTrigger, HostStore, Trigger

logger = logging.getLogger(__name__)


class TriggerComposer:
    """
    Composes user hooks into host-store triggers.

    The composer reads the registry when a trigger is built, so hooks
    must be registered before triggers are exported.

    Example:
        >>> composer = TriggerComposer(registry, store)
        >>> store.register_trigger(
        ...     TriggerKind.BEFORE_SAVE, "Order", composer.before_save("Order")
        ... )
    """

    def __init__(
        self,
        registry: TriggerRegistry,
        store: HostStore,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._registry = registry
        self._store = store
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    def before_save(self, klass: Any) -> BeforeSaveTrigger:
        """
        Build the before_save trigger for a class.

        The trigger returns the record the host should persist:

        1. A write stamping JUST_IMPORTED is the sweep's own write and
           passes through untouched.
        2. The user before_save hook runs unless the only change is the
           status field.
        3. Records explicitly set to IS_MIGRATED in this write opt out of
           migration, as do classes without a migrate_object hook.
        4. Records without an identifier are left for the second pass.
        5. Otherwise the status is advanced and migrate_object runs; its
           failure rejects the write.
        """
        hooks = self._registry.handlers(klass)
        class_name = hooks.class_name
        user_before_save = hooks.before_save
        migrate = hooks.migrate_object

        async def before_save(request: TriggerRequest) -> Record:
            record = request.record
            with self._tracer.span(
                "livemigrate.trigger.before_save",
                {
                    ATTR_CLASS_NAME: class_name,
                    ATTR_RECORD_ID: record.id or "",
                    ATTR_TRIGGER_KIND: "before_save",
                },
            ):
                if (
                    record.is_dirty(MIGRATION_KEY)
                    and record.migration_status is MigrationStatus.JUST_IMPORTED
                ):
                    logger.debug("Skipping triggers for imported %s/%s", class_name, record.id)
                    return record

                status_only = record.dirty_keys == frozenset({MIGRATION_KEY})
                if user_before_save is not None and not status_only:
                    result = resolve_hook_result(
                        await call_hook(user_before_save, request, NOT_A_RESPONSE)
                    )
                    record = _adopt(apply_hook_result(result, record), request.record)

                if migrate is None:
                    return record

                if (
                    record.is_dirty(MIGRATION_KEY)
                    and record.migration_status is MigrationStatus.IS_MIGRATED
                ):
                    logger.debug("%s/%s opted out of migration", class_name, record.id)
                    return record

                if record.is_new:
                    logger.debug("Deferring migration of new %s to second pass", class_name)
                    return record

                previous = record.field_state(MIGRATION_KEY)
                if record.migration_status is MigrationStatus.NEEDS_SECOND_PASS:
                    record.set_migration_status(MigrationStatus.FINISHED_SECOND_PASS)
                else:
                    record.set_migration_status(MigrationStatus.IS_MIGRATED)

                try:
                    result = resolve_hook_result(await call_hook(migrate, record))
                except Exception:
                    # A rejected write keeps its prior status.
                    record.restore_field(MIGRATION_KEY, previous)
                    raise
                record = _adopt(apply_hook_result(result, record), request.record)
                logger.debug(
                    "Migrated %s/%s (status %s)",
                    class_name,
                    record.id,
                    record.get(MIGRATION_KEY),
                )
                return record

        return before_save

    def after_save(self, klass: Any) -> Trigger:
        """
        Build the after_save trigger for a class.

        The user after_save hook and the second-pass re-save of new
        records run concurrently. Both always complete; failures are
        raised afterwards as a single AfterTriggerError.
        """
        hooks = self._registry.handlers(klass)
        class_name = hooks.class_name
        user_after_save = hooks.after_save
        migrate = hooks.migrate_object
        store = self._store

        async def maybe_touch(request: TriggerRequest) -> None:
            record = request.record
            if record.existed or migrate is None:
                return
            record.set_migration_status(MigrationStatus.NEEDS_SECOND_PASS)
            with self._tracer.span(
                "livemigrate.trigger.second_pass",
                {
                    ATTR_CLASS_NAME: class_name,
                    ATTR_RECORD_ID: record.id or "",
                    ATTR_MIGRATION_STATUS: int(MigrationStatus.NEEDS_SECOND_PASS),
                },
            ):
                await store.save(record)

        async def after_save(request: TriggerRequest) -> None:
            with self._tracer.span(
                "livemigrate.trigger.after_save",
                {
                    ATTR_CLASS_NAME: class_name,
                    ATTR_RECORD_ID: request.record.id or "",
                    ATTR_TRIGGER_KIND: "after_save",
                },
            ):
                tasks = [maybe_touch(request)]
                if user_after_save is not None:
                    tasks.insert(0, call_hook(user_after_save, request))
                results = await asyncio.gather(*tasks, return_exceptions=True)
                errors = [r for r in results if isinstance(r, BaseException)]
                if errors:
                    raise AfterTriggerError(class_name, "after_save", errors) from errors[0]

        return after_save

    def before_delete(self, klass: Any) -> Trigger:
        """
        Build the before_delete trigger for a class.

        migrate_delete runs only after the user before_delete hook
        succeeded, so a vetoed delete never reaches the destination.
        """
        hooks = self._registry.handlers(klass)
        class_name = hooks.class_name
        user_before_delete = hooks.before_delete
        migrate_delete = hooks.migrate_delete

        async def before_delete(request: TriggerRequest) -> None:
            with self._tracer.span(
                "livemigrate.trigger.before_delete",
                {
                    ATTR_CLASS_NAME: class_name,
                    ATTR_RECORD_ID: request.record.id or "",
                    ATTR_TRIGGER_KIND: "before_delete",
                },
            ):
                if user_before_delete is not None:
                    await call_hook(user_before_delete, request, NOT_A_RESPONSE)
                if migrate_delete is not None:
                    await call_hook(migrate_delete, request.record)
                    logger.debug("Migrated delete of %s/%s", class_name, request.record.id)

        return before_delete

    def after_delete(self, klass: Any) -> Trigger:
        """Build the after_delete trigger for a class."""
        class_name = class_name_of(klass)
        user_after_delete = self._registry.handlers(klass).after_delete

        async def after_delete(request: TriggerRequest) -> None:
            if user_after_delete is None:
                return
            with self._tracer.span(
                "livemigrate.trigger.after_delete",
                {
                    ATTR_CLASS_NAME: class_name,
                    ATTR_RECORD_ID: request.record.id or "",
                    ATTR_TRIGGER_KIND: "after_delete",
                },
            ):
                try:
                    await call_hook(user_after_delete, request)
                except Exception as e:
                    raise AfterTriggerError(class_name, "after_delete", [e]) from e

        return after_delete


def _adopt(record: Record, original: Record) -> Record:
    """A replacement record stands in for the original and keeps its identifier."""
    if record is not original and record.id is None and original.id is not None:
        record.id = original.id
    return record


__all__ = ["TriggerComposer"]
