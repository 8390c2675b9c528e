"""
Batch importer.

Migrates one page of records that predate the live triggers, stamps
them JUST_IMPORTED and writes them back to the host store. The stamp
makes the host's before_save trigger pass the write through, and keeps
the records out of the sweep's next page.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from livemigrate.observability import (
    ATTR_BATCH_SIZE,
    ATTR_CLASS_NAME,
    ATTR_RECORDS_MIGRATED,
    Tracer,
    create_tracer,
)
from livemigrate.records import Record, apply_hook_result, call_hook, chunked, resolve_hook_result
from livemigrate.registry import TriggerRegistry
from livemigrate.status import SAVE_BATCH_SIZE, MigrationStatus
from livemigrate.store.interface import HostStore

logger = logging.getLogger(__name__)


class BatchImporter:
    """
    Imports pages of records for one class.

    Uses the class's bulk_import hook when one is registered, otherwise
    runs migrate_object on every record of the page concurrently. Results
    are saved back in sequential save-all requests of ``save_batch_size``
    records, so a page never exceeds the host's batch limit or its
    request throughput.

    Use ``for_class`` to build one; it returns None for classes that
    have nothing to import with.

    Example:
        >>> importer = BatchImporter.for_class(registry, store, "Order")
        >>> if importer is not None:
        ...     migrated = await importer(records)
    """

    def __init__(
        self,
        class_name: str,
        store: HostStore,
        *,
        migrate_object: Callable[..., Any] | None = None,
        bulk_import: Callable[..., Any] | None = None,
        save_batch_size: int = SAVE_BATCH_SIZE,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        if migrate_object is None and bulk_import is None:
            raise ValueError(f"{class_name} has neither a migrate_object nor a bulk_import hook")
        if save_batch_size < 1:
            raise ValueError(f"save_batch_size must be positive, got {save_batch_size}")
        self.class_name = class_name
        self._store = store
        self._migrate_object = migrate_object
        self._bulk_import = bulk_import
        self._save_batch_size = save_batch_size
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    @classmethod
    def for_class(
        cls,
        registry: TriggerRegistry,
        store: HostStore,
        klass: Any,
        *,
        save_batch_size: int = SAVE_BATCH_SIZE,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> BatchImporter | None:
        """Build the importer for a class, or None if it has no import hooks."""
        hooks = registry.handlers(klass)
        if not hooks.can_import:
            return None
        return cls(
            hooks.class_name,
            store,
            migrate_object=hooks.migrate_object,
            bulk_import=hooks.bulk_import,
            save_batch_size=save_batch_size,
            tracer=tracer,
            enable_tracing=enable_tracing,
        )

    async def __call__(self, records: list[Record]) -> int:
        """
        Import a page of records.

        Returns:
            Number of input records processed

        Raises:
            Exception: Any hook or save failure. Sub-batches saved before
                the failure stay saved.
        """
        with self._tracer.span(
            "livemigrate.importer.import_page",
            {ATTR_CLASS_NAME: self.class_name, ATTR_BATCH_SIZE: len(records)},
        ) as span:
            if self._bulk_import is not None:
                migrated = await _run_bulk_import(self._bulk_import, records)
            else:
                migrated = await _run_migrations(self._migrate_object, records)

            for record in migrated:
                record.set_migration_status(MigrationStatus.JUST_IMPORTED)

            for batch in chunked(migrated, self._save_batch_size):
                await self._store.save_all(batch)

            if span:
                span.set_attribute(ATTR_RECORDS_MIGRATED, len(records))
            logger.debug(
                "Imported %d %s records",
                len(records),
                self.class_name,
                extra={"class_name": self.class_name, "records": len(records)},
            )
            return len(records)


async def _run_bulk_import(bulk_import: Callable[..., Any], records: list[Record]) -> list[Record]:
    # A bulk hook returning None changed the page in place.
    changed = await call_hook(bulk_import, records)
    if changed is None:
        return list(records)
    return list(changed)


async def _run_migrations(
    migrate_object: Callable[..., Any], records: list[Record]
) -> list[Record]:
    async def migrate_one(record: Record) -> Record:
        result = resolve_hook_result(await call_hook(migrate_object, record))
        return apply_hook_result(result, record)

    return list(await asyncio.gather(*(migrate_one(record) for record in records)))


__all__ = ["BatchImporter"]
