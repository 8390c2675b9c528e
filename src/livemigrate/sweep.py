"""
Sweep job.

Catches up on records that existed before the live triggers were
installed. Each invocation walks the registered classes in order and
imports pages of not-yet-migrated records until a class is exhausted or
the invocation's time budget runs out. Migrated records are stamped, so
the next invocation resumes where this one stopped without any stored
cursor.

Usage:
    >>> job = SweepJob(registry, store, MigratorConfig())
    >>> result = await job.run(LoggingJobStatus())
    >>> result.message
    'Completed initial import!'
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from livemigrate.config import MigratorConfig
from livemigrate.exceptions import SweepError
from livemigrate.importer import BatchImporter
from livemigrate.observability import (
    ATTR_CLASS_NAME,
    ATTR_PAGE_SIZE,
    ATTR_RECORDS_MIGRATED,
    Tracer,
    create_tracer,
)
from livemigrate.registry import TriggerRegistry
from livemigrate.status import MIGRATION_KEY, SWEPT_STATUSES
from livemigrate.store.interface import HostStore, JobStatus
from livemigrate.store.query import ID_FIELD, Filter, Query

logger = logging.getLogger(__name__)

COMPLETED_MESSAGE = "Completed initial import!"
PASS_MESSAGE = "Done with an import pass"


@dataclass
class SweepResult:
    """
    Outcome of one sweep invocation.

    Attributes:
        success: False if a page failed and the pass was aborted
        records_migrated: Records imported across all classes
        per_class: Records imported per class, in sweep order
        deadline_reached: Whether the time budget stopped the pass early
        duration_seconds: Wall-clock time of the invocation
        message: Final status message reported to the job status
        error_message: Description of the failure, if any
    """

    success: bool
    records_migrated: int
    per_class: dict[str, int] = field(default_factory=dict)
    deadline_reached: bool = False
    duration_seconds: float = 0.0
    message: str = ""
    error_message: str | None = None

    @property
    def is_complete(self) -> bool:
        """True once a pass found nothing left to import."""
        return self.success and not self.deadline_reached and self.records_migrated == 0


class LoggingJobStatus:
    """
    JobStatus that writes to the module logger and keeps what it was told.

    Useful where the host has no job console of its own, and in tests.
    """

    def __init__(self) -> None:
        self.messages: list[str] = []
        self.final: str | None = None
        self.succeeded: bool | None = None

    def message(self, text: str) -> None:
        self.messages.append(text)
        logger.info(text)

    def success(self, text: str) -> None:
        self.final = text
        self.succeeded = True
        logger.info(text)

    def error(self, text: str) -> None:
        self.final = text
        self.succeeded = False
        logger.error(text)


class SweepJob:
    """
    Deadline-bounded background import over every registered class.

    Classes are imported one after another in registration order. Within
    a class, pages of ``import_batch_size`` records whose status is not
    in SWEPT_STATUSES are queried in identifier order and handed to the
    class's BatchImporter. A full page means more records may remain.

    The deadline is checked before each class and between pages; a page
    in flight is always finished. Classes not started before the deadline
    are left out of the result.

    Example:
        >>> job = SweepJob(registry, store, config, clock=fake_clock)
        >>> result = await job.run(status)
    """

    def __init__(
        self,
        registry: TriggerRegistry,
        store: HostStore,
        config: MigratorConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._registry = registry
        self._store = store
        self._config = config or MigratorConfig()
        self._clock = clock
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    async def __call__(self, status: JobStatus) -> SweepResult:
        return await self.run(status)

    async def run(self, status: JobStatus) -> SweepResult:
        """
        Run one import pass.

        Page failures are reported through ``status.error`` and returned
        as an unsuccessful SweepResult. Pages imported before the failure
        stay imported.
        """
        started = self._clock()
        deadline = started + self._config.max_duration_seconds
        per_class: dict[str, int] = {}
        deadline_reached = False

        logger.info("Starting import pass")
        importers: list[BatchImporter] = []
        for class_name in self._registry.class_names:
            importer = BatchImporter.for_class(
                self._registry,
                self._store,
                class_name,
                save_batch_size=self._config.save_batch_size,
                tracer=self._tracer,
            )
            if importer is None:
                logger.info(
                    "%s has no migrate_object or bulk_import hook; nothing to import", class_name
                )
                continue
            logger.info("Will import class %s", class_name)
            importers.append(importer)

        for importer in importers:
            class_name = importer.class_name
            if self._clock() > deadline:
                logger.info(
                    "Not starting import of %s to finish before the job time limit", class_name
                )
                deadline_reached = True
                break
            migrated = 0
            try:
                with self._tracer.span(
                    "livemigrate.sweep.class",
                    {ATTR_CLASS_NAME: class_name, ATTR_PAGE_SIZE: self._config.import_batch_size},
                ) as span:
                    logger.info("Starting import of class %s", class_name)
                    while True:
                        count = await self._import_page(importer)
                        migrated += count
                        if count < self._config.import_batch_size:
                            logger.info("Done migrating %s class", class_name)
                            break
                        if self._clock() > deadline:
                            logger.info(
                                "Stopping import of %s to finish before the job time limit",
                                class_name,
                            )
                            deadline_reached = True
                            break
                    if span:
                        span.set_attribute(ATTR_RECORDS_MIGRATED, migrated)
            except Exception as e:
                error = SweepError(class_name, migrated, str(e))
                per_class[class_name] = migrated
                logger.exception(
                    "Import of class %s failed",
                    class_name,
                    extra={"class_name": class_name, "migrated": migrated},
                )
                status.error(str(error))
                return SweepResult(
                    success=False,
                    records_migrated=sum(per_class.values()),
                    per_class=per_class,
                    deadline_reached=deadline_reached,
                    duration_seconds=self._clock() - started,
                    message=str(error),
                    error_message=str(error),
                )

            per_class[class_name] = migrated
            status.message(f"Imported {migrated} {class_name} records")
            if deadline_reached:
                break

        total = sum(per_class.values())
        message = PASS_MESSAGE if deadline_reached or total > 0 else COMPLETED_MESSAGE
        logger.info(message, extra={"records_migrated": total})
        status.success(message)
        return SweepResult(
            success=True,
            records_migrated=total,
            per_class=per_class,
            deadline_reached=deadline_reached,
            duration_seconds=self._clock() - started,
            message=message,
        )

    def page_query(self) -> Query:
        """The query selecting the next page of not-yet-migrated records."""
        return Query(
            filters=[Filter.not_in(MIGRATION_KEY, [int(s) for s in SWEPT_STATUSES])],
            order_by=ID_FIELD,
            limit=self._config.import_batch_size,
        )

    async def _import_page(self, importer: BatchImporter) -> int:
        records = await self._store.find(importer.class_name, self.page_query())
        if not records:
            return 0
        return await importer(records)


__all__ = [
    "SweepJob",
    "SweepResult",
    "LoggingJobStatus",
    "COMPLETED_MESSAGE",
    "PASS_MESSAGE",
]
