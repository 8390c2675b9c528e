"""
Migrator: the registration and export surface of livemigrate.

Usage:
    >>> store = InMemoryHostStore()
    >>> migrator = Migrator(store)
    >>>
    >>> @migrator.migrate_object("Order")
    ... async def migrate_order(record):
    ...     await destination.child(f"orders/{record.id}").put(record.fields)
    >>>
    >>> migrator.before_save("Order", validate_order)
    >>> migrator.export_triggers()

After ``export_triggers`` the host store runs the composed triggers on
every write, the sweep job is registered as ``config.job_name`` and the
ad-hoc migration function as ``config.function_name``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from livemigrate.adhoc import AdhocMigrator
from livemigrate.config import MigratorConfig
from livemigrate.guards import ReadOnlyGuard
from livemigrate.importer import BatchImporter
from livemigrate.observability import Tracer, create_tracer
from livemigrate.registry import ClassHooks, HookKind, TriggerRegistry
from livemigrate.store.interface import BeforeSaveTrigger, HostStore, Trigger, TriggerKind
from livemigrate.sweep import SweepJob
from livemigrate.triggers import TriggerComposer

logger = logging.getLogger(__name__)

THook = TypeVar("THook", bound=Callable[..., Any])


class Migrator:
    """
    Orchestrates a live migration away from a host store.

    Register hooks per class, then call ``export_triggers`` once at
    startup. Each hook kind can be registered once per class; hooks may
    be plain functions or coroutine functions, and every registration
    method also works as a decorator.

    Attributes:
        store: The host store being migrated away from
        registry: Hooks registered so far
        config: Sweep tuning and exported entry point names
    """

    def __init__(
        self,
        store: HostStore,
        config: MigratorConfig | None = None,
        *,
        registry: TriggerRegistry | None = None,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self.store = store
        self.config = config or MigratorConfig()
        self.registry = registry or TriggerRegistry()
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._composer = TriggerComposer(self.registry, store, tracer=self._tracer)

    # =========================================================================
    # Registration
    # =========================================================================

    def _register(
        self,
        kind: HookKind,
        klass: Any,
        hook: THook | None,
    ) -> THook | Callable[[THook], THook]:
        if hook is not None:
            self.registry.register(kind, klass, hook)
            return hook

        def decorator(func: THook) -> THook:
            self.registry.register(kind, klass, func)
            return func

        return decorator

    def before_save(self, klass: Any, hook: Any = None) -> Any:
        """Register ``hook(request, response)`` to run before records of ``klass`` are saved."""
        return self._register(HookKind.BEFORE_SAVE, klass, hook)

    def after_save(self, klass: Any, hook: Any = None) -> Any:
        """Register ``hook(request)`` to run after records of ``klass`` are saved."""
        return self._register(HookKind.AFTER_SAVE, klass, hook)

    def before_delete(self, klass: Any, hook: Any = None) -> Any:
        """Register ``hook(request, response)``; raising vetoes the delete."""
        return self._register(HookKind.BEFORE_DELETE, klass, hook)

    def after_delete(self, klass: Any, hook: Any = None) -> Any:
        return self._register(HookKind.AFTER_DELETE, klass, hook)

    def migrate_object(self, klass: Any, hook: Any = None) -> Any:
        """
        Register ``hook(record)`` propagating one record to the destination.

        Runs on every live write between the before and after hooks, and
        for every record the sweep imports unless ``bulk_import`` is set.
        """
        return self._register(HookKind.MIGRATE_OBJECT, klass, hook)

    def migrate_delete(self, klass: Any, hook: Any = None) -> Any:
        """Register ``hook(record)`` propagating a delete; runs before the host deletes."""
        return self._register(HookKind.MIGRATE_DELETE, klass, hook)

    def bulk_import(self, klass: Any, hook: Any = None) -> Any:
        """Register ``hook(records) -> records`` importing a whole sweep page at once."""
        return self._register(HookKind.BULK_IMPORT, klass, hook)

    def handlers(self, klass: Any) -> ClassHooks:
        return self.registry.handlers(klass)

    # =========================================================================
    # Composed entry points
    # =========================================================================

    def get_before_save(self, klass: Any) -> BeforeSaveTrigger:
        return self._composer.before_save(klass)

    def get_after_save(self, klass: Any) -> Trigger:
        return self._composer.after_save(klass)

    def get_before_delete(self, klass: Any) -> Trigger:
        return self._composer.before_delete(klass)

    def get_after_delete(self, klass: Any) -> Trigger:
        return self._composer.after_delete(klass)

    def get_bulk_import(self, klass: Any) -> BatchImporter | None:
        """The importer for a class, or None if it has nothing to import with."""
        return BatchImporter.for_class(
            self.registry,
            self.store,
            klass,
            save_batch_size=self.config.save_batch_size,
            tracer=self._tracer,
        )

    def get_import_job(self, **kwargs: Any) -> SweepJob:
        """The sweep job; keyword arguments (e.g. ``clock``) go to SweepJob."""
        return SweepJob(self.registry, self.store, self.config, tracer=self._tracer, **kwargs)

    def get_adhoc_migration(self) -> AdhocMigrator:
        return AdhocMigrator(self.registry, self.store, tracer=self._tracer)

    # =========================================================================
    # Export
    # =========================================================================

    def export_triggers(self) -> None:
        """
        Register composed triggers, the sweep job and the ad-hoc function.

        A trigger is only registered where it has work to do:

        - before_save: a before_save or migrate_object hook exists
        - after_save: an after_save or migrate_object hook exists
        - before_delete: a before_delete or migrate_delete hook exists
        - after_delete: an after_delete hook exists
        """
        for hooks in self.registry:
            class_name = hooks.class_name
            if hooks.before_save is not None or hooks.migrate_object is not None:
                self.store.register_trigger(
                    TriggerKind.BEFORE_SAVE, class_name, self.get_before_save(class_name)
                )
            if hooks.after_save is not None or hooks.migrate_object is not None:
                self.store.register_trigger(
                    TriggerKind.AFTER_SAVE, class_name, self.get_after_save(class_name)
                )
            if hooks.before_delete is not None or hooks.migrate_delete is not None:
                self.store.register_trigger(
                    TriggerKind.BEFORE_DELETE, class_name, self.get_before_delete(class_name)
                )
            if hooks.after_delete is not None:
                self.store.register_trigger(
                    TriggerKind.AFTER_DELETE, class_name, self.get_after_delete(class_name)
                )

        self.store.register_job(self.config.job_name, self.get_import_job())
        self.store.register_function(self.config.function_name, self.get_adhoc_migration())
        logger.info(
            "Exported migration triggers for %d classes",
            len(self.registry),
            extra={
                "classes": self.registry.class_names,
                "job_name": self.config.job_name,
                "function_name": self.config.function_name,
            },
        )

    def make_read_only(self, classes: Iterable[Any], message: str | None = None) -> ReadOnlyGuard:
        """
        Reject every write to ``classes`` during a maintenance window.

        Call after ``export_triggers``; the guard replaces the classes'
        before_save triggers.
        """
        guard = ReadOnlyGuard(classes) if message is None else ReadOnlyGuard(classes, message)
        guard.install(self.store)
        return guard


__all__ = ["Migrator"]
