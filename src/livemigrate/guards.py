"""
Guards for a migration window.

- ReadOnlyGuard: rejects every write to a set of classes while an
  initial copy runs that must not race with live writes.
- InstallationVersionGate: skips server-side migration for writes from
  client builds that already write to the destination themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any

from packaging.version import InvalidVersion, Version

from livemigrate.exceptions import MaintenanceModeError, RecordNotFoundError
from livemigrate.records import TriggerRequest, call_hook, class_name_of
from livemigrate.store.interface import HostStore, TriggerKind

logger = logging.getLogger(__name__)

MAINTENANCE_MESSAGE = "Sorry, we are currently performing scheduled maintenance."

INSTALLATION_CLASS = "_Installation"


class ReadOnlyGuard:
    """
    Makes classes read-only by rejecting every save.

    Installing the guard replaces any before_save trigger already
    registered for the classes; install it after exporting migration
    triggers.

    Example:
        >>> guard = ReadOnlyGuard(["_User", "Order"])
        >>> guard.install(store)
    """

    def __init__(self, classes: Iterable[Any], message: str = MAINTENANCE_MESSAGE) -> None:
        self.class_names = [class_name_of(klass) for klass in classes]
        if not self.class_names:
            raise ValueError("ReadOnlyGuard needs at least one class")
        self.message = message

    async def before_save(self, request: TriggerRequest) -> Any:
        raise MaintenanceModeError(self.message)

    def install(self, store: HostStore) -> None:
        for class_name in self.class_names:
            store.register_trigger(TriggerKind.BEFORE_SAVE, class_name, self.before_save)
        logger.info(
            "Read-only mode enabled for %s",
            ", ".join(self.class_names),
            extra={"classes": self.class_names},
        )


class InstallationVersionGate:
    """
    Decides per write whether the writing client still needs migration.

    ``migrated_versions`` maps an app name to the first version of that
    app which migrates its own writes. A write is migrated server-side
    unless its installation reports that app at that version or newer.
    Any missing information means migrate, which is always safe.

    Example:
        >>> gate = InstallationVersionGate(store, {"myapp.ios": "1.2.3"})
        >>> migrator.after_save("Order", gate.after_save(migrate_order))
    """

    def __init__(
        self,
        store: HostStore,
        migrated_versions: Mapping[str, str],
        *,
        installation_class: str = INSTALLATION_CLASS,
    ) -> None:
        self._store = store
        self._installation_class = installation_class
        self._migrated_versions: dict[str, Version] = {}
        for app_name, version in migrated_versions.items():
            try:
                self._migrated_versions[app_name] = Version(version)
            except InvalidVersion as e:
                raise ValueError(f"Invalid migrated version {version!r} for {app_name}") from e

    async def needs_migration(self, installation_id: str | None) -> bool:
        """
        Whether writes from this installation need server-side migration.

        Raises:
            Exception: Host lookup failures other than a missing record
        """
        if not installation_id:
            logger.debug("No installation id; migrating to be safe")
            return True

        try:
            installation = await self._store.get(self._installation_class, installation_id)
        except RecordNotFoundError:
            logger.info(
                "Installation %s has no installation record; migrating to be safe",
                installation_id,
            )
            return True

        app_version = installation.get("appVersion")
        app_name = installation.get("appName")
        if not app_version or not app_name:
            logger.warning(
                "Installation %s has no appVersion/appName, which usually means a very "
                "old SDK. Migrating to be safe",
                installation_id,
            )
            return True

        migrated_version = self._migrated_versions.get(app_name)
        if migrated_version is None:
            logger.warning(
                "No already-migrated version known for app %s. Migrating to be safe",
                app_name,
            )
            return True

        try:
            version = Version(str(app_version))
        except InvalidVersion:
            logger.warning(
                "Installation %s reports unparsable version %r. Migrating to be safe",
                installation_id,
                app_version,
            )
            return True

        return version < migrated_version

    def after_save(
        self, migration: Callable[..., Any]
    ) -> Callable[[TriggerRequest], Awaitable[None]]:
        """Build an after_save hook that runs ``migration(record)`` only when needed."""

        async def after_save(request: TriggerRequest) -> None:
            if await self.needs_migration(request.installation_id):
                await call_hook(migration, request.record)

        return after_save


__all__ = [
    "ReadOnlyGuard",
    "InstallationVersionGate",
    "MAINTENANCE_MESSAGE",
    "INSTALLATION_CLASS",
]
