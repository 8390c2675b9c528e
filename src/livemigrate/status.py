"""
Migration status codes and tuning constants.

Each migrated record carries a status in the reserved ``MIGRATION_KEY``
field. The usual live path is::

    before_save  -> user hook, migrate_object   (status: IS_MIGRATED)
    host persists
    after_save   -> user hook

New records have no identifier during their first before_save, so they
take a second pass::

    before_save #1 (no id)  -> user hook only
    host persists
    after_save #1           -> user hook; status := NEEDS_SECOND_PASS, resave
    before_save #2 (has id) -> migrate_object   (status: FINISHED_SECOND_PASS)
    host persists
    after_save #2           -> user hook

So migrate_object may run after the first after_save for new records.
The sweep job stamps the records it imports with JUST_IMPORTED; the write
carrying that stamp skips every before_save step.
"""

from enum import IntEnum

MIGRATION_KEY = "migrationStatus"
"""Field that tracks the per-record migration state machine."""


class MigrationStatus(IntEnum):
    """
    Per-record migration states.

    Values are stored in the host store as plain integers so that hybrid
    clients can opt out of server-side migration by writing ``1``.
    """

    IS_MIGRATED = 1
    """The record's current state has been propagated."""

    FINISHED_SECOND_PASS = 2
    """The second pass of a new record's migration completed."""

    NEEDS_SECOND_PASS = 3
    """Created without an identifier; a second write will migrate it."""

    JUST_IMPORTED = 4
    """Migrated by the sweep job rather than a live trigger."""


SWEPT_STATUSES: tuple[MigrationStatus, ...] = (
    MigrationStatus.IS_MIGRATED,
    MigrationStatus.NEEDS_SECOND_PASS,
    MigrationStatus.FINISHED_SECOND_PASS,
    MigrationStatus.JUST_IMPORTED,
)
"""Records in any of these states are skipped by the sweep job."""

IMPORT_BATCH_SIZE = 1000
"""Records queried per sweep page."""

SAVE_BATCH_SIZE = 50
"""Records sent to the host store in a single save-all request."""

MAXIMUM_DURATION_SECONDS = 14.5 * 60
"""Sweep deadline, kept below the host's ~15 minute job ceiling."""


def status_of(value: object) -> MigrationStatus | None:
    """
    Interpret a raw status field value.

    Returns None for unset or unknown values.
    """
    if value is None:
        return None
    try:
        return MigrationStatus(value)
    except ValueError:
        return None


__all__ = [
    "MIGRATION_KEY",
    "MigrationStatus",
    "SWEPT_STATUSES",
    "IMPORT_BATCH_SIZE",
    "SAVE_BATCH_SIZE",
    "MAXIMUM_DURATION_SECONDS",
    "status_of",
]
