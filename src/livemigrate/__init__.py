"""
livemigrate - Live migration of application data between stores.

This library provides:
- Composed save/delete triggers that migrate every live write
- A two-pass protocol for records created without an identifier
- A deadline-bounded sweep job that imports pre-existing records
- Ad-hoc migration of named records
- A small REST client for the destination store
- In-memory and SQLite host stores with a trigger runtime
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("livemigrate")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

from livemigrate.adhoc import AdhocMigrationRequest, AdhocMigrationResult, AdhocMigrator
from livemigrate.config import DestinationConfig, MigratorConfig
from livemigrate.destination import (
    AiohttpTransport,
    DestinationRef,
    InMemoryTransport,
    Transport,
)
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
from livemigrate.guards import InstallationVersionGate, ReadOnlyGuard
from livemigrate.importer import BatchImporter
from livemigrate.migrator import Migrator
from livemigrate.records import (
    UNCHANGED,
    HookResult,
    Record,
    Replaced,
    TriggerRequest,
    Unchanged,
)
from livemigrate.registry import ClassHooks, HookKind, TriggerRegistry
from livemigrate.status import (
    IMPORT_BATCH_SIZE,
    MAXIMUM_DURATION_SECONDS,
    MIGRATION_KEY,
    SAVE_BATCH_SIZE,
    SWEPT_STATUSES,
    MigrationStatus,
)
from livemigrate.store import (
    Filter,
    HostStore,
    InMemoryHostStore,
    JobStatus,
    Query,
    SQLiteHostStore,
    TriggerKind,
)
from livemigrate.sweep import LoggingJobStatus, SweepJob, SweepResult
from livemigrate.triggers import TriggerComposer

__all__ = [
    "__version__",
    # Orchestration
    "Migrator",
    "MigratorConfig",
    "TriggerRegistry",
    "HookKind",
    "ClassHooks",
    "TriggerComposer",
    "BatchImporter",
    "SweepJob",
    "SweepResult",
    "LoggingJobStatus",
    "AdhocMigrator",
    "AdhocMigrationRequest",
    "AdhocMigrationResult",
    # Status
    "MIGRATION_KEY",
    "MigrationStatus",
    "SWEPT_STATUSES",
    "IMPORT_BATCH_SIZE",
    "SAVE_BATCH_SIZE",
    "MAXIMUM_DURATION_SECONDS",
    # Records
    "Record",
    "TriggerRequest",
    "HookResult",
    "Unchanged",
    "Replaced",
    "UNCHANGED",
    # Host store
    "HostStore",
    "InMemoryHostStore",
    "SQLiteHostStore",
    "TriggerKind",
    "JobStatus",
    "Query",
    "Filter",
    # Destination
    "DestinationRef",
    "DestinationConfig",
    "Transport",
    "AiohttpTransport",
    "InMemoryTransport",
    # Guards
    "ReadOnlyGuard",
    "InstallationVersionGate",
    # Exceptions
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
