"""
Host store capability and bundled implementations.

The host store is the store being migrated away from. livemigrate
registers triggers on it, runs its sweep job through it, and reads and
writes records through it.
"""

from livemigrate.store.base import TriggeringHostStore
from livemigrate.store.in_memory import InMemoryHostStore
from livemigrate.store.interface import (
    BeforeSaveTrigger,
    HostFunction,
    HostStore,
    Job,
    JobStatus,
    Trigger,
    TriggerKind,
)
from livemigrate.store.query import ID_FIELD, Filter, Query
from livemigrate.store.sqlite import SQLiteHostStore

__all__ = [
    "HostStore",
    "TriggeringHostStore",
    "InMemoryHostStore",
    "SQLiteHostStore",
    "TriggerKind",
    "BeforeSaveTrigger",
    "Trigger",
    "JobStatus",
    "Job",
    "HostFunction",
    "Filter",
    "Query",
    "ID_FIELD",
]
