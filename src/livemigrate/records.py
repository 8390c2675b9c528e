"""
Records, trigger requests and hook results.

A Record is the host store's unit of data: a key-value document of a
named class with change tracking. Hooks receive records (or requests
wrapping a record) and may hand back a replacement, which the trigger
composer resolves into a tagged ``HookResult``.
"""

from __future__ import annotations

import copy
import inspect
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from livemigrate.exceptions import CallbackMisuseError
from livemigrate.status import MIGRATION_KEY, MigrationStatus, status_of

logger = logging.getLogger(__name__)


class Record:
    """
    A key-value document belonging to a record class.

    Attributes:
        class_name: Name of the class this record belongs to
        id: Durable identifier, None until the record is first persisted

    Change tracking:
        Every ``set``/``unset`` since the record was last persisted is
        reported by ``dirty_keys``. ``existed`` tells whether the record
        had been persisted before the current write; host stores set it
        when they persist the record.

    Example:
        >>> record = Record("Order", {"total": 10})
        >>> record.is_new
        True
        >>> record.dirty_keys
        frozenset({'total'})
    """

    def __init__(
        self,
        class_name: str,
        data: Mapping[str, Any] | None = None,
        *,
        id: str | None = None,
    ) -> None:
        self.class_name = class_name
        self.id = id
        self._data: dict[str, Any] = {}
        self._dirty: set[str] = set()
        self._existed = False
        for key, value in (data or {}).items():
            self.set(key, value)

    @classmethod
    def from_stored(cls, class_name: str, id: str, data: Mapping[str, Any]) -> Record:
        """Build a clean record as loaded from the host store."""
        record = cls(class_name, id=id)
        record._data = copy.deepcopy(dict(data))
        record._existed = True
        return record

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if key == "id":
            raise ValueError("'id' is reserved for the record identifier")
        self._data[key] = value
        self._dirty.add(key)

    def unset(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._dirty.add(key)

    def has(self, key: str) -> bool:
        return key in self._data

    def is_dirty(self, key: str | None = None) -> bool:
        """Whether ``key`` (or any field, if None) changed in this write."""
        if key is None:
            return bool(self._dirty)
        return key in self._dirty

    @property
    def dirty_keys(self) -> frozenset[str]:
        return frozenset(self._dirty)

    @property
    def fields(self) -> dict[str, Any]:
        """A deep copy of the record's data."""
        return copy.deepcopy(self._data)

    @property
    def is_new(self) -> bool:
        return self.id is None

    @property
    def existed(self) -> bool:
        return self._existed

    @property
    def migration_status(self) -> MigrationStatus | None:
        return status_of(self._data.get(MIGRATION_KEY))

    def set_migration_status(self, status: MigrationStatus) -> None:
        self.set(MIGRATION_KEY, int(status))

    def field_state(self, key: str) -> tuple[bool, Any, bool]:
        """Capture ``(present, value, dirty)`` of a field for ``restore_field``."""
        return key in self._data, self._data.get(key), key in self._dirty

    def restore_field(self, key: str, state: tuple[bool, Any, bool]) -> None:
        """Put a field and its change flag back as captured by ``field_state``."""
        present, value, dirty = state
        if present:
            self._data[key] = value
        else:
            self._data.pop(key, None)
        if dirty:
            self._dirty.add(key)
        else:
            self._dirty.discard(key)

    def mark_persisted(self, record_id: str, existed: bool) -> None:
        """
        Record that the host store has durably written this record.

        Called by host store implementations only.
        """
        self.id = record_id
        self._existed = existed
        self._dirty.clear()

    def to_dict(self) -> dict[str, Any]:
        """Serialize as a plain dict including the identifier."""
        data = self.fields
        if self.id is not None:
            data["id"] = self.id
        return data

    def __repr__(self) -> str:
        return f"Record({self.class_name!r}, id={self.id!r}, dirty={sorted(self._dirty)})"


def class_name_of(klass: Any) -> str:
    """
    Resolve a record class reference to its name.

    Accepts a string or any object (class or instance) exposing a
    ``class_name`` attribute.
    """
    if isinstance(klass, str):
        return klass
    name = getattr(klass, "class_name", None)
    if isinstance(name, str) and name:
        return name
    raise TypeError(f"Expected a class name or an object with 'class_name', got {klass!r}")


@dataclass
class TriggerRequest:
    """
    Context handed to before/after hooks.

    Attributes:
        record: The record being written or deleted
        installation_id: Client installation that issued the write, if known
        user: Authenticated user of the write, if any
        master: Whether the write was made with master privileges
        context: Free-form host-specific context
    """

    record: Record
    installation_id: str | None = None
    user: Any = None
    master: bool = False
    context: dict[str, Any] = field(default_factory=dict)


class LegacyResponse:
    """
    Stand-in for a callback-style response object.

    Hooks are promise-style: they return or raise. Calling either method
    raises CallbackMisuseError instead of silently hanging the write.
    """

    def success(self, *args: Any, **kwargs: Any) -> None:
        raise CallbackMisuseError("success")

    def error(self, *args: Any, **kwargs: Any) -> None:
        raise CallbackMisuseError("error")


NOT_A_RESPONSE = LegacyResponse()


@dataclass(frozen=True)
class Unchanged:
    """The hook kept the current record."""


@dataclass(frozen=True)
class Replaced:
    """The hook replaced the current record."""

    record: Record


HookResult = Unchanged | Replaced

UNCHANGED = Unchanged()


def resolve_hook_result(value: Any) -> HookResult:
    """
    Turn a hook's return value into a HookResult.

    None keeps the record, a Record replaces it, and explicit HookResult
    values pass through. Anything else is ignored like None.
    """
    if isinstance(value, (Unchanged, Replaced)):
        return value
    if isinstance(value, Record):
        return Replaced(value)
    if value is not None:
        logger.debug("Ignoring non-record hook return value of type %s", type(value).__name__)
    return UNCHANGED


def apply_hook_result(result: HookResult, current: Record) -> Record:
    """Return the record a HookResult designates."""
    if isinstance(result, Replaced):
        return result.record
    return current


async def call_hook(hook: Callable[..., Any], *args: Any) -> Any:
    """Call a sync or async hook and return its (awaited) result."""
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def chunked(records: Iterable[Record], size: int) -> list[list[Record]]:
    """Split records into consecutive lists of at most ``size``."""
    items = list(records)
    return [items[start : start + size] for start in range(0, len(items), size)]


__all__ = [
    "Record",
    "class_name_of",
    "TriggerRequest",
    "LegacyResponse",
    "NOT_A_RESPONSE",
    "Unchanged",
    "Replaced",
    "HookResult",
    "UNCHANGED",
    "resolve_hook_result",
    "apply_hook_result",
    "call_hook",
    "chunked",
]
