"""
Hook registry for migrated record classes.

Maps (class name, hook kind) to the user callable registered for it.
The registry is populated once at startup and only read afterwards,
when triggers are composed and the sweep job runs.

Usage:
    registry = TriggerRegistry()
    registry.register(HookKind.MIGRATE_OBJECT, "Order", migrate_order)

    hooks = registry.handlers("Order")
    if hooks.migrate_object is not None:
        ...
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from livemigrate.exceptions import DuplicateHookError
from livemigrate.records import class_name_of

logger = logging.getLogger(__name__)


class HookKind(Enum):
    """Kinds of user hooks a class may register."""

    BEFORE_SAVE = "before_save"
    AFTER_SAVE = "after_save"
    BEFORE_DELETE = "before_delete"
    AFTER_DELETE = "after_delete"
    MIGRATE_OBJECT = "migrate_object"
    MIGRATE_DELETE = "migrate_delete"
    BULK_IMPORT = "bulk_import"


@dataclass(frozen=True)
class ClassHooks:
    """
    Snapshot of every hook registered for one class.

    Unregistered hooks are None.
    """

    class_name: str
    before_save: Callable[..., Any] | None = None
    after_save: Callable[..., Any] | None = None
    before_delete: Callable[..., Any] | None = None
    after_delete: Callable[..., Any] | None = None
    migrate_object: Callable[..., Any] | None = None
    migrate_delete: Callable[..., Any] | None = None
    bulk_import: Callable[..., Any] | None = None

    @property
    def is_migrated(self) -> bool:
        """Whether records of this class are migrated one at a time."""
        return self.migrate_object is not None

    @property
    def can_import(self) -> bool:
        """Whether the sweep job can import records of this class."""
        return self.bulk_import is not None or self.migrate_object is not None


class TriggerRegistry:
    """
    Registry of user hooks keyed by class and hook kind.

    At most one hook is registered per (class, kind). Classes are kept
    in the order they first received a hook, which is the order the
    sweep job imports them in.

    Thread-Safety:
        Registration uses an internal lock.

    Example:
        >>> registry = TriggerRegistry()
        >>> registry.register(HookKind.BEFORE_SAVE, "Order", validate_order)
        >>> registry.get(HookKind.BEFORE_SAVE, "Order") is validate_order
        True
    """

    def __init__(self) -> None:
        self._hooks: dict[str, dict[HookKind, Callable[..., Any]]] = {}
        self._lock = threading.RLock()

    def register(self, kind: HookKind, klass: Any, hook: Callable[..., Any]) -> None:
        """
        Register a hook for a class.

        Args:
            kind: The kind of hook
            klass: Class name, or an object exposing ``class_name``
            hook: Sync or async callable

        Raises:
            DuplicateHookError: If a hook of this kind is already registered
            TypeError: If ``hook`` is not callable or ``klass`` has no name
        """
        if not callable(hook):
            raise TypeError(f"{kind.value} hook must be callable, got {hook!r}")
        class_name = class_name_of(klass)

        with self._lock:
            class_hooks = self._hooks.setdefault(class_name, {})
            if kind in class_hooks:
                raise DuplicateHookError(kind.value, class_name)
            class_hooks[kind] = hook

        logger.debug(
            "Registered %s hook for %s",
            kind.value,
            class_name,
            extra={"class_name": class_name, "hook_kind": kind.value},
        )

    def get(self, kind: HookKind, klass: Any) -> Callable[..., Any] | None:
        """Get the hook of a kind for a class, or None."""
        return self._hooks.get(class_name_of(klass), {}).get(kind)

    def handlers(self, klass: Any) -> ClassHooks:
        """Get a snapshot of all hooks registered for a class."""
        class_name = class_name_of(klass)
        hooks = self._hooks.get(class_name, {})
        return ClassHooks(
            class_name=class_name,
            **{kind.value: hook for kind, hook in hooks.items()},
        )

    def has(self, kind: HookKind, klass: Any) -> bool:
        return self.get(kind, klass) is not None

    @property
    def class_names(self) -> list[str]:
        """Classes with at least one hook, in registration order."""
        return list(self._hooks)

    def importable_class_names(self) -> list[str]:
        """Classes the sweep job can import, in registration order."""
        return [name for name in self._hooks if self.handlers(name).can_import]

    def __contains__(self, klass: Any) -> bool:
        return class_name_of(klass) in self._hooks

    def __iter__(self) -> Iterator[ClassHooks]:
        return (self.handlers(name) for name in list(self._hooks))

    def __len__(self) -> int:
        return len(self._hooks)


__all__ = [
    "HookKind",
    "ClassHooks",
    "TriggerRegistry",
]
