"""
Test doubles for user hooks, job status and time.
"""

from __future__ import annotations

from typing import Any

from livemigrate.records import Record, TriggerRequest


class HookSpy:
    """
    Records every call made to a hook.

    Args:
        returns: Value returned by every call
        raises: Exception raised by every call
    """

    def __init__(self, returns: Any = None, raises: BaseException | None = None) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.returns = returns
        self.raises = raises

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def called(self) -> bool:
        return bool(self.calls)

    def __call__(self, *args: Any) -> Any:
        self.calls.append(args)
        if self.raises is not None:
            raise self.raises
        return self.returns


class AsyncHookSpy(HookSpy):
    """HookSpy for coroutine hooks."""

    async def __call__(self, *args: Any) -> Any:  # type: ignore[override]
        return super().__call__(*args)


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


class RecordingJobStatus:
    """JobStatus that records every call."""

    def __init__(self) -> None:
        self.messages: list[str] = []
        self.successes: list[str] = []
        self.errors: list[str] = []

    def message(self, text: str) -> None:
        self.messages.append(text)

    def success(self, text: str) -> None:
        self.successes.append(text)

    def error(self, text: str) -> None:
        self.errors.append(text)


def stored_record(class_name: str, record_id: str, **fields: Any) -> Record:
    """A clean record as if loaded from the host store."""
    return Record.from_stored(class_name, record_id, fields)


def request_for(record: Record, **kwargs: Any) -> TriggerRequest:
    return TriggerRequest(record=record, **kwargs)
