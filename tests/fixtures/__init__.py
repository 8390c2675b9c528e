"""
Shared test fixtures for the livemigrate library.

This module provides reusable test doubles:
- HookSpy / AsyncHookSpy: hooks that record their calls
- FakeClock: a controllable monotonic clock for sweep deadlines
- RecordingJobStatus: a JobStatus that keeps every report
- stored_record / request_for: record and trigger request builders

Usage:
    from tests.fixtures import HookSpy, FakeClock, stored_record
"""

from tests.fixtures.hooks import (
    AsyncHookSpy,
    FakeClock,
    HookSpy,
    RecordingJobStatus,
    request_for,
    stored_record,
)

__all__ = [
    "HookSpy",
    "AsyncHookSpy",
    "FakeClock",
    "RecordingJobStatus",
    "stored_record",
    "request_for",
]
