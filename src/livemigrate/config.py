"""
Configuration classes for livemigrate.

This module provides:
- MigratorConfig: Tuning for the sweep job and exported host entry points
- DestinationConfig: Location and optional secret of the destination store
"""

from __future__ import annotations

from dataclasses import dataclass

from livemigrate.status import (
    IMPORT_BATCH_SIZE,
    MAXIMUM_DURATION_SECONDS,
    SAVE_BATCH_SIZE,
)


@dataclass(frozen=True)
class MigratorConfig:
    """
    Configuration for a Migrator.

    Attributes:
        import_batch_size: Records queried per sweep page. A page that comes
            back full means more records remain for the class.
        save_batch_size: Records per host save-all request when the importer
            writes statuses back.
        max_duration_seconds: Wall-clock budget of one sweep invocation. Must
            stay below the host's own job timeout so the job can report and
            exit cleanly.
        job_name: Name under which the sweep job is registered on the host.
        function_name: Name under which the ad-hoc migration function is
            registered on the host.

    Example:
        >>> config = MigratorConfig(import_batch_size=200, max_duration_seconds=300)
    """

    import_batch_size: int = IMPORT_BATCH_SIZE
    save_batch_size: int = SAVE_BATCH_SIZE
    max_duration_seconds: float = MAXIMUM_DURATION_SECONDS
    job_name: str = "import"
    function_name: str = "migrate"

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.import_batch_size < 1:
            raise ValueError(
                f"import_batch_size must be positive, got {self.import_batch_size}. "
                f"Use a value like {IMPORT_BATCH_SIZE} (default)."
            )

        if self.save_batch_size < 1:
            raise ValueError(
                f"save_batch_size must be positive, got {self.save_batch_size}. "
                "It must not exceed the host store's batch save limit."
            )

        if self.max_duration_seconds <= 0:
            raise ValueError(
                f"max_duration_seconds must be positive, got {self.max_duration_seconds}. "
                "Keep it below the host's job timeout."
            )

        if not self.job_name:
            raise ValueError("job_name must be a non-empty string")

        if not self.function_name:
            raise ValueError("function_name must be a non-empty string")


@dataclass(frozen=True)
class DestinationConfig:
    """
    Location of the destination store.

    Attributes:
        url: Base URL, e.g. "https://myapp.firebaseio.com"
        secret: Optional shared secret sent as the ``auth`` query parameter
    """

    url: str
    secret: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.url:
            raise ValueError("url must be a non-empty string")
        if not self.url.startswith(("http://", "https://")):
            raise ValueError(f"url must be an http(s) URL, got {self.url!r}")

    def __repr__(self) -> str:
        secret = "'***'" if self.secret else "None"
        return f"DestinationConfig(url={self.url!r}, secret={secret})"


__all__ = [
    "MigratorConfig",
    "DestinationConfig",
]
