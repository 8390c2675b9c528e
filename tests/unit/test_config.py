"""Unit tests for status constants and configuration classes."""

import pytest

from livemigrate.config import DestinationConfig, MigratorConfig
from livemigrate.status import (
    IMPORT_BATCH_SIZE,
    MAXIMUM_DURATION_SECONDS,
    MIGRATION_KEY,
    SAVE_BATCH_SIZE,
    SWEPT_STATUSES,
    MigrationStatus,
    status_of,
)


class TestStatus:
    """Tests for migration status codes."""

    def test_codes(self) -> None:
        assert MIGRATION_KEY == "migrationStatus"
        assert MigrationStatus.IS_MIGRATED == 1
        assert MigrationStatus.FINISHED_SECOND_PASS == 2
        assert MigrationStatus.NEEDS_SECOND_PASS == 3
        assert MigrationStatus.JUST_IMPORTED == 4

    def test_swept_statuses_cover_every_code(self) -> None:
        assert set(SWEPT_STATUSES) == set(MigrationStatus)

    def test_constants(self) -> None:
        assert IMPORT_BATCH_SIZE == 1000
        assert SAVE_BATCH_SIZE == 50
        assert MAXIMUM_DURATION_SECONDS == 870.0

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, None),
            (1, MigrationStatus.IS_MIGRATED),
            (4, MigrationStatus.JUST_IMPORTED),
            (7, None),
            ("done", None),
        ],
    )
    def test_status_of(self, value: object, expected: MigrationStatus | None) -> None:
        assert status_of(value) is expected


class TestMigratorConfig:
    """Tests for MigratorConfig."""

    def test_defaults(self) -> None:
        config = MigratorConfig()

        assert config.import_batch_size == 1000
        assert config.save_batch_size == 50
        assert config.max_duration_seconds == 870.0
        assert config.job_name == "import"
        assert config.function_name == "migrate"

    def test_is_frozen(self) -> None:
        config = MigratorConfig()

        with pytest.raises(AttributeError):
            config.import_batch_size = 5  # type: ignore[misc]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"import_batch_size": 0},
            {"save_batch_size": 0},
            {"max_duration_seconds": 0},
            {"job_name": ""},
            {"function_name": ""},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            MigratorConfig(**kwargs)


class TestDestinationConfig:
    """Tests for DestinationConfig."""

    def test_valid(self) -> None:
        config = DestinationConfig("https://myapp.firebaseio.com", secret="s3cret")

        assert config.url == "https://myapp.firebaseio.com"
        assert config.secret == "s3cret"

    def test_repr_masks_secret(self) -> None:
        config = DestinationConfig("https://myapp.firebaseio.com", secret="s3cret")

        assert "s3cret" not in repr(config)
        assert "***" in repr(config)

    @pytest.mark.parametrize("url", ["", "ftp://example.com", "myapp.firebaseio.com"])
    def test_invalid_url(self, url: str) -> None:
        with pytest.raises(ValueError):
            DestinationConfig(url)
