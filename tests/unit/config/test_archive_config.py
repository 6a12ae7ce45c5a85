"""Unit tests for ArchiveConfig."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from asset_archive.config.archive_config import (
    DEFAULT_ARCHIVE_CONFIG,
    DEFAULT_CHECKSUM_SYNC_LIMIT_BYTES,
    DEFAULT_COMPLIANCE_CUTOFF,
    ArchiveConfig,
    parse_cutoff,
)

_ENV_KEYS = (
    "ARCHIVE_COMPLIANCE_CUTOFF",
    "ARCHIVE_ALLOW_IN_USE",
    "ARCHIVE_CHECKSUM_SYNC_LIMIT_BYTES",
    "ARCHIVE_CHECKSUM_LEASE_SECONDS",
    "ARCHIVE_FILE_IO_TIMEOUT_SECONDS",
    "ARCHIVE_CHECKSUM_TIMEOUT_SECONDS",
    "ARCHIVE_PUBLIC_FILES_ROOT",
    "ARCHIVE_PRIVATE_FILES_ROOT",
    "ARCHIVE_WORKER_POLL_SECONDS",
    "ARCHIVE_WORKER_BATCH_SIZE",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestArchiveConfigDefaults:
    def test_defaults(self) -> None:
        config = ArchiveConfig()

        assert config.compliance_cutoff == datetime(2026, 4, 24, tzinfo=timezone.utc)
        assert config.allow_in_use is False
        assert config.checksum_sync_limit_bytes == 50 * 1024 * 1024
        assert config.checksum_lease_seconds == 300
        assert config.worker_batch_size == 10
        assert DEFAULT_ARCHIVE_CONFIG == config

    def test_is_frozen(self) -> None:
        with pytest.raises(AttributeError):
            DEFAULT_ARCHIVE_CONFIG.allow_in_use = True  # type: ignore[misc]


class TestArchiveConfigValidation:
    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"compliance_cutoff": datetime(2026, 4, 24)}, "timezone-aware"),
            ({"checksum_sync_limit_bytes": -1}, "checksum_sync_limit_bytes"),
            ({"checksum_lease_seconds": 299}, "at least 300"),
            ({"file_io_timeout_seconds": 0}, "file_io_timeout_seconds"),
            ({"checksum_timeout_seconds": -5.0}, "checksum_timeout_seconds"),
            ({"worker_poll_seconds": 0}, "worker_poll_seconds"),
            ({"worker_batch_size": 0}, "worker_batch_size"),
        ],
    )
    def test_rejects_invalid_values(self, overrides: dict, message: str) -> None:
        with pytest.raises(ValueError, match=message):
            ArchiveConfig(**overrides)

    def test_zero_sync_limit_defers_every_file(self) -> None:
        assert ArchiveConfig(checksum_sync_limit_bytes=0).checksum_sync_limit_bytes == 0


class TestParseCutoff:
    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_uses_default(self, value: str | None) -> None:
        assert parse_cutoff(value) == DEFAULT_COMPLIANCE_CUTOFF

    def test_zulu_suffix(self) -> None:
        assert parse_cutoff("2027-01-05T00:00:00Z") == datetime(
            2027, 1, 5, tzinfo=timezone.utc
        )

    def test_naive_is_utc(self) -> None:
        assert parse_cutoff("2026-09-01T12:30:00").tzinfo == timezone.utc

    def test_offset_is_kept(self) -> None:
        parsed = parse_cutoff("2026-04-24T00:00:00+02:00")

        assert parsed.utcoffset() == timedelta(hours=2)

    def test_garbage_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_cutoff("next tuesday")


class TestFromEnvironment:
    def test_defaults_when_unset(self, clean_env: pytest.MonkeyPatch) -> None:
        assert ArchiveConfig.from_environment() == ArchiveConfig()

    def test_reads_overrides(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        clean_env.setenv("ARCHIVE_COMPLIANCE_CUTOFF", "2027-01-05T00:00:00Z")
        clean_env.setenv("ARCHIVE_ALLOW_IN_USE", "yes")
        clean_env.setenv("ARCHIVE_CHECKSUM_SYNC_LIMIT_BYTES", "1024")
        clean_env.setenv("ARCHIVE_CHECKSUM_LEASE_SECONDS", "900")
        clean_env.setenv("ARCHIVE_FILE_IO_TIMEOUT_SECONDS", "2.5")
        clean_env.setenv("ARCHIVE_PRIVATE_FILES_ROOT", str(tmp_path))
        clean_env.setenv("ARCHIVE_WORKER_BATCH_SIZE", "25")

        config = ArchiveConfig.from_environment()

        assert config.compliance_cutoff == datetime(2027, 1, 5, tzinfo=timezone.utc)
        assert config.allow_in_use is True
        assert config.checksum_sync_limit_bytes == 1024
        assert config.checksum_lease_seconds == 900
        assert config.file_io_timeout_seconds == 2.5
        assert config.private_files_root == tmp_path
        assert config.worker_batch_size == 25

    def test_unparseable_numbers_fall_back(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("ARCHIVE_CHECKSUM_SYNC_LIMIT_BYTES", "fifty")
        clean_env.setenv("ARCHIVE_WORKER_POLL_SECONDS", "soon")

        config = ArchiveConfig.from_environment()

        assert config.checksum_sync_limit_bytes == DEFAULT_CHECKSUM_SYNC_LIMIT_BYTES
        assert config.worker_poll_seconds == 10.0

    def test_short_lease_is_rejected(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("ARCHIVE_CHECKSUM_LEASE_SECONDS", "60")

        with pytest.raises(ValueError, match="checksum_lease_seconds"):
            ArchiveConfig.from_environment()

    @pytest.mark.parametrize("value", ["0", "false", "no", "off"])
    def test_false_values(self, clean_env: pytest.MonkeyPatch, value: str) -> None:
        clean_env.setenv("ARCHIVE_ALLOW_IN_USE", value)

        assert ArchiveConfig.from_environment().allow_in_use is False
