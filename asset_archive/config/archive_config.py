"""Archive lifecycle configuration.

This module defines configuration for the archive lifecycle core with
environment variable overrides for production tuning.

Environment Variables:
- ARCHIVE_COMPLIANCE_CUTOFF: ISO-8601 cutoff instant (default: 2026-04-24T00:00:00+00:00)
- ARCHIVE_ALLOW_IN_USE: Permit executing archives of referenced files (default: false)
- ARCHIVE_CHECKSUM_SYNC_LIMIT_BYTES: Largest file hashed inside execute() (default: 52428800)
- ARCHIVE_CHECKSUM_LEASE_SECONDS: Checksum job claim lease (default: 300, minimum 300)
- ARCHIVE_FILE_IO_TIMEOUT_SECONDS: Existence check / delete timeout (default: 30.0)
- ARCHIVE_CHECKSUM_TIMEOUT_SECONDS: Hashing timeout (default: 600.0)
- ARCHIVE_PUBLIC_FILES_ROOT: Directory backing public:// (default: ./files/public)
- ARCHIVE_PRIVATE_FILES_ROOT: Directory backing private:// (default: ./files/private)
- ARCHIVE_WORKER_POLL_SECONDS: Checksum worker poll interval (default: 10.0)
- ARCHIVE_WORKER_BATCH_SIZE: Jobs claimed per worker pass (default: 10)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

# Default compliance cutoff: April 24, 2026 00:00:00 UTC
DEFAULT_COMPLIANCE_CUTOFF = datetime(2026, 4, 24, 0, 0, 0, tzinfo=timezone.utc)

# Files larger than 50 MiB are hashed by the checksum worker
DEFAULT_CHECKSUM_SYNC_LIMIT_BYTES = 52_428_800

MIN_CHECKSUM_LEASE_SECONDS = 300

_TRUE_VALUES = ("1", "true", "yes", "on")


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    value = os.environ.get(key)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def parse_cutoff(value: str | None) -> datetime:
    """Parse an ISO-8601 cutoff, falling back to the default when unset.

    Naive values are interpreted as UTC.

    Raises:
        ValueError: If the value is set but not a valid ISO-8601 instant.
    """
    if value is None or not value.strip():
        return DEFAULT_COMPLIANCE_CUTOFF
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class ArchiveConfig:
    """Configuration for the archive lifecycle core.

    All values can be overridden via environment variables.

    Attributes:
        compliance_cutoff: Instant separating legacy from general archives.
        allow_in_use: When True, the usage gate reports but does not block.
        checksum_sync_limit_bytes: Files above this size are hashed asynchronously.
        checksum_lease_seconds: Lease taken by checksum workers on a job.
        file_io_timeout_seconds: Bound on existence checks and deletes.
        checksum_timeout_seconds: Bound on a single hash computation.
        public_files_root: Directory that public:// URIs map to.
        private_files_root: Directory that private:// URIs map to.
        worker_poll_seconds: Sleep between checksum worker passes.
        worker_batch_size: Maximum jobs claimed per worker pass.
    """

    compliance_cutoff: datetime = field(default=DEFAULT_COMPLIANCE_CUTOFF)
    allow_in_use: bool = False
    checksum_sync_limit_bytes: int = DEFAULT_CHECKSUM_SYNC_LIMIT_BYTES
    checksum_lease_seconds: int = MIN_CHECKSUM_LEASE_SECONDS
    file_io_timeout_seconds: float = 30.0
    checksum_timeout_seconds: float = 600.0
    public_files_root: Path = field(default=Path("files/public"))
    private_files_root: Path = field(default=Path("files/private"))
    worker_poll_seconds: float = 10.0
    worker_batch_size: int = 10

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.compliance_cutoff.tzinfo is None:
            raise ValueError("compliance_cutoff must be timezone-aware")
        if self.checksum_sync_limit_bytes < 0:
            raise ValueError(
                "checksum_sync_limit_bytes must be non-negative, "
                f"got {self.checksum_sync_limit_bytes}"
            )
        if self.checksum_lease_seconds < MIN_CHECKSUM_LEASE_SECONDS:
            raise ValueError(
                f"checksum_lease_seconds must be at least {MIN_CHECKSUM_LEASE_SECONDS}, "
                f"got {self.checksum_lease_seconds}"
            )
        if self.file_io_timeout_seconds <= 0:
            raise ValueError(
                f"file_io_timeout_seconds must be positive, got {self.file_io_timeout_seconds}"
            )
        if self.checksum_timeout_seconds <= 0:
            raise ValueError(
                "checksum_timeout_seconds must be positive, "
                f"got {self.checksum_timeout_seconds}"
            )
        if self.worker_poll_seconds <= 0:
            raise ValueError(
                f"worker_poll_seconds must be positive, got {self.worker_poll_seconds}"
            )
        if self.worker_batch_size < 1:
            raise ValueError(
                f"worker_batch_size must be at least 1, got {self.worker_batch_size}"
            )

    @classmethod
    def from_environment(cls) -> ArchiveConfig:
        """Create config from environment variables with defaults.

        Returns:
            ArchiveConfig with values from environment or defaults.

        Raises:
            ValueError: If ARCHIVE_COMPLIANCE_CUTOFF is set but unparseable,
                or a value fails validation.
        """
        return cls(
            compliance_cutoff=parse_cutoff(os.environ.get("ARCHIVE_COMPLIANCE_CUTOFF")),
            allow_in_use=_get_bool_env("ARCHIVE_ALLOW_IN_USE", False),
            checksum_sync_limit_bytes=_get_int_env(
                "ARCHIVE_CHECKSUM_SYNC_LIMIT_BYTES", DEFAULT_CHECKSUM_SYNC_LIMIT_BYTES
            ),
            checksum_lease_seconds=_get_int_env(
                "ARCHIVE_CHECKSUM_LEASE_SECONDS", MIN_CHECKSUM_LEASE_SECONDS
            ),
            file_io_timeout_seconds=_get_float_env("ARCHIVE_FILE_IO_TIMEOUT_SECONDS", 30.0),
            checksum_timeout_seconds=_get_float_env(
                "ARCHIVE_CHECKSUM_TIMEOUT_SECONDS", 600.0
            ),
            public_files_root=Path(
                os.environ.get("ARCHIVE_PUBLIC_FILES_ROOT", "files/public")
            ),
            private_files_root=Path(
                os.environ.get("ARCHIVE_PRIVATE_FILES_ROOT", "files/private")
            ),
            worker_poll_seconds=_get_float_env("ARCHIVE_WORKER_POLL_SECONDS", 10.0),
            worker_batch_size=_get_int_env("ARCHIVE_WORKER_BATCH_SIZE", 10),
        )


# Default production config
DEFAULT_ARCHIVE_CONFIG = ArchiveConfig()
