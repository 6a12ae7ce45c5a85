"""Checksum engine: SHA-256 fingerprints of archived files.

The checksum taken at execution time is the integrity baseline for the
life of an archive record. Reconciliation recomputes it and compares.

Rules:
1. STREAM - Files are hashed in 1 MiB chunks, never loaded whole
2. BOUNDED - Hashing runs in a worker thread under checksum_timeout_seconds
3. FAIL CLOSED - verify() returns False whenever integrity cannot be proven
   (except when no baseline exists yet, i.e. the deferred hash is pending)
"""

from __future__ import annotations

import hashlib

from structlog import get_logger

from asset_archive.application.ports.archive_metrics import ArchiveMetricsProtocol
from asset_archive.application.ports.file_store import FileStoreProtocol
from asset_archive.application.ports.time_authority import TimeAuthorityProtocol
from asset_archive.application.services.file_io import FileIOTimeoutError, run_file_io
from asset_archive.domain.errors.integrity import (
    FileUnreadableError,
    IntegrityUnresolvableError,
)
from asset_archive.domain.models.archive_record import ArchiveRecord, SourceLocator

logger = get_logger(__name__)

CHUNK_SIZE = 1024 * 1024

# Files above 50 MiB are hashed by the checksum worker
DEFAULT_SYNC_LIMIT_BYTES = 52_428_800


class ChecksumEngine:
    """Computes and verifies SHA-256 checksums of source files.

    Example:
        >>> engine = ChecksumEngine(file_store, time_authority)
        >>> digest = await engine.compute(record.source)
        >>> intact = await engine.verify(record)
    """

    def __init__(
        self,
        file_store: FileStoreProtocol,
        time_authority: TimeAuthorityProtocol,
        sync_limit_bytes: int = DEFAULT_SYNC_LIMIT_BYTES,
        file_io_timeout_seconds: float = 30.0,
        checksum_timeout_seconds: float = 600.0,
        metrics: ArchiveMetricsProtocol | None = None,
    ) -> None:
        """Initialize the checksum engine.

        Args:
            file_store: Locator resolution and chunked reads.
            time_authority: Monotonic clock for duration metrics.
            sync_limit_bytes: Largest size hashed inside execute().
            file_io_timeout_seconds: Bound on resolve/exists calls.
            checksum_timeout_seconds: Bound on one full hash.
            metrics: Optional metrics sink.
        """
        self._file_store = file_store
        self._time = time_authority
        self._sync_limit_bytes = sync_limit_bytes
        self._file_io_timeout = file_io_timeout_seconds
        self._checksum_timeout = checksum_timeout_seconds
        self._metrics = metrics

    @property
    def sync_limit_bytes(self) -> int:
        return self._sync_limit_bytes

    def needs_async(self, size_bytes: int | None) -> bool:
        """Return True if a file of this size must be hashed by the worker.

        Unknown sizes are hashed synchronously.
        """
        return size_bytes is not None and size_bytes > self._sync_limit_bytes

    async def compute(self, locator: SourceLocator, mode: str = "sync") -> str:
        """Compute the SHA-256 hex digest of the file behind a locator.

        Args:
            locator: Source locator of the file.
            mode: Label for duration metrics ("sync", "async", "verify").

        Returns:
            64-character lowercase hex digest.

        Raises:
            FileUnreadableError: If the locator cannot be resolved, the file
                does not exist, or reading it fails.
            IntegrityUnresolvableError: If resolving or hashing timed out.
        """
        try:
            resolved = await run_file_io(
                "resolve",
                self._file_store.resolve,
                locator,
                timeout_seconds=self._file_io_timeout,
            )
            if resolved is None:
                raise FileUnreadableError(str(locator), "cannot resolve source file path")
            found = await run_file_io(
                "exists",
                self._file_store.exists,
                resolved,
                timeout_seconds=self._file_io_timeout,
            )
            if not found:
                raise FileUnreadableError(str(locator))

            started = self._time.monotonic()
            digest = await run_file_io(
                "hash", self._hash_file, resolved, timeout_seconds=self._checksum_timeout
            )
        except FileIOTimeoutError as e:
            raise IntegrityUnresolvableError(str(locator), str(e)) from e
        except OSError as e:
            raise FileUnreadableError(str(locator), str(e)) from e

        if self._metrics is not None:
            self._metrics.observe_checksum_duration(mode, self._time.monotonic() - started)
        return digest

    def _hash_file(self, resolved_path: str) -> str:
        sha = hashlib.sha256()
        for chunk in self._file_store.iter_chunks(resolved_path, CHUNK_SIZE):
            sha.update(chunk)
        return sha.hexdigest()

    async def verify(self, record: ArchiveRecord) -> bool:
        """Recompute a record's checksum and compare it with the stored one.

        Returns:
            True if the file matches, or no checksum is stored yet.
            False if the file differs or cannot be read or hashed.
        """
        if not record.checksum_sha256:
            return True

        log = logger.bind(record_id=str(record.id), locator=str(record.source))
        try:
            current = await self.compute(record.source, mode="verify")
        except IntegrityUnresolvableError as e:
            log.warning("integrity_unresolvable", reason=e.reason)
            return False

        if current != record.checksum_sha256:
            log.warning(
                "checksum_mismatch",
                expected=record.checksum_sha256,
                actual=current,
            )
            return False
        return True
