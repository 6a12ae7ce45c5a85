"""Archive repository port.

This module defines the abstract interface for archive record storage.
Any durable keyed store suffices; the in-memory stub and the PostgreSQL
adapter both implement it.

Persistence Rules:
1. CAS EVERY WRITE - Every write is conditioned on the version last read
   and fails with ConcurrentModificationError on mismatch
2. WRITE-ONCE FIELDS ARE STRUCTURAL - checksum_sha256 and classified_at
   are only written by record_classification() and set_checksum_once();
   update() refuses to change them (ImmutableFieldError)
   voided_at is stamped by update() on entry into EXEMPTION_VOID and never
   cleared afterwards
3. NO PHYSICAL DELETES - except delete_queued(), which abandons a
   never-executed intent
4. FAIL LOUD - Repository raises on errors, the service logs
"""

from __future__ import annotations

from collections.abc import Collection
from datetime import datetime
from typing import Protocol
from uuid import UUID

from asset_archive.domain.models.archive_record import (
    ArchiveFlags,
    ArchiveRecord,
    ArchiveStatus,
)


class ArchiveRepositoryProtocol(Protocol):
    """Protocol for archive record persistence.

    Secondary lookups: by public_id, by locator identity key (history of a
    file), and by status (listing and reconciliation sweeps).

    Methods:
        create: Store a new record
        get: Retrieve a record by id
        get_by_public_id: Retrieve a record by its public identifier
        list_by_status: List records in any of the given statuses
        list_for_locator: Full history of records for one file
        find_active_for_locator: The active record for a file, if any
        has_void_history: Whether a file ever reached EXEMPTION_VOID
        update: CAS write of mutable fields
        record_classification: CAS queued -> archived transition
        set_checksum_once: Deferred checksum write
        delete_queued: Hard-delete a queued record
    """

    async def create(self, record: ArchiveRecord) -> None:
        """Store a new archive record.

        Raises:
            ValueError: If a record with the same id or public_id exists.
        """
        ...

    async def get(self, record_id: UUID) -> ArchiveRecord | None:
        """Retrieve an archive record by id, or None if not found."""
        ...

    async def get_by_public_id(self, public_id: UUID) -> ArchiveRecord | None:
        """Retrieve an archive record by public identifier, or None."""
        ...

    async def list_by_status(
        self,
        statuses: Collection[ArchiveStatus],
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[ArchiveRecord], int]:
        """List records whose status is in statuses.

        Ordered by created_at descending, then id.

        Args:
            statuses: Statuses to include.
            limit: Maximum number of records to return.
            offset: Number of records to skip.

        Returns:
            Tuple of (page of records, total count matching).
        """
        ...

    async def list_for_locator(self, locator_key: str) -> list[ArchiveRecord]:
        """Return every record ever created for a file, oldest first."""
        ...

    async def find_active_for_locator(self, locator_key: str) -> ArchiveRecord | None:
        """Return the record in an active status for a file, if any."""
        ...

    async def has_void_history(self, locator_key: str) -> bool:
        """Return True if any record for the file ever entered EXEMPTION_VOID.

        The answer does not change when such a record is later unarchived;
        the record keeps its voided_at marker.
        """
        ...

    async def update(self, record: ArchiveRecord, expected_version: int) -> ArchiveRecord:
        """Persist mutable fields of a record with compare-and-swap.

        Writes status, flags, deletion metadata, notes and descriptive
        fields. The stored version must equal expected_version; the
        returned record carries version expected_version + 1.

        Raises:
            ConcurrentModificationError: If the stored version differs or the
                record no longer exists.
            ImmutableFieldError: If checksum_sha256 or classified_at differ
                from the stored values.
        """
        ...

    async def record_classification(
        self,
        record_id: UUID,
        expected_version: int,
        new_status: ArchiveStatus,
        classified_at: datetime,
        checksum_sha256: str | None,
        flags: ArchiveFlags,
    ) -> ArchiveRecord:
        """Atomically execute a queued record (the queued -> archived edge).

        This is the only write path that sets classified_at, and the
        synchronous write path for checksum_sha256.

        Raises:
            ConcurrentModificationError: On version mismatch.
            InvalidStatusTransitionError: If the stored status is not QUEUED
                or new_status is not an archived-active status.
        """
        ...

    async def set_checksum_once(self, record_id: UUID, checksum_sha256: str) -> ArchiveRecord:
        """Write the deferred checksum of a large file.

        Allowed only while the stored checksum is null. Writing the value
        already stored is a no-op (idempotent reprocessing).

        Raises:
            RecordNotFoundError: If the record does not exist.
            ImmutableFieldError: If a different checksum is already stored.
        """
        ...

    async def delete_queued(self, record_id: UUID, expected_version: int) -> None:
        """Hard-delete a queued record (queue abandonment).

        Raises:
            ConcurrentModificationError: On version mismatch.
            NotQueuedError: If the stored status is not QUEUED.
        """
        ...
