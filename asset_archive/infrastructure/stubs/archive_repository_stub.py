"""Archive repository stub implementation.

In-memory implementation of ArchiveRepositoryProtocol for development and
testing. Compare-and-swap is simulated under an asyncio.Lock so
concurrent coroutines observe the same conflicts a database would
report.
"""

from __future__ import annotations

import asyncio
from collections.abc import Collection
from dataclasses import replace
from datetime import datetime
from uuid import UUID

from asset_archive.application.ports.archive_repository import ArchiveRepositoryProtocol
from asset_archive.domain.errors.concurrent_modification import (
    ConcurrentModificationError,
)
from asset_archive.domain.errors.immutable_field import ImmutableFieldError
from asset_archive.domain.errors.state import (
    ActiveRecordExistsError,
    InvalidStatusTransitionError,
    NotQueuedError,
    RecordNotFoundError,
)
from asset_archive.domain.models.archive_record import (
    ARCHIVED_ACTIVE_STATUSES,
    ArchiveFlags,
    ArchiveRecord,
    ArchiveStatus,
    ensure_mutable_update,
    stamp_voided_at,
)


class ArchiveRepositoryStub(ArchiveRepositoryProtocol):
    """In-memory archive repository for testing.

    Attributes:
        _records: Dictionary mapping record id to ArchiveRecord
        _lock: Serializes every read-check-write
    """

    def __init__(self) -> None:
        """Initialize empty in-memory storage."""
        self._records: dict[UUID, ArchiveRecord] = {}
        self._lock = asyncio.Lock()

    async def create(self, record: ArchiveRecord) -> None:
        """Store a new archive record.

        Raises:
            ValueError: If a record with the same id or public_id exists.
            ActiveRecordExistsError: If the record is active and its file
                already has an active record.
        """
        async with self._lock:
            if record.id in self._records:
                raise ValueError(f"Archive record {record.id} already exists")
            if any(r.public_id == record.public_id for r in self._records.values()):
                raise ValueError(f"Public id {record.public_id} already in use")
            if record.status.is_active():
                for other in self._records.values():
                    if other.locator_key == record.locator_key and other.status.is_active():
                        raise ActiveRecordExistsError(
                            locator_key=record.locator_key,
                            existing_record_id=other.id,
                            existing_status=other.status,
                        )
            self._records[record.id] = record

    async def get(self, record_id: UUID) -> ArchiveRecord | None:
        return self._records.get(record_id)

    async def get_by_public_id(self, public_id: UUID) -> ArchiveRecord | None:
        for record in self._records.values():
            if record.public_id == public_id:
                return record
        return None

    async def list_by_status(
        self,
        statuses: Collection[ArchiveStatus],
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[ArchiveRecord], int]:
        """List records in any of the statuses, newest first."""
        wanted = set(statuses)
        matching = [r for r in self._records.values() if r.status in wanted]
        matching.sort(key=lambda r: str(r.id))
        matching.sort(key=lambda r: r.created_at, reverse=True)
        return matching[offset : offset + limit], len(matching)

    async def list_for_locator(self, locator_key: str) -> list[ArchiveRecord]:
        history = [r for r in self._records.values() if r.locator_key == locator_key]
        return sorted(history, key=lambda r: r.created_at)

    async def find_active_for_locator(self, locator_key: str) -> ArchiveRecord | None:
        for record in await self.list_for_locator(locator_key):
            if record.status.is_active():
                return record
        return None

    async def has_void_history(self, locator_key: str) -> bool:
        return any(r.was_ever_voided for r in await self.list_for_locator(locator_key))

    def _check_version(
        self, record_id: UUID, expected_version: int, operation: str
    ) -> ArchiveRecord:
        stored = self._records.get(record_id)
        if stored is None or stored.version != expected_version:
            raise ConcurrentModificationError(
                record_id=record_id,
                expected_version=expected_version,
                actual_version=stored.version if stored is not None else None,
                operation=operation,
            )
        return stored

    async def update(self, record: ArchiveRecord, expected_version: int) -> ArchiveRecord:
        """CAS write of mutable fields; returns the stored record."""
        async with self._lock:
            stored = self._check_version(record.id, expected_version, "update")
            record = stamp_voided_at(record)
            ensure_mutable_update(stored, record)
            saved = replace(record, version=expected_version + 1)
            self._records[record.id] = saved
            return saved

    async def record_classification(
        self,
        record_id: UUID,
        expected_version: int,
        new_status: ArchiveStatus,
        classified_at: datetime,
        checksum_sha256: str | None,
        flags: ArchiveFlags,
    ) -> ArchiveRecord:
        """Atomically move a queued record into an archived status."""
        async with self._lock:
            stored = self._check_version(record_id, expected_version, "execute")
            if stored.status is not ArchiveStatus.QUEUED or (
                new_status not in ARCHIVED_ACTIVE_STATUSES
            ):
                raise InvalidStatusTransitionError(
                    from_status=stored.status,
                    to_status=new_status,
                    allowed_transitions=list(stored.status.valid_transitions()),
                )
            saved = replace(
                stored,
                status=new_status,
                classified_at=classified_at,
                checksum_sha256=checksum_sha256,
                flags=flags,
                updated_at=classified_at,
                version=expected_version + 1,
            )
            self._records[record_id] = saved
            return saved

    async def set_checksum_once(self, record_id: UUID, checksum_sha256: str) -> ArchiveRecord:
        """Write a deferred checksum; identical rewrites are no-ops."""
        async with self._lock:
            stored = self._records.get(record_id)
            if stored is None:
                raise RecordNotFoundError(record_id)
            if stored.checksum_sha256 == checksum_sha256:
                return stored
            if stored.checksum_sha256 is not None:
                raise ImmutableFieldError(record_id, "checksum_sha256")
            saved = replace(
                stored, checksum_sha256=checksum_sha256, version=stored.version + 1
            )
            self._records[record_id] = saved
            return saved

    async def delete_queued(self, record_id: UUID, expected_version: int) -> None:
        async with self._lock:
            stored = self._check_version(record_id, expected_version, "remove from queue")
            if stored.status is not ArchiveStatus.QUEUED:
                raise NotQueuedError(record_id, stored.status, "remove from queue")
            del self._records[record_id]

    # Test helpers

    def put(self, record: ArchiveRecord) -> None:
        """Store a record as-is, bypassing every check (test setup only)."""
        self._records[record.id] = record

    def clear(self) -> None:
        """Clear all stored data (for testing)."""
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)
