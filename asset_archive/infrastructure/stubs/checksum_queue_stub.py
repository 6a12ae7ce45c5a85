"""Checksum queue stub implementation.

In-memory lease-based queue implementing ChecksumQueueProtocol. Lease
expiry is evaluated against the injected time authority, so tests can
advance the clock to make a claimed job reclaimable.
"""

from __future__ import annotations

import asyncio
from uuid import UUID, uuid4

from asset_archive.application.ports.checksum_queue import ChecksumQueueProtocol
from asset_archive.application.ports.time_authority import TimeAuthorityProtocol
from asset_archive.domain.models.checksum_job import ChecksumJob


class ChecksumQueueStub(ChecksumQueueProtocol):
    """In-memory checksum queue for testing.

    Attributes:
        _jobs: Jobs keyed by id, in enqueue order
        _deleted: Ids of jobs deleted after processing (for assertions)
    """

    def __init__(self, time_authority: TimeAuthorityProtocol) -> None:
        self._time = time_authority
        self._jobs: dict[UUID, ChecksumJob] = {}
        self._deleted: list[UUID] = []
        self._lock = asyncio.Lock()

    async def enqueue(self, record_id: UUID) -> UUID:
        job = ChecksumJob(id=uuid4(), record_id=record_id, created_at=self._time.now())
        async with self._lock:
            self._jobs[job.id] = job
        return job.id

    async def claim(self, lease_seconds: int) -> ChecksumJob | None:
        """Lease the oldest claimable job."""
        async with self._lock:
            now = self._time.now()
            for job in sorted(self._jobs.values(), key=lambda j: j.created_at):
                if job.is_claimable(now):
                    leased = job.with_lease(now, lease_seconds)
                    self._jobs[job.id] = leased
                    return leased
            return None

    async def delete(self, job_id: UUID) -> None:
        async with self._lock:
            if self._jobs.pop(job_id, None) is not None:
                self._deleted.append(job_id)

    async def release(self, job_id: UUID) -> None:
        async with self._lock:
            job = self._jobs.get(job_id)
            if job is not None:
                self._jobs[job_id] = job.released()

    async def depth(self) -> int:
        return len(self._jobs)

    async def has_job(self, record_id: UUID) -> bool:
        return any(j.record_id == record_id for j in self._jobs.values())

    # Test helpers

    def get_job(self, job_id: UUID) -> ChecksumJob | None:
        return self._jobs.get(job_id)

    def jobs_for_record(self, record_id: UUID) -> list[ChecksumJob]:
        return [j for j in self._jobs.values() if j.record_id == record_id]

    @property
    def deleted_job_ids(self) -> list[UUID]:
        return list(self._deleted)

    def clear(self) -> None:
        self._jobs.clear()
        self._deleted.clear()
