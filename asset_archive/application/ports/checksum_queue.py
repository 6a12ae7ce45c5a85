"""Checksum queue port for deferred large-file hashing.

Lease-based work queue: claim -> process -> delete. A claimed job whose
lease expires becomes claimable again, so a crashed worker never loses a
job. There is no cancellation primitive.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from asset_archive.domain.models.checksum_job import ChecksumJob


class ChecksumQueueProtocol(Protocol):
    """Protocol for the checksum work queue.

    Methods:
        enqueue: Add a job for a record
        claim: Lease the oldest claimable job
        delete: Remove a finished job
        release: Drop a lease early so the job is claimable again
        depth: Number of jobs in the queue (claimed or not)
        has_job: Whether a record has a job queued (claimed or not)
    """

    async def enqueue(self, record_id: UUID) -> UUID:
        """Queue checksum computation for a record.

        Returns:
            UUID of the created job.
        """
        ...

    async def claim(self, lease_seconds: int) -> ChecksumJob | None:
        """Claim the oldest job that is unclaimed or whose lease expired.

        Uses SELECT FOR UPDATE SKIP LOCKED (or equivalent) so concurrent
        workers never claim the same job under a live lease.

        Args:
            lease_seconds: Lease duration for the claim.

        Returns:
            The claimed job, or None if nothing is claimable.
        """
        ...

    async def delete(self, job_id: UUID) -> None:
        """Delete a job after successful processing. Missing jobs are ignored."""
        ...

    async def release(self, job_id: UUID) -> None:
        """Clear the lease of a job so it can be claimed immediately."""
        ...

    async def depth(self) -> int:
        """Return the number of jobs in the queue."""
        ...

    async def has_job(self, record_id: UUID) -> bool:
        """Return True if any job, leased or not, exists for the record."""
        ...
