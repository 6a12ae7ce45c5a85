"""Checksum job model for deferred large-file hashing.

Files above the synchronous checksum limit are archived without a
checksum; a ChecksumJob carrying only the record id is queued instead.
Workers claim jobs with a lease, and an expired lease makes the job
claimable again (at-least-once processing; recomputation is idempotent).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from uuid import UUID


@dataclass(frozen=True, eq=True)
class ChecksumJob:
    """A queued checksum computation for one archive record.

    Attributes:
        id: Unique job identifier.
        record_id: Archive record whose checksum is pending.
        created_at: When the job was enqueued.
        lease_expires_at: End of the current claim lease (None if unclaimed).
        attempts: Number of times the job has been claimed.
    """

    id: UUID
    record_id: UUID
    created_at: datetime
    lease_expires_at: datetime | None = field(default=None)
    attempts: int = field(default=0)

    def is_claimable(self, now: datetime) -> bool:
        """Unclaimed, or the previous lease has expired."""
        return self.lease_expires_at is None or self.lease_expires_at <= now

    def with_lease(self, now: datetime, lease_seconds: int) -> ChecksumJob:
        return replace(
            self,
            lease_expires_at=now + timedelta(seconds=lease_seconds),
            attempts=self.attempts + 1,
        )

    def released(self) -> ChecksumJob:
        return replace(self, lease_expires_at=None)
