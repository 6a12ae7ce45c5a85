"""PostgreSQL implementation of ChecksumQueueProtocol.

Claims use FOR UPDATE SKIP LOCKED so concurrent workers never lease the
same job; an expired lease makes the job claimable again. Lease
timestamps come from the injected time authority rather than the
database clock, keeping expiry testable.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from asset_archive.application.ports.checksum_queue import ChecksumQueueProtocol
from asset_archive.application.ports.time_authority import TimeAuthorityProtocol
from asset_archive.domain.models.checksum_job import ChecksumJob

logger = get_logger(__name__)

_ENQUEUE_SQL = text(
    """
    INSERT INTO archive_checksum_jobs (id, record_id, created_at)
    VALUES (:id, :record_id, :created_at)
    """
)

_CLAIM_SQL = text(
    """
    UPDATE archive_checksum_jobs
    SET lease_expires_at = :lease_expires_at, attempts = attempts + 1
    WHERE id = (
        SELECT id FROM archive_checksum_jobs
        WHERE lease_expires_at IS NULL OR lease_expires_at <= :now
        ORDER BY created_at, id
        LIMIT 1
        FOR UPDATE SKIP LOCKED
    )
    RETURNING id, record_id, created_at, lease_expires_at, attempts
    """
)

_DELETE_SQL = text("DELETE FROM archive_checksum_jobs WHERE id = :id")

_RELEASE_SQL = text(
    "UPDATE archive_checksum_jobs SET lease_expires_at = NULL WHERE id = :id"
)

_DEPTH_SQL = text("SELECT COUNT(*) FROM archive_checksum_jobs")

_HAS_JOB_SQL = text(
    "SELECT EXISTS (SELECT 1 FROM archive_checksum_jobs WHERE record_id = :record_id)"
)


def job_from_row(row: Mapping[str, Any]) -> ChecksumJob:
    return ChecksumJob(
        id=UUID(str(row["id"])),
        record_id=UUID(str(row["record_id"])),
        created_at=row["created_at"],
        lease_expires_at=row["lease_expires_at"],
        attempts=row["attempts"],
    )


class PostgresChecksumQueue(ChecksumQueueProtocol):
    """Checksum work queue stored in archive_checksum_jobs."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._session_factory = session_factory
        self._time = time_authority

    async def enqueue(self, record_id: UUID) -> UUID:
        job_id = uuid4()
        async with self._session_factory() as session, session.begin():
            await session.execute(
                _ENQUEUE_SQL,
                {"id": job_id, "record_id": record_id, "created_at": self._time.now()},
            )
        logger.debug("checksum_job_enqueued", job_id=str(job_id), record_id=str(record_id))
        return job_id

    async def claim(self, lease_seconds: int) -> ChecksumJob | None:
        now = self._time.now()
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                _CLAIM_SQL,
                {
                    "now": now,
                    "lease_expires_at": now + timedelta(seconds=lease_seconds),
                },
            )
            row = result.mappings().first()
        return job_from_row(row) if row is not None else None

    async def delete(self, job_id: UUID) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(_DELETE_SQL, {"id": job_id})

    async def release(self, job_id: UUID) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(_RELEASE_SQL, {"id": job_id})

    async def depth(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(_DEPTH_SQL)
            return int(result.scalar_one())

    async def has_job(self, record_id: UUID) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(_HAS_JOB_SQL, {"record_id": record_id})
            return bool(result.scalar_one())
