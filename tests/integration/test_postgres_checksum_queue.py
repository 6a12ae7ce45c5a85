"""Integration tests for PostgresChecksumQueue and PostgresArchiveNoteRepository."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from asset_archive.domain.models.archive_note import ArchiveNote
from asset_archive.domain.models.archive_record import ArchiveRecord, SourceLocator
from asset_archive.infrastructure.adapters.persistence.postgres_archive_note_repository import (
    PostgresArchiveNoteRepository,
)
from asset_archive.infrastructure.adapters.persistence.postgres_archive_repository import (
    PostgresArchiveRepository,
)
from asset_archive.infrastructure.adapters.persistence.postgres_checksum_queue import (
    PostgresChecksumQueue,
)
from tests.helpers import FakeTimeAuthority, make_record
from tests.helpers.record_factory import CREATED_AT

pytestmark = pytest.mark.integration

LEASE_SECONDS = 300


@pytest.fixture
def time_authority() -> FakeTimeAuthority:
    return FakeTimeAuthority(CREATED_AT)


@pytest.fixture
def queue(
    session_factory: async_sessionmaker[AsyncSession], time_authority: FakeTimeAuthority
) -> PostgresChecksumQueue:
    return PostgresChecksumQueue(session_factory, time_authority)


@pytest.fixture
async def record(session_factory: async_sessionmaker[AsyncSession]) -> ArchiveRecord:
    record = make_record()
    await PostgresArchiveRepository(session_factory).create(record)
    return record


class TestPostgresChecksumQueue:
    @pytest.mark.asyncio
    async def test_claim_takes_a_lease(
        self, queue: PostgresChecksumQueue, record: ArchiveRecord
    ) -> None:
        job_id = await queue.enqueue(record.id)

        job = await queue.claim(LEASE_SECONDS)

        assert job is not None
        assert job.id == job_id
        assert job.record_id == record.id
        assert job.attempts == 1
        assert job.lease_expires_at == CREATED_AT + timedelta(seconds=LEASE_SECONDS)
        assert await queue.claim(LEASE_SECONDS) is None
        assert await queue.depth() == 1

    @pytest.mark.asyncio
    async def test_expired_lease_is_reclaimed(
        self,
        queue: PostgresChecksumQueue,
        record: ArchiveRecord,
        time_authority: FakeTimeAuthority,
    ) -> None:
        await queue.enqueue(record.id)
        await queue.claim(LEASE_SECONDS)

        time_authority.advance(delta=timedelta(seconds=LEASE_SECONDS))
        job = await queue.claim(LEASE_SECONDS)

        assert job is not None
        assert job.attempts == 2

    @pytest.mark.asyncio
    async def test_release_and_delete(
        self, queue: PostgresChecksumQueue, record: ArchiveRecord
    ) -> None:
        await queue.enqueue(record.id)
        job = await queue.claim(LEASE_SECONDS)

        await queue.release(job.id)
        again = await queue.claim(LEASE_SECONDS)
        await queue.delete(again.id)

        assert again.id == job.id
        assert await queue.depth() == 0
        assert await queue.claim(LEASE_SECONDS) is None

    @pytest.mark.asyncio
    async def test_has_job_tracks_leased_jobs(
        self, queue: PostgresChecksumQueue, record: ArchiveRecord
    ) -> None:
        assert not await queue.has_job(record.id)

        await queue.enqueue(record.id)
        job = await queue.claim(LEASE_SECONDS)

        assert await queue.has_job(record.id)
        await queue.delete(job.id)
        assert not await queue.has_job(record.id)

    @pytest.mark.asyncio
    async def test_concurrent_claims_never_share_a_job(
        self,
        queue: PostgresChecksumQueue,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        repository = PostgresArchiveRepository(session_factory)
        for i in range(3):
            record = make_record(source=SourceLocator(path=f"public://big/{i}.zip"))
            await repository.create(record)
            await queue.enqueue(record.id)

        jobs = await asyncio.gather(*(queue.claim(LEASE_SECONDS) for _ in range(5)))

        claimed = [job.id for job in jobs if job is not None]
        assert len(claimed) == 3
        assert len(set(claimed)) == 3

    @pytest.mark.asyncio
    async def test_jobs_go_with_their_record(
        self,
        queue: PostgresChecksumQueue,
        record: ArchiveRecord,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        await queue.enqueue(record.id)

        await PostgresArchiveRepository(session_factory).delete_queued(record.id, 1)

        assert await queue.depth() == 0


class TestPostgresArchiveNoteRepository:
    @pytest.mark.asyncio
    async def test_notes_listed_oldest_first(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        record: ArchiveRecord,
    ) -> None:
        notes = PostgresArchiveNoteRepository(session_factory)
        later = ArchiveNote(
            id=uuid4(),
            archive_id=record.id,
            text="Confirmed with records office",
            author="user:9",
            created_at=CREATED_AT + timedelta(hours=2),
        )
        earlier = ArchiveNote(
            id=uuid4(),
            archive_id=record.id,
            text="Waiting on legal review",
            author="user:7",
            created_at=CREATED_AT,
        )

        await notes.add(later)
        await notes.add(earlier)

        assert await notes.list_for_archive(record.id) == [earlier, later]
        assert await notes.list_for_archive(uuid4()) == []
