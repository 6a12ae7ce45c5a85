"""Unit tests for ChecksumWorkerService (deferred hashing)."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from asset_archive.domain.models.archive_record import ArchiveStatus
from tests.helpers import ACTOR, ArchiveHarness, build_harness, sample_value

VIDEO = b"0123456789abcdef" * 4


@pytest.fixture
def deferred(tmp_path: Path) -> ArchiveHarness:
    """Harness that defers hashing of anything above 8 bytes."""
    return build_harness(tmp_path, checksum_sync_limit_bytes=8)


async def _archive_video(harness: ArchiveHarness, asset_id: str = "vid-1"):
    harness.add_asset(asset_id, f"videos/{asset_id}.mp4", VIDEO, asset_type="mp4")
    return await harness.archive(asset_id)


class TestProcessPending:
    @pytest.mark.asyncio
    async def test_writes_deferred_checksum(self, deferred: ArchiveHarness) -> None:
        result = await _archive_video(deferred)

        batch = await deferred.services.checksum_worker.process_pending()

        assert batch.processed == 1
        assert batch.claimed == 1
        stored = await deferred.repository.get(result.record.id)
        assert stored.checksum_sha256 == hashlib.sha256(VIDEO).hexdigest()
        assert deferred.queue.deleted_job_ids == [result.checksum_job_id]
        assert await deferred.queue.depth() == 0
        assert await deferred.services.lifecycle.list_pending_checksums() == []

    @pytest.mark.asyncio
    async def test_empty_queue(self, deferred: ArchiveHarness) -> None:
        batch = await deferred.services.checksum_worker.process_pending()

        assert batch.claimed == 0

    @pytest.mark.asyncio
    async def test_limit_bounds_the_pass(self, deferred: ArchiveHarness) -> None:
        for asset_id in ("vid-1", "vid-2", "vid-3"):
            await _archive_video(deferred, asset_id)

        batch = await deferred.services.checksum_worker.process_pending(limit=2)

        assert batch.processed == 2
        assert await deferred.queue.depth() == 1

    @pytest.mark.asyncio
    async def test_job_for_withdrawn_record_is_skipped(
        self, deferred: ArchiveHarness
    ) -> None:
        result = await _archive_video(deferred)
        await deferred.services.lifecycle.unarchive(result.record.id, actor=ACTOR)

        batch = await deferred.services.checksum_worker.process_pending()

        assert batch.skipped == 1
        assert await deferred.queue.depth() == 0
        stored = await deferred.repository.get(result.record.id)
        assert stored.status is ArchiveStatus.ARCHIVED_DELETED
        assert stored.checksum_sha256 is None

    @pytest.mark.asyncio
    async def test_job_for_hashed_record_is_skipped(self, deferred: ArchiveHarness) -> None:
        result = await _archive_video(deferred)
        await deferred.repository.set_checksum_once(result.record.id, "d" * 64)

        batch = await deferred.services.checksum_worker.process_pending()

        assert batch.skipped == 1
        assert (await deferred.repository.get(result.record.id)).checksum_sha256 == (
            "d" * 64
        )

    @pytest.mark.asyncio
    async def test_missing_file_fails_and_job_is_reclaimed(
        self, deferred: ArchiveHarness
    ) -> None:
        result = await _archive_video(deferred)
        path = deferred.public_root / "videos/vid-1.mp4"
        path.unlink()
        worker = deferred.services.checksum_worker

        failed = await worker.process_pending()
        leased = await worker.process_pending()
        path.write_bytes(VIDEO)
        deferred.time.advance(seconds=deferred.services.config.checksum_lease_seconds + 1)
        retried = await worker.process_pending()

        assert failed.failed == 1
        assert leased.claimed == 0
        assert retried.processed == 1
        stored = await deferred.repository.get(result.record.id)
        assert stored.checksum_sha256 == hashlib.sha256(VIDEO).hexdigest()

    @pytest.mark.asyncio
    async def test_records_job_metrics(self, deferred: ArchiveHarness) -> None:
        await _archive_video(deferred)

        await deferred.services.checksum_worker.process_pending()

        assert (
            sample_value(deferred.metrics, "archive_checksum_jobs_total", result="processed")
            == 1.0
        )
        assert sample_value(deferred.metrics, "archive_checksum_queue_depth") == 0.0
