"""Unit tests for the checksum worker poll loop."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from asset_archive.domain.models.lifecycle_results import ChecksumBatchResult
from asset_archive.workers.checksum_worker import ChecksumWorker
from tests.helpers import build_harness


def _service(*batches: ChecksumBatchResult) -> MagicMock:
    service = MagicMock()
    service.process_pending = AsyncMock(side_effect=list(batches))
    return service


class TestChecksumWorkerConstruction:
    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"poll_seconds": 0}, "poll_seconds"),
            ({"poll_seconds": -1.0}, "poll_seconds"),
            ({"batch_size": 0}, "batch_size"),
        ],
    )
    def test_rejects_bad_arguments(self, kwargs: dict, message: str) -> None:
        with pytest.raises(ValueError, match=message):
            ChecksumWorker(MagicMock(), **kwargs)

    def test_initial_metrics(self) -> None:
        worker = ChecksumWorker(MagicMock())

        assert worker.get_metrics() == {
            "passes": 0,
            "processed": 0,
            "skipped": 0,
            "failed": 0,
            "running": False,
        }


class TestRunOnce:
    @pytest.mark.asyncio
    async def test_accumulates_stats(self) -> None:
        service = _service(
            ChecksumBatchResult(processed=2, skipped=1),
            ChecksumBatchResult(failed=1),
        )
        worker = ChecksumWorker(service, batch_size=5)

        await worker.run_once()
        await worker.run_once()

        service.process_pending.assert_awaited_with(5)
        metrics = worker.get_metrics()
        assert metrics["passes"] == 2
        assert metrics["processed"] == 2
        assert metrics["skipped"] == 1
        assert metrics["failed"] == 1

    @pytest.mark.asyncio
    async def test_drains_real_queue(self, tmp_path: Path) -> None:
        harness = build_harness(tmp_path, checksum_sync_limit_bytes=4)
        harness.add_asset("big", "reports/big.pdf", content=b"0123456789")
        result = await harness.archive("big")
        assert result.checksum_pending
        worker = ChecksumWorker(harness.services.checksum_worker, batch_size=10)

        batch = await worker.run_once()

        assert batch.processed == 1
        stored = await harness.repository.get(result.record.id)
        assert stored is not None and stored.checksum_sha256 is not None


class TestRunLoop:
    @pytest.mark.asyncio
    async def test_full_batch_runs_again_without_sleeping(self) -> None:
        worker = ChecksumWorker(MagicMock(), poll_seconds=60.0, batch_size=2)

        async def process(limit: int) -> ChecksumBatchResult:
            if worker.get_metrics()["passes"] >= 2:
                worker.stop()
                return ChecksumBatchResult()
            return ChecksumBatchResult(processed=limit)

        worker._service.process_pending = AsyncMock(side_effect=process)

        await asyncio.wait_for(worker.run(), timeout=2.0)

        assert worker.get_metrics()["passes"] == 3
        assert worker.get_metrics()["processed"] == 4
        assert not worker.running

    @pytest.mark.asyncio
    async def test_stop_interrupts_sleep(self) -> None:
        service = MagicMock()
        service.process_pending = AsyncMock(return_value=ChecksumBatchResult())
        worker = ChecksumWorker(service, poll_seconds=60.0)

        task = asyncio.create_task(worker.run())
        await asyncio.sleep(0.05)
        assert worker.running

        worker.stop()
        await asyncio.wait_for(task, timeout=2.0)

        assert not worker.running
        assert worker.get_metrics()["passes"] == 1

    @pytest.mark.asyncio
    async def test_service_error_propagates(self) -> None:
        service = MagicMock()
        service.process_pending = AsyncMock(side_effect=RuntimeError("queue down"))
        worker = ChecksumWorker(service)

        with pytest.raises(RuntimeError, match="queue down"):
            await worker.run()

        assert not worker.running
