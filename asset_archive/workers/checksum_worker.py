"""Long-running checksum worker process.

Claims deferred checksum jobs in batches and sleeps between passes.
A full batch is followed immediately by another pass so a backlog
drains without waiting for the poll interval. SIGINT and SIGTERM stop
the loop after the current batch; a job interrupted mid-hash keeps its
lease and is reclaimed after expiry.

Usage:
    python -m asset_archive.workers.checksum_worker
"""

from __future__ import annotations

import asyncio
import signal
from dataclasses import dataclass
from typing import Any

from structlog import get_logger

from asset_archive.application.services.checksum_worker_service import (
    ChecksumWorkerService,
)
from asset_archive.bootstrap.archive_services import (
    ArchiveServices,
    build_archive_services_from_environment,
)
from asset_archive.bootstrap.database import close_database_engine
from asset_archive.bootstrap.logging import configure_logging
from asset_archive.domain.models.lifecycle_results import ChecksumBatchResult
from asset_archive.infrastructure.observability.correlation import correlation_scope

logger = get_logger(__name__)


@dataclass
class ChecksumWorkerStats:
    """Counters accumulated over the life of a worker."""

    passes: int = 0
    processed: int = 0
    skipped: int = 0
    failed: int = 0


class ChecksumWorker:
    """Poll loop around ChecksumWorkerService.process_pending."""

    def __init__(
        self,
        service: ChecksumWorkerService,
        poll_seconds: float = 10.0,
        batch_size: int = 10,
    ) -> None:
        if poll_seconds <= 0:
            raise ValueError(f"poll_seconds must be positive, got {poll_seconds}")
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self._service = service
        self._poll_seconds = poll_seconds
        self._batch_size = batch_size
        self._stop_requested = asyncio.Event()
        self._running = False
        self._stats = ChecksumWorkerStats()

    @property
    def running(self) -> bool:
        return self._running

    async def run_once(self) -> ChecksumBatchResult:
        """Run a single pass under its own correlation id."""
        with correlation_scope():
            batch = await self._service.process_pending(self._batch_size)
        self._stats.passes += 1
        self._stats.processed += batch.processed
        self._stats.skipped += batch.skipped
        self._stats.failed += batch.failed
        return batch

    async def run(self) -> None:
        """Run until stop() is called."""
        self._running = True
        self._stop_requested.clear()
        logger.info(
            "checksum_worker_started",
            poll_seconds=self._poll_seconds,
            batch_size=self._batch_size,
        )
        try:
            while not self._stop_requested.is_set():
                batch = await self.run_once()
                if batch.claimed >= self._batch_size and not batch.failed:
                    continue
                await self._sleep()
        except Exception:
            logger.critical("checksum_worker_fatal_error", exc_info=True)
            raise
        finally:
            self._running = False
            logger.info("checksum_worker_stopped", **self.get_metrics())

    async def _sleep(self) -> None:
        try:
            await asyncio.wait_for(self._stop_requested.wait(), self._poll_seconds)
        except asyncio.TimeoutError:
            pass

    def stop(self) -> None:
        """Ask the loop to exit after the current pass."""
        logger.info("checksum_worker_stop_requested")
        self._stop_requested.set()

    def get_metrics(self) -> dict[str, Any]:
        return {
            "passes": self._stats.passes,
            "processed": self._stats.processed,
            "skipped": self._stats.skipped,
            "failed": self._stats.failed,
            "running": self._running,
        }


async def run_checksum_worker(services: ArchiveServices) -> None:
    """Run a checksum worker with graceful shutdown on SIGINT/SIGTERM."""
    worker = ChecksumWorker(
        services.checksum_worker,
        poll_seconds=services.config.worker_poll_seconds,
        batch_size=services.config.worker_batch_size,
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, worker.stop)

    await worker.run()


async def _run_from_env() -> None:
    services = await build_archive_services_from_environment()
    try:
        await run_checksum_worker(services)
    finally:
        await close_database_engine()


def main() -> None:
    configure_logging()
    asyncio.run(_run_from_env())


if __name__ == "__main__":
    main()
