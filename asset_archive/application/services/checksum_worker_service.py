"""Checksum worker service: deferred hashing of large archived files.

Processing loop for one pass:
1. Claim a job with a lease
2. Load the record; discard the job if the record is gone, no longer
   archived-active, or already has a checksum
3. Compute the checksum and write it with set_checksum_once()
4. Delete the job

A failure leaves the job on the queue; its lease expires and another
pass reclaims it (at-least-once). Recomputing an identical checksum is
a no-op, so duplicate processing is harmless.
"""

from __future__ import annotations

from structlog import get_logger

from asset_archive.application.ports.archive_metrics import ArchiveMetricsProtocol
from asset_archive.application.ports.archive_repository import ArchiveRepositoryProtocol
from asset_archive.application.ports.checksum_queue import ChecksumQueueProtocol
from asset_archive.application.services.checksum_engine import ChecksumEngine
from asset_archive.domain.exceptions import ArchiveError
from asset_archive.domain.models.checksum_job import ChecksumJob
from asset_archive.domain.models.lifecycle_results import ChecksumBatchResult

logger = get_logger(__name__)

DEFAULT_LEASE_SECONDS = 300


class ChecksumWorkerService:
    """Claims checksum jobs and writes deferred checksums.

    Example:
        >>> worker = ChecksumWorkerService(repository, queue, engine)
        >>> result = await worker.process_pending(limit=10)
        >>> print(f"processed={result.processed} failed={result.failed}")
    """

    def __init__(
        self,
        repository: ArchiveRepositoryProtocol,
        queue: ChecksumQueueProtocol,
        checksum_engine: ChecksumEngine,
        lease_seconds: int = DEFAULT_LEASE_SECONDS,
        metrics: ArchiveMetricsProtocol | None = None,
    ) -> None:
        """Initialize the worker service.

        Args:
            repository: Archive record persistence.
            queue: Checksum job queue.
            checksum_engine: Hash computation.
            lease_seconds: Lease taken on each claimed job.
            metrics: Optional metrics sink.
        """
        self._repository = repository
        self._queue = queue
        self._checksums = checksum_engine
        self._lease_seconds = lease_seconds
        self._metrics = metrics

    async def process_pending(self, limit: int = 10) -> ChecksumBatchResult:
        """Process up to limit claimable jobs.

        Args:
            limit: Maximum number of jobs claimed in this pass.

        Returns:
            ChecksumBatchResult counting processed, skipped and failed jobs.
        """
        processed = skipped = failed = 0
        for _ in range(limit):
            job = await self._queue.claim(self._lease_seconds)
            if job is None:
                break
            result = await self._process_job(job)
            if result == "processed":
                processed += 1
            elif result == "skipped":
                skipped += 1
            else:
                failed += 1
            if self._metrics is not None:
                self._metrics.record_checksum_job(result)

        if self._metrics is not None:
            self._metrics.set_checksum_queue_depth(await self._queue.depth())

        batch = ChecksumBatchResult(processed=processed, skipped=skipped, failed=failed)
        if batch.claimed:
            logger.info(
                "checksum_batch_completed",
                processed=processed,
                skipped=skipped,
                failed=failed,
            )
        return batch

    async def _process_job(self, job: ChecksumJob) -> str:
        log = logger.bind(
            job_id=str(job.id), record_id=str(job.record_id), attempt=job.attempts
        )

        try:
            record = await self._repository.get(job.record_id)
            if record is None or not record.status.is_archived_active():
                await self._queue.delete(job.id)
                log.info(
                    "checksum_job_discarded",
                    reason="record missing" if record is None else "record not archived",
                )
                return "skipped"
            if record.checksum_sha256 is not None:
                await self._queue.delete(job.id)
                log.info("checksum_job_discarded", reason="checksum already recorded")
                return "skipped"

            checksum = await self._checksums.compute(record.source, mode="async")
            await self._repository.set_checksum_once(record.id, checksum)
            await self._queue.delete(job.id)
        except ArchiveError as e:
            # Left on the queue; the lease expiry makes it claimable again
            log.error("checksum_job_failed", error=str(e), error_type=type(e).__name__)
            return "failed"

        log.info("checksum_job_processed", checksum=checksum)
        return "processed"
