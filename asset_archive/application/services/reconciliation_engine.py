"""Reconciliation engine: re-derive flags and escalate status from ground truth.

A periodic sweep over queued and archived-active records. For each
file-backed record it re-runs the existence gate, integrity verification
and the usage gate, and writes back only what changed.

Escalation after the compliance cutoff, on an integrity failure:
- legacy archive (classified at or before the cutoff, no voided
  exemption for the file) -> EXEMPTION_VOID
- general archive -> ARCHIVED_DELETED with content_modified and deletion
  metadata recorded for the reconciliation actor

Queued records whose file disappeared are hard-deleted; there is
nothing left to archive. Archived records are never auto-deleted for a
missing file, only flagged.

An archived file record still waiting for its deferred checksum gets a
new queue job when none exists, so a lost enqueue is repaired by the
next sweep.

Writes use the same CAS discipline as the lifecycle service. A record
that changed underneath the sweep is counted as a conflict and left for
the next run.
"""

from __future__ import annotations

from dataclasses import replace
from uuid import UUID

from structlog import get_logger

from asset_archive.application.ports.archive_metrics import ArchiveMetricsProtocol
from asset_archive.application.ports.archive_repository import ArchiveRepositoryProtocol
from asset_archive.application.ports.checksum_queue import ChecksumQueueProtocol
from asset_archive.application.ports.time_authority import TimeAuthorityProtocol
from asset_archive.application.services.checksum_engine import ChecksumEngine
from asset_archive.application.services.compliance_clock import ComplianceClock
from asset_archive.application.services.execution_gate_validator import (
    ExecutionGateValidator,
)
from asset_archive.domain.errors.concurrent_modification import (
    ConcurrentModificationError,
)
from asset_archive.domain.errors.state import NotQueuedError, RecordNotFoundError
from asset_archive.domain.models.archive_record import (
    RECONCILABLE_STATUSES,
    ArchiveFlags,
    ArchiveRecord,
    ArchiveStatus,
)
from asset_archive.domain.models.lifecycle_results import (
    ReconciliationAction,
    ReconciliationOutcome,
    ReconciliationReport,
)

logger = get_logger(__name__)

DEFAULT_RECONCILIATION_ACTOR = "system:reconciliation"

_FLAG_NAMES = (
    "usage_detected",
    "file_missing",
    "integrity_violation",
    "content_modified",
)


def _active_flag_names(flags: ArchiveFlags) -> tuple[str, ...]:
    return tuple(name for name in _FLAG_NAMES if getattr(flags, name))


class ReconciliationEngine:
    """Sweeps archive records and self-heals or escalates their state.

    Example:
        >>> engine = ReconciliationEngine(repository, gates, checksums, clock, time)
        >>> report = await engine.run()
        >>> report.count(ReconciliationAction.EXEMPTION_VOIDED)
    """

    def __init__(
        self,
        repository: ArchiveRepositoryProtocol,
        gate_validator: ExecutionGateValidator,
        checksum_engine: ChecksumEngine,
        compliance_clock: ComplianceClock,
        time_authority: TimeAuthorityProtocol,
        actor: str = DEFAULT_RECONCILIATION_ACTOR,
        metrics: ArchiveMetricsProtocol | None = None,
        checksum_queue: ChecksumQueueProtocol | None = None,
    ) -> None:
        """Initialize the reconciliation engine.

        Args:
            repository: Archive record persistence.
            gate_validator: Existence and usage gates.
            checksum_engine: Integrity verification.
            compliance_clock: Cutoff and legacy eligibility.
            time_authority: Source of "now".
            actor: Identity recorded as deleted_by for general-archive removal.
            metrics: Optional metrics sink.
            checksum_queue: Queue used to re-enqueue lost checksum jobs.
        """
        self._repository = repository
        self._gates = gate_validator
        self._checksums = checksum_engine
        self._clock = compliance_clock
        self._time = time_authority
        self._actor = actor
        self._metrics = metrics
        self._checksum_queue = checksum_queue

    async def run(self, batch_size: int = 100) -> ReconciliationReport:
        """Reconcile every queued and archived-active record.

        Records are fetched in batches. The set of candidates is snapshotted
        up front so records leaving the swept statuses during the run do not
        shift later pages.

        Args:
            batch_size: Records fetched per repository page.

        Returns:
            ReconciliationReport with one outcome per examined record.
        """
        candidates: list[UUID] = []
        offset = 0
        while True:
            page, total = await self._repository.list_by_status(
                RECONCILABLE_STATUSES, limit=batch_size, offset=offset
            )
            candidates.extend(record.id for record in page)
            offset += len(page)
            if not page or offset >= total:
                break

        report = ReconciliationReport()
        for record_id in candidates:
            report.add(await self.reconcile_record(record_id))

        logger.info(
            "reconciliation_completed",
            examined=report.examined,
            writes=report.writes,
            auto_removed=report.count(ReconciliationAction.AUTO_REMOVED),
            exemptions_voided=report.count(ReconciliationAction.EXEMPTION_VOIDED),
            general_archives_removed=report.count(
                ReconciliationAction.GENERAL_ARCHIVE_REMOVED
            ),
            checksums_requeued=report.count(ReconciliationAction.CHECKSUM_REQUEUED),
            conflicts=report.count(ReconciliationAction.CONFLICT),
        )
        return report

    async def reconcile_record(self, record_id: UUID) -> ReconciliationOutcome:
        """Reconcile a single record.

        Raises:
            RecordNotFoundError: If the record does not exist.
        """
        record = await self._repository.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)

        if record.is_manual_entry or record.status not in RECONCILABLE_STATUSES:
            outcome = self._outcome(record, ReconciliationAction.SKIPPED, record)
        else:
            try:
                if record.status is ArchiveStatus.QUEUED:
                    outcome = await self._reconcile_queued(record)
                else:
                    outcome = await self._reconcile_archived(record)
            except (ConcurrentModificationError, NotQueuedError) as e:
                logger.warning(
                    "reconciliation_conflict",
                    record_id=str(record.id),
                    error=str(e),
                )
                outcome = self._outcome(record, ReconciliationAction.CONFLICT, record)

        if self._metrics is not None:
            self._metrics.record_reconciliation_action(outcome.action.value)
        return outcome

    def _outcome(
        self,
        before: ArchiveRecord,
        action: ReconciliationAction,
        after: ArchiveRecord | None,
    ) -> ReconciliationOutcome:
        return ReconciliationOutcome(
            record_id=before.id,
            action=action,
            previous_status=before.status,
            new_status=after.status if after is not None else None,
            active_flags=_active_flag_names(after.flags) if after is not None else (),
        )

    async def _reconcile_queued(self, record: ArchiveRecord) -> ReconciliationOutcome:
        log = logger.bind(record_id=str(record.id), file_name=record.file_name)

        if await self._gates.resolve_if_exists(record) is None:
            await self._repository.delete_queued(record.id, record.version)
            log.info("queued_archive_auto_removed", reason="source file no longer exists")
            return self._outcome(record, ReconciliationAction.AUTO_REMOVED, None)

        usage = await self._gates.usage_count(record)
        flags = replace(record.flags, usage_detected=usage > 0, file_missing=False)
        if flags == record.flags:
            return self._outcome(record, ReconciliationAction.UNCHANGED, record)

        updated = await self._repository.update(
            record.with_flags(flags, self._time.now()), record.version
        )
        log.info("queued_archive_flags_updated", flags=_active_flag_names(flags))
        return self._outcome(record, ReconciliationAction.FLAGS_UPDATED, updated)

    async def _requeue_missing_checksum(self, record: ArchiveRecord) -> bool:
        if (
            self._checksum_queue is None
            or record.checksum_sha256 is not None
            or await self._checksum_queue.has_job(record.id)
        ):
            return False
        job_id = await self._checksum_queue.enqueue(record.id)
        logger.warning(
            "checksum_job_requeued",
            record_id=str(record.id),
            job_id=str(job_id),
        )
        return True

    async def _reconcile_archived(self, record: ArchiveRecord) -> ReconciliationOutcome:
        log = logger.bind(
            record_id=str(record.id),
            public_id=str(record.public_id),
            file_name=record.file_name,
        )
        now = self._time.now()
        flags = record.flags.cleared()
        target_status = record.status
        action = ReconciliationAction.FLAGS_UPDATED

        if await self._gates.resolve_if_exists(record) is None:
            flags = replace(flags, file_missing=True)
        elif not await self._checksums.verify(record):
            flags = replace(flags, integrity_violation=True)
            if self._clock.is_after_cutoff(now):
                history = await self._repository.list_for_locator(record.locator_key)
                if self._clock.is_legacy_eligible(record, history):
                    target_status = ArchiveStatus.EXEMPTION_VOID
                    action = ReconciliationAction.EXEMPTION_VOIDED
                else:
                    flags = replace(flags, content_modified=True)
                    target_status = ArchiveStatus.ARCHIVED_DELETED
                    action = ReconciliationAction.GENERAL_ARCHIVE_REMOVED

        usage = await self._gates.usage_count(record)
        if usage > 0:
            flags = replace(flags, usage_detected=True)

        requeued = False
        if target_status is record.status and not flags.file_missing:
            requeued = await self._requeue_missing_checksum(record)

        if flags == record.flags and target_status is record.status:
            if requeued:
                return self._outcome(
                    record, ReconciliationAction.CHECKSUM_REQUEUED, record
                )
            return self._outcome(record, ReconciliationAction.UNCHANGED, record)

        changed = record.with_flags(flags, now)
        if target_status is not record.status:
            changed = changed.with_status(target_status, now)
        if target_status is ArchiveStatus.ARCHIVED_DELETED:
            changed = changed.with_deletion(deleted_at=now, deleted_by=self._actor)

        updated = await self._repository.update(changed, record.version)

        if action is ReconciliationAction.EXEMPTION_VOIDED:
            log.warning(
                "exemption_voided",
                previous_status=record.status.value,
                message="File modified after compliance cutoff",
            )
        elif action is ReconciliationAction.GENERAL_ARCHIVE_REMOVED:
            log.info(
                "general_archive_removed",
                previous_status=record.status.value,
                message="File modified after archiving (integrity violation)",
            )
        else:
            log.info("archived_flags_updated", flags=_active_flag_names(flags))
        return self._outcome(record, action, updated)
