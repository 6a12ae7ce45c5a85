"""Archive lifecycle service.

Every mutation of an archive record goes through this service. Callers
pass the acting identity explicitly; time comes from the injected
TimeAuthorityProtocol.

Developer Golden Rules:
1. RE-READ, THEN CAS - Each operation loads the record and writes it with
   the version it read; a concurrent change raises
   ConcurrentModificationError instead of being overwritten
2. GATES ARE VALUES - A blocked execution returns ExecutionResult(BLOCKED)
   with the record still queued and the blocking flag set
3. WRITE-ONCE - classified_at and checksum_sha256 are only written by
   record_classification() (and the checksum worker's deferred write)
4. FAIL LOUD - State and validation problems raise; nothing is swallowed
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Collection
from dataclasses import replace
from typing import TypeVar
from uuid import UUID, uuid4

from structlog import get_logger

from asset_archive.application.ports.archive_metrics import ArchiveMetricsProtocol
from asset_archive.application.ports.archive_repository import ArchiveRepositoryProtocol
from asset_archive.application.ports.asset_catalog import AssetCatalogProtocol
from asset_archive.application.ports.checksum_queue import ChecksumQueueProtocol
from asset_archive.application.ports.file_store import FileStoreProtocol
from asset_archive.application.ports.time_authority import TimeAuthorityProtocol
from asset_archive.application.services.checksum_engine import ChecksumEngine
from asset_archive.application.services.compliance_clock import ComplianceClock
from asset_archive.application.services.execution_gate_validator import (
    ExecutionGateValidator,
    file_missing_details,
)
from asset_archive.application.services.file_io import FileIOTimeoutError, run_file_io
from asset_archive.domain.errors.concurrent_modification import (
    ConcurrentModificationError,
)
from asset_archive.domain.errors.integrity import FileUnreadableError
from asset_archive.domain.errors.state import (
    ActiveRecordExistsError,
    NotActiveError,
    NotArchivableError,
    NotDeletableError,
    NotQueuedError,
    NotUnarchivableError,
    RecordNotFoundError,
)
from asset_archive.domain.errors.underlying_io import UnderlyingDeleteFailedError
from asset_archive.domain.errors.validation import ArchiveValidationError
from asset_archive.domain.models.archive_record import (
    ARCHIVED_ACTIVE_STATUSES,
    MANUAL_ASSET_TYPES,
    ArchiveFlags,
    ArchiveReason,
    ArchiveRecord,
    ArchiveStatus,
    AssetCategory,
    SourceLocator,
    Visibility,
)
from asset_archive.domain.models.gate import GateBlocked, GateBlockReason
from asset_archive.domain.models.lifecycle_results import (
    ExecutionOutcome,
    ExecutionResult,
)

logger = get_logger(__name__)

T = TypeVar("T")

# Page size used when a projection has to walk every record in a status
_SCAN_PAGE_SIZE = 500

# Statuses listed in the archive registry
ARCHIVED_STATUSES: frozenset[ArchiveStatus] = frozenset(
    {
        ArchiveStatus.ARCHIVED_PUBLIC,
        ArchiveStatus.ARCHIVED_ADMIN,
        ArchiveStatus.ARCHIVED_DELETED,
        ArchiveStatus.EXEMPTION_VOID,
    }
)


async def retry_on_conflict(
    operation: Callable[[], Awaitable[T]],
    attempts: int = 2,
) -> T:
    """Run an operation, retrying after a concurrent modification.

    The operation must re-read the record on each call (every
    ArchiveLifecycleService mutation does). The final conflict propagates.

    Args:
        operation: Zero-argument coroutine factory.
        attempts: Total attempts, including the first.

    Returns:
        The operation's result.

    Raises:
        ConcurrentModificationError: If every attempt conflicted.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")
    attempt = 1
    while True:
        try:
            return await operation()
        except ConcurrentModificationError as e:
            if attempt >= attempts:
                raise
            logger.info(
                "concurrent_modification_retry",
                record_id=str(e.record_id),
                attempt=attempt,
            )
            attempt += 1


class ArchiveLifecycleService:
    """Drives archive records through queue, execution and withdrawal.

    Example:
        >>> record = await service.enqueue(
        ...     asset_id="42",
        ...     reason=ArchiveReason.REFERENCE,
        ...     public_description="2019 budget report",
        ...     actor="user:7",
        ... )
        >>> result = await service.execute(record.id, Visibility.PUBLIC, actor="user:7")
        >>> if not result.was_executed:
        ...     print(result.blocked.details)
    """

    def __init__(
        self,
        repository: ArchiveRepositoryProtocol,
        catalog: AssetCatalogProtocol,
        gate_validator: ExecutionGateValidator,
        checksum_engine: ChecksumEngine,
        checksum_queue: ChecksumQueueProtocol,
        compliance_clock: ComplianceClock,
        file_store: FileStoreProtocol,
        time_authority: TimeAuthorityProtocol,
        metrics: ArchiveMetricsProtocol | None = None,
        file_io_timeout_seconds: float = 30.0,
    ) -> None:
        """Initialize the lifecycle service.

        Args:
            repository: Archive record persistence.
            catalog: Asset discovery catalog.
            gate_validator: Existence and usage gates.
            checksum_engine: Synchronous hashing and size policy.
            checksum_queue: Deferred hashing queue for large files.
            compliance_clock: Cutoff logic.
            file_store: File deletion for delete_file().
            time_authority: Source of "now".
            metrics: Optional metrics sink.
            file_io_timeout_seconds: Bound on file deletion.
        """
        self._repository = repository
        self._catalog = catalog
        self._gates = gate_validator
        self._checksums = checksum_engine
        self._checksum_queue = checksum_queue
        self._clock = compliance_clock
        self._file_store = file_store
        self._time = time_authority
        self._metrics = metrics
        self._file_io_timeout = file_io_timeout_seconds

    async def _load(self, record_id: UUID) -> ArchiveRecord:
        record = await self._repository.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    async def _ensure_no_active_record(self, locator: SourceLocator) -> None:
        existing = await self._repository.find_active_for_locator(locator.identity_key)
        if existing is not None:
            raise ActiveRecordExistsError(
                locator_key=locator.identity_key,
                existing_record_id=existing.id,
                existing_status=existing.status,
            )

    def _record_transition(self, operation: str, status: ArchiveStatus) -> None:
        if self._metrics is not None:
            self._metrics.record_transition(operation, status.value)

    async def enqueue(
        self,
        asset_id: str,
        reason: ArchiveReason,
        public_description: str,
        actor: str,
        reason_other: str = "",
        internal_note: str = "",
    ) -> ArchiveRecord:
        """Queue an asset for archiving.

        Args:
            asset_id: Catalog identifier of the asset.
            reason: Archive reason code.
            public_description: Externally shown description (required).
            actor: Identity of the caller.
            reason_other: Custom reason, required when reason is OTHER.
            internal_note: Internal-only note.

        Returns:
            The new record in status QUEUED.

        Raises:
            NotArchivableError: If the catalog says the asset cannot be archived.
            ActiveRecordExistsError: If the file already has an active record.
            ArchiveValidationError: If reason or description are invalid.
        """
        log = logger.bind(asset_id=asset_id, actor=actor)

        if not await self._catalog.is_archivable(asset_id):
            raise NotArchivableError(asset_id)
        descriptor = await self._catalog.describe(asset_id)
        if descriptor is None:
            raise NotArchivableError(asset_id)

        await self._ensure_no_active_record(descriptor.locator)

        now = self._time.now()
        record = ArchiveRecord(
            id=uuid4(),
            public_id=uuid4(),
            source=descriptor.locator,
            file_name=descriptor.file_name,
            asset_type=descriptor.asset_type,
            asset_category=descriptor.category,
            reason=reason,
            reason_other=reason_other.strip(),
            public_description=public_description.strip(),
            internal_note=internal_note.strip(),
            mime_type=descriptor.mime_type,
            file_size_bytes=descriptor.size_bytes,
            is_private=descriptor.is_private,
            created_at=now,
            updated_at=now,
            created_by=actor,
        )
        await self._repository.create(record)
        self._record_transition("enqueue", record.status)
        log.info(
            "archive_enqueued",
            record_id=str(record.id),
            file_name=record.file_name,
            reason=record.reason.value,
        )
        return record

    async def execute(
        self,
        record_id: UUID,
        visibility: Visibility | str,
        actor: str,
    ) -> ExecutionResult:
        """Execute a queued archive: gates, checksum, classification.

        Args:
            record_id: The queued record.
            visibility: Visibility.PUBLIC or Visibility.ADMIN (or "public"/"admin").
            actor: Identity of the caller.

        Returns:
            ExecutionResult; outcome is BLOCKED (record still queued, flag
            set) when a gate fails.

        Raises:
            ArchiveValidationError: If visibility is not public or admin.
            RecordNotFoundError: If the record does not exist.
            NotQueuedError: If the record is not queued.
            IntegrityUnresolvableError: If synchronous hashing timed out.
            ConcurrentModificationError: If the record changed meanwhile.

        A failure to queue a deferred checksum propagates after the record
        is archived; the next reconciliation sweep queues the job again.
        """
        chosen = Visibility.parse(visibility)
        record = await self._load(record_id)
        log = logger.bind(
            record_id=str(record.id), public_id=str(record.public_id), actor=actor
        )
        if not record.can_execute():
            raise NotQueuedError(record.id, record.status, "execute")

        gates = await self._gates.validate(record)
        blocked = gates.first_block()
        if blocked is not None:
            return await self._block(record, blocked, actor)

        checksum: str | None = None
        deferred = self._checksums.needs_async(record.file_size_bytes)
        if not deferred:
            try:
                checksum = await self._checksums.compute(record.source)
            except FileUnreadableError:
                return await self._block(
                    record,
                    GateBlocked(
                        reason=GateBlockReason.FILE_MISSING,
                        details=file_missing_details(record),
                    ),
                    actor,
                )

        now = self._time.now()
        has_prior_void = await self._repository.has_void_history(record.locator_key)
        late, prior_void = self._clock.classification_flags(now, has_prior_void)

        executed = await self._repository.record_classification(
            record_id=record.id,
            expected_version=record.version,
            new_status=chosen.status,
            classified_at=now,
            checksum_sha256=checksum,
            flags=ArchiveFlags(late_classification=late, prior_void=prior_void),
        )

        job_id: UUID | None = None
        if deferred:
            try:
                job_id = await self._checksum_queue.enqueue(executed.id)
            except Exception:
                # The record is already archived; reconciliation re-enqueues it
                log.exception("checksum_enqueue_failed", status=executed.status.value)
                raise

        self._record_transition("execute", executed.status)
        log.info(
            "archive_executed",
            status=executed.status.value,
            checksum=checksum,
            checksum_pending=deferred,
            checksum_job_id=str(job_id) if job_id else None,
            late_classification=late,
            prior_void=prior_void,
        )
        return ExecutionResult(
            outcome=ExecutionOutcome.EXECUTED,
            record=executed,
            checksum_pending=deferred,
            checksum_job_id=job_id,
        )

    async def _block(
        self, record: ArchiveRecord, blocked: GateBlocked, actor: str
    ) -> ExecutionResult:
        if blocked.reason is GateBlockReason.FILE_MISSING:
            flags = replace(record.flags, file_missing=True)
        else:
            flags = replace(record.flags, usage_detected=True)

        persisted = record
        if flags != record.flags:
            persisted = await self._repository.update(
                record.with_flags(flags, self._time.now()), record.version
            )
        if self._metrics is not None:
            self._metrics.record_gate_block(blocked.reason.value)
        logger.warning(
            "archive_execution_blocked",
            record_id=str(record.id),
            actor=actor,
            reason=blocked.reason.value,
            details=blocked.details,
        )
        return ExecutionResult(
            outcome=ExecutionOutcome.BLOCKED, record=persisted, blocked=blocked
        )

    async def toggle_visibility(self, record_id: UUID, actor: str) -> ArchiveRecord:
        """Switch an archived record between public and admin-only.

        Raises:
            RecordNotFoundError: If the record does not exist.
            NotActiveError: If the record is not archived-active.
            ConcurrentModificationError: If the record changed meanwhile.
        """
        record = await self._load(record_id)
        if not record.can_toggle_visibility():
            raise NotActiveError(record.id, record.status, "toggle visibility of")

        target = (
            ArchiveStatus.ARCHIVED_ADMIN
            if record.status is ArchiveStatus.ARCHIVED_PUBLIC
            else ArchiveStatus.ARCHIVED_PUBLIC
        )
        updated = await self._repository.update(
            record.with_status(target, self._time.now()), record.version
        )
        self._record_transition("toggle_visibility", updated.status)
        logger.info(
            "archive_visibility_changed",
            record_id=str(record.id),
            actor=actor,
            status=updated.status.value,
        )
        return updated

    async def unarchive(self, record_id: UUID, actor: str) -> ArchiveRecord:
        """Withdraw an archive; the file is untouched, the record kept.

        Raises:
            RecordNotFoundError: If the record does not exist.
            NotUnarchivableError: If the record is queued or already deleted.
            ConcurrentModificationError: If the record changed meanwhile.
        """
        record = await self._load(record_id)
        if not record.can_unarchive():
            raise NotUnarchivableError(record.id, record.status, "unarchive")

        now = self._time.now()
        withdrawn = record.with_status(ArchiveStatus.ARCHIVED_DELETED, now).with_flags(
            record.flags.cleared(), now
        )
        updated = await self._repository.update(withdrawn, record.version)
        self._record_transition("unarchive", updated.status)
        logger.info(
            "archive_unarchived",
            record_id=str(record.id),
            actor=actor,
            previous_status=record.status.value,
        )
        return updated

    async def delete_file(self, record_id: UUID, actor: str) -> ArchiveRecord:
        """Mark an archive deleted, then delete the file behind it.

        The path is resolved before anything is written. The record moves
        to ARCHIVED_DELETED under CAS before the file is touched, so a
        concurrent change leaves the file in place. A file that is already
        gone is not an error. The managed-file entry, if any, is dropped too.

        Raises:
            RecordNotFoundError: If the record does not exist.
            NotDeletableError: If the record is not active or is a manual entry.
            UnderlyingDeleteFailedError: If the path cannot be resolved (record
                unchanged) or the file cannot be deleted (record already
                ARCHIVED_DELETED).
            ConcurrentModificationError: If the record changed meanwhile; the
                file is untouched.
        """
        record = await self._load(record_id)
        if not record.can_unarchive():
            raise NotDeletableError(
                record.id,
                record.status,
                "Only active archived or voided file assets can have their files deleted.",
            )
        if not record.is_file_backed:
            raise NotDeletableError(
                record.id, record.status, "Manual entries have no file to delete."
            )

        log = logger.bind(record_id=str(record.id), actor=actor)
        locator = record.source
        try:
            resolved = await run_file_io(
                "resolve",
                self._file_store.resolve,
                locator,
                timeout_seconds=self._file_io_timeout,
            )
        except (OSError, FileIOTimeoutError) as e:
            log.error("archive_file_resolve_failed", error=str(e))
            raise UnderlyingDeleteFailedError(str(locator), str(e)) from e
        if resolved is None:
            raise UnderlyingDeleteFailedError(
                str(locator), "cannot resolve file path for deletion"
            )

        now = self._time.now()
        deleted = record.with_status(ArchiveStatus.ARCHIVED_DELETED, now).with_deletion(
            deleted_at=now, deleted_by=actor
        )
        updated = await self._repository.update(deleted, record.version)
        self._record_transition("delete_file", updated.status)

        try:
            await run_file_io(
                "delete",
                self._file_store.delete,
                resolved,
                timeout_seconds=self._file_io_timeout,
            )
            if locator.managed_file_id is not None:
                await run_file_io(
                    "forget",
                    self._file_store.forget_managed_file,
                    locator.managed_file_id,
                    timeout_seconds=self._file_io_timeout,
                )
        except (OSError, FileIOTimeoutError) as e:
            log.error(
                "archive_file_delete_failed",
                error=str(e),
                path=resolved,
                status=updated.status.value,
            )
            raise UnderlyingDeleteFailedError(resolved, str(e)) from e

        log.info("archive_file_deleted", file_name=record.file_name, path=resolved)
        return updated

    async def remove_from_queue(self, record_id: UUID, actor: str) -> None:
        """Abandon a queued archive (hard delete).

        Raises:
            RecordNotFoundError: If the record does not exist.
            NotQueuedError: If the record is not queued.
            ConcurrentModificationError: If the record changed meanwhile.
        """
        record = await self._load(record_id)
        if not record.can_remove_from_queue():
            raise NotQueuedError(record.id, record.status, "remove from queue")
        await self._repository.delete_queued(record.id, record.version)
        logger.info(
            "archive_removed_from_queue",
            record_id=str(record.id),
            actor=actor,
            file_name=record.file_name,
        )

    async def create_manual_entry(
        self,
        title: str,
        url: str,
        entry_type: str,
        reason: ArchiveReason,
        public_description: str,
        visibility: Visibility | str,
        actor: str,
        reason_other: str = "",
        internal_note: str = "",
    ) -> ArchiveRecord:
        """Archive a web page or external resource directly.

        Manual entries skip the queue: they are created already archived,
        classified now, with the same late / prior-void rules as execute().

        Raises:
            ArchiveValidationError: On an unknown entry type, blank title or
                URL, bad visibility, or invalid reason/description.
            ActiveRecordExistsError: If the URL already has an active record.
        """
        chosen = Visibility.parse(visibility)
        if entry_type not in MANUAL_ASSET_TYPES:
            raise ArchiveValidationError(
                "entry_type", f"Entry type must be one of {sorted(MANUAL_ASSET_TYPES)}."
            )
        if not title.strip():
            raise ArchiveValidationError("title", "A title is required.")
        if not url.strip():
            raise ArchiveValidationError("url", "A URL is required.")

        locator = SourceLocator(path=url.strip())
        await self._ensure_no_active_record(locator)

        now = self._time.now()
        has_prior_void = await self._repository.has_void_history(locator.identity_key)
        late, prior_void = self._clock.classification_flags(now, has_prior_void)

        record = ArchiveRecord(
            id=uuid4(),
            public_id=uuid4(),
            source=locator,
            file_name=title.strip(),
            asset_type=entry_type,
            asset_category=AssetCategory.OTHER,
            reason=reason,
            reason_other=reason_other.strip(),
            public_description=public_description.strip(),
            internal_note=internal_note.strip(),
            status=chosen.status,
            classified_at=now,
            flags=ArchiveFlags(late_classification=late, prior_void=prior_void),
            created_at=now,
            updated_at=now,
            created_by=actor,
        )
        await self._repository.create(record)
        self._record_transition("create_manual_entry", record.status)
        logger.info(
            "manual_archive_created",
            record_id=str(record.id),
            actor=actor,
            entry_type=entry_type,
            status=record.status.value,
            late_classification=late,
        )
        return record

    # Read projections

    async def get(self, record_id: UUID) -> ArchiveRecord:
        """Return a record by id.

        Raises:
            RecordNotFoundError: If the record does not exist.
        """
        return await self._load(record_id)

    async def get_by_public_id(self, public_id: UUID) -> ArchiveRecord:
        record = await self._repository.get_by_public_id(public_id)
        if record is None:
            raise RecordNotFoundError(public_id)
        return record

    async def _scan(self, statuses: Collection[ArchiveStatus]) -> list[ArchiveRecord]:
        records: list[ArchiveRecord] = []
        offset = 0
        while True:
            page, total = await self._repository.list_by_status(
                statuses, limit=_SCAN_PAGE_SIZE, offset=offset
            )
            records.extend(page)
            offset += len(page)
            if not page or offset >= total:
                return records

    async def list_queued(self) -> list[ArchiveRecord]:
        """Queued records, newest first."""
        return await self._scan({ArchiveStatus.QUEUED})

    async def list_blocked(self) -> list[ArchiveRecord]:
        """Queued records carrying a warning flag."""
        return [r for r in await self.list_queued() if r.flags.has_warnings]

    async def list_archived(self) -> list[ArchiveRecord]:
        """Executed records in any archived status, newest first."""
        return await self._scan(ARCHIVED_STATUSES)

    async def list_archived_with_problems(self) -> list[ArchiveRecord]:
        return [r for r in await self.list_archived() if r.flags.has_warnings]

    async def list_pending_checksums(self) -> list[ArchiveRecord]:
        """Archived-active file records whose deferred checksum is not written yet."""
        return [
            r
            for r in await self._scan(ARCHIVED_ACTIVE_STATUSES)
            if r.checksum_sha256 is None and r.is_file_backed
        ]
