"""Result models returned by lifecycle, checksum and reconciliation services."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from asset_archive.domain.models.archive_record import ArchiveRecord, ArchiveStatus
from asset_archive.domain.models.gate import GateBlocked


class ExecutionOutcome(Enum):
    """How an execute() call ended."""

    EXECUTED = "executed"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class ExecutionResult:
    """Result of executing a queued archive record.

    Attributes:
        outcome: EXECUTED or BLOCKED.
        record: The record as persisted after the call.
        blocked: Blocking gate condition when outcome is BLOCKED.
        checksum_pending: True when hashing was deferred to the checksum queue.
        checksum_job_id: Queue item created for deferred hashing.
    """

    outcome: ExecutionOutcome
    record: ArchiveRecord
    blocked: GateBlocked | None = None
    checksum_pending: bool = False
    checksum_job_id: UUID | None = None

    @property
    def was_executed(self) -> bool:
        return self.outcome is ExecutionOutcome.EXECUTED


class ReconciliationAction(Enum):
    """What reconciliation did with a single record."""

    UNCHANGED = "unchanged"
    FLAGS_UPDATED = "flags_updated"
    AUTO_REMOVED = "auto_removed"
    EXEMPTION_VOIDED = "exemption_voided"
    GENERAL_ARCHIVE_REMOVED = "general_archive_removed"
    CHECKSUM_REQUEUED = "checksum_requeued"
    SKIPPED = "skipped"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class ReconciliationOutcome:
    """Reconciliation result for one record.

    Attributes:
        record_id: The record reconciled.
        action: What happened.
        previous_status: Status before reconciliation.
        new_status: Status afterwards (None when the record was hard-deleted).
        active_flags: Names of condition flags set after reconciliation.
    """

    record_id: UUID
    action: ReconciliationAction
    previous_status: ArchiveStatus
    new_status: ArchiveStatus | None
    active_flags: tuple[str, ...] = field(default_factory=tuple)

    @property
    def wrote(self) -> bool:
        return self.action in WRITE_ACTIONS


WRITE_ACTIONS: frozenset[ReconciliationAction] = frozenset(
    {
        ReconciliationAction.FLAGS_UPDATED,
        ReconciliationAction.AUTO_REMOVED,
        ReconciliationAction.EXEMPTION_VOIDED,
        ReconciliationAction.GENERAL_ARCHIVE_REMOVED,
        ReconciliationAction.CHECKSUM_REQUEUED,
    }
)


@dataclass
class ReconciliationReport:
    """Aggregate result of a reconciliation sweep."""

    outcomes: list[ReconciliationOutcome] = field(default_factory=list)

    def add(self, outcome: ReconciliationOutcome) -> None:
        self.outcomes.append(outcome)

    def count(self, action: ReconciliationAction) -> int:
        return sum(1 for o in self.outcomes if o.action is action)

    @property
    def examined(self) -> int:
        return len(self.outcomes)

    @property
    def writes(self) -> int:
        return sum(1 for o in self.outcomes if o.wrote)


@dataclass(frozen=True)
class ChecksumBatchResult:
    """Result of one checksum worker pass.

    Attributes:
        processed: Checksums computed and written.
        skipped: Jobs discarded as no-ops (record gone, deleted, or hashed).
        failed: Jobs left on the queue for lease-expiry retry.
    """

    processed: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def claimed(self) -> int:
        return self.processed + self.skipped + self.failed
