"""Domain models for the asset archive."""

from asset_archive.domain.models.archive_note import ArchiveNote
from asset_archive.domain.models.archive_record import (
    ACTIVE_STATUSES,
    ARCHIVED_ACTIVE_STATUSES,
    MANUAL_ASSET_TYPES,
    RECONCILABLE_STATUSES,
    STATUS_TRANSITION_MATRIX,
    ArchiveFlags,
    ArchiveReason,
    ArchiveRecord,
    ArchiveStatus,
    AssetCategory,
    SourceLocator,
    Visibility,
    ensure_mutable_update,
)
from asset_archive.domain.models.asset import AssetDescriptor
from asset_archive.domain.models.checksum_job import ChecksumJob
from asset_archive.domain.models.gate import GateBlocked, GateBlockReason, GateCheckResult
from asset_archive.domain.models.lifecycle_results import (
    ChecksumBatchResult,
    ExecutionOutcome,
    ExecutionResult,
    ReconciliationAction,
    ReconciliationOutcome,
    ReconciliationReport,
)

__all__: list[str] = [
    "ACTIVE_STATUSES",
    "ARCHIVED_ACTIVE_STATUSES",
    "MANUAL_ASSET_TYPES",
    "RECONCILABLE_STATUSES",
    "STATUS_TRANSITION_MATRIX",
    "ArchiveFlags",
    "ArchiveNote",
    "ArchiveReason",
    "ArchiveRecord",
    "ArchiveStatus",
    "AssetCategory",
    "AssetDescriptor",
    "ChecksumBatchResult",
    "ChecksumJob",
    "ExecutionOutcome",
    "ExecutionResult",
    "GateBlockReason",
    "GateBlocked",
    "GateCheckResult",
    "ReconciliationAction",
    "ReconciliationOutcome",
    "ReconciliationReport",
    "SourceLocator",
    "Visibility",
    "ensure_mutable_update",
]
