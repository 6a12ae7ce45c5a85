"""Application services - Use case orchestration.

Available services:
- ArchiveLifecycleService: enqueue, execute, visibility, unarchive, delete, manual entries
- ArchiveNoteService: Append-only internal notes
- ChecksumEngine: SHA-256 computation and integrity verification
- ChecksumWorkerService: Deferred hashing of large files
- ComplianceClock: Cutoff and legacy-archive eligibility
- ExecutionGateValidator: Existence and usage gates
- ReconciliationEngine: Periodic re-derivation of flags and status escalation
- SystemTimeAuthority: Production TimeAuthorityProtocol
"""

from asset_archive.application.services.archive_lifecycle_service import (
    ARCHIVED_STATUSES,
    ArchiveLifecycleService,
    retry_on_conflict,
)
from asset_archive.application.services.archive_note_service import ArchiveNoteService
from asset_archive.application.services.checksum_engine import CHUNK_SIZE, ChecksumEngine
from asset_archive.application.services.checksum_worker_service import (
    ChecksumWorkerService,
)
from asset_archive.application.services.compliance_clock import ComplianceClock
from asset_archive.application.services.execution_gate_validator import (
    ExecutionGateValidator,
)
from asset_archive.application.services.reconciliation_engine import (
    DEFAULT_RECONCILIATION_ACTOR,
    ReconciliationEngine,
)
from asset_archive.application.services.time_authority_service import (
    SystemTimeAuthority,
)

__all__: list[str] = [
    "ARCHIVED_STATUSES",
    "CHUNK_SIZE",
    "DEFAULT_RECONCILIATION_ACTOR",
    "ArchiveLifecycleService",
    "ArchiveNoteService",
    "ChecksumEngine",
    "ChecksumWorkerService",
    "ComplianceClock",
    "ExecutionGateValidator",
    "ReconciliationEngine",
    "SystemTimeAuthority",
    "retry_on_conflict",
]
