"""Composition root for the archive lifecycle services.

Wires ports to either the in-memory stubs (development and tests) or
the PostgreSQL adapters. The asset catalog, usage oracle and managed
file registry belong to the host system; callers pass their own
implementations and the stubs stand in when they do not.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from asset_archive.application.ports.archive_metrics import ArchiveMetricsProtocol
from asset_archive.application.ports.archive_note_repository import (
    ArchiveNoteRepositoryProtocol,
)
from asset_archive.application.ports.archive_repository import ArchiveRepositoryProtocol
from asset_archive.application.ports.asset_catalog import AssetCatalogProtocol
from asset_archive.application.ports.checksum_queue import ChecksumQueueProtocol
from asset_archive.application.ports.file_store import FileStoreProtocol
from asset_archive.application.ports.managed_file_registry import (
    ManagedFileRegistryProtocol,
)
from asset_archive.application.ports.time_authority import TimeAuthorityProtocol
from asset_archive.application.ports.usage_oracle import UsageOracleProtocol
from asset_archive.application.services.archive_lifecycle_service import (
    ArchiveLifecycleService,
)
from asset_archive.application.services.archive_note_service import ArchiveNoteService
from asset_archive.application.services.checksum_engine import ChecksumEngine
from asset_archive.application.services.checksum_worker_service import (
    ChecksumWorkerService,
)
from asset_archive.application.services.compliance_clock import ComplianceClock
from asset_archive.application.services.execution_gate_validator import (
    ExecutionGateValidator,
)
from asset_archive.application.services.reconciliation_engine import (
    ReconciliationEngine,
)
from asset_archive.application.services.time_authority_service import (
    SystemTimeAuthority,
)
from asset_archive.bootstrap.database import DATABASE_URL_ENV, get_session_factory
from asset_archive.config.archive_config import ArchiveConfig
from asset_archive.infrastructure.adapters.filesystem.local_file_store import (
    LocalFileStore,
)
from asset_archive.infrastructure.adapters.persistence.migrations import apply_migrations
from asset_archive.infrastructure.adapters.persistence.postgres_archive_note_repository import (
    PostgresArchiveNoteRepository,
)
from asset_archive.infrastructure.adapters.persistence.postgres_archive_repository import (
    PostgresArchiveRepository,
)
from asset_archive.infrastructure.adapters.persistence.postgres_checksum_queue import (
    PostgresChecksumQueue,
)
from asset_archive.infrastructure.monitoring.metrics import get_metrics_collector
from asset_archive.infrastructure.stubs.archive_note_repository_stub import (
    ArchiveNoteRepositoryStub,
)
from asset_archive.infrastructure.stubs.archive_repository_stub import (
    ArchiveRepositoryStub,
)
from asset_archive.infrastructure.stubs.asset_catalog_stub import AssetCatalogStub
from asset_archive.infrastructure.stubs.checksum_queue_stub import ChecksumQueueStub
from asset_archive.infrastructure.stubs.managed_file_registry_stub import (
    ManagedFileRegistryStub,
)
from asset_archive.infrastructure.stubs.usage_oracle_stub import UsageOracleStub

logger = get_logger(__name__)


@dataclass(frozen=True)
class ArchiveServices:
    """Everything a host needs to drive the archive lifecycle."""

    config: ArchiveConfig
    time_authority: TimeAuthorityProtocol
    repository: ArchiveRepositoryProtocol
    checksum_queue: ChecksumQueueProtocol
    notes_repository: ArchiveNoteRepositoryProtocol
    file_store: FileStoreProtocol
    compliance_clock: ComplianceClock
    gate_validator: ExecutionGateValidator
    checksum_engine: ChecksumEngine
    lifecycle: ArchiveLifecycleService
    notes: ArchiveNoteService
    reconciliation: ReconciliationEngine
    checksum_worker: ChecksumWorkerService


def build_archive_services(
    config: ArchiveConfig,
    *,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    time_authority: TimeAuthorityProtocol | None = None,
    catalog: AssetCatalogProtocol | None = None,
    usage_oracle: UsageOracleProtocol | None = None,
    registry: ManagedFileRegistryProtocol | None = None,
    file_store: FileStoreProtocol | None = None,
    metrics: ArchiveMetricsProtocol | None = None,
) -> ArchiveServices:
    """Wire the archive services.

    Args:
        config: Archive configuration.
        session_factory: When given, records, jobs and notes are stored in
            PostgreSQL; otherwise in memory.
        time_authority: Clock; SystemTimeAuthority when omitted.
        catalog: Asset discovery catalog of the host system.
        usage_oracle: Reference scanner of the host system.
        registry: Managed-file registry of the host system.
        file_store: File storage; a LocalFileStore over the configured
            roots when omitted.
        metrics: Metrics sink; the Prometheus collector when omitted.

    Returns:
        The wired ArchiveServices container.
    """
    clock_source = time_authority or SystemTimeAuthority()
    metrics_sink = metrics if metrics is not None else get_metrics_collector()
    registry = registry if registry is not None else ManagedFileRegistryStub()

    repository: ArchiveRepositoryProtocol
    queue: ChecksumQueueProtocol
    notes_repository: ArchiveNoteRepositoryProtocol
    if session_factory is not None:
        repository = PostgresArchiveRepository(session_factory)
        queue = PostgresChecksumQueue(session_factory, clock_source)
        notes_repository = PostgresArchiveNoteRepository(session_factory)
        backend = "postgres"
    else:
        repository = ArchiveRepositoryStub()
        queue = ChecksumQueueStub(clock_source)
        notes_repository = ArchiveNoteRepositoryStub()
        backend = "memory"

    store = file_store or LocalFileStore(
        public_root=config.public_files_root,
        private_root=config.private_files_root,
        registry=registry,
    )

    compliance_clock = ComplianceClock(clock_source, config.compliance_cutoff)
    gate_validator = ExecutionGateValidator(
        file_store=store,
        usage_oracle=usage_oracle if usage_oracle is not None else UsageOracleStub(),
        allow_in_use=config.allow_in_use,
        file_io_timeout_seconds=config.file_io_timeout_seconds,
    )
    checksum_engine = ChecksumEngine(
        file_store=store,
        time_authority=clock_source,
        sync_limit_bytes=config.checksum_sync_limit_bytes,
        file_io_timeout_seconds=config.file_io_timeout_seconds,
        checksum_timeout_seconds=config.checksum_timeout_seconds,
        metrics=metrics_sink,
    )

    lifecycle = ArchiveLifecycleService(
        repository=repository,
        catalog=catalog if catalog is not None else AssetCatalogStub(),
        gate_validator=gate_validator,
        checksum_engine=checksum_engine,
        checksum_queue=queue,
        compliance_clock=compliance_clock,
        file_store=store,
        time_authority=clock_source,
        metrics=metrics_sink,
        file_io_timeout_seconds=config.file_io_timeout_seconds,
    )
    reconciliation = ReconciliationEngine(
        repository=repository,
        gate_validator=gate_validator,
        checksum_engine=checksum_engine,
        compliance_clock=compliance_clock,
        time_authority=clock_source,
        metrics=metrics_sink,
        checksum_queue=queue,
    )
    checksum_worker = ChecksumWorkerService(
        repository=repository,
        queue=queue,
        checksum_engine=checksum_engine,
        lease_seconds=config.checksum_lease_seconds,
        metrics=metrics_sink,
    )

    logger.info(
        "archive_services_built",
        backend=backend,
        compliance_cutoff=config.compliance_cutoff.isoformat(),
        allow_in_use=config.allow_in_use,
    )

    return ArchiveServices(
        config=config,
        time_authority=clock_source,
        repository=repository,
        checksum_queue=queue,
        notes_repository=notes_repository,
        file_store=store,
        compliance_clock=compliance_clock,
        gate_validator=gate_validator,
        checksum_engine=checksum_engine,
        lifecycle=lifecycle,
        notes=ArchiveNoteService(notes_repository, repository, clock_source),
        reconciliation=reconciliation,
        checksum_worker=checksum_worker,
    )


async def build_archive_services_from_environment(
    apply_schema: bool = True,
    **overrides: Any,
) -> ArchiveServices:
    """Wire services for a standalone process.

    PostgreSQL is used when DATABASE_URL is set, in which case the
    migrations are applied first (they are idempotent). Without it the
    process runs against in-memory storage.

    Args:
        apply_schema: Apply the SQL migrations before wiring.
        **overrides: Passed through to build_archive_services.
    """
    config = ArchiveConfig.from_environment()
    session_factory = None
    if os.environ.get(DATABASE_URL_ENV):
        session_factory = get_session_factory()
        if apply_schema:
            await apply_migrations(session_factory)
    else:
        logger.warning("database_url_not_set", backend="memory")
    return build_archive_services(config, session_factory=session_factory, **overrides)
