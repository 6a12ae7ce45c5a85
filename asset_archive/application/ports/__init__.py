"""Application ports: interfaces the core consumes.

Infrastructure provides the implementations (in-memory stubs for tests and
development, PostgreSQL and local-filesystem adapters for production).
"""

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

__all__: list[str] = [
    "ArchiveMetricsProtocol",
    "ArchiveNoteRepositoryProtocol",
    "ArchiveRepositoryProtocol",
    "AssetCatalogProtocol",
    "ChecksumQueueProtocol",
    "FileStoreProtocol",
    "ManagedFileRegistryProtocol",
    "TimeAuthorityProtocol",
    "UsageOracleProtocol",
]
