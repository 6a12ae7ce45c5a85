"""Infrastructure stubs for development and testing.

Available stubs:
- ArchiveRepositoryStub: In-memory records with simulated CAS
- ArchiveNoteRepositoryStub: In-memory append-only notes
- AssetCatalogStub: Registered asset descriptors
- ChecksumQueueStub: Lease-based queue driven by a time authority
- ManagedFileRegistryStub: Managed file id to stream URI mapping
- UsageOracleStub: Configurable reference counts

WARNING: These stubs are NOT for production use.
Production implementations are in asset_archive/infrastructure/adapters/.
"""

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

__all__: list[str] = [
    "ArchiveNoteRepositoryStub",
    "ArchiveRepositoryStub",
    "AssetCatalogStub",
    "ChecksumQueueStub",
    "ManagedFileRegistryStub",
    "UsageOracleStub",
]
