"""Configuration module for the asset archive.

Available Configurations:
- ArchiveConfig: Compliance cutoff, gates, checksum and worker tuning
"""

from asset_archive.config.archive_config import (
    DEFAULT_ARCHIVE_CONFIG,
    DEFAULT_CHECKSUM_SYNC_LIMIT_BYTES,
    DEFAULT_COMPLIANCE_CUTOFF,
    ArchiveConfig,
)

__all__ = [
    "ArchiveConfig",
    "DEFAULT_ARCHIVE_CONFIG",
    "DEFAULT_CHECKSUM_SYNC_LIMIT_BYTES",
    "DEFAULT_COMPLIANCE_CUTOFF",
]
