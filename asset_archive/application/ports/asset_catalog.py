"""Asset catalog port (external discovery/scanning collaborator).

The core only consumes "is this asset archivable?" and the descriptive
facts needed to open an archive record.
"""

from __future__ import annotations

from typing import Protocol

from asset_archive.domain.models.asset import AssetDescriptor


class AssetCatalogProtocol(Protocol):
    """Protocol for the asset discovery catalog."""

    async def is_archivable(self, asset_id: str) -> bool:
        """Return True if the asset's category allows archiving."""
        ...

    async def describe(self, asset_id: str) -> AssetDescriptor | None:
        """Return the catalog description of an asset, or None if unknown."""
        ...
