"""Asset catalog stub implementation.

Holds AssetDescriptors registered by tests. An asset is archivable when
its category is Documents or Videos.
"""

from __future__ import annotations

from asset_archive.application.ports.asset_catalog import AssetCatalogProtocol
from asset_archive.domain.models.asset import AssetDescriptor


class AssetCatalogStub(AssetCatalogProtocol):
    """In-memory asset catalog for testing."""

    def __init__(self, assets: list[AssetDescriptor] | None = None) -> None:
        self._assets: dict[str, AssetDescriptor] = {}
        for asset in assets or []:
            self.add(asset)

    def add(self, asset: AssetDescriptor) -> None:
        self._assets[asset.asset_id] = asset

    async def is_archivable(self, asset_id: str) -> bool:
        asset = self._assets.get(asset_id)
        return asset is not None and asset.category.is_archivable()

    async def describe(self, asset_id: str) -> AssetDescriptor | None:
        return self._assets.get(asset_id)
