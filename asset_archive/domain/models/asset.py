"""Asset descriptor supplied by the external discovery catalog."""

from __future__ import annotations

from dataclasses import dataclass

from asset_archive.domain.models.archive_record import AssetCategory, SourceLocator


@dataclass(frozen=True, eq=True)
class AssetDescriptor:
    """What the catalog knows about a discovered asset.

    Attributes:
        asset_id: Catalog identifier.
        locator: Where the file lives.
        file_name: File name.
        asset_type: Fine-grained type (pdf, word, excel, powerpoint, mp4, ...).
        category: Catalog category (Documents, Videos, ...).
        mime_type: MIME type, if known.
        size_bytes: File size in bytes, if known.
        is_private: Whether the file is in private storage.
    """

    asset_id: str
    locator: SourceLocator
    file_name: str
    asset_type: str
    category: AssetCategory
    mime_type: str | None = None
    size_bytes: int | None = None
    is_private: bool = False
