"""Filesystem adapters: locator resolution and local file storage."""

from asset_archive.infrastructure.adapters.filesystem.local_file_store import (
    LocalFileStore,
)
from asset_archive.infrastructure.adapters.filesystem.locator_resolver import (
    resolve_source_uri,
    url_path_to_stream_uri,
)

__all__: list[str] = ["LocalFileStore", "resolve_source_uri", "url_path_to_stream_uri"]
