"""File store port: locator resolution and raw file access.

Methods are synchronous and may block on disk or network I/O. Services
call them through asyncio.to_thread under a bounded timeout and treat a
timeout as "missing" or "unverifiable", never as a hang.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

from asset_archive.domain.models.archive_record import SourceLocator


class FileStoreProtocol(Protocol):
    """Protocol for reaching the file behind a source locator."""

    def resolve(self, locator: SourceLocator) -> str | None:
        """Resolve a locator to a storage path.

        Returns:
            The resolved path, or None if the locator cannot be mapped.
        """
        ...

    def exists(self, resolved_path: str) -> bool:
        """Return True if the resolved path is a readable file."""
        ...

    def iter_chunks(self, resolved_path: str, chunk_size: int) -> Iterator[bytes]:
        """Stream the file contents in chunks.

        Raises:
            OSError: If the file cannot be opened or read.
        """
        ...

    def delete(self, resolved_path: str) -> None:
        """Delete the file. Deleting an absent file is not an error.

        Raises:
            OSError: If the file exists but cannot be deleted.
        """
        ...

    def forget_managed_file(self, managed_file_id: int) -> None:
        """Drop the managed-file registry entry for a deleted file."""
        ...
