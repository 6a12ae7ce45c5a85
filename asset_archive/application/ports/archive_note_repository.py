"""Archive note repository port (append-only)."""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from asset_archive.domain.models.archive_note import ArchiveNote


class ArchiveNoteRepositoryProtocol(Protocol):
    """Protocol for storing internal notes on archive records."""

    async def add(self, note: ArchiveNote) -> None:
        """Append a note."""
        ...

    async def list_for_archive(self, archive_id: UUID) -> list[ArchiveNote]:
        """Return the notes of a record, oldest first."""
        ...
