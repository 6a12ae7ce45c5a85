"""Archive note repository stub implementation (append-only, in memory)."""

from __future__ import annotations

from uuid import UUID

from asset_archive.application.ports.archive_note_repository import (
    ArchiveNoteRepositoryProtocol,
)
from asset_archive.domain.models.archive_note import ArchiveNote


class ArchiveNoteRepositoryStub(ArchiveNoteRepositoryProtocol):
    """In-memory note storage for testing."""

    def __init__(self) -> None:
        self._notes: list[ArchiveNote] = []

    async def add(self, note: ArchiveNote) -> None:
        self._notes.append(note)

    async def list_for_archive(self, archive_id: UUID) -> list[ArchiveNote]:
        notes = [n for n in self._notes if n.archive_id == archive_id]
        return sorted(notes, key=lambda n: n.created_at)

    def clear(self) -> None:
        self._notes.clear()
