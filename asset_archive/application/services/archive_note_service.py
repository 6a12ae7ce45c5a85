"""Internal notes on archive records (append-only)."""

from __future__ import annotations

from uuid import UUID, uuid4

from structlog import get_logger

from asset_archive.application.ports.archive_note_repository import (
    ArchiveNoteRepositoryProtocol,
)
from asset_archive.application.ports.archive_repository import ArchiveRepositoryProtocol
from asset_archive.application.ports.time_authority import TimeAuthorityProtocol
from asset_archive.domain.errors.state import RecordNotFoundError
from asset_archive.domain.models.archive_note import ArchiveNote

logger = get_logger(__name__)


class ArchiveNoteService:
    """Adds and lists internal notes for archive records.

    Notes can be added in any status, including ARCHIVED_DELETED, since
    the record stays part of the audit trail.
    """

    def __init__(
        self,
        notes: ArchiveNoteRepositoryProtocol,
        repository: ArchiveRepositoryProtocol,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._notes = notes
        self._repository = repository
        self._time = time_authority

    async def _require_record(self, record_id: UUID) -> None:
        if await self._repository.get(record_id) is None:
            raise RecordNotFoundError(record_id)

    async def add_note(self, record_id: UUID, text: str, actor: str) -> ArchiveNote:
        """Append a note to a record.

        Raises:
            RecordNotFoundError: If the record does not exist.
            ArchiveValidationError: If the text is empty or too long.
        """
        await self._require_record(record_id)
        note = ArchiveNote(
            id=uuid4(),
            archive_id=record_id,
            text=text.strip(),
            author=actor,
            created_at=self._time.now(),
        )
        await self._notes.add(note)
        logger.info(
            "archive_note_added",
            record_id=str(record_id),
            note_id=str(note.id),
            actor=actor,
        )
        return note

    async def list_notes(self, record_id: UUID) -> list[ArchiveNote]:
        """Return a record's notes, oldest first.

        Raises:
            RecordNotFoundError: If the record does not exist.
        """
        await self._require_record(record_id)
        return await self._notes.list_for_archive(record_id)
