"""Internal notes attached to archive records.

Notes are append-only: they are never edited or deleted, so the
discussion around an archive decision stays part of its audit trail.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from asset_archive.domain.errors.validation import ArchiveValidationError

MAX_NOTE_LENGTH = 500


@dataclass(frozen=True, eq=True)
class ArchiveNote:
    """An internal note on an archive record.

    Attributes:
        id: Note identifier.
        archive_id: Archive record the note belongs to.
        text: Note body (max 500 characters).
        author: Actor who wrote the note.
        created_at: When the note was written.
    """

    id: UUID
    archive_id: UUID
    text: str
    author: str
    created_at: datetime

    def __post_init__(self) -> None:
        if not self.text.strip():
            raise ArchiveValidationError("text", "Note text cannot be empty.")
        if len(self.text) > MAX_NOTE_LENGTH:
            raise ArchiveValidationError(
                "text", f"Note text exceeds maximum length of {MAX_NOTE_LENGTH} characters."
            )
