"""PostgreSQL implementation of ArchiveNoteRepositoryProtocol (append-only)."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from asset_archive.application.ports.archive_note_repository import (
    ArchiveNoteRepositoryProtocol,
)
from asset_archive.domain.models.archive_note import ArchiveNote

_INSERT_SQL = text(
    """
    INSERT INTO archive_notes (id, archive_id, text, author, created_at)
    VALUES (:id, :archive_id, :text, :author, :created_at)
    """
)

_LIST_SQL = text(
    """
    SELECT id, archive_id, text, author, created_at
    FROM archive_notes
    WHERE archive_id = :archive_id
    ORDER BY created_at, id
    """
)


class PostgresArchiveNoteRepository(ArchiveNoteRepositoryProtocol):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add(self, note: ArchiveNote) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                _INSERT_SQL,
                {
                    "id": note.id,
                    "archive_id": note.archive_id,
                    "text": note.text,
                    "author": note.author,
                    "created_at": note.created_at,
                },
            )

    async def list_for_archive(self, archive_id: UUID) -> list[ArchiveNote]:
        async with self._session_factory() as session:
            result = await session.execute(_LIST_SQL, {"archive_id": archive_id})
            rows = result.mappings().all()
        return [
            ArchiveNote(
                id=UUID(str(row["id"])),
                archive_id=UUID(str(row["archive_id"])),
                text=row["text"],
                author=row["author"],
                created_at=row["created_at"],
            )
            for row in rows
        ]
