"""Unit tests for ArchiveNoteService."""

from __future__ import annotations

from uuid import uuid4

import pytest

from asset_archive.domain.errors.state import RecordNotFoundError
from asset_archive.domain.errors.validation import ArchiveValidationError
from tests.helpers import ACTOR, BEFORE_CUTOFF, ArchiveHarness


class TestArchiveNoteService:
    @pytest.mark.asyncio
    async def test_notes_listed_oldest_first(self, harness: ArchiveHarness) -> None:
        harness.add_asset("doc-1", "reports/budget-2019.pdf")
        record = await harness.enqueue("doc-1")
        notes = harness.services.notes

        first = await notes.add_note(record.id, "  Checked with records office ", ACTOR)
        harness.time.advance(seconds=30)
        second = await notes.add_note(record.id, "Approved for archive", "user:9")

        listed = await notes.list_notes(record.id)
        assert listed == [first, second]
        assert first.text == "Checked with records office"
        assert first.created_at == BEFORE_CUTOFF
        assert second.author == "user:9"

    @pytest.mark.asyncio
    async def test_notes_allowed_on_deleted_record(self, harness: ArchiveHarness) -> None:
        harness.add_asset("doc-1", "reports/budget-2019.pdf")
        executed = (await harness.archive("doc-1")).record
        await harness.services.lifecycle.unarchive(executed.id, actor=ACTOR)

        note = await harness.services.notes.add_note(
            executed.id, "Withdrawn after review", ACTOR
        )

        assert note.archive_id == executed.id

    @pytest.mark.asyncio
    async def test_notes_are_per_record(self, harness: ArchiveHarness) -> None:
        harness.add_asset("doc-1", "reports/a.pdf")
        harness.add_asset("doc-2", "reports/b.pdf")
        a = await harness.enqueue("doc-1")
        b = await harness.enqueue("doc-2")
        await harness.services.notes.add_note(a.id, "note on a", ACTOR)

        assert await harness.services.notes.list_notes(b.id) == []

    @pytest.mark.asyncio
    async def test_unknown_record(self, harness: ArchiveHarness) -> None:
        with pytest.raises(RecordNotFoundError):
            await harness.services.notes.add_note(uuid4(), "text", ACTOR)
        with pytest.raises(RecordNotFoundError):
            await harness.services.notes.list_notes(uuid4())

    @pytest.mark.parametrize("text", ["", "   ", "x" * 501])
    @pytest.mark.asyncio
    async def test_invalid_text(self, harness: ArchiveHarness, text: str) -> None:
        harness.add_asset("doc-1", "reports/budget-2019.pdf")
        record = await harness.enqueue("doc-1")

        with pytest.raises(ArchiveValidationError):
            await harness.services.notes.add_note(record.id, text, ACTOR)
