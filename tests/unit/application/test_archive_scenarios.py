"""End-to-end archive lifecycle scenarios on the in-memory stack."""

from __future__ import annotations

import hashlib

import pytest

from asset_archive.domain.errors.state import NotQueuedError
from asset_archive.domain.models.archive_record import ArchiveStatus, Visibility
from asset_archive.domain.models.gate import GateBlockReason
from asset_archive.domain.models.lifecycle_results import ExecutionOutcome
from tests.helpers import ACTOR, AFTER_CUTOFF, ArchiveHarness

MIB = 1024 * 1024


@pytest.mark.asyncio
async def test_ten_mebibyte_pdf_is_hashed_synchronously(harness: ArchiveHarness) -> None:
    content = b"%PDF-1.4\n" + b"\x00" * (10 * MIB - 9)
    harness.add_asset("doc-1", "reports/annual-2018.pdf", content)

    result = await harness.archive("doc-1", Visibility.PUBLIC)

    assert result.outcome is ExecutionOutcome.EXECUTED
    assert result.record.status is ArchiveStatus.ARCHIVED_PUBLIC
    assert result.record.checksum_sha256 == hashlib.sha256(content).hexdigest()
    assert not result.checksum_pending


@pytest.mark.asyncio
async def test_file_in_use_is_blocked(harness: ArchiveHarness) -> None:
    descriptor = harness.add_asset("doc-1", "reports/annual-2018.pdf")
    harness.usage.set_count(descriptor.locator, 2)
    record = await harness.enqueue("doc-1")

    result = await harness.services.lifecycle.execute(
        record.id, Visibility.PUBLIC, actor=ACTOR
    )

    assert result.outcome is ExecutionOutcome.BLOCKED
    assert result.blocked.reason is GateBlockReason.USAGE_DETECTED
    assert result.record.flags.usage_detected
    assert result.record.status is ArchiveStatus.QUEUED


@pytest.mark.asyncio
async def test_legacy_archive_modified_after_cutoff_voids_exemption(
    harness: ArchiveHarness,
) -> None:
    harness.add_asset("doc-1", "reports/annual-2018.pdf")
    archived = (await harness.archive("doc-1", Visibility.PUBLIC)).record
    harness.set_time(AFTER_CUTOFF)
    harness.write_file("reports/annual-2018.pdf", b"%PDF-1.4 corrupted")

    await harness.services.reconciliation.run()

    stored = await harness.services.lifecycle.get(archived.id)
    assert stored.status is ArchiveStatus.EXEMPTION_VOID
    assert stored.flags.integrity_violation


@pytest.mark.asyncio
async def test_general_archive_modified_after_cutoff_is_removed(
    harness: ArchiveHarness,
) -> None:
    harness.set_time(AFTER_CUTOFF)
    harness.add_asset("doc-1", "reports/annual-2018.pdf")
    archived = (await harness.archive("doc-1", Visibility.PUBLIC)).record
    harness.write_file("reports/annual-2018.pdf", b"%PDF-1.4 corrupted")

    await harness.services.reconciliation.run()

    stored = await harness.services.lifecycle.get(archived.id)
    assert stored.status is ArchiveStatus.ARCHIVED_DELETED
    assert stored.flags.content_modified
    assert stored.status is not ArchiveStatus.EXEMPTION_VOID


@pytest.mark.asyncio
async def test_large_file_is_hashed_by_worker(harness: ArchiveHarness) -> None:
    content = b"\x00\x00\x00\x18ftypmp42 meeting recording"
    harness.add_asset(
        "vid-1", "videos/council-2019.mp4", content, asset_type="mp4", size_bytes=200 * MIB
    )

    result = await harness.archive("vid-1", Visibility.ADMIN)

    assert result.was_executed
    assert result.record.checksum_sha256 is None
    assert await harness.queue.depth() == 1

    batch = await harness.services.checksum_worker.process_pending()

    stored = await harness.services.lifecycle.get(result.record.id)
    assert batch.processed == 1
    assert stored.checksum_sha256 == hashlib.sha256(content).hexdigest()
    assert stored.status is ArchiveStatus.ARCHIVED_ADMIN
    assert stored.classified_at == result.record.classified_at


@pytest.mark.asyncio
async def test_remove_from_queue_rejects_archived_record(harness: ArchiveHarness) -> None:
    harness.add_asset("doc-1", "reports/annual-2018.pdf")
    archived = (await harness.archive("doc-1", Visibility.PUBLIC)).record

    with pytest.raises(NotQueuedError):
        await harness.services.lifecycle.remove_from_queue(archived.id, actor=ACTOR)


@pytest.mark.asyncio
async def test_void_history_outlives_unarchive(harness: ArchiveHarness) -> None:
    harness.add_asset("doc-1", "reports/annual-2018.pdf")
    first = (await harness.archive("doc-1", Visibility.PUBLIC)).record
    harness.set_time(AFTER_CUTOFF)
    harness.write_file("reports/annual-2018.pdf", b"%PDF-1.4 corrupted")
    await harness.services.reconciliation.run()
    withdrawn = await harness.services.lifecycle.unarchive(first.id, actor=ACTOR)

    second = (await harness.archive("doc-1", Visibility.ADMIN)).record

    assert withdrawn.status is ArchiveStatus.ARCHIVED_DELETED
    assert withdrawn.voided_at == AFTER_CUTOFF
    assert await harness.repository.has_void_history(first.locator_key)
    assert second.flags.late_classification
    assert second.flags.prior_void
    assert not second.is_legacy_classified
