"""Unit tests for checksum jobs, notes, gate results and lifecycle results."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from asset_archive.domain.errors.validation import ArchiveValidationError
from asset_archive.domain.models.archive_note import MAX_NOTE_LENGTH, ArchiveNote
from asset_archive.domain.models.archive_record import ArchiveStatus
from asset_archive.domain.models.checksum_job import ChecksumJob
from asset_archive.domain.models.gate import (
    GateBlocked,
    GateBlockReason,
    GateCheckResult,
)
from asset_archive.domain.models.lifecycle_results import (
    ChecksumBatchResult,
    ReconciliationAction,
    ReconciliationOutcome,
    ReconciliationReport,
)

NOW = datetime(2026, 3, 1, 8, 0, 0, tzinfo=timezone.utc)


class TestChecksumJob:
    def test_unclaimed_job_is_claimable(self) -> None:
        job = ChecksumJob(id=uuid4(), record_id=uuid4(), created_at=NOW)
        assert job.is_claimable(NOW)

    def test_lease_blocks_until_expiry(self) -> None:
        job = ChecksumJob(id=uuid4(), record_id=uuid4(), created_at=NOW)
        leased = job.with_lease(NOW, 300)
        assert leased.attempts == 1
        assert leased.lease_expires_at == NOW + timedelta(seconds=300)
        assert not leased.is_claimable(NOW + timedelta(seconds=299))
        assert leased.is_claimable(NOW + timedelta(seconds=300))

    def test_released_job_is_claimable_again(self) -> None:
        job = ChecksumJob(id=uuid4(), record_id=uuid4(), created_at=NOW).with_lease(NOW, 300)
        released = job.released()
        assert released.is_claimable(NOW)
        assert released.attempts == 1


class TestArchiveNote:
    def test_blank_text_rejected(self) -> None:
        with pytest.raises(ArchiveValidationError):
            ArchiveNote(id=uuid4(), archive_id=uuid4(), text="  ", author="u", created_at=NOW)

    def test_text_length_limit(self) -> None:
        ArchiveNote(
            id=uuid4(),
            archive_id=uuid4(),
            text="x" * MAX_NOTE_LENGTH,
            author="u",
            created_at=NOW,
        )
        with pytest.raises(ArchiveValidationError):
            ArchiveNote(
                id=uuid4(),
                archive_id=uuid4(),
                text="x" * (MAX_NOTE_LENGTH + 1),
                author="u",
                created_at=NOW,
            )


class TestGateCheckResult:
    def test_passed_without_blocks(self) -> None:
        result = GateCheckResult(file_exists=True, usage_count=0)
        assert result.passed
        assert result.first_block() is None
        assert not result.usage_detected

    def test_first_block_in_gate_order(self) -> None:
        missing = GateBlocked(GateBlockReason.FILE_MISSING, "gone")
        usage = GateBlocked(GateBlockReason.USAGE_DETECTED, "in use")
        result = GateCheckResult(file_exists=False, blocks=(missing, usage))
        assert not result.passed
        assert result.first_block() == missing


class TestResults:
    def test_batch_claimed_counts_everything(self) -> None:
        assert ChecksumBatchResult(processed=2, skipped=1, failed=3).claimed == 6

    def test_report_counts_actions(self) -> None:
        report = ReconciliationReport()
        report.add(
            ReconciliationOutcome(
                record_id=uuid4(),
                action=ReconciliationAction.UNCHANGED,
                previous_status=ArchiveStatus.QUEUED,
                new_status=ArchiveStatus.QUEUED,
            )
        )
        report.add(
            ReconciliationOutcome(
                record_id=uuid4(),
                action=ReconciliationAction.EXEMPTION_VOIDED,
                previous_status=ArchiveStatus.ARCHIVED_PUBLIC,
                new_status=ArchiveStatus.EXEMPTION_VOID,
            )
        )
        assert report.examined == 2
        assert report.writes == 1
        assert report.count(ReconciliationAction.EXEMPTION_VOIDED) == 1
