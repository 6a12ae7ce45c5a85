"""Unit tests for ComplianceClock."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from asset_archive.application.services.compliance_clock import ComplianceClock
from asset_archive.domain.models.archive_record import ArchiveFlags, ArchiveStatus
from tests.helpers import AFTER_CUTOFF, BEFORE_CUTOFF, FakeTimeAuthority, make_record
from tests.helpers.record_factory import SAMPLE_CHECKSUM


@pytest.fixture
def clock(
    fake_time_authority: FakeTimeAuthority, compliance_cutoff: datetime
) -> ComplianceClock:
    return ComplianceClock(fake_time_authority, compliance_cutoff)


def _classified(at: datetime, **overrides):
    fields = {
        "status": ArchiveStatus.ARCHIVED_PUBLIC,
        "classified_at": at,
        "checksum_sha256": SAMPLE_CHECKSUM,
        **overrides,
    }
    return make_record(**fields)


class TestCutoff:
    def test_cutoff_is_strict(
        self, clock: ComplianceClock, compliance_cutoff: datetime
    ) -> None:
        assert not clock.is_after_cutoff(compliance_cutoff)
        assert clock.is_after_cutoff(compliance_cutoff + timedelta(microseconds=1))

    def test_compliance_mode_follows_time_authority(
        self, clock: ComplianceClock, fake_time_authority: FakeTimeAuthority
    ) -> None:
        assert not clock.is_compliance_mode()
        fake_time_authority.set_time(AFTER_CUTOFF)
        assert clock.is_compliance_mode()
        assert not clock.is_compliance_mode(BEFORE_CUTOFF)

    def test_naive_cutoff_rejected(self, fake_time_authority: FakeTimeAuthority) -> None:
        with pytest.raises(ValueError):
            ComplianceClock(fake_time_authority, datetime(2026, 4, 24))

    def test_cutoff_label(self, clock: ComplianceClock) -> None:
        assert clock.cutoff_label() == "April 24, 2026"

    def test_custom_cutoff_label(self, fake_time_authority: FakeTimeAuthority) -> None:
        clock = ComplianceClock(
            fake_time_authority, datetime(2027, 1, 5, tzinfo=timezone.utc)
        )
        assert clock.cutoff_label() == "January 5, 2027"


class TestLegacyEligibility:
    def test_classified_before_cutoff_is_legacy(self, clock: ComplianceClock) -> None:
        record = _classified(BEFORE_CUTOFF)

        assert clock.is_legacy_eligible(record, [record])

    def test_classified_at_cutoff_is_legacy(
        self, clock: ComplianceClock, compliance_cutoff: datetime
    ) -> None:
        assert clock.is_legacy_eligible(_classified(compliance_cutoff), [])

    def test_classified_after_cutoff_is_general(self, clock: ComplianceClock) -> None:
        assert not clock.is_legacy_eligible(_classified(AFTER_CUTOFF), [])

    def test_unclassified_is_not_legacy(self, clock: ComplianceClock) -> None:
        assert not clock.is_legacy_eligible(make_record(), [])

    def test_void_history_removes_eligibility(self, clock: ComplianceClock) -> None:
        record = _classified(BEFORE_CUTOFF)
        voided = _classified(
            BEFORE_CUTOFF - timedelta(days=90), status=ArchiveStatus.EXEMPTION_VOID
        )

        assert not clock.is_legacy_eligible(record, [voided, record])

    def test_unarchived_void_record_still_counts(self, clock: ComplianceClock) -> None:
        record = _classified(BEFORE_CUTOFF)
        withdrawn = _classified(
            BEFORE_CUTOFF - timedelta(days=90),
            status=ArchiveStatus.ARCHIVED_DELETED,
            voided_at=BEFORE_CUTOFF - timedelta(days=60),
        )

        assert not clock.is_legacy_eligible(record, [withdrawn, record])

    @pytest.mark.parametrize(
        "flags",
        [
            ArchiveFlags(late_classification=True, prior_void=True),
            ArchiveFlags(late_classification=True),
        ],
    )
    def test_late_classification_is_never_legacy(
        self, clock: ComplianceClock, flags: ArchiveFlags
    ) -> None:
        record = _classified(BEFORE_CUTOFF, flags=flags)

        assert not clock.is_legacy_eligible(record, [record])

    def test_own_void_status_is_ignored(self, clock: ComplianceClock) -> None:
        record = _classified(BEFORE_CUTOFF, status=ArchiveStatus.EXEMPTION_VOID)

        assert clock.is_legacy_eligible(record, [record])


class TestClassificationFlags:
    @pytest.mark.parametrize(
        ("now", "prior_void", "expected"),
        [
            (BEFORE_CUTOFF, False, (False, False)),
            (BEFORE_CUTOFF, True, (True, True)),
            (AFTER_CUTOFF, False, (True, False)),
            (AFTER_CUTOFF, True, (True, True)),
        ],
    )
    def test_classification_flags(
        self,
        clock: ComplianceClock,
        now: datetime,
        prior_void: bool,
        expected: tuple[bool, bool],
    ) -> None:
        assert clock.classification_flags(now, prior_void) == expected
