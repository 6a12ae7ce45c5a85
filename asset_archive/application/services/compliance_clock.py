"""Compliance clock: the cutoff that separates legacy from general archives.

Records classified at or before the cutoff are legacy archives and keep
a retention exemption while their file stays intact. Records classified
after it, or for a file whose exemption was ever voided, are general
archives.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from asset_archive.application.ports.time_authority import TimeAuthorityProtocol
from asset_archive.config.archive_config import DEFAULT_COMPLIANCE_CUTOFF
from asset_archive.domain.models.archive_record import ArchiveRecord


class ComplianceClock:
    """Holds the configured cutoff and answers cutoff questions.

    Example:
        >>> clock = ComplianceClock(time_authority, cutoff=cutoff)
        >>> late, prior_void = clock.classification_flags(now, has_prior_void=False)
    """

    def __init__(
        self,
        time_authority: TimeAuthorityProtocol,
        cutoff: datetime = DEFAULT_COMPLIANCE_CUTOFF,
    ) -> None:
        if cutoff.tzinfo is None:
            raise ValueError("cutoff must be timezone-aware")
        self._time = time_authority
        self._cutoff = cutoff

    @property
    def cutoff(self) -> datetime:
        return self._cutoff

    def is_after_cutoff(self, instant: datetime) -> bool:
        """True if instant is strictly after the cutoff."""
        return instant > self._cutoff

    def is_compliance_mode(self, now: datetime | None = None) -> bool:
        """True once the cutoff has passed (defaults to the current time)."""
        return self.is_after_cutoff(now if now is not None else self._time.now())

    def is_legacy_eligible(
        self,
        record: ArchiveRecord,
        history: Iterable[ArchiveRecord],
    ) -> bool:
        """Decide whether a record is a legacy archive.

        Args:
            record: The classified record.
            history: Every record for the same file (may include record).

        Returns:
            True iff the record was classified at or before the cutoff, was
            not flagged late when classified, and no other record for the
            file ever reached EXEMPTION_VOID.
        """
        if record.classified_at is None or self.is_after_cutoff(record.classified_at):
            return False
        if record.flags.late_classification or record.flags.prior_void:
            return False
        return not any(other.id != record.id and other.was_ever_voided for other in history)

    def classification_flags(
        self, now: datetime, has_prior_void: bool
    ) -> tuple[bool, bool]:
        """Return (late_classification, prior_void) for a record classified now."""
        return self.is_after_cutoff(now) or has_prior_void, has_prior_void

    def cutoff_label(self) -> str:
        """Human-readable cutoff date, e.g. "April 24, 2026"."""
        return f"{self._cutoff:%B} {self._cutoff.day}, {self._cutoff.year}"
