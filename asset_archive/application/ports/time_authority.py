"""Time authority port.

Late classification and exemption voiding both hinge on where "now" sits
relative to the compliance cutoff, so components receive a clock instead
of reading the host one. SystemTimeAuthority is the production clock;
tests pin and advance tests/helpers/fake_time_authority.FakeTimeAuthority.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Source of wall-clock and monotonic time.

    Example:
        class ArchiveNoteService:
            def __init__(self, ..., time_authority: TimeAuthorityProtocol) -> None:
                self._time = time_authority

            async def add_note(self, ...) -> ArchiveNote:
                created_at = self._time.now()
    """

    @abstractmethod
    def now(self) -> datetime:
        """Current instant, timezone-aware."""
        ...

    @abstractmethod
    def utcnow(self) -> datetime:
        """Current instant in UTC, timezone-aware."""
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Monotonic seconds; only differences are meaningful (durations)."""
        ...
