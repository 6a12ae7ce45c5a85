"""System time authority (production implementation of TimeAuthorityProtocol).

This is the only module in the package allowed to read the wall clock
directly (see scripts/check_no_datetime_now.py).
"""

import time
from datetime import datetime, timezone

from asset_archive.application.ports.time_authority import TimeAuthorityProtocol


class SystemTimeAuthority(TimeAuthorityProtocol):
    """Time authority backed by the host clock, always in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def utcnow(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()
