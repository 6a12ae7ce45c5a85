"""Usage oracle port (external usage-tracking collaborator)."""

from __future__ import annotations

from typing import Protocol

from asset_archive.domain.models.archive_record import SourceLocator


class UsageOracleProtocol(Protocol):
    """Protocol for counting active references to a file."""

    async def active_reference_count(self, locator: SourceLocator) -> int:
        """Return the number of places that currently reference the file."""
        ...
