"""Usage oracle stub implementation.

Reference counts are keyed by locator identity. Unknown files have no
references.
"""

from __future__ import annotations

from asset_archive.application.ports.usage_oracle import UsageOracleProtocol
from asset_archive.domain.models.archive_record import SourceLocator


class UsageOracleStub(UsageOracleProtocol):
    """Configurable usage oracle for testing.

    Attributes:
        _counts: Reference count per locator identity key
        _queries: Locators queried, in order (for assertions)
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._queries: list[SourceLocator] = []

    def set_count(self, locator: SourceLocator, count: int) -> None:
        """Set the number of active references to a file."""
        self._counts[locator.identity_key] = count

    async def active_reference_count(self, locator: SourceLocator) -> int:
        self._queries.append(locator)
        return self._counts.get(locator.identity_key, 0)

    @property
    def queries(self) -> list[SourceLocator]:
        return list(self._queries)
