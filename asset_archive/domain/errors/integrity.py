"""Integrity errors raised by checksum computation.

When the integrity of a file cannot be proven or disproven (file
unreadable, hashing timed out) callers fail closed: reconciliation
treats the record as integrity-violated rather than skipping it.
"""

from __future__ import annotations

from asset_archive.domain.exceptions import ArchiveError


class IntegrityUnresolvableError(ArchiveError):
    """Raised when a checksum cannot be computed for a locator.

    Attributes:
        locator: Locator string that was being hashed.
        reason: Why hashing could not complete.
    """

    def __init__(self, locator: str, reason: str) -> None:
        """Initialize integrity unresolvable error.

        Args:
            locator: Locator string that was being hashed.
            reason: Why hashing could not complete.
        """
        self.locator = locator
        self.reason = reason
        super().__init__(f"Cannot calculate checksum for {locator}: {reason}")


class FileUnreadableError(IntegrityUnresolvableError):
    """Raised when the resolved file does not exist or cannot be opened."""

    def __init__(self, locator: str, reason: str = "file not found") -> None:
        super().__init__(locator=locator, reason=reason)
