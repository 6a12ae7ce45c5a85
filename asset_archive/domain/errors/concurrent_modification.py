"""Concurrent modification error for optimistic concurrency control.

This module defines the error raised when a compare-and-swap write on an
archive record fails because another caller changed the record after it
was read.

This is a recoverable error - the caller should re-read the record and
retry once before surfacing a conflict.
"""

from __future__ import annotations

from uuid import UUID

from asset_archive.domain.exceptions import ArchiveError


class ConcurrentModificationError(ArchiveError):
    """Raised when a CAS write fails due to concurrent modification.

    Attributes:
        record_id: UUID of the archive record that was being modified.
        expected_version: The version the writer read before modifying.
        actual_version: The version found in storage (None if the record
            disappeared in the meantime).
        operation: Description of the operation that failed.
    """

    def __init__(
        self,
        record_id: UUID,
        expected_version: int,
        actual_version: int | None = None,
        operation: str = "update",
    ) -> None:
        """Initialize concurrent modification error.

        Args:
            record_id: UUID of the record being modified.
            expected_version: Version expected by the CAS write.
            actual_version: Version currently stored, if known.
            operation: Description of the failed operation.
        """
        self.record_id = record_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        self.operation = operation
        found = (
            f"found version {actual_version}"
            if actual_version is not None
            else "record no longer exists"
        )
        super().__init__(
            f"Concurrent modification detected for archive record {record_id} "
            f"during {operation}. Expected version {expected_version}, {found}."
        )
