"""Immutable field error for write-once archive fields.

The classification timestamp and the SHA-256 checksum are write-once per
lifecycle. The persistence boundary raises this error when any write path
other than the queued -> archived transition (or the single deferred
checksum write) attempts to change them.
"""

from __future__ import annotations

from uuid import UUID

from asset_archive.domain.exceptions import ArchiveError


class ImmutableFieldError(ArchiveError):
    """Raised when a write-once field would be changed.

    Attributes:
        record_id: UUID of the archive record.
        field_name: Name of the immutable field.
    """

    def __init__(self, record_id: UUID, field_name: str) -> None:
        """Initialize immutable field error.

        Args:
            record_id: UUID of the archive record.
            field_name: Name of the immutable field.
        """
        self.record_id = record_id
        self.field_name = field_name
        super().__init__(
            f"Field '{field_name}' of archive record {record_id} is immutable. "
            "It can only be set during archive execution."
        )
