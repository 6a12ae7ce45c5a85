"""State errors for the archive record lifecycle.

This module defines errors for operations that are not valid for the
current status of an archive record. State errors are caller mistakes:
they are returned synchronously and never retried automatically.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from asset_archive.domain.exceptions import ArchiveError

if TYPE_CHECKING:
    from asset_archive.domain.models.archive_record import ArchiveStatus


class ArchiveStateError(ArchiveError):
    """Base class for operations invalid in the record's current state."""


class RecordNotFoundError(ArchiveStateError):
    """Raised when an archive record does not exist.

    Attributes:
        record_id: UUID (or public id) that was looked up.
    """

    def __init__(self, record_id: UUID) -> None:
        self.record_id = record_id
        super().__init__(f"Archive record not found: {record_id}")


class _StatusGuardError(ArchiveStateError):
    """Shared shape for status precondition failures."""

    requirement: str = ""

    def __init__(self, record_id: UUID, status: ArchiveStatus, operation: str) -> None:
        self.record_id = record_id
        self.status = status
        self.operation = operation
        super().__init__(
            f"Cannot {operation} archive record {record_id} "
            f"(status: {status.value}). {self.requirement}"
        )


class NotQueuedError(_StatusGuardError):
    """Raised when an operation requires status QUEUED."""

    requirement = "Only queued assets can be archived or removed from the queue."


class NotActiveError(_StatusGuardError):
    """Raised when visibility is toggled on a record that is not archived-active."""

    requirement = "Only active archived assets can have visibility toggled."


class NotUnarchivableError(_StatusGuardError):
    """Raised when unarchive is attempted on a queued or deleted record."""

    requirement = "Only active archived assets or voided exemptions can be unarchived."


class NotDeletableError(ArchiveStateError):
    """Raised when the file behind a record may not be deleted.

    Attributes:
        record_id: UUID of the archive record.
        status: Current status of the record.
        reason: Why deletion is not allowed.
    """

    def __init__(self, record_id: UUID, status: ArchiveStatus, reason: str) -> None:
        self.record_id = record_id
        self.status = status
        self.reason = reason
        super().__init__(
            f"Cannot delete file for archive record {record_id} "
            f"(status: {status.value}): {reason}"
        )


class NotArchivableError(ArchiveStateError):
    """Raised when an asset's category is not eligible for archiving.

    Attributes:
        asset_id: Catalog identifier of the asset.
        category: The asset's category as reported by the catalog.
    """

    def __init__(self, asset_id: str, category: str | None = None) -> None:
        self.asset_id = asset_id
        self.category = category
        suffix = f" (category: {category})" if category else ""
        super().__init__(
            f"Asset {asset_id} cannot be archived{suffix}. "
            "Only document and video assets can be archived."
        )


class ActiveRecordExistsError(ArchiveStateError):
    """Raised when a file already has an active archive record.

    Archived-deleted records are closed; a new record may be created for
    the same file once every earlier record has left the active statuses.

    Attributes:
        locator_key: Identity key of the file.
        existing_record_id: UUID of the blocking active record.
        existing_status: Status of the blocking record.
    """

    def __init__(
        self,
        locator_key: str,
        existing_record_id: UUID,
        existing_status: ArchiveStatus,
    ) -> None:
        self.locator_key = locator_key
        self.existing_record_id = existing_record_id
        self.existing_status = existing_status
        super().__init__(
            f"This asset already has an active archive record "
            f"(status: {existing_status.label}). You must unarchive it first "
            "before archiving again."
        )


class InvalidStatusTransitionError(ArchiveStateError):
    """Raised when a status change is not an edge of the transition matrix.

    Attributes:
        from_status: Current status.
        to_status: Attempted target status.
        allowed_transitions: Valid target statuses from the current status.
    """

    def __init__(
        self,
        from_status: ArchiveStatus,
        to_status: ArchiveStatus,
        allowed_transitions: list[ArchiveStatus] | None = None,
    ) -> None:
        self.from_status = from_status
        self.to_status = to_status
        self.allowed_transitions = allowed_transitions or []

        allowed_str = (
            f" Valid transitions: {sorted(s.value for s in self.allowed_transitions)}"
            if self.allowed_transitions
            else ""
        )
        super().__init__(
            f"Invalid status transition: {from_status.value} -> {to_status.value}.{allowed_str}"
        )
