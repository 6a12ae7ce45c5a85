"""Errors for failures of the underlying file storage."""

from __future__ import annotations

from asset_archive.domain.exceptions import ArchiveError


class UnderlyingIOError(ArchiveError):
    """Raised when a file operation on the underlying storage fails.

    Attributes:
        path: Resolved path or URI of the file.
        operation: The file operation that failed (read, delete).
        reason: Description of the failure.
    """

    def __init__(self, path: str, operation: str, reason: str) -> None:
        """Initialize underlying I/O error.

        Args:
            path: Resolved path or URI of the file.
            operation: The file operation that failed.
            reason: Description of the failure.
        """
        self.path = path
        self.operation = operation
        self.reason = reason
        super().__init__(f"Failed to {operation} file {path}: {reason}")


class UnderlyingDeleteFailedError(UnderlyingIOError):
    """Raised when deleting an archived file from storage fails."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(path=path, operation="delete", reason=reason)
