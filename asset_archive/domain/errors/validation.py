"""Validation errors for archive input (bad input shape).

Validation errors are caller mistakes. They are returned synchronously
and never retried automatically.
"""

from __future__ import annotations

from asset_archive.domain.exceptions import ArchiveError


class ArchiveValidationError(ArchiveError):
    """Raised when archive input fails shape validation.

    Examples:
        - reason is OTHER but reason_other is blank
        - public_description is missing
        - visibility is neither "public" nor "admin"

    Attributes:
        field: Name of the offending input field.
        reason: Why the value was rejected.
    """

    def __init__(self, field: str, reason: str) -> None:
        """Initialize validation error.

        Args:
            field: Name of the offending input field.
            reason: Why the value was rejected.
        """
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid value for '{field}': {reason}")
