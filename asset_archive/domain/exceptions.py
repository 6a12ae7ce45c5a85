"""Base exception classes for the asset archive domain layer."""


class ArchiveError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class.
    This enables consistent error handling across the application.

    Subclass families:
    - ArchiveValidationError (bad input shape)
    - ArchiveStateError (operation not valid for current status)
    - ConcurrentModificationError (optimistic check failed)
    - IntegrityUnresolvableError (checksum could not be proven either way)
    - UnderlyingIOError (file deletion or read failure)
    - ImmutableFieldError (write-once field rewrite attempted)
    """

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
