"""Domain errors for the asset archive.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from ArchiveError.
"""

from asset_archive.domain.errors.concurrent_modification import (
    ConcurrentModificationError,
)
from asset_archive.domain.errors.immutable_field import ImmutableFieldError
from asset_archive.domain.errors.integrity import (
    FileUnreadableError,
    IntegrityUnresolvableError,
)
from asset_archive.domain.errors.state import (
    ActiveRecordExistsError,
    ArchiveStateError,
    InvalidStatusTransitionError,
    NotActiveError,
    NotArchivableError,
    NotDeletableError,
    NotQueuedError,
    NotUnarchivableError,
    RecordNotFoundError,
)
from asset_archive.domain.errors.underlying_io import (
    UnderlyingDeleteFailedError,
    UnderlyingIOError,
)
from asset_archive.domain.errors.validation import ArchiveValidationError

__all__: list[str] = [
    "ActiveRecordExistsError",
    "ArchiveStateError",
    "ArchiveValidationError",
    "ConcurrentModificationError",
    "FileUnreadableError",
    "ImmutableFieldError",
    "IntegrityUnresolvableError",
    "InvalidStatusTransitionError",
    "NotActiveError",
    "NotArchivableError",
    "NotDeletableError",
    "NotQueuedError",
    "NotUnarchivableError",
    "RecordNotFoundError",
    "UnderlyingDeleteFailedError",
    "UnderlyingIOError",
]
