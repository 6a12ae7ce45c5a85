"""Unit tests for archive domain errors."""

from __future__ import annotations

from uuid import uuid4

from asset_archive.domain.errors import (
    ActiveRecordExistsError,
    ArchiveStateError,
    ConcurrentModificationError,
    FileUnreadableError,
    IntegrityUnresolvableError,
    NotQueuedError,
    UnderlyingDeleteFailedError,
    UnderlyingIOError,
)
from asset_archive.domain.exceptions import ArchiveError
from asset_archive.domain.models.archive_record import ArchiveStatus


def test_every_error_is_an_archive_error() -> None:
    record_id = uuid4()
    errors = [
        NotQueuedError(record_id, ArchiveStatus.ARCHIVED_PUBLIC, "execute"),
        ConcurrentModificationError(record_id, expected_version=1, actual_version=2),
        FileUnreadableError("public://a.pdf"),
        UnderlyingDeleteFailedError("/srv/files/a.pdf", "permission denied"),
    ]
    assert all(isinstance(error, ArchiveError) for error in errors)


def test_status_guard_message_names_operation_and_status() -> None:
    record_id = uuid4()
    error = NotQueuedError(record_id, ArchiveStatus.ARCHIVED_ADMIN, "execute")
    assert isinstance(error, ArchiveStateError)
    assert str(record_id) in str(error)
    assert "archived_admin" in str(error)
    assert "Only queued assets" in str(error)


def test_concurrent_modification_without_stored_version() -> None:
    error = ConcurrentModificationError(uuid4(), expected_version=3, operation="execute")
    assert error.actual_version is None
    assert "record no longer exists" in str(error)


def test_file_unreadable_is_integrity_unresolvable() -> None:
    error = FileUnreadableError("public://gone.pdf")
    assert isinstance(error, IntegrityUnresolvableError)
    assert str(error) == "Cannot calculate checksum for public://gone.pdf: file not found"


def test_delete_failure_is_underlying_io() -> None:
    error = UnderlyingDeleteFailedError("/srv/files/a.pdf", "permission denied")
    assert isinstance(error, UnderlyingIOError)
    assert error.operation == "delete"


def test_active_record_exists_mentions_unarchive() -> None:
    error = ActiveRecordExistsError("path:public://a.pdf", uuid4(), ArchiveStatus.QUEUED)
    assert "unarchive it first" in str(error)
    assert error.existing_status is ArchiveStatus.QUEUED
