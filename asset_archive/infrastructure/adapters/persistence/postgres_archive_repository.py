"""PostgreSQL implementation of ArchiveRepositoryProtocol.

Every write runs in its own transaction: the row is read with
SELECT ... FOR UPDATE, checked against the expected version, and
written with version = version + 1. The write-once trigger from
migrations 001 and 004 back up the application-level guards.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import bindparam, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from asset_archive.application.ports.archive_repository import ArchiveRepositoryProtocol
from asset_archive.domain.errors.concurrent_modification import (
    ConcurrentModificationError,
)
from asset_archive.domain.errors.immutable_field import ImmutableFieldError
from asset_archive.domain.errors.state import (
    ActiveRecordExistsError,
    InvalidStatusTransitionError,
    NotQueuedError,
    RecordNotFoundError,
)
from asset_archive.domain.models.archive_record import (
    ACTIVE_STATUSES,
    ARCHIVED_ACTIVE_STATUSES,
    ArchiveFlags,
    ArchiveReason,
    ArchiveRecord,
    ArchiveStatus,
    AssetCategory,
    SourceLocator,
    ensure_mutable_update,
    stamp_voided_at,
)

logger = get_logger(__name__)

ACTIVE_LOCATOR_INDEX = "uq_archive_records_active_locator"

_INSERT_SQL = text(
    """
    INSERT INTO archive_records (
        id, public_id, locator_path, managed_file_id, locator_key,
        file_name, asset_type, asset_category, reason, reason_other,
        public_description, internal_note, mime_type, file_size_bytes,
        is_private, status, checksum_sha256, classified_at,
        flag_usage, flag_missing, flag_integrity, flag_modified,
        flag_late, flag_prior_void,
        created_at, updated_at, created_by, deleted_at, deleted_by, voided_at,
        version
    ) VALUES (
        :id, :public_id, :locator_path, :managed_file_id, :locator_key,
        :file_name, :asset_type, :asset_category, :reason, :reason_other,
        :public_description, :internal_note, :mime_type, :file_size_bytes,
        :is_private, :status, :checksum_sha256, :classified_at,
        :flag_usage, :flag_missing, :flag_integrity, :flag_modified,
        :flag_late, :flag_prior_void,
        :created_at, :updated_at, :created_by, :deleted_at, :deleted_by, :voided_at,
        :version
    )
    """
)

_SELECT_BY_ID_SQL = text("SELECT * FROM archive_records WHERE id = :id")

_SELECT_FOR_UPDATE_SQL = text("SELECT * FROM archive_records WHERE id = :id FOR UPDATE")

_SELECT_BY_PUBLIC_ID_SQL = text("SELECT * FROM archive_records WHERE public_id = :public_id")

_LIST_BY_STATUS_SQL = text(
    """
    SELECT * FROM archive_records
    WHERE status IN :statuses
    ORDER BY created_at DESC, id
    LIMIT :limit OFFSET :offset
    """
).bindparams(bindparam("statuses", expanding=True))

_COUNT_BY_STATUS_SQL = text(
    "SELECT COUNT(*) FROM archive_records WHERE status IN :statuses"
).bindparams(bindparam("statuses", expanding=True))

_LIST_FOR_LOCATOR_SQL = text(
    """
    SELECT * FROM archive_records
    WHERE locator_key = :locator_key
    ORDER BY created_at, id
    """
)

_FIND_ACTIVE_SQL = text(
    """
    SELECT * FROM archive_records
    WHERE locator_key = :locator_key AND status IN :statuses
    ORDER BY created_at
    LIMIT 1
    """
).bindparams(bindparam("statuses", expanding=True))

_HAS_VOID_SQL = text(
    """
    SELECT EXISTS (
        SELECT 1 FROM archive_records
        WHERE locator_key = :locator_key
          AND (voided_at IS NOT NULL OR status = 'exemption_void')
    )
    """
)

# Identity and write-once columns are deliberately absent
_UPDATE_SQL = text(
    """
    UPDATE archive_records SET
        file_name = :file_name,
        asset_type = :asset_type,
        asset_category = :asset_category,
        reason = :reason,
        reason_other = :reason_other,
        public_description = :public_description,
        internal_note = :internal_note,
        mime_type = :mime_type,
        file_size_bytes = :file_size_bytes,
        is_private = :is_private,
        status = :status,
        flag_usage = :flag_usage,
        flag_missing = :flag_missing,
        flag_integrity = :flag_integrity,
        flag_modified = :flag_modified,
        flag_late = :flag_late,
        flag_prior_void = :flag_prior_void,
        updated_at = :updated_at,
        deleted_at = :deleted_at,
        deleted_by = :deleted_by,
        voided_at = :voided_at,
        version = version + 1
    WHERE id = :id AND version = :expected_version
    RETURNING *
    """
)

_CLASSIFY_SQL = text(
    """
    UPDATE archive_records SET
        status = :status,
        classified_at = :classified_at,
        checksum_sha256 = :checksum_sha256,
        flag_usage = :flag_usage,
        flag_missing = :flag_missing,
        flag_integrity = :flag_integrity,
        flag_modified = :flag_modified,
        flag_late = :flag_late,
        flag_prior_void = :flag_prior_void,
        updated_at = :classified_at,
        version = version + 1
    WHERE id = :id AND version = :expected_version AND status = 'queued'
    RETURNING *
    """
)

_SET_CHECKSUM_SQL = text(
    """
    UPDATE archive_records SET
        checksum_sha256 = :checksum_sha256,
        version = version + 1
    WHERE id = :id AND checksum_sha256 IS NULL
    RETURNING *
    """
)

_DELETE_QUEUED_SQL = text(
    "DELETE FROM archive_records WHERE id = :id AND status = 'queued'"
)


def _flag_params(flags: ArchiveFlags) -> dict[str, bool]:
    return {
        "flag_usage": flags.usage_detected,
        "flag_missing": flags.file_missing,
        "flag_integrity": flags.integrity_violation,
        "flag_modified": flags.content_modified,
        "flag_late": flags.late_classification,
        "flag_prior_void": flags.prior_void,
    }


def record_to_params(record: ArchiveRecord) -> dict[str, Any]:
    """Flatten a record into bind parameters for archive_records."""
    return {
        "id": record.id,
        "public_id": record.public_id,
        "locator_path": record.source.path,
        "managed_file_id": record.source.managed_file_id,
        "locator_key": record.locator_key,
        "file_name": record.file_name,
        "asset_type": record.asset_type,
        "asset_category": record.asset_category.value,
        "reason": record.reason.value,
        "reason_other": record.reason_other,
        "public_description": record.public_description,
        "internal_note": record.internal_note,
        "mime_type": record.mime_type,
        "file_size_bytes": record.file_size_bytes,
        "is_private": record.is_private,
        "status": record.status.value,
        "checksum_sha256": record.checksum_sha256,
        "classified_at": record.classified_at,
        **_flag_params(record.flags),
        "created_at": record.created_at,
        "updated_at": record.updated_at,
        "created_by": record.created_by,
        "deleted_at": record.deleted_at,
        "deleted_by": record.deleted_by,
        "voided_at": record.voided_at,
        "version": record.version,
    }


def record_from_row(row: Mapping[str, Any]) -> ArchiveRecord:
    """Build an ArchiveRecord from an archive_records row mapping."""
    return ArchiveRecord(
        id=UUID(str(row["id"])),
        public_id=UUID(str(row["public_id"])),
        source=SourceLocator(
            path=row["locator_path"],
            managed_file_id=row["managed_file_id"],
        ),
        file_name=row["file_name"],
        asset_type=row["asset_type"],
        asset_category=AssetCategory(row["asset_category"]),
        reason=ArchiveReason(row["reason"]),
        reason_other=row["reason_other"],
        public_description=row["public_description"],
        internal_note=row["internal_note"],
        mime_type=row["mime_type"],
        file_size_bytes=row["file_size_bytes"],
        is_private=row["is_private"],
        status=ArchiveStatus(row["status"]),
        checksum_sha256=row["checksum_sha256"],
        classified_at=row["classified_at"],
        flags=ArchiveFlags(
            usage_detected=row["flag_usage"],
            file_missing=row["flag_missing"],
            integrity_violation=row["flag_integrity"],
            content_modified=row["flag_modified"],
            late_classification=row["flag_late"],
            prior_void=row["flag_prior_void"],
        ),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        created_by=row["created_by"],
        deleted_at=row["deleted_at"],
        deleted_by=row["deleted_by"],
        voided_at=row["voided_at"],
        version=row["version"],
    )


class PostgresArchiveRepository(ArchiveRepositoryProtocol):
    """Archive record storage in PostgreSQL.

    Example:
        >>> repository = PostgresArchiveRepository(get_session_factory())
        >>> record = await repository.get(record_id)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, record: ArchiveRecord) -> None:
        """Insert a new record.

        Raises:
            ActiveRecordExistsError: If a concurrent create already holds the
                active slot for the same file.
            ValueError: If the id or public_id is already in use.
        """
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(_INSERT_SQL, record_to_params(record))
        except IntegrityError as exc:
            if ACTIVE_LOCATOR_INDEX in str(exc.orig):
                existing = await self.find_active_for_locator(record.locator_key)
                if existing is not None:
                    raise ActiveRecordExistsError(
                        locator_key=record.locator_key,
                        existing_record_id=existing.id,
                        existing_status=existing.status,
                    ) from exc
            raise ValueError(f"Archive record {record.id} could not be stored") from exc

    async def get(self, record_id: UUID) -> ArchiveRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(_SELECT_BY_ID_SQL, {"id": record_id})
            row = result.mappings().first()
        return record_from_row(row) if row is not None else None

    async def get_by_public_id(self, public_id: UUID) -> ArchiveRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(
                _SELECT_BY_PUBLIC_ID_SQL, {"public_id": public_id}
            )
            row = result.mappings().first()
        return record_from_row(row) if row is not None else None

    async def list_by_status(
        self,
        statuses: Collection[ArchiveStatus],
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[ArchiveRecord], int]:
        values = [status.value for status in statuses]
        if not values:
            return [], 0
        async with self._session_factory() as session:
            result = await session.execute(
                _LIST_BY_STATUS_SQL,
                {"statuses": values, "limit": limit, "offset": offset},
            )
            rows = result.mappings().all()
            total = (
                await session.execute(_COUNT_BY_STATUS_SQL, {"statuses": values})
            ).scalar_one()
        return [record_from_row(row) for row in rows], int(total)

    async def list_for_locator(self, locator_key: str) -> list[ArchiveRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                _LIST_FOR_LOCATOR_SQL, {"locator_key": locator_key}
            )
            rows = result.mappings().all()
        return [record_from_row(row) for row in rows]

    async def find_active_for_locator(self, locator_key: str) -> ArchiveRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(
                _FIND_ACTIVE_SQL,
                {
                    "locator_key": locator_key,
                    "statuses": [status.value for status in ACTIVE_STATUSES],
                },
            )
            row = result.mappings().first()
        return record_from_row(row) if row is not None else None

    async def has_void_history(self, locator_key: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(_HAS_VOID_SQL, {"locator_key": locator_key})
            return bool(result.scalar_one())

    async def _lock_row(
        self,
        session: AsyncSession,
        record_id: UUID,
        expected_version: int,
        operation: str,
    ) -> ArchiveRecord:
        result = await session.execute(_SELECT_FOR_UPDATE_SQL, {"id": record_id})
        row = result.mappings().first()
        stored = record_from_row(row) if row is not None else None
        if stored is None or stored.version != expected_version:
            raise ConcurrentModificationError(
                record_id=record_id,
                expected_version=expected_version,
                actual_version=stored.version if stored is not None else None,
                operation=operation,
            )
        return stored

    async def update(self, record: ArchiveRecord, expected_version: int) -> ArchiveRecord:
        async with self._session_factory() as session, session.begin():
            stored = await self._lock_row(session, record.id, expected_version, "update")
            record = stamp_voided_at(record)
            ensure_mutable_update(stored, record)
            params = record_to_params(record)
            params["expected_version"] = expected_version
            result = await session.execute(_UPDATE_SQL, params)
            row = result.mappings().one()
        return record_from_row(row)

    async def record_classification(
        self,
        record_id: UUID,
        expected_version: int,
        new_status: ArchiveStatus,
        classified_at: datetime,
        checksum_sha256: str | None,
        flags: ArchiveFlags,
    ) -> ArchiveRecord:
        async with self._session_factory() as session, session.begin():
            stored = await self._lock_row(session, record_id, expected_version, "execute")
            if stored.status is not ArchiveStatus.QUEUED or (
                new_status not in ARCHIVED_ACTIVE_STATUSES
            ):
                raise InvalidStatusTransitionError(
                    from_status=stored.status,
                    to_status=new_status,
                    allowed_transitions=list(stored.status.valid_transitions()),
                )
            result = await session.execute(
                _CLASSIFY_SQL,
                {
                    "id": record_id,
                    "expected_version": expected_version,
                    "status": new_status.value,
                    "classified_at": classified_at,
                    "checksum_sha256": checksum_sha256,
                    **_flag_params(flags),
                },
            )
            row = result.mappings().one()
        return record_from_row(row)

    async def set_checksum_once(self, record_id: UUID, checksum_sha256: str) -> ArchiveRecord:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(_SELECT_FOR_UPDATE_SQL, {"id": record_id})
            row = result.mappings().first()
            if row is None:
                raise RecordNotFoundError(record_id)
            stored = record_from_row(row)
            if stored.checksum_sha256 == checksum_sha256:
                return stored
            if stored.checksum_sha256 is not None:
                raise ImmutableFieldError(record_id, "checksum_sha256")
            result = await session.execute(
                _SET_CHECKSUM_SQL,
                {"id": record_id, "checksum_sha256": checksum_sha256},
            )
            row = result.mappings().one()
        logger.debug("checksum_stored", record_id=str(record_id))
        return record_from_row(row)

    async def delete_queued(self, record_id: UUID, expected_version: int) -> None:
        async with self._session_factory() as session, session.begin():
            stored = await self._lock_row(
                session, record_id, expected_version, "remove from queue"
            )
            if stored.status is not ArchiveStatus.QUEUED:
                raise NotQueuedError(record_id, stored.status, "remove from queue")
            await session.execute(_DELETE_QUEUED_SQL, {"id": record_id})
