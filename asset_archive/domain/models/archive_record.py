"""Archive record domain model.

One ArchiveRecord exists per archival action, not per file: a file may
accumulate several historical records across its lifetime. Records are
never physically deleted once executed; ARCHIVED_DELETED is a terminal,
retained state that preserves the audit history.

Invariants:
- classified_at and checksum_sha256 are write-once per lifecycle; only
  the queued -> archived transition (and the single deferred checksum
  write for large files) may set them
- voided_at is stamped on the first transition into EXEMPTION_VOID and
  survives every later transition, so a file keeps its void history
- status changes only along STATUS_TRANSITION_MATRIX edges
- flags are derived data re-computed by reconciliation; they never
  drive status except through reconciliation escalation
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from uuid import UUID

from asset_archive.domain.errors.immutable_field import ImmutableFieldError
from asset_archive.domain.errors.state import InvalidStatusTransitionError
from asset_archive.domain.errors.validation import ArchiveValidationError

SHA256_HEX_PATTERN = re.compile(r"^[0-9a-f]{64}$")

# Asset types for manual entries (web pages, external resources).
# These have no file behind them and are never monitored.
MANUAL_ASSET_TYPES: frozenset[str] = frozenset({"page", "external"})


class ArchiveStatus(Enum):
    """Status in the archive record lifecycle.

    State Machine:
        QUEUED -> ARCHIVED_PUBLIC | ARCHIVED_ADMIN (execute)
        ARCHIVED_PUBLIC <-> ARCHIVED_ADMIN (toggle visibility)
        ARCHIVED_PUBLIC | ARCHIVED_ADMIN -> ARCHIVED_DELETED (unarchive,
            delete file, general-archive integrity failure)
        ARCHIVED_PUBLIC | ARCHIVED_ADMIN -> EXEMPTION_VOID (legacy-archive
            integrity failure after the compliance cutoff)
        EXEMPTION_VOID -> ARCHIVED_DELETED

    ARCHIVED_DELETED is terminal. Abandoning a QUEUED record is a hard
    delete and sits outside this graph.
    """

    QUEUED = "queued"
    ARCHIVED_PUBLIC = "archived_public"
    ARCHIVED_ADMIN = "archived_admin"
    ARCHIVED_DELETED = "archived_deleted"
    EXEMPTION_VOID = "exemption_void"

    @property
    def label(self) -> str:
        """Human-readable status label."""
        return STATUS_LABELS[self]

    def is_terminal(self) -> bool:
        """Check if no further transitions are permitted."""
        return not STATUS_TRANSITION_MATRIX.get(self)

    def is_active(self) -> bool:
        """Check if this status blocks a new record for the same file."""
        return self in ACTIVE_STATUSES

    def is_archived_active(self) -> bool:
        """Check if this is ARCHIVED_PUBLIC or ARCHIVED_ADMIN."""
        return self in ARCHIVED_ACTIVE_STATUSES

    def valid_transitions(self) -> frozenset[ArchiveStatus]:
        """Get valid transitions from this status."""
        return STATUS_TRANSITION_MATRIX.get(self, frozenset())


STATUS_LABELS: dict[ArchiveStatus, str] = {
    ArchiveStatus.QUEUED: "Queued",
    ArchiveStatus.ARCHIVED_PUBLIC: "Archived (Public)",
    ArchiveStatus.ARCHIVED_ADMIN: "Archived (Admin-only)",
    ArchiveStatus.ARCHIVED_DELETED: "Archived (Deleted)",
    ArchiveStatus.EXEMPTION_VOID: "Exemption Void",
}

ARCHIVED_ACTIVE_STATUSES: frozenset[ArchiveStatus] = frozenset(
    {ArchiveStatus.ARCHIVED_PUBLIC, ArchiveStatus.ARCHIVED_ADMIN}
)

# A file may hold at most one record in these statuses at a time
ACTIVE_STATUSES: frozenset[ArchiveStatus] = frozenset(
    {
        ArchiveStatus.QUEUED,
        ArchiveStatus.ARCHIVED_PUBLIC,
        ArchiveStatus.ARCHIVED_ADMIN,
        ArchiveStatus.EXEMPTION_VOID,
    }
)

# Statuses swept by reconciliation
RECONCILABLE_STATUSES: frozenset[ArchiveStatus] = frozenset(
    {
        ArchiveStatus.QUEUED,
        ArchiveStatus.ARCHIVED_PUBLIC,
        ArchiveStatus.ARCHIVED_ADMIN,
    }
)

STATUS_TRANSITION_MATRIX: dict[ArchiveStatus, frozenset[ArchiveStatus]] = {
    ArchiveStatus.QUEUED: frozenset(
        {ArchiveStatus.ARCHIVED_PUBLIC, ArchiveStatus.ARCHIVED_ADMIN}
    ),
    ArchiveStatus.ARCHIVED_PUBLIC: frozenset(
        {
            ArchiveStatus.ARCHIVED_ADMIN,
            ArchiveStatus.ARCHIVED_DELETED,
            ArchiveStatus.EXEMPTION_VOID,
        }
    ),
    ArchiveStatus.ARCHIVED_ADMIN: frozenset(
        {
            ArchiveStatus.ARCHIVED_PUBLIC,
            ArchiveStatus.ARCHIVED_DELETED,
            ArchiveStatus.EXEMPTION_VOID,
        }
    ),
    ArchiveStatus.EXEMPTION_VOID: frozenset({ArchiveStatus.ARCHIVED_DELETED}),
    # Terminal
    ArchiveStatus.ARCHIVED_DELETED: frozenset(),
}


class ArchiveReason(Enum):
    """Why an asset is being archived."""

    REFERENCE = "reference"
    RESEARCH = "research"
    RECORDKEEPING = "recordkeeping"
    OTHER = "other"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class Visibility(Enum):
    """Visibility chosen at execution time. There is no default."""

    PUBLIC = "public"
    ADMIN = "admin"

    @property
    def status(self) -> ArchiveStatus:
        """Archived status that corresponds to this visibility."""
        if self is Visibility.PUBLIC:
            return ArchiveStatus.ARCHIVED_PUBLIC
        return ArchiveStatus.ARCHIVED_ADMIN

    @classmethod
    def parse(cls, value: Visibility | str) -> Visibility:
        """Accept a Visibility or its string value; reject anything else.

        Raises:
            ArchiveValidationError: If the value is not "public" or "admin".
        """
        if isinstance(value, Visibility):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ArchiveValidationError(
                "visibility",
                'Visibility must be explicitly set to "public" or "admin".',
            ) from None


class AssetCategory(Enum):
    """Asset categories reported by the discovery catalog."""

    DOCUMENTS = "Documents"
    VIDEOS = "Videos"
    IMAGES = "Images"
    AUDIO = "Audio"
    OTHER = "Other"

    def is_archivable(self) -> bool:
        return self in ARCHIVABLE_CATEGORIES


ARCHIVABLE_CATEGORIES: frozenset[AssetCategory] = frozenset(
    {AssetCategory.DOCUMENTS, AssetCategory.VIDEOS}
)


@dataclass(frozen=True, eq=True)
class SourceLocator:
    """How to find the file behind an archive record.

    Either a managed-file reference (managed_file_id, with path kept as the
    last known URI) or a raw path / URL string.

    Attributes:
        path: Stream URI (public://, private://), URL, or raw path.
        managed_file_id: Identifier in the managed-file registry, if any.
    """

    path: str
    managed_file_id: int | None = None

    @property
    def identity_key(self) -> str:
        """Stable identity of the underlying file, used for history lookups."""
        if self.managed_file_id is not None:
            return f"fid:{self.managed_file_id}"
        return f"path:{self.path}"

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True, eq=True)
class ArchiveFlags:
    """Condition flags for an archive record.

    The first four are condition flags re-derived by reconciliation.
    late_classification and prior_void record how the record was
    classified and survive flag clearing.
    """

    usage_detected: bool = False
    file_missing: bool = False
    integrity_violation: bool = False
    content_modified: bool = False
    late_classification: bool = False
    prior_void: bool = False

    def cleared(self) -> ArchiveFlags:
        """Return flags with every condition flag cleared."""
        return ArchiveFlags(
            late_classification=self.late_classification,
            prior_void=self.prior_void,
        )

    @property
    def has_warnings(self) -> bool:
        """True if any blocking/problem condition flag is set."""
        return self.usage_detected or self.file_missing or self.integrity_violation

    def warning_labels(self) -> list[str]:
        labels = []
        if self.usage_detected:
            labels.append("Usage Detected")
        if self.file_missing:
            labels.append("File Missing")
        if self.integrity_violation:
            labels.append("Integrity Violation")
        if self.content_modified:
            labels.append("Modified")
        return labels


def _validate_reason(reason: ArchiveReason, reason_other: str) -> None:
    if reason is ArchiveReason.OTHER and not reason_other.strip():
        raise ArchiveValidationError(
            "reason_other", "A custom reason is required when reason is 'other'."
        )


@dataclass(frozen=True, eq=True)
class ArchiveRecord:
    """One audit-trailed instance of classifying a file for retention.

    Frozen: every change produces a new instance through the with_*
    helpers, and the repository persists it with a CAS on version.

    Attributes:
        id: Opaque identity assigned at creation.
        public_id: Stable externally-shareable identifier (immutable).
        source: Locator of the underlying file.
        file_name: Display file name (or title for manual entries).
        asset_type: Fine-grained asset type (pdf, word, mp4, page, ...).
        asset_category: Category reported by the catalog.
        reason: Archive reason code.
        public_description: Externally shown description (required).
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
        created_by: Actor who created the record.
        reason_other: Custom reason, required iff reason is OTHER.
        internal_note: Internal-only note.
        mime_type: MIME type of the file.
        file_size_bytes: File size in bytes, if known.
        is_private: Whether the file lives in private storage.
        status: Current lifecycle status.
        checksum_sha256: SHA-256 hex digest (write-once).
        classified_at: Classification timestamp (write-once, legal decision point).
        flags: Condition and classification flags.
        deleted_at: Set on transition into ARCHIVED_DELETED by deletion.
        deleted_by: Actor recorded with deleted_at.
        voided_at: When the record entered EXEMPTION_VOID (never cleared).
        version: Optimistic concurrency token.
    """

    id: UUID
    public_id: UUID
    source: SourceLocator
    file_name: str
    asset_type: str
    asset_category: AssetCategory
    reason: ArchiveReason
    public_description: str
    created_at: datetime
    updated_at: datetime
    created_by: str
    reason_other: str = field(default="")
    internal_note: str = field(default="")
    mime_type: str | None = field(default=None)
    file_size_bytes: int | None = field(default=None)
    is_private: bool = field(default=False)
    status: ArchiveStatus = field(default=ArchiveStatus.QUEUED)
    checksum_sha256: str | None = field(default=None)
    classified_at: datetime | None = field(default=None)
    flags: ArchiveFlags = field(default_factory=ArchiveFlags)
    deleted_at: datetime | None = field(default=None)
    deleted_by: str | None = field(default=None)
    voided_at: datetime | None = field(default=None)
    version: int = field(default=1)

    def __post_init__(self) -> None:
        """Validate archive record fields."""
        if not self.public_description.strip():
            raise ArchiveValidationError(
                "public_description", "A public description is required."
            )
        _validate_reason(self.reason, self.reason_other)
        if self.checksum_sha256 is not None and not SHA256_HEX_PATTERN.match(
            self.checksum_sha256
        ):
            raise ArchiveValidationError(
                "checksum_sha256", "Checksum must be 64 lowercase hex characters."
            )
        if self.file_size_bytes is not None and self.file_size_bytes < 0:
            raise ArchiveValidationError(
                "file_size_bytes", "File size cannot be negative."
            )

    # Derived properties

    @property
    def locator_key(self) -> str:
        return self.source.identity_key

    @property
    def is_manual_entry(self) -> bool:
        """Manual entries (pages, external resources) have no file behind them."""
        return self.asset_type in MANUAL_ASSET_TYPES

    @property
    def is_file_backed(self) -> bool:
        return not self.is_manual_entry

    @property
    def was_ever_voided(self) -> bool:
        return self.voided_at is not None or self.status is ArchiveStatus.EXEMPTION_VOID

    @property
    def is_legacy_classified(self) -> bool:
        """Classified before the cutoff with no prior-void history."""
        return self.classified_at is not None and not self.flags.late_classification

    @property
    def reason_label(self) -> str:
        if self.reason is ArchiveReason.OTHER:
            return self.reason_other or ArchiveReason.OTHER.label
        return self.reason.label

    @property
    def detailed_status_label(self) -> str:
        """Status label with warning indicators, e.g. 'Queued (Usage Detected)'."""
        warnings = [
            label for label in self.flags.warning_labels() if label != "Modified"
        ]
        if not warnings:
            return self.status.label
        return f"{self.status.label} ({', '.join(warnings)})"

    @property
    def is_publicly_visible(self) -> bool:
        return self.status is ArchiveStatus.ARCHIVED_PUBLIC

    # Operation guards

    def can_execute(self) -> bool:
        return self.status is ArchiveStatus.QUEUED

    def can_remove_from_queue(self) -> bool:
        return self.status is ArchiveStatus.QUEUED

    def can_toggle_visibility(self) -> bool:
        return self.status.is_archived_active()

    def can_unarchive(self) -> bool:
        return (
            self.status.is_archived_active()
            or self.status is ArchiveStatus.EXEMPTION_VOID
        )

    def can_delete_file(self) -> bool:
        return self.can_unarchive() and self.is_file_backed

    # Copy-on-write helpers

    def with_status(self, new_status: ArchiveStatus, now: datetime) -> ArchiveRecord:
        """Create new record with updated status.

        Enforces the status transition matrix.

        Raises:
            InvalidStatusTransitionError: If the edge is not in the matrix.
        """
        valid = self.status.valid_transitions()
        if new_status not in valid:
            raise InvalidStatusTransitionError(
                from_status=self.status,
                to_status=new_status,
                allowed_transitions=list(valid),
            )
        voided_at = self.voided_at
        if new_status is ArchiveStatus.EXEMPTION_VOID and voided_at is None:
            voided_at = now
        return replace(self, status=new_status, updated_at=now, voided_at=voided_at)

    def with_flags(self, flags: ArchiveFlags, now: datetime) -> ArchiveRecord:
        return replace(self, flags=flags, updated_at=now)

    def with_deletion(self, deleted_at: datetime, deleted_by: str) -> ArchiveRecord:
        """Create new record carrying deletion metadata."""
        return replace(
            self, deleted_at=deleted_at, deleted_by=deleted_by, updated_at=deleted_at
        )


# Fields that only the queued -> archived transition (and the deferred
# checksum write) may set
WRITE_ONCE_FIELDS: tuple[str, ...] = ("checksum_sha256", "classified_at")

# Fields fixed at creation
IDENTITY_FIELDS: tuple[str, ...] = ("public_id", "source", "created_at", "created_by")


def ensure_mutable_update(stored: ArchiveRecord, updated: ArchiveRecord) -> None:
    """Check that a generic update only touches mutable fields.

    Repositories call this before a CAS update so write-once fields
    cannot be changed outside their dedicated write paths.

    Raises:
        ImmutableFieldError: If a write-once or identity field differs, or
            voided_at is cleared, changed, or set outside EXEMPTION_VOID.
        InvalidStatusTransitionError: If the status change is not a matrix edge.
    """
    for field_name in WRITE_ONCE_FIELDS + IDENTITY_FIELDS:
        if getattr(updated, field_name) != getattr(stored, field_name):
            raise ImmutableFieldError(stored.id, field_name)
    if updated.status is not stored.status and (
        updated.status not in stored.status.valid_transitions()
    ):
        raise InvalidStatusTransitionError(
            from_status=stored.status,
            to_status=updated.status,
            allowed_transitions=list(stored.status.valid_transitions()),
        )
    if stored.voided_at is not None and updated.voided_at != stored.voided_at:
        raise ImmutableFieldError(stored.id, "voided_at")
    if (
        stored.voided_at is None
        and updated.voided_at is not None
        and updated.status is not ArchiveStatus.EXEMPTION_VOID
    ):
        raise ImmutableFieldError(stored.id, "voided_at")


def stamp_voided_at(record: ArchiveRecord) -> ArchiveRecord:
    """Fill voided_at for a record entering EXEMPTION_VOID without one."""
    if record.status is ArchiveStatus.EXEMPTION_VOID and record.voided_at is None:
        return replace(record, voided_at=record.updated_at)
    return record
