"""Execution gate validator.

Two ordered gates decide whether a queued record may be executed:

1. Existence gate - the source locator must resolve to a readable file.
   Nothing else is checked when it fails.
2. Usage gate - the usage oracle must report zero active references,
   unless archiving in-use files is explicitly allowed.

Gate failures are reported as GateBlocked values, not raised.
"""

from __future__ import annotations

from structlog import get_logger

from asset_archive.application.ports.file_store import FileStoreProtocol
from asset_archive.application.ports.usage_oracle import UsageOracleProtocol
from asset_archive.application.services.file_io import resolve_existing
from asset_archive.domain.models.archive_record import ArchiveRecord
from asset_archive.domain.models.gate import (
    GateBlocked,
    GateBlockReason,
    GateCheckResult,
)

logger = get_logger(__name__)


def file_missing_details(record: ArchiveRecord) -> str:
    return f"Source file does not exist at: {record.source.path}"


def usage_details(usage_count: int) -> str:
    return (
        f"File is still referenced in {usage_count} location(s). "
        "Remove references before archiving."
    )


class ExecutionGateValidator:
    """Runs the existence and usage gates against an archive record."""

    def __init__(
        self,
        file_store: FileStoreProtocol,
        usage_oracle: UsageOracleProtocol,
        allow_in_use: bool = False,
        file_io_timeout_seconds: float = 30.0,
    ) -> None:
        """Initialize the validator.

        Args:
            file_store: Locator resolution and existence checks.
            usage_oracle: Counts active references to a file.
            allow_in_use: When True the usage gate reports but does not block.
            file_io_timeout_seconds: Bound on existence checks.
        """
        self._file_store = file_store
        self._usage_oracle = usage_oracle
        self._allow_in_use = allow_in_use
        self._file_io_timeout = file_io_timeout_seconds

    @property
    def allow_in_use(self) -> bool:
        return self._allow_in_use

    async def resolve_if_exists(self, record: ArchiveRecord) -> str | None:
        """Existence gate only: the resolved path, or None if missing."""
        return await resolve_existing(self._file_store, record.source, self._file_io_timeout)

    async def usage_count(self, record: ArchiveRecord) -> int:
        """Usage gate only: active references to the record's file."""
        return await self._usage_oracle.active_reference_count(record.source)

    async def validate(self, record: ArchiveRecord) -> GateCheckResult:
        """Run both gates in order.

        Args:
            record: The record whose file is checked.

        Returns:
            GateCheckResult; passed is False when any gate blocks.
        """
        log = logger.bind(record_id=str(record.id), locator=str(record.source))

        resolved = await self.resolve_if_exists(record)
        if resolved is None:
            log.info("execution_gate_blocked", reason=GateBlockReason.FILE_MISSING.value)
            return GateCheckResult(
                file_exists=False,
                blocks=(
                    GateBlocked(
                        reason=GateBlockReason.FILE_MISSING,
                        details=file_missing_details(record),
                    ),
                ),
            )

        count = await self.usage_count(record)
        if count > 0 and not self._allow_in_use:
            log.info(
                "execution_gate_blocked",
                reason=GateBlockReason.USAGE_DETECTED.value,
                usage_count=count,
            )
            return GateCheckResult(
                file_exists=True,
                usage_count=count,
                blocks=(
                    GateBlocked(
                        reason=GateBlockReason.USAGE_DETECTED,
                        details=usage_details(count),
                    ),
                ),
                resolved_path=resolved,
            )

        if count > 0:
            log.info("execution_gate_usage_permitted", usage_count=count)
        return GateCheckResult(file_exists=True, usage_count=count, resolved_path=resolved)
