"""Execution gate results.

Gate failures are expected, recoverable conditions. They are returned as
values so callers branch on the block reason instead of catching and
re-interpreting exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class GateBlockReason(Enum):
    """Why an execution gate blocked archiving."""

    FILE_MISSING = "file_missing"
    USAGE_DETECTED = "usage_detected"


@dataclass(frozen=True, eq=True)
class GateBlocked:
    """A blocking gate condition with human-readable detail.

    Attributes:
        reason: Which gate blocked.
        details: Operator-facing explanation.
    """

    reason: GateBlockReason
    details: str


@dataclass(frozen=True, eq=True)
class GateCheckResult:
    """Outcome of running the execution gates against a record.

    Attributes:
        file_exists: Whether the source resolved to a readable file.
        usage_count: Active references reported by the usage oracle
            (None when the existence gate already failed).
        blocks: Blocking conditions, in gate order.
        resolved_path: Resolved storage path, when the file exists.
    """

    file_exists: bool
    usage_count: int | None = None
    blocks: tuple[GateBlocked, ...] = field(default_factory=tuple)
    resolved_path: str | None = None

    @property
    def passed(self) -> bool:
        return not self.blocks

    @property
    def usage_detected(self) -> bool:
        return bool(self.usage_count)

    def first_block(self) -> GateBlocked | None:
        return self.blocks[0] if self.blocks else None
