"""Archive metrics port.

Services report lifecycle activity through this interface; the
Prometheus collector in infrastructure/monitoring implements it. Every
service accepts None and then records nothing.
"""

from __future__ import annotations

from typing import Protocol


class ArchiveMetricsProtocol(Protocol):
    """Protocol for recording archive lifecycle metrics."""

    def record_transition(self, operation: str, to_status: str) -> None:
        """Count a status change made by a lifecycle operation."""
        ...

    def record_gate_block(self, reason: str) -> None:
        """Count an execution blocked by a gate."""
        ...

    def record_reconciliation_action(self, action: str) -> None:
        """Count one reconciliation outcome."""
        ...

    def record_checksum_job(self, result: str) -> None:
        """Count a checksum job (processed, skipped, failed)."""
        ...

    def observe_checksum_duration(self, mode: str, seconds: float) -> None:
        """Record the duration of one hash computation."""
        ...

    def set_checksum_queue_depth(self, depth: int) -> None:
        """Publish the current checksum queue depth."""
        ...
