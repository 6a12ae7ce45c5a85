"""Prometheus metrics for the archive lifecycle.

Operational metrics only: lifecycle transitions, gate blocks,
reconciliation actions and checksum queue activity.

Labels: service, environment on every series.
"""

import os
import threading

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

_collector_lock = threading.Lock()

# Hashing duration buckets (10ms to 10min)
CHECKSUM_DURATION_BUCKETS = (0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 15.0, 60.0, 180.0, 600.0)


class ArchiveMetricsCollector:
    """Collects and manages archive lifecycle Prometheus metrics.

    Attributes:
        lifecycle_transitions_total: Counter of status changes by operation.
        gate_blocks_total: Counter of execution gate blocks by reason.
        reconciliation_actions_total: Counter of reconciliation outcomes.
        checksum_jobs_total: Counter of checksum jobs by result.
        checksum_duration_seconds: Histogram of hashing durations.
        checksum_queue_depth: Gauge of jobs waiting in the checksum queue.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize the collector.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()
        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "asset-archive")

        self.lifecycle_transitions_total = Counter(
            name="archive_lifecycle_transitions_total",
            documentation="Archive record status changes",
            labelnames=["service", "environment", "operation", "to_status"],
            registry=self._registry,
        )

        self.gate_blocks_total = Counter(
            name="archive_gate_blocks_total",
            documentation="Archive executions blocked by a gate",
            labelnames=["service", "environment", "reason"],
            registry=self._registry,
        )

        self.reconciliation_actions_total = Counter(
            name="archive_reconciliation_actions_total",
            documentation="Reconciliation outcomes per record",
            labelnames=["service", "environment", "action"],
            registry=self._registry,
        )

        self.checksum_jobs_total = Counter(
            name="archive_checksum_jobs_total",
            documentation="Checksum jobs handled by workers",
            labelnames=["service", "environment", "result"],
            registry=self._registry,
        )

        self.checksum_duration_seconds = Histogram(
            name="archive_checksum_duration_seconds",
            documentation="Time spent computing SHA-256 checksums",
            labelnames=["service", "environment", "mode"],
            buckets=CHECKSUM_DURATION_BUCKETS,
            registry=self._registry,
        )

        self.checksum_queue_depth = Gauge(
            name="archive_checksum_queue_depth",
            documentation="Jobs currently in the checksum queue",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

    def _labels(self) -> dict[str, str]:
        return {"service": self._service_name, "environment": self._environment}

    def record_transition(self, operation: str, to_status: str) -> None:
        """Count a status change.

        Args:
            operation: Lifecycle operation (execute, unarchive, ...).
            to_status: Status value written.
        """
        self.lifecycle_transitions_total.labels(
            operation=operation, to_status=to_status, **self._labels()
        ).inc()

    def record_gate_block(self, reason: str) -> None:
        self.gate_blocks_total.labels(reason=reason, **self._labels()).inc()

    def record_reconciliation_action(self, action: str) -> None:
        self.reconciliation_actions_total.labels(action=action, **self._labels()).inc()

    def record_checksum_job(self, result: str) -> None:
        """Count a checksum job by result (processed, skipped, failed)."""
        self.checksum_jobs_total.labels(result=result, **self._labels()).inc()

    def observe_checksum_duration(self, mode: str, seconds: float) -> None:
        """Record how long one hash took.

        Args:
            mode: "sync" for execute-time hashing, "async" for workers.
            seconds: Elapsed seconds.
        """
        self.checksum_duration_seconds.labels(mode=mode, **self._labels()).observe(
            seconds
        )

    def set_checksum_queue_depth(self, depth: int) -> None:
        self.checksum_queue_depth.labels(**self._labels()).set(depth)

    def get_registry(self) -> CollectorRegistry:
        """Get the collector registry."""
        return self._registry


# Singleton instance
_metrics_collector: ArchiveMetricsCollector | None = None


def get_metrics_collector() -> ArchiveMetricsCollector:
    """Get the singleton ArchiveMetricsCollector instance (thread-safe).

    Returns:
        The global ArchiveMetricsCollector instance.
    """
    global _metrics_collector
    if _metrics_collector is None:
        with _collector_lock:
            if _metrics_collector is None:
                _metrics_collector = ArchiveMetricsCollector()
    return _metrics_collector


def generate_metrics() -> bytes:
    """Generate Prometheus metrics in exposition format."""
    return generate_latest(get_metrics_collector().get_registry())


def reset_metrics_collector() -> None:
    """Reset the singleton collector (for testing only)."""
    global _metrics_collector
    with _collector_lock:
        _metrics_collector = None
