"""Monitoring infrastructure (Prometheus metrics)."""

from asset_archive.infrastructure.monitoring.metrics import (
    ArchiveMetricsCollector,
    generate_metrics,
    get_metrics_collector,
    reset_metrics_collector,
)

__all__ = [
    "ArchiveMetricsCollector",
    "generate_metrics",
    "get_metrics_collector",
    "reset_metrics_collector",
]
