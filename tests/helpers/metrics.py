"""Read Prometheus samples back out of a collector in tests."""

from __future__ import annotations

from asset_archive.infrastructure.monitoring.metrics import ArchiveMetricsCollector


def sample_value(
    collector: ArchiveMetricsCollector, name: str, **labels: str
) -> float:
    """Sum every sample of a metric whose labels include the given ones."""
    total = 0.0
    for metric in collector.get_registry().collect():
        for sample in metric.samples:
            if sample.name != name:
                continue
            if all(sample.labels.get(key) == value for key, value in labels.items()):
                total += sample.value
    return total
