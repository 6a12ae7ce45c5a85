"""Worker processes for the archive lifecycle.

Workers:
- ChecksumWorker: Drains the deferred checksum queue
- reconciliation_runner: One-shot reconciliation sweep
"""

from asset_archive.workers.checksum_worker import (
    ChecksumWorker,
    ChecksumWorkerStats,
    run_checksum_worker,
)
from asset_archive.workers.reconciliation_runner import run_reconciliation

__all__ = [
    "ChecksumWorker",
    "ChecksumWorkerStats",
    "run_checksum_worker",
    "run_reconciliation",
]
