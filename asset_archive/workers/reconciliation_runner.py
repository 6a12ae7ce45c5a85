"""One-shot reconciliation sweep.

Meant to be scheduled (cron, systemd timer, Kubernetes CronJob). Exits
with status 0 after a completed sweep, including sweeps that recorded
conflicts; conflicted records are picked up by the next run.

Usage:
    python -m asset_archive.workers.reconciliation_runner --batch-size 200
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from structlog import get_logger

from asset_archive.application.services.reconciliation_engine import (
    ReconciliationEngine,
)
from asset_archive.bootstrap.archive_services import (
    build_archive_services_from_environment,
)
from asset_archive.bootstrap.database import close_database_engine
from asset_archive.bootstrap.logging import configure_logging
from asset_archive.domain.models.lifecycle_results import (
    ReconciliationAction,
    ReconciliationReport,
)
from asset_archive.infrastructure.observability.correlation import correlation_scope

logger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 100


async def run_reconciliation(
    engine: ReconciliationEngine,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> ReconciliationReport:
    """Run one sweep under a fresh correlation id and log a summary."""
    with correlation_scope() as run_id:
        log = logger.bind(run_id=run_id)
        log.info("reconciliation_run_started", batch_size=batch_size)
        report = await engine.run(batch_size=batch_size)
        log.info(
            "reconciliation_run_summary",
            **{action.value: report.count(action) for action in ReconciliationAction},
        )
    return report


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile archive records once")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help="Records fetched per repository page",
    )
    return parser.parse_args(argv)


async def _run_from_env(batch_size: int) -> ReconciliationReport:
    services = await build_archive_services_from_environment()
    try:
        return await run_reconciliation(services.reconciliation, batch_size)
    finally:
        await close_database_engine()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.batch_size < 1:
        print("--batch-size must be >= 1", file=sys.stderr)
        return 2
    configure_logging()
    asyncio.run(_run_from_env(args.batch_size))
    return 0


if __name__ == "__main__":
    sys.exit(main())
