"""Unit tests for the one-shot reconciliation runner."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from asset_archive.domain.models.lifecycle_results import ReconciliationAction
from asset_archive.workers import reconciliation_runner
from asset_archive.workers.reconciliation_runner import (
    DEFAULT_BATCH_SIZE,
    main,
    parse_args,
    run_reconciliation,
)
from tests.helpers import build_harness


class TestParseArgs:
    def test_default_batch_size(self) -> None:
        assert parse_args([]).batch_size == DEFAULT_BATCH_SIZE

    def test_explicit_batch_size(self) -> None:
        assert parse_args(["--batch-size", "250"]).batch_size == 250


class TestMain:
    @pytest.mark.parametrize("value", ["0", "-3"])
    def test_rejects_non_positive_batch_size(
        self, value: str, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main(["--batch-size", value]) == 2
        assert "--batch-size" in capsys.readouterr().err

    def test_runs_sweep(self, monkeypatch: pytest.MonkeyPatch) -> None:
        run = AsyncMock()
        monkeypatch.setattr(reconciliation_runner, "_run_from_env", run)
        monkeypatch.setattr(reconciliation_runner, "configure_logging", lambda: "test")

        assert main(["--batch-size", "5"]) == 0
        run.assert_awaited_once_with(5)


class TestRunReconciliation:
    @pytest.mark.asyncio
    async def test_sweeps_with_harness(self, tmp_path: Path) -> None:
        harness = build_harness(tmp_path)
        harness.add_asset("kept", "reports/kept.pdf")
        harness.add_asset("gone", "reports/gone.pdf")
        await harness.archive("kept")
        await harness.enqueue("gone")
        (harness.public_root / "reports" / "gone.pdf").unlink()

        report = await run_reconciliation(harness.services.reconciliation, batch_size=1)

        assert report.examined == 2
        assert report.count(ReconciliationAction.AUTO_REMOVED) == 1
        assert report.count(ReconciliationAction.UNCHANGED) == 1
