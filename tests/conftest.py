"""
Pytest configuration and shared fixtures for the asset archive tests.

Testing Standards:
- Async tests are marked with pytest.mark.asyncio (auto mode is on in pyproject.toml)
- Use AsyncMock for async collaborator mocks
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/ and carry the integration marker
"""

from datetime import datetime
from pathlib import Path

import pytest

from asset_archive.config.archive_config import DEFAULT_COMPLIANCE_CUTOFF
from asset_archive.infrastructure.monitoring.metrics import reset_metrics_collector
from tests.helpers.archive_harness import BEFORE_CUTOFF, ArchiveHarness, build_harness
from tests.helpers.fake_time_authority import FakeTimeAuthority


@pytest.fixture
def project_version() -> str:
    from asset_archive import __version__

    return __version__


@pytest.fixture
def compliance_cutoff() -> datetime:
    return DEFAULT_COMPLIANCE_CUTOFF


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    """Clock frozen before the compliance cutoff."""
    return FakeTimeAuthority(frozen_at=BEFORE_CUTOFF)


@pytest.fixture
def harness(tmp_path: Path) -> ArchiveHarness:
    """Lifecycle services on stubs with files under tmp_path, clock before the cutoff."""
    built = build_harness(tmp_path)
    built.set_time(BEFORE_CUTOFF)
    return built


@pytest.fixture(autouse=True)
def _reset_metrics_singleton() -> None:
    reset_metrics_collector()
