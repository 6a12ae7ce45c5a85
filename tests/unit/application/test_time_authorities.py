"""Unit tests for SystemTimeAuthority and the FakeTimeAuthority test clock."""

from datetime import datetime, timedelta, timezone

import pytest

from asset_archive.application.ports.time_authority import TimeAuthorityProtocol
from asset_archive.application.services.time_authority_service import (
    SystemTimeAuthority,
)
from tests.helpers import FakeTimeAuthority


class TestSystemTimeAuthority:
    def test_implements_protocol(self) -> None:
        assert isinstance(SystemTimeAuthority(), TimeAuthorityProtocol)

    def test_now_is_utc_aware(self) -> None:
        clock = SystemTimeAuthority()

        assert clock.now().tzinfo == timezone.utc
        assert clock.utcnow().tzinfo == timezone.utc

    def test_monotonic_never_goes_backwards(self) -> None:
        clock = SystemTimeAuthority()
        first = clock.monotonic()

        assert clock.monotonic() >= first


class TestFakeTimeAuthority:
    def test_naive_start_is_utc(self) -> None:
        clock = FakeTimeAuthority(datetime(2026, 4, 24))

        assert clock.now() == datetime(2026, 4, 24, tzinfo=timezone.utc)

    def test_advance_moves_both_clocks(self) -> None:
        clock = FakeTimeAuthority(start_monotonic=5.0)
        start = clock.now()

        clock.advance(seconds=30)
        clock.advance(delta=timedelta(minutes=1))

        assert clock.now() - start == timedelta(seconds=90)
        assert clock.monotonic() == 95.0

    @pytest.mark.parametrize("kwargs", [{}, {"seconds": -1}])
    def test_advance_rejects_missing_or_negative(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            FakeTimeAuthority().advance(**kwargs)
