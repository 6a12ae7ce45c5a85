"""Test helpers for the asset archive tests.

Helpers:
    FakeTimeAuthority: Controllable time authority for deterministic tests
    ArchiveHarness: Lifecycle services wired to stubs and a temp file store
    make_record: ArchiveRecord factory with overridable fields
    sample_value: Sum of Prometheus samples matching a label subset
"""

from tests.helpers.archive_harness import (
    ACTOR,
    AFTER_CUTOFF,
    BEFORE_CUTOFF,
    ArchiveHarness,
    build_harness,
)
from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.metrics import sample_value
from tests.helpers.record_factory import make_record

__all__ = [
    "ACTOR",
    "AFTER_CUTOFF",
    "BEFORE_CUTOFF",
    "ArchiveHarness",
    "FakeTimeAuthority",
    "build_harness",
    "make_record",
    "sample_value",
]
