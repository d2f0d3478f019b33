"""
Root pytest configuration and shared fixtures.

This file contains configuration and fixtures shared across all test types.
Directory-specific conftest.py files can override or extend these fixtures.
"""

import sys
import threading
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add the repository root to the Python path so content_services imports
# work without an installed package
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from content_services.providers.base_client import BaseProviderAdapter  # noqa: E402
from content_services.shared.models import COURSE, JOB, RawRecord  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAdapter(BaseProviderAdapter):
    """
    In-memory provider adapter.

    Returns `records`, raises `error` if set, or blocks until `release` is set
    when `block` is True.
    """

    def __init__(
        self,
        name,
        kind=COURSE,
        records=None,
        error=None,
        block=False,
        synthetic=False,
        rate_limit_per_hour=3600,
    ):
        super().__init__(rate_limit_per_hour)
        self.name = name
        self.kind = kind
        self.records = list(records or [])
        self.error = error
        self.block = block
        self.synthetic = synthetic
        self.release = threading.Event()
        self.calls = []

    def search(self, query, limit):
        self.calls.append((query, limit))
        if self.block:
            self.release.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return list(self.records)


def raw_course(provider, external_id, title="Course", rating=None, enrollments=None, price=None, **fields):
    return RawRecord(
        provider=provider,
        external_id=str(external_id),
        kind=COURSE,
        title=title,
        description=fields.pop("description", ""),
        url=f"https://{provider}.example/{external_id}",
        fields={"rating": rating, "enrollments": enrollments, "price": price, **fields},
    )


def raw_job(provider, external_id, title="Job", posted_at=None, **fields):
    return RawRecord(
        provider=provider,
        external_id=str(external_id),
        kind=JOB,
        title=title,
        description=fields.pop("description", ""),
        url=f"https://{provider}.example/jobs/{external_id}",
        fields={"posted_at": posted_at, **fields},
    )


@pytest.fixture
def fake_clock():
    """Clock starting at t=1000s."""
    return FakeClock()


@pytest.fixture
def make_adapter():
    """Factory for FakeAdapter instances; blocked adapters are released on teardown."""
    created = []

    def factory(name, **kwargs):
        adapter = FakeAdapter(name, **kwargs)
        created.append(adapter)
        return adapter

    yield factory
    for adapter in created:
        adapter.release.set()


@pytest.fixture
def make_raw_course():
    return raw_course


@pytest.fixture
def make_raw_job():
    return raw_job


@pytest.fixture
def fixed_now():
    return datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
