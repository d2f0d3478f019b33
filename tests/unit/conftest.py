"""
Pytest configuration and fixtures for unit tests.

Unit tests are fast, isolated tests that don't require external dependencies.
"""

from unittest.mock import MagicMock

import pytest

from content_services.shared.models import NormalizedRecord, RecordAttributes, SalaryRange


@pytest.fixture
def mock_redis_client():
    """Mock redis-py client for unit testing."""
    client = MagicMock()
    client.get.return_value = None
    client.ttl.return_value = -2
    client.scan_iter.return_value = iter([])
    client.delete.return_value = 0
    return client


@pytest.fixture
def make_job_record():
    """Factory for normalized job records used by the analytics tests."""

    def factory(index, location=None, salary=None, skills=()):
        return NormalizedRecord(
            id=f"test_{index}",
            kind="job",
            title=f"Job {index}",
            description="",
            provider="test",
            attributes=RecordAttributes(
                location=location,
                salary_range=SalaryRange(min=salary[0], max=salary[1]) if salary else None,
                skills=tuple(skills),
            ),
            url="",
        )

    return factory
