"""
Pytest configuration and fixtures for integration tests.

Integration tests run the full service stack (adapters, rate limiter,
orchestrator, ranker, analytics and cache) with provider HTTP calls
stubbed out. All tests in this directory should be marked with
@pytest.mark.integration
"""

import pytest

from content_services.aggregation import AggregationService
from content_services.providers.registry import build_adapters
from content_services.shared.config import AggregatorSettings
from content_services.shared.tiered_cache import TieredCache


@pytest.fixture
def unconfigured_settings():
    """Settings with no provider credentials and no Redis."""
    return AggregatorSettings()


@pytest.fixture
def service(unconfigured_settings):
    """AggregationService built from settings with every provider unconfigured."""
    svc = AggregationService(
        build_adapters(unconfigured_settings),
        cache=TieredCache(unconfigured_settings.cache_ttl_seconds),
        aggregation_timeout_seconds=5.0,
    )
    yield svc
    svc.close()
