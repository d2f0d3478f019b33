"""
Integration tests for the search → aggregate → rank → cache flow.

Tests the complete pipeline with the adapters built from settings:
1. Unconfigured providers answer with sample data
2. A configured provider is queried over (mocked) HTTP
3. Results are normalized, ranked, cached and analysed
"""

from unittest.mock import MagicMock, patch

import pytest

from content_services.aggregation import AggregationService
from content_services.providers.registry import build_adapters
from content_services.shared.config import AggregatorSettings
from content_services.shared.redis_cache import RedisCache
from content_services.shared.serialization import encode_cache_value
from content_services.shared.tiered_cache import TieredCache

# Mark all tests in this module as integration tests
pytestmark = pytest.mark.integration


def adzuna_response(count):
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = {
        "results": [
            {
                "id": str(1000 + i),
                "title": f"Rust Engineer {i}",
                "description": "Rust and Kubernetes in production.",
                "company": {"display_name": "Ferris Ltd"},
                "location": {"display_name": "London" if i % 2 else "Manchester"},
                "created": f"2024-05-{(i % 28) + 1:02d}T09:00:00Z",
                "redirect_url": f"https://adzuna.example/{1000 + i}",
            }
            for i in range(count)
        ]
    }
    return response


class TestUnconfiguredService:
    """Every provider unconfigured: the service still answers with labeled sample data."""

    def test_course_search_returns_sample_data(self, service):
        outcome = service.search_courses_outcome("python", limit=5)

        assert 0 < len(outcome.records) <= 5
        assert outcome.used_fallback is True
        assert all(r.synthetic for r in outcome.records)
        assert len({r.id for r in outcome.records}) == len(outcome.records)

    def test_sample_data_ranked_deterministically(self, service):
        first = service.search_courses("python", limit=6)
        # Sample outcomes are not cached; reset rate windows so providers answer again
        for config in service.rate_limiter.configs():
            config.last_admitted_at = None
        second = service.search_courses("python", limit=6)
        assert [r.id for r in first] == [r.id for r in second]

    def test_rate_limited_second_round_still_answers(self, service):
        service.search_courses("python")
        outcome = service.search_courses_outcome("python")

        assert set(outcome.providers_skipped) == {"coursera", "udemy", "edx"}
        assert outcome.used_fallback is True
        assert outcome.records[0].provider == "various"

    def test_status(self, service):
        status = service.get_status()
        configured = {p.name: p.configured for p in status.providers}
        assert configured == {
            "coursera": False,
            "udemy": False,
            "edx": False,
            "nptel": True,
            "adzuna": False,
            "github": False,
        }


class TestConfiguredJobProvider:
    """Adzuna configured and answering over mocked HTTP."""

    @pytest.fixture
    def configured_service(self):
        settings = AggregatorSettings(adzuna_app_id="id", adzuna_app_key="key")
        adapters = build_adapters(settings)
        svc = AggregationService(adapters, cache=TieredCache(600))
        yield svc
        svc.close()

    def test_trends_over_live_and_sample_jobs(self, configured_service):
        adzuna = configured_service.adapters["adzuna"]
        with patch.object(adzuna.session, "get", return_value=adzuna_response(50)) as mock_get:
            result = configured_service.get_job_market_trends(["rust"])[0]

        assert mock_get.call_args.kwargs["params"]["results_per_page"] == 50
        # 50 Adzuna jobs plus 2 sample GitHub jobs
        assert result.job_count == 52
        assert result.demand == "medium"
        assert result.required_skills[0].skill == "rust"
        assert {loc.location for loc in result.top_locations} >= {"London", "Manchester"}

    def test_job_search_cached_after_live_results(self, configured_service):
        adzuna = configured_service.adapters["adzuna"]
        with patch.object(adzuna.session, "get", return_value=adzuna_response(5)) as mock_get:
            first = configured_service.search_jobs_outcome("rust", limit=3)
            second = configured_service.search_jobs_outcome("rust", limit=3)

        assert mock_get.call_count == 1
        assert first.used_fallback is False
        assert second.from_cache is True
        assert [r.id for r in second.records] == [r.id for r in first.records]
        # Sample GitHub jobs are dated a week ago, so they rank ahead of the 2024 postings
        assert [r.id for r in first.records] == [
            "github_sample-rust-1",
            "github_sample-rust-2",
            "adzuna_1004",
        ]

    def test_provider_outage_degrades_to_sample_jobs(self, configured_service):
        adzuna = configured_service.adapters["adzuna"]
        failing = MagicMock(status_code=502, text="bad gateway")
        with patch.object(adzuna.session, "get", return_value=failing):
            outcome = configured_service.search_jobs_outcome("rust")

        assert [(f.provider, f.reason) for f in outcome.providers_failed] == [("adzuna", "http_502")]
        assert outcome.used_fallback is True
        assert all(r.provider == "github" for r in outcome.records)


class TestSharedCache:
    """Two service instances sharing one Redis tier."""

    def test_second_instance_reads_first_instance_results(self):
        store = {}
        client = MagicMock()
        client.get.side_effect = lambda key: store.get(key)
        client.ttl.return_value = 300
        client.setex.side_effect = lambda key, ttl, value: store.__setitem__(key, value)

        settings = AggregatorSettings(adzuna_app_id="id", adzuna_app_key="key")
        first = AggregationService(
            build_adapters(settings), cache=TieredCache(600, distributed=RedisCache(client))
        )
        second = AggregationService(
            build_adapters(settings), cache=TieredCache(600, distributed=RedisCache(client))
        )

        with patch.object(first.adapters["adzuna"].session, "get", return_value=adzuna_response(4)):
            records = first.search_jobs("rust", limit=4)

        with patch.object(second.adapters["adzuna"].session, "get") as second_get:
            outcome = second.search_jobs_outcome("rust", limit=4)

        second_get.assert_not_called()
        assert outcome.from_cache is True
        assert list(outcome.records) == records
        assert any(value == encode_cache_value(tuple(records)) for value in store.values())

        first.close()
        second.close()
