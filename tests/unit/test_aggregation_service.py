"""Unit tests for AggregationService."""

import itertools
from unittest.mock import MagicMock, patch

import pytest

from content_services.aggregation.service import AggregationService, build_cache_key
from content_services.providers.rate_limiter import RateLimiter
from content_services.shared.config import AggregatorSettings
from content_services.shared.errors import InvalidQuery
from content_services.shared.models import Query, QueryFilters
from content_services.shared.tiered_cache import TieredCache


@pytest.fixture
def open_limiter():
    """Rate limiter whose clock jumps an hour on every read, so every call is admitted."""
    return RateLimiter(clock=itertools.count(0, 3600).__next__)


@pytest.fixture
def course_adapters(make_adapter, make_raw_course):
    return {
        "coursera": make_adapter(
            "coursera",
            records=[make_raw_course("coursera", i, f"Python {i}", rating=4.0) for i in range(4)],
        ),
        "udemy": make_adapter(
            "udemy", records=[make_raw_course("udemy", i, "Python", rating=4.5) for i in range(2)]
        ),
        "edx": make_adapter("edx", records=[make_raw_course("edx", 1, "Python", price=0)]),
        "nptel": make_adapter("nptel", records=[make_raw_course("nptel", 1, "Python")]),
    }


@pytest.fixture
def job_adapters(make_adapter, make_raw_job):
    return {
        "adzuna": make_adapter(
            "adzuna",
            kind="job",
            records=[make_raw_job("adzuna", i, location="Berlin", skills=["rust"]) for i in range(70)],
        ),
        "github": make_adapter(
            "github",
            kind="job",
            records=[make_raw_job("github", i, location="Remote") for i in range(50)],
        ),
    }


@pytest.fixture
def service(course_adapters, job_adapters, open_limiter):
    svc = AggregationService(
        {**course_adapters, **job_adapters},
        cache=TieredCache(3600),
        rate_limiter=open_limiter,
    )
    yield svc
    svc.close()


class TestBuildCacheKey:
    def test_deterministic_and_provider_order_insensitive(self):
        query = Query(text="python", limit=5)
        assert build_cache_key("courses", query, ["udemy", "coursera"]) == build_cache_key(
            "courses", query, ["coursera", "udemy"]
        )

    def test_namespace_prefix(self):
        key = build_cache_key("jobs", Query(text="python"), ["adzuna"])
        namespace, digest = key.split(":")
        assert namespace == "jobs"
        assert len(digest) == 64

    def test_filters_and_limit_change_key(self):
        base = build_cache_key("courses", Query(text="python", limit=5), ["edx"])
        assert base != build_cache_key("courses", Query(text="python", limit=6), ["edx"])
        assert base != build_cache_key(
            "courses", Query(text="python", filters=QueryFilters(level="beginner"), limit=5), ["edx"]
        )


class TestSearchCourses:
    def test_default_providers(self, service, course_adapters):
        records = service.search_courses("python")

        assert len(records) == 7
        assert course_adapters["nptel"].calls == []
        assert {r.provider for r in records} == {"coursera", "udemy", "edx"}

    def test_limit_applied(self, service):
        assert len(service.search_courses("python", limit=3)) == 3

    def test_explicit_providers(self, service, course_adapters):
        records = service.search_courses("python", providers=["NPTEL"])
        assert [r.id for r in records] == ["nptel_1"]
        assert course_adapters["coursera"].calls == []

    def test_skill_level_all_is_no_filter(self, service, course_adapters):
        service.search_courses("python", skill_level="all")
        query, _ = course_adapters["coursera"].calls[0]
        assert query.filters.level is None
        assert query.filters.language == "en"

    def test_skill_level_passed_through(self, service, course_adapters):
        service.search_courses("python", skill_level="beginner")
        query, _ = course_adapters["coursera"].calls[0]
        assert query.filters.level == "beginner"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"query": ""},
            {"query": "python", "limit": 0},
            {"query": "python", "providers": ["unknown"]},
            {"query": "python", "providers": ["adzuna"]},
            {"query": "python", "providers": []},
            {"query": "python", "providers": "coursera"},
        ],
    )
    def test_invalid_input(self, service, kwargs):
        with pytest.raises(InvalidQuery):
            service.search_courses(**kwargs)

    def test_second_call_served_from_cache(self, service, course_adapters):
        first = service.search_courses_outcome("python", limit=5)
        second = service.search_courses_outcome("python", limit=5)

        assert second.from_cache is True
        assert second.records == first.records
        assert len(course_adapters["coursera"].calls) == 1

    def test_fallback_results_not_cached(self, open_limiter, make_adapter):
        adapter = make_adapter("coursera", records=[])
        svc = AggregationService({"coursera": adapter}, rate_limiter=open_limiter)

        first = svc.search_courses_outcome("python")
        svc.search_courses_outcome("python")

        assert first.used_fallback is True
        assert len(adapter.calls) == 2
        svc.close()


class TestSearchJobs:
    def test_queries_all_job_providers(self, service, job_adapters):
        records = service.search_jobs("rust", limit=10)
        assert len(records) == 10
        assert len(job_adapters["adzuna"].calls) == 1
        assert len(job_adapters["github"].calls) == 1

    def test_location_and_remote_filters(self, service, job_adapters):
        service.search_jobs("rust", location="Berlin", remote=True)
        query, limit = job_adapters["adzuna"].calls[0]
        assert query.filters.location == "Berlin"
        assert query.filters.remote is True
        assert limit == 25

    def test_remote_false_is_no_filter(self, service, job_adapters):
        service.search_jobs("rust")
        query, _ = job_adapters["adzuna"].calls[0]
        assert query.filters.remote is None


class TestCourseRecommendations:
    def test_first_five_skills_three_courses_each(self, service):
        skills = ["python", "sql", "go", "rust", "java", "kotlin", "swift"]
        recommendations = service.get_course_recommendations(skills)

        assert [r.skill for r in recommendations] == skills[:5]
        for recommendation in recommendations:
            assert len(recommendation.courses) <= 3
            assert set(recommendation.relevance) == {c.id for c in recommendation.courses}

    def test_relevance_scores(self, service):
        recommendation = service.get_course_recommendations(["python"])[0]
        assert all(score == pytest.approx(0.8) for score in recommendation.relevance.values())

    def test_user_level_used(self, service, course_adapters):
        service.get_course_recommendations(["python"], user_level="advanced")
        query, limit = course_adapters["udemy"].calls[0]
        assert query.filters.level == "advanced"
        assert limit == 3

    def test_blank_skills_skipped(self, service):
        assert service.get_course_recommendations(["", "  "]) == []

    def test_skills_must_be_a_list(self, service):
        with pytest.raises(InvalidQuery):
            service.get_course_recommendations("python")


class TestJobMarketTrends:
    def test_high_demand_for_120_records(self, service):
        result = service.get_job_market_trends(["rust"])[0]

        assert result.job_count == 120
        assert result.demand == "high"
        assert result.average_salary is None
        assert result.top_locations[0].location == "Berlin"
        assert result.top_locations[0].count == 70

    def test_ten_records_without_salary(self, open_limiter, make_adapter, make_raw_job):
        adapter = make_adapter(
            "adzuna", kind="job", records=[make_raw_job("adzuna", i) for i in range(10)]
        )
        svc = AggregationService({"adzuna": adapter}, rate_limiter=open_limiter)

        result = svc.get_job_market_trends(["rust"])[0]

        assert result.demand == "low"
        assert result.average_salary is None
        svc.close()

    def test_samples_up_to_trends_limit(self, service, job_adapters):
        service.trends_sample_limit = 30
        result = service.get_job_market_trends(["rust"])[0]
        assert result.job_count == 30
        assert job_adapters["adzuna"].calls[0][1] == 30

    def test_results_cached_per_skill(self, service, job_adapters):
        first = service.get_job_market_trends(["rust"])
        second = service.get_job_market_trends(["rust"])
        assert first == second
        assert len(job_adapters["adzuna"].calls) == 1

    def test_placeholder_trends_logged_as_warning(self, fake_clock, job_adapters, caplog):
        """Skills analysed while the job providers are rate limited are flagged in the logs."""
        svc = AggregationService(job_adapters, rate_limiter=RateLimiter(clock=fake_clock))

        with caplog.at_level("WARNING", logger="content_services.aggregation.service"):
            live, placeholder = svc.get_job_market_trends(["rust", "go"])

        assert live.job_count == 120
        assert placeholder.job_count == 1
        assert placeholder.demand == "low"
        assert "go built from placeholder records" in caplog.text
        assert "adzuna, github" in caplog.text
        assert "rust built from placeholder" not in caplog.text
        svc.close()

    def test_first_ten_skills(self, service):
        skills = [f"skill{i}" for i in range(12)]
        assert [r.skill for r in service.get_job_market_trends(skills)] == skills[:10]


class TestCacheAdministration:
    def test_clear_scope(self, service):
        service.search_courses("python")
        service.search_jobs("rust")

        assert service.clear_cache("courses") == 1
        assert service.get_status().cache.entry_count == 1
        assert service.clear_cache() == 1

    def test_clear_bypasses_ttl(self, service, course_adapters):
        service.search_courses("python")
        service.clear_cache("all")
        service.search_courses("python")
        assert len(course_adapters["coursera"].calls) == 2

    @pytest.mark.parametrize("scope", ["", 5])
    def test_invalid_scope(self, service, scope):
        with pytest.raises(InvalidQuery):
            service.clear_cache(scope)


class TestStatusAndLifecycle:
    def test_status(self, service):
        status = service.get_status()
        by_name = {p.name: p for p in status.providers}

        assert set(by_name) == {"coursera", "udemy", "edx", "nptel", "adzuna", "github"}
        assert by_name["adzuna"].kind == "job"
        assert by_name["coursera"].configured is True
        assert by_name["coursera"].rate_limit_per_hour == 3600
        assert status.cache.ttl_seconds == 3600
        assert status.cache.distributed is False

    def test_requires_adapters(self):
        with pytest.raises(ValueError):
            AggregationService({})

    def test_close_shuts_down_orchestrator(self, course_adapters):
        orchestrator = MagicMock()
        svc = AggregationService(course_adapters, orchestrator=orchestrator)
        svc.close()
        orchestrator.shutdown.assert_called_once()

    def test_from_env_without_redis(self):
        settings = AggregatorSettings(cache_ttl_seconds=120)
        svc = AggregationService.from_env(settings)

        status = svc.get_status()
        assert status.cache.ttl_seconds == 120
        assert status.cache.distributed is False
        assert all(not p.configured for p in status.providers if p.name != "nptel")
        svc.close()

    def test_from_env_with_redis(self):
        settings = AggregatorSettings(redis_url="redis://cache:6379/0")
        with patch("content_services.aggregation.service.RedisCache.from_url") as from_url:
            svc = AggregationService.from_env(settings)

        from_url.assert_called_once_with("redis://cache:6379/0")
        assert svc.get_status().cache.distributed is True
        svc.close()
