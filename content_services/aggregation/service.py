"""
Aggregation Service

Entry point for callers: course and job search, course recommendations,
job-market trends and administrative cache/status operations. One instance
is built at process start and owns the adapters, rate limiter, cache and
orchestrator.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Sequence

from ..analytics.market_analyzer import analyze_skill_market
from ..providers.base_client import BaseProviderAdapter
from ..providers.rate_limiter import RateLimiter
from ..providers.registry import build_adapters
from ..ranker.record_ranker import relevance_score
from ..shared.config import DEFAULT_COURSE_PROVIDERS, AggregatorSettings
from ..shared.errors import InvalidQuery
from ..shared.models import (
    COURSE,
    JOB,
    AggregationOutcome,
    AnalyticsResult,
    NormalizedRecord,
    ProviderStatus,
    Query,
    QueryFilters,
    ServiceStatus,
    SkillRecommendation,
)
from ..shared.redis_cache import RedisCache
from ..shared.tiered_cache import TieredCache
from .orchestrator import AggregationOrchestrator

logger = logging.getLogger(__name__)

COURSES_NAMESPACE = "courses"
JOBS_NAMESPACE = "jobs"
TRENDS_NAMESPACE = "job-trends"

MAX_RECOMMENDATION_SKILLS = 5
COURSES_PER_RECOMMENDATION = 3
MAX_TREND_SKILLS = 10


def build_cache_key(namespace: str, query: Query, providers: Sequence[str]) -> str:
    """
    Build a deterministic cache key for a query against a provider set.

    The key is `<namespace>:<sha256>` over the canonical JSON of the query
    text, filters, limit and sorted provider names.
    """
    canonical = json.dumps(
        {
            "text": query.text,
            "filters": query.filters.to_dict(),
            "limit": query.limit,
            "providers": sorted(providers),
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return f"{namespace}:{digest}"


def _validate_skills(skills: Sequence[str]) -> list[str]:
    if isinstance(skills, str) or not isinstance(skills, (list, tuple)):
        raise InvalidQuery("skills must be a list of strings")
    if not all(isinstance(skill, str) for skill in skills):
        raise InvalidQuery("skills must be a list of strings")
    return [skill.strip() for skill in skills if skill.strip()]


class AggregationService:
    """
    Service for aggregated course and job search.

    Only malformed input raises (InvalidQuery). Provider and cache failures
    degrade the result instead: fewer records, or fallback records.
    """

    def __init__(
        self,
        adapters: dict[str, BaseProviderAdapter],
        cache: TieredCache | None = None,
        rate_limiter: RateLimiter | None = None,
        orchestrator: AggregationOrchestrator | None = None,
        aggregation_timeout_seconds: float = 10.0,
        trends_sample_limit: int = 200,
    ):
        """
        Initialize the aggregation service.

        Args:
            adapters: Provider adapters keyed by provider name
            cache: Result cache (default: in-process only, 1 hour TTL)
            rate_limiter: Admission gate; adapters are registered with it
            orchestrator: Fan-out orchestrator (default built from rate_limiter)
            aggregation_timeout_seconds: Timeout for the default orchestrator
            trends_sample_limit: Job records analysed per skill for trends

        Raises:
            ValueError: If no adapters are given
        """
        if not adapters:
            raise ValueError("At least one provider adapter is required")

        self.adapters = dict(adapters)
        self.cache = cache or TieredCache()
        self.rate_limiter = rate_limiter or RateLimiter()
        for adapter in self.adapters.values():
            self.rate_limiter.register(adapter.provider_config())
        self.orchestrator = orchestrator or AggregationOrchestrator(
            self.rate_limiter, timeout_seconds=aggregation_timeout_seconds
        )
        self.trends_sample_limit = trends_sample_limit

    @classmethod
    def from_env(cls, settings: AggregatorSettings | None = None) -> AggregationService:
        """
        Build the service from environment configuration.

        Args:
            settings: Pre-loaded settings (default: AggregatorSettings.from_env())
        """
        settings = settings or AggregatorSettings.from_env()
        distributed = RedisCache.from_url(settings.redis_url) if settings.redis_url else None
        if distributed is None:
            logger.info("REDIS_URL not set, caching in-process only")
        cache = TieredCache(settings.cache_ttl_seconds, distributed=distributed)
        return cls(
            build_adapters(settings),
            cache=cache,
            aggregation_timeout_seconds=settings.aggregation_timeout_seconds,
            trends_sample_limit=settings.trends_sample_limit,
        )

    def _resolve_adapters(
        self, providers: Sequence[str] | None, kind: str
    ) -> list[BaseProviderAdapter]:
        if providers is None:
            if kind == COURSE:
                names = [name for name in DEFAULT_COURSE_PROVIDERS if name in self.adapters]
            else:
                names = [name for name, adapter in self.adapters.items() if adapter.kind == kind]
        else:
            if isinstance(providers, str) or not all(isinstance(p, str) for p in providers):
                raise InvalidQuery("providers must be a list of provider names")
            names = list(dict.fromkeys(p.strip().lower() for p in providers))

        if not names:
            raise InvalidQuery(f"No {kind} providers selected")

        resolved = []
        for name in names:
            adapter = self.adapters.get(name)
            if adapter is None:
                raise InvalidQuery(f"Unknown provider: {name}")
            if adapter.kind != kind:
                raise InvalidQuery(f"Provider {name} does not serve {kind} results")
            resolved.append(adapter)
        return resolved

    def _search(
        self, namespace: str, query: Query, adapters: list[BaseProviderAdapter], kind: str
    ) -> AggregationOutcome:
        key = build_cache_key(namespace, query, [adapter.name for adapter in adapters])
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {namespace} query '{query.text}'")
            return AggregationOutcome(records=tuple(cached), from_cache=True)

        outcome = self.orchestrator.aggregate(query, adapters, kind=kind)
        # Fallback and empty outcomes are not cached so the next call retries the providers
        if outcome.records and not outcome.used_fallback:
            self.cache.set(key, outcome.records)
        return outcome

    def search_courses_outcome(
        self,
        query: str,
        providers: Sequence[str] | None = None,
        limit: int = 20,
        skill_level: str | None = "all",
        language: str | None = "en",
    ) -> AggregationOutcome:
        """
        Search courses and return the full aggregation outcome.

        Args:
            query: Search text
            providers: Course providers to query (default: coursera, udemy, edx)
            limit: Maximum number of courses
            skill_level: Level filter; "all" disables it
            language: Language filter

        Raises:
            InvalidQuery: For empty text, a non-positive limit or unknown providers
        """
        level = None if not skill_level or skill_level == "all" else skill_level
        q = Query(text=query, filters=QueryFilters(level=level, language=language), limit=limit)
        adapters = self._resolve_adapters(providers, COURSE)
        return self._search(COURSES_NAMESPACE, q, adapters, COURSE)

    def search_courses(
        self,
        query: str,
        providers: Sequence[str] | None = None,
        limit: int = 20,
        skill_level: str | None = "all",
        language: str | None = "en",
    ) -> list[NormalizedRecord]:
        """Search courses across providers; see search_courses_outcome."""
        outcome = self.search_courses_outcome(query, providers, limit, skill_level, language)
        return list(outcome.records)

    def search_jobs_outcome(
        self,
        query: str,
        limit: int = 25,
        location: str | None = None,
        remote: bool = False,
    ) -> AggregationOutcome:
        """
        Search jobs across all job providers and return the full outcome.

        Raises:
            InvalidQuery: For empty text or a non-positive limit
        """
        filters = QueryFilters(location=location or None, remote=True if remote else None)
        q = Query(text=query, filters=filters, limit=limit)
        adapters = self._resolve_adapters(None, JOB)
        return self._search(JOBS_NAMESPACE, q, adapters, JOB)

    def search_jobs(
        self,
        query: str,
        limit: int = 25,
        location: str | None = None,
        remote: bool = False,
    ) -> list[NormalizedRecord]:
        return list(self.search_jobs_outcome(query, limit, location, remote).records)

    def get_course_recommendations(
        self, skills: Sequence[str], user_level: str = "intermediate"
    ) -> list[SkillRecommendation]:
        """
        Recommend courses for each of the first five skills.

        Args:
            skills: Skill names
            user_level: Level filter applied to every search

        Returns:
            One SkillRecommendation per skill with up to three courses and a
            0-1 relevance score per course id
        """
        recommendations = []
        for skill in _validate_skills(skills)[:MAX_RECOMMENDATION_SKILLS]:
            courses = self.search_courses(
                skill, limit=COURSES_PER_RECOMMENDATION, skill_level=user_level
            )
            recommendations.append(
                SkillRecommendation(
                    skill=skill,
                    courses=tuple(courses),
                    relevance={course.id: relevance_score(course, skill) for course in courses},
                )
            )
        logger.info(f"Built course recommendations for {len(recommendations)} skill(s)")
        return recommendations

    def get_job_market_trends(self, skills: Sequence[str]) -> list[AnalyticsResult]:
        """
        Analyse the job market for each of the first ten skills.

        Each skill is analysed over up to trends_sample_limit aggregated job
        records; results are cached per skill.
        """
        results = []
        job_adapters = self._resolve_adapters(None, JOB)
        for skill in _validate_skills(skills)[:MAX_TREND_SKILLS]:
            query = Query(text=skill, limit=self.trends_sample_limit)
            key = build_cache_key(TRENDS_NAMESPACE, query, [a.name for a in job_adapters])
            cached = self.cache.get(key)
            if cached is not None:
                results.append(cached)
                continue

            outcome = self._search(JOBS_NAMESPACE, query, job_adapters, JOB)
            analytics = analyze_skill_market(skill, outcome.records)
            if outcome.records and not outcome.used_fallback:
                self.cache.set(key, analytics)
            elif outcome.used_fallback:
                logger.warning(
                    f"Market trends for {skill} built from placeholder records, "
                    f"no live job data (skipped: {', '.join(outcome.providers_skipped) or '-'})"
                )
            logger.info(
                f"Market trends for {skill}: {analytics.job_count} job(s), demand={analytics.demand}"
            )
            results.append(analytics)
        return results

    def clear_cache(self, scope: str | None = "all") -> int:
        """
        Clear cached results, bypassing TTL.

        Args:
            scope: "all", or a key namespace such as "courses", "jobs" or "job-trends"

        Returns:
            Number of in-process entries removed
        """
        if scope is not None and (not isinstance(scope, str) or not scope.strip()):
            raise InvalidQuery(f"Invalid cache scope: {scope!r}")
        prefix = None if scope is None or scope == "all" else scope.strip()
        return self.cache.clear(prefix)

    def get_status(self) -> ServiceStatus:
        providers = tuple(
            ProviderStatus(
                name=name,
                kind=adapter.kind,
                configured=adapter.configured,
                rate_limit_per_hour=adapter.rate_limit_per_hour,
            )
            for name, adapter in self.adapters.items()
        )
        return ServiceStatus(providers=providers, cache=self.cache.stats())

    def close(self) -> None:
        """Stop the orchestrator and close HTTP sessions."""
        self.orchestrator.shutdown()
        for adapter in self.adapters.values():
            close = getattr(adapter, "close", None)
            if callable(close):
                close()
