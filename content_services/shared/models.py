"""
Data Models

Typed records passed between the providers, ranker, analytics and
aggregation services. Records handed to callers are frozen dataclasses so a
cached result cannot be mutated by one caller under another.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .errors import AggregationExhausted, InvalidQuery

COURSE = "course"
JOB = "job"
RECORD_KINDS = (COURSE, JOB)

DEMAND_LOW = "low"
DEMAND_MEDIUM = "medium"
DEMAND_HIGH = "high"


@dataclass(frozen=True)
class QueryFilters:
    """Optional provider-side filters attached to a query."""

    level: str | None = None
    location: str | None = None
    remote: bool | None = None
    language: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "location": self.location,
            "remote": self.remote,
            "language": self.language,
        }


@dataclass(frozen=True)
class Query:
    """
    A caller query, immutable once dispatched to providers.

    Raises:
        InvalidQuery: If text is empty or limit is not a positive integer
    """

    text: str
    filters: QueryFilters = field(default_factory=QueryFilters)
    limit: int = 20

    def __post_init__(self):
        if not isinstance(self.text, str) or not self.text.strip():
            raise InvalidQuery("Query text is required and cannot be empty")
        if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit <= 0:
            raise InvalidQuery(f"limit must be a positive integer, got: {self.limit!r}")
        object.__setattr__(self, "text", self.text.strip())


@dataclass
class ProviderConfig:
    """
    Rate-limit state for one provider.

    Mutated only by the RateLimiter. last_admitted_at is None until the first
    admission and never moves backwards afterwards.
    """

    name: str
    rate_limit_per_hour: int
    last_admitted_at: float | None = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("Provider name is required")
        if not isinstance(self.rate_limit_per_hour, int) or self.rate_limit_per_hour <= 0:
            raise ValueError(
                f"rate_limit_per_hour must be a positive integer, got: {self.rate_limit_per_hour}"
            )

    @property
    def min_interval_seconds(self) -> float:
        return 3600.0 / self.rate_limit_per_hour


@dataclass(frozen=True)
class RawRecord:
    """
    A provider reply item after the adapter has pulled out the fields it knows.

    `fields` keeps provider-specific values (rating, salary_min, created, ...)
    under the names the normalizer expects; anything else stays out.
    """

    provider: str
    external_id: str
    kind: str
    title: str
    description: str = ""
    url: str = ""
    fields: dict[str, Any] = field(default_factory=dict)
    synthetic: bool = False


@dataclass(frozen=True)
class SalaryRange:
    min: float | None = None
    max: float | None = None
    currency: str = "USD"
    estimated: bool = False

    @property
    def midpoint(self) -> float | None:
        if self.min is None or self.max is None:
            return None
        return (self.min + self.max) / 2


@dataclass(frozen=True)
class RecordAttributes:
    """Optional attributes of a normalized record; unknown values are None, never absent."""

    rating: float | None = None
    enrollments: int | None = None
    price: float | None = None
    salary_range: SalaryRange | None = None
    location: str | None = None
    remote: bool | None = None
    skills: tuple[str, ...] = ()
    level: str | None = None
    instructor: str | None = None
    duration: str | None = None
    company: str | None = None
    language: str | None = None
    certificate: bool | None = None
    posted_at: datetime | None = None

    def populated_count(self) -> int:
        """Number of attributes carrying a value (used as a completeness measure)."""
        values = [
            self.rating,
            self.enrollments,
            self.price,
            self.salary_range,
            self.location,
            self.remote,
            self.level,
            self.instructor,
            self.duration,
            self.company,
            self.language,
            self.certificate,
            self.posted_at,
        ]
        count = sum(1 for value in values if value is not None)
        if self.skills:
            count += 1
        return count


@dataclass(frozen=True)
class NormalizedRecord:
    """A course or job listing in the common schema. `id` is provider-prefixed."""

    id: str
    kind: str
    title: str
    description: str
    provider: str
    attributes: RecordAttributes
    url: str
    synthetic: bool = False


@dataclass(frozen=True)
class LocationCount:
    location: str
    count: int


@dataclass(frozen=True)
class SkillFrequency:
    skill: str
    frequency: int


@dataclass(frozen=True)
class AnalyticsResult:
    """Market aggregates derived from a set of job records for one skill."""

    skill: str
    demand: str
    average_salary: float | None
    top_locations: tuple[LocationCount, ...]
    growth_rate_percent: float
    required_skills: tuple[SkillFrequency, ...]
    job_count: int


@dataclass(frozen=True)
class ProviderFailure:
    provider: str
    reason: str


@dataclass(frozen=True)
class AggregationOutcome:
    """
    Result of one fan-out round, before caching.

    Attributes:
        records: Normalized, ranked and truncated records
        providers_succeeded: Providers whose call completed
        providers_failed: Providers whose call failed, with a reason
        used_fallback: True when no real provider contributed records
        providers_skipped: Providers not admitted by the rate limiter
        from_cache: True when the records were served from the cache
    """

    records: tuple[NormalizedRecord, ...]
    providers_succeeded: tuple[str, ...] = ()
    providers_failed: tuple[ProviderFailure, ...] = ()
    used_fallback: bool = False
    providers_skipped: tuple[str, ...] = ()
    from_cache: bool = False

    @property
    def exhausted(self) -> bool:
        return not self.records and not self.used_fallback

    def raise_if_exhausted(self) -> AggregationOutcome:
        """Return self, or raise AggregationExhausted for the explicit empty outcome."""
        if self.exhausted:
            failed = ", ".join(f"{f.provider}={f.reason}" for f in self.providers_failed)
            raise AggregationExhausted(f"No records available (failed: {failed or 'none'})")
        return self


@dataclass(frozen=True)
class SkillRecommendation:
    """Courses recommended for one skill, with a 0-1 relevance score per course id."""

    skill: str
    courses: tuple[NormalizedRecord, ...]
    relevance: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ProviderStatus:
    name: str
    kind: str
    configured: bool
    rate_limit_per_hour: int


@dataclass(frozen=True)
class CacheStats:
    entry_count: int
    ttl_seconds: int
    distributed: bool


@dataclass(frozen=True)
class ServiceStatus:
    providers: tuple[ProviderStatus, ...]
    cache: CacheStats
