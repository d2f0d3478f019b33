"""
Synthetic Records

Deterministic, clearly labeled sample records. SyntheticAdapter stands in
for a provider with no credentials configured so development and demo flows
keep working; generate_fallback_records fills an aggregation round in which
no provider produced anything.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import quote_plus

from ..shared.models import COURSE, JOB, Query, RawRecord
from .base_client import BaseProviderAdapter

logger = logging.getLogger(__name__)

SAMPLE_MARKER = "[Sample]"
FALLBACK_PROVIDER = "various"

# Per-provider templates; "{q}" is replaced with the query text
COURSE_TEMPLATES: dict[str, dict[str, Any]] = {
    "coursera": {
        "title": "Complete {q} Course",
        "description": "Master {q} with hands-on projects and real-world applications.",
        "url": "https://www.coursera.org/search?query={q_url}",
        "instructor": "Stanford University",
        "rating": 4.7,
        "enrollments": 125000,
        "price": 79,
        "duration": "6 weeks",
        "level": "intermediate",
    },
    "udemy": {
        "title": "{q} Masterclass: From Beginner to Advanced",
        "description": "Comprehensive {q} course with practical exercises.",
        "url": "https://www.udemy.com/courses/search/?q={q_url}",
        "instructor": "John Smith",
        "rating": 4.5,
        "enrollments": 89000,
        "price": 89.99,
        "duration": "12 hours",
        "level": "all",
    },
    "edx": {
        "title": "Introduction to {q}",
        "description": "Learn the fundamentals of {q} from leading universities.",
        "url": "https://www.edx.org/search?q={q_url}",
        "instructor": "MIT",
        "rating": 4.6,
        "enrollments": 67000,
        "price": 0,
        "duration": "8 weeks",
        "level": "beginner",
    },
    "nptel": {
        "title": "{q} (NPTEL)",
        "description": "Free {q} lectures from IIT faculty.",
        "url": "https://nptel.ac.in/courses/search?query={q_url}",
        "instructor": "NPTEL Faculty",
        "rating": 4.3,
        "enrollments": 40000,
        "price": 0,
        "duration": "12 weeks",
        "level": "intermediate",
    },
}

JOB_TEMPLATES: dict[str, dict[str, Any]] = {
    "adzuna": {
        "title": "Senior {q} Developer",
        "description": "We are looking for an experienced {q} developer to join our team.",
        "url": "https://www.adzuna.com/search?q={q_url}",
        "company": "TechCorp Inc.",
        "location": "San Francisco, CA",
        "salary_min": 120000,
        "salary_max": 160000,
    },
    "github": {
        "title": "{q} Engineer",
        "description": "Open-source focused team hiring a {q} engineer.",
        "url": "https://github.com/search?q={q_url}&type=jobs",
        "company": "OpenSource Labs",
        "location": "Remote",
        "salary_min": 110000,
        "salary_max": 150000,
    },
}


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-") or "query"


def _fill(template: str, query_text: str) -> str:
    return template.format(q=query_text, q_url=quote_plus(query_text))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SyntheticAdapter(BaseProviderAdapter):
    """
    Provider variant used when no credentials are configured.

    Produces records_per_query labeled records for every query; the output
    depends only on the query text and the clock.
    """

    synthetic = True

    def __init__(
        self,
        name: str,
        kind: str,
        rate_limit_per_hour: int,
        records_per_query: int = 2,
        now: Callable[[], datetime] = _utc_now,
    ):
        if kind not in (COURSE, JOB):
            raise ValueError(f"Unknown record kind: {kind}")
        super().__init__(rate_limit_per_hour)
        self.name = name
        self.kind = kind
        self.records_per_query = records_per_query
        self._now = now
        templates = COURSE_TEMPLATES if kind == COURSE else JOB_TEMPLATES
        # Unknown providers borrow the first template of their kind
        self.template = templates.get(name) or next(iter(templates.values()))

    def search(self, query: Query, limit: int) -> list[RawRecord]:
        count = min(limit, self.records_per_query)
        logger.debug(f"Generating {count} sample record(s) for {self.name}")
        if self.kind == COURSE:
            return [self._course_record(query, i) for i in range(count)]
        return [self._job_record(query, i) for i in range(count)]

    def _title(self, query: Query, index: int) -> str:
        title = f"{SAMPLE_MARKER} {_fill(self.template['title'], query.text)}"
        return title if index == 0 else f"{title} (Part {index + 1})"

    def _course_record(self, query: Query, index: int) -> RawRecord:
        t = self.template
        return RawRecord(
            provider=self.name,
            external_id=f"sample-{_slug(query.text)}-{index + 1}",
            kind=COURSE,
            title=self._title(query, index),
            description=_fill(t["description"], query.text),
            url=_fill(t["url"], query.text),
            fields={
                "rating": t["rating"],
                "enrollments": t["enrollments"],
                "price": t["price"],
                "instructor": t["instructor"],
                "duration": t["duration"],
                "level": query.filters.level or t["level"],
                "language": query.filters.language or "en",
                "certificate": True,
                "skills": [query.text.lower()],
            },
            synthetic=True,
        )

    def _job_record(self, query: Query, index: int) -> RawRecord:
        t = self.template
        return RawRecord(
            provider=self.name,
            external_id=f"sample-{_slug(query.text)}-{index + 1}",
            kind=JOB,
            title=self._title(query, index),
            description=_fill(t["description"], query.text),
            url=_fill(t["url"], query.text),
            fields={
                "company": t["company"],
                "location": query.filters.location or t["location"],
                "remote": bool(query.filters.remote) or t["location"] == "Remote",
                "salary_min": t["salary_min"],
                "salary_max": t["salary_max"],
                "salary_currency": "USD",
                "salary_estimated": True,
                "posted_at": self._now() - timedelta(weeks=1, days=index),
                "skills": [query.text.lower(), "communication skills", "teamwork"],
            },
            synthetic=True,
        )


def generate_fallback_records(query: Query, kind: str) -> list[RawRecord]:
    """
    Build the fallback record set for a round in which no provider produced data.

    Args:
        query: Caller query
        kind: COURSE or JOB

    Returns:
        A non-empty list of synthetic records

    Raises:
        ValueError: If kind is not a known record kind
    """
    slug = _slug(query.text)
    if kind == COURSE:
        return [
            RawRecord(
                provider=FALLBACK_PROVIDER,
                external_id=f"fallback-{slug}",
                kind=COURSE,
                title=f"{SAMPLE_MARKER} Learn {query.text} - Free Resources",
                description=f"Free learning resources for {query.text}.",
                url=f"https://freecodecamp.org/learn/{quote_plus(query.text.lower())}",
                fields={"price": 0, "rating": 4.0, "level": "all", "skills": [query.text.lower()]},
                synthetic=True,
            )
        ]
    if kind == JOB:
        return [
            RawRecord(
                provider=FALLBACK_PROVIDER,
                external_id=f"fallback-{slug}",
                kind=JOB,
                title=f"{SAMPLE_MARKER} {query.text} Opportunities",
                description=f"Listings for {query.text} roles are temporarily unavailable.",
                url=f"https://www.adzuna.com/search?q={quote_plus(query.text)}",
                fields={
                    "location": query.filters.location,
                    "remote": query.filters.remote,
                    "skills": [query.text.lower()],
                },
                synthetic=True,
            )
        ]
    raise ValueError(f"Cannot generate fallback records for kind: {kind}")
