"""
Coursera API Client

Adapter for the Coursera catalog API (courses.v1).
"""

from __future__ import annotations

import logging
from typing import Any

from ..shared.models import COURSE, Query, RawRecord
from .base_client import HttpProviderAdapter

logger = logging.getLogger(__name__)


class CourseraClient(HttpProviderAdapter):
    """
    Client for the Coursera catalog API.

    Authenticates with an API key header.
    """

    name = "coursera"
    kind = COURSE
    base_url = "https://api.coursera.org/api/courses.v1"

    def __init__(self, api_key: str, rate_limit_per_hour: int = 100, **kwargs):
        """
        Initialize Coursera API client.

        Args:
            api_key: Coursera API key
            rate_limit_per_hour: Hourly request budget
            **kwargs: Timeout and retry settings passed to HttpProviderAdapter
        """
        if not api_key:
            raise ValueError("Coursera API key is required")
        super().__init__(rate_limit_per_hour, **kwargs)
        self.api_key = api_key

    def _get_headers(self) -> dict[str, str]:
        headers = super()._get_headers()
        headers["X-Coursera-API-Key"] = self.api_key
        return headers

    def _build_params(self, query: Query, limit: int) -> dict[str, Any]:
        params = {
            "q": "search",
            "query": query.text,
            "limit": limit,
            "fields": "name,description,slug,partnerIds,instructorIds,workload,primaryLanguages",
        }
        if query.filters.language:
            params["languages"] = query.filters.language
        return params

    def _parse_payload(self, payload: dict[str, Any], query: Query) -> list[RawRecord]:
        elements = payload["elements"]
        if not isinstance(elements, list):
            raise TypeError("elements is not a list")

        records = []
        for course in elements:
            course_id = course.get("id") or course.get("slug")
            if not course_id:
                logger.debug("Skipping Coursera element without id")
                continue
            slug = course.get("slug") or course_id
            languages = course.get("primaryLanguages") or []
            records.append(
                RawRecord(
                    provider=self.name,
                    external_id=str(course_id),
                    kind=COURSE,
                    title=course.get("name") or "",
                    description=course.get("description") or "",
                    url=f"https://www.coursera.org/learn/{slug}",
                    fields={
                        "rating": course.get("rating"),
                        "enrollments": course.get("enrollments"),
                        "price": course.get("price"),
                        "duration": course.get("workload"),
                        "instructor": course.get("instructor"),
                        "level": course.get("level") or query.filters.level,
                        "language": languages[0] if languages else None,
                        "certificate": True,
                        "skills": course.get("skills") or [],
                    },
                )
            )
        return records
