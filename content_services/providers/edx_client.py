"""
edX API Client

Adapter for the edX course catalog API.
"""

from __future__ import annotations

from typing import Any

from ..shared.models import COURSE, Query, RawRecord
from .base_client import HttpProviderAdapter


class EdxClient(HttpProviderAdapter):
    """Client for the edX course catalog API (bearer token auth)."""

    name = "edx"
    kind = COURSE
    base_url = "https://api.edx.org/courses/v1/courses/"

    def __init__(self, api_key: str, rate_limit_per_hour: int = 1000, **kwargs):
        if not api_key:
            raise ValueError("edX API key is required")
        super().__init__(rate_limit_per_hour, **kwargs)
        self.api_key = api_key

    def _get_headers(self) -> dict[str, str]:
        headers = super()._get_headers()
        headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _build_params(self, query: Query, limit: int) -> dict[str, Any]:
        return {"search_term": query.text, "page_size": limit}

    def _parse_payload(self, payload: dict[str, Any], query: Query) -> list[RawRecord]:
        results = payload["results"]
        if not isinstance(results, list):
            raise TypeError("results is not a list")

        records = []
        for course in results:
            course_id = course.get("uuid") or course.get("key")
            if not course_id:
                continue
            owners = course.get("owners") or []
            weeks = course.get("weeks_to_complete")
            records.append(
                RawRecord(
                    provider=self.name,
                    external_id=str(course_id),
                    kind=COURSE,
                    title=course.get("title") or "",
                    description=course.get("short_description") or "",
                    url=course.get("marketing_url") or "",
                    fields={
                        "instructor": owners[0].get("name") if owners else None,
                        "duration": f"{weeks} weeks" if weeks else None,
                        "level": course.get("level_type"),
                        # Auditing is free on edX
                        "price": 0,
                        "certificate": True,
                    },
                )
            )
        return records
