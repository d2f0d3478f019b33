"""
Udemy API Client

Adapter for the Udemy affiliate API (api-2.0/courses).
"""

from __future__ import annotations

import base64
from typing import Any

from ..shared.models import COURSE, Query, RawRecord
from .base_client import HttpProviderAdapter

# Udemy's instructional_level values keyed by our level names
LEVEL_MAP = {
    "beginner": "beginner",
    "intermediate": "intermediate",
    "advanced": "expert",
}


class UdemyClient(HttpProviderAdapter):
    """
    Client for the Udemy affiliate API.

    Authenticates with HTTP basic auth built from the client id and secret.
    """

    name = "udemy"
    kind = COURSE
    base_url = "https://www.udemy.com/api-2.0/courses/"

    def __init__(
        self, client_id: str, client_secret: str, rate_limit_per_hour: int = 200, **kwargs
    ):
        if not client_id or not client_secret:
            raise ValueError("Udemy client id and secret are required")
        super().__init__(rate_limit_per_hour, **kwargs)
        self.client_id = client_id
        self.client_secret = client_secret

    def _get_headers(self) -> dict[str, str]:
        credentials = base64.b64encode(f"{self.client_id}:{self.client_secret}".encode()).decode()
        headers = super()._get_headers()
        headers["Authorization"] = f"Basic {credentials}"
        return headers

    def _build_params(self, query: Query, limit: int) -> dict[str, Any]:
        params = {
            "search": query.text,
            "page_size": limit,
        }
        level = LEVEL_MAP.get((query.filters.level or "").lower())
        if level:
            params["instructional_level"] = level
        if query.filters.language:
            params["language"] = query.filters.language
        return params

    def _parse_payload(self, payload: dict[str, Any], query: Query) -> list[RawRecord]:
        results = payload["results"]
        if not isinstance(results, list):
            raise TypeError("results is not a list")

        records = []
        for course in results:
            if course.get("id") is None:
                continue
            instructors = course.get("visible_instructors") or []
            price_detail = course.get("price_detail") or {}
            url = course.get("url") or ""
            # Free courses come back without price_detail
            free_price = 0 if course.get("is_paid") is False else None
            if url.startswith("/"):
                url = f"https://www.udemy.com{url}"
            records.append(
                RawRecord(
                    provider=self.name,
                    external_id=str(course["id"]),
                    kind=COURSE,
                    title=course.get("title") or "",
                    description=course.get("headline") or "",
                    url=url,
                    fields={
                        "rating": course.get("rating") or course.get("avg_rating"),
                        "enrollments": course.get("num_subscribers"),
                        "price": price_detail.get("amount", free_price),
                        "instructor": instructors[0].get("display_name") if instructors else None,
                        "duration": course.get("content_info"),
                        "level": course.get("instructional_level"),
                        "language": (course.get("locale") or {}).get("locale"),
                        "certificate": True,
                    },
                )
            )
        return records
