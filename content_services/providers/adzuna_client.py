"""
Adzuna API Client

Adapter for the Adzuna job search API. Adzuna does not return a skills
list, so required skills are extracted from the title and description.
"""

from __future__ import annotations

import logging
from typing import Any

from ..shared.models import JOB, Query, RawRecord
from .base_client import HttpProviderAdapter
from .skills import extract_skills

logger = logging.getLogger(__name__)

# Adzuna caps results_per_page at 50
MAX_RESULTS_PER_PAGE = 50


class AdzunaClient(HttpProviderAdapter):
    """
    Client for the Adzuna job search API.

    Authenticates with app id and app key query parameters.
    """

    name = "adzuna"
    kind = JOB
    base_url = "https://api.adzuna.com/v1/api/jobs"

    def __init__(
        self,
        app_id: str,
        app_key: str,
        country: str = "gb",
        rate_limit_per_hour: int = 1000,
        **kwargs,
    ):
        """
        Initialize Adzuna API client.

        Args:
            app_id: Adzuna application id
            app_key: Adzuna application key
            country: Two-letter country code selecting the Adzuna market
            rate_limit_per_hour: Hourly request budget
            **kwargs: Timeout and retry settings passed to HttpProviderAdapter
        """
        if not app_id or not app_key:
            raise ValueError("Adzuna app id and key are required")
        super().__init__(rate_limit_per_hour, **kwargs)
        self.app_id = app_id
        self.app_key = app_key
        self.country = country.lower()

    def _search_url(self, query: Query) -> str:
        return f"{self.base_url}/{self.country}/search/1"

    def _build_params(self, query: Query, limit: int) -> dict[str, Any]:
        what = query.text
        if query.filters.remote:
            what = f"{what} remote"
        params = {
            "app_id": self.app_id,
            "app_key": self.app_key,
            "what": what,
            "results_per_page": min(MAX_RESULTS_PER_PAGE, limit),
            "distance": 25,
        }
        if query.filters.location:
            params["where"] = query.filters.location
        return params

    def _parse_payload(self, payload: dict[str, Any], query: Query) -> list[RawRecord]:
        results = payload["results"]
        if not isinstance(results, list):
            raise TypeError("results is not a list")

        records = []
        for job in results:
            if job.get("id") is None:
                continue
            title = job.get("title") or ""
            description = job.get("description") or ""
            location = job.get("location") or {}
            records.append(
                RawRecord(
                    provider=self.name,
                    external_id=str(job["id"]),
                    kind=JOB,
                    title=title,
                    description=description,
                    url=job.get("redirect_url") or "",
                    fields={
                        "company": (job.get("company") or {}).get("display_name"),
                        "location": location.get("display_name"),
                        "salary_min": job.get("salary_min"),
                        "salary_max": job.get("salary_max"),
                        "salary_currency": _currency_for(self.country),
                        "salary_estimated": job.get("salary_is_predicted") in ("1", 1, True),
                        "posted_at": job.get("created"),
                        "remote": "remote" in f"{title} {description}".lower(),
                        "skills": extract_skills(title, description),
                    },
                )
            )
        logger.debug(f"Adzuna returned {len(records)} job(s) for '{query.text}'")
        return records


def _currency_for(country: str) -> str:
    return {
        "gb": "GBP",
        "us": "USD",
        "ca": "CAD",
        "au": "AUD",
        "in": "INR",
        "de": "EUR",
        "fr": "EUR",
        "nl": "EUR",
    }.get(country, "USD")
