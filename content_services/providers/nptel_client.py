"""
NPTEL Catalog Link

NPTEL offers no public search API. The adapter returns a single record that
links to NPTEL's own catalog search for the query, without any network call.
"""

from __future__ import annotations

from urllib.parse import quote_plus

from ..shared.models import COURSE, Query, RawRecord
from .base_client import BaseProviderAdapter


class NptelCatalogAdapter(BaseProviderAdapter):
    name = "nptel"
    kind = COURSE

    def __init__(self, rate_limit_per_hour: int = 200):
        super().__init__(rate_limit_per_hour)

    def search(self, query: Query, limit: int) -> list[RawRecord]:
        search_url = f"https://nptel.ac.in/courses/search?query={quote_plus(query.text)}"
        record = RawRecord(
            provider=self.name,
            external_id=f"search-{quote_plus(query.text.lower())}",
            kind=COURSE,
            title=f"{query.text} Courses on NPTEL",
            description=(
                f"Free {query.text} courses from IITs and IISc, "
                "with optional paid certification exams."
            ),
            url=search_url,
            fields={
                "price": 0,
                "instructor": "NPTEL Faculty",
                "language": "en",
                "certificate": True,
            },
        )
        return [record][:limit]
