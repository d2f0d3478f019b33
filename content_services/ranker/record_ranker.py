"""
Record Ranker

Orders normalized records by a deterministic composite score. Courses are
scored on title match, rating, popularity and price; jobs are ordered by
recency and then by how complete their attributes are. Ties break by
provider name and then record id so identical input always yields the same
order.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from ..shared.models import COURSE, NormalizedRecord

logger = logging.getLogger(__name__)

DEFAULT_COURSE_WEIGHTS = {
    "title_match": 10.0,
    "rating": 2.0,
    "enrollments": 0.5,
    "free": 5.0,
}

# Relevance of a record to a skill, by where the skill is mentioned
RELEVANCE_WEIGHTS = {
    "title": 0.8,
    "description": 0.6,
    "skills": 0.9,
}


class RecordRanker:
    """
    Ranks course and job records.

    Mixed result sets list all courses before all jobs.
    """

    def __init__(self, course_weights: dict[str, float] | None = None):
        """
        Initialize the ranker.

        Args:
            course_weights: Overrides for DEFAULT_COURSE_WEIGHTS
        """
        self.course_weights = {**DEFAULT_COURSE_WEIGHTS, **(course_weights or {})}

    def calculate_course_score(
        self, record: NormalizedRecord, query_text: str
    ) -> tuple[float, dict[str, float]]:
        """
        Calculate the score of a course for a query.

        score = 10 * title contains query + 2 * rating
                + 0.5 * ln(enrollments + 1) + 5 * is free

        Missing rating or enrollments count as 0; a course is free only when
        its price is known to be 0.

        Args:
            record: Course record
            query_text: Query text matched case-insensitively against the title

        Returns:
            Tuple of (score, explanation dictionary with the per-factor points)
        """
        weights = self.course_weights
        attrs = record.attributes
        explanation = {}

        needle = (query_text or "").strip().lower()
        title_match = 1.0 if needle and needle in record.title.lower() else 0.0
        explanation["title_match"] = weights["title_match"] * title_match

        explanation["rating"] = weights["rating"] * (attrs.rating or 0.0)

        enrollments = max(attrs.enrollments or 0, 0)
        explanation["enrollments"] = weights["enrollments"] * math.log(enrollments + 1)

        is_free = 1.0 if attrs.price is not None and attrs.price == 0 else 0.0
        explanation["free"] = weights["free"] * is_free

        score = sum(explanation.values())
        explanation["total_score"] = score
        return score, explanation

    def _course_key(self, record: NormalizedRecord, query_text: str) -> tuple:
        score, _ = self.calculate_course_score(record, query_text)
        return (0, -score, record.provider, record.id)

    @staticmethod
    def _job_key(record: NormalizedRecord) -> tuple:
        posted_at = record.attributes.posted_at
        # Undated jobs sort after every dated one
        recency = (0, -posted_at.timestamp()) if posted_at else (1, 0.0)
        completeness = record.attributes.populated_count()
        return (1, *recency, -completeness, record.provider, record.id)

    def rank(
        self,
        records: Iterable[NormalizedRecord],
        query_text: str,
        limit: int | None = None,
    ) -> list[NormalizedRecord]:
        """
        Rank records, then truncate to limit.

        Args:
            records: Normalized records (courses, jobs or both)
            query_text: Query the records were retrieved for
            limit: Maximum number of records to return (None for all)

        Returns:
            Ranked records
        """

        def sort_key(record: NormalizedRecord) -> tuple:
            if record.kind == COURSE:
                return self._course_key(record, query_text)
            return self._job_key(record)

        ranked = sorted(records, key=sort_key)
        if limit is not None:
            ranked = ranked[:limit]
        return ranked


def relevance_score(record: NormalizedRecord, skill: str) -> float:
    """
    Score how relevant a record is to a skill, from 0 to 1.

    Mentions in the title, description and skills list add their
    RELEVANCE_WEIGHTS; the sum is capped at 1.0.
    """
    needle = skill.strip().lower()
    if not needle:
        return 0.0

    score = 0.0
    if needle in record.title.lower():
        score += RELEVANCE_WEIGHTS["title"]
    if needle in record.description.lower():
        score += RELEVANCE_WEIGHTS["description"]
    if any(needle in item.lower() for item in record.attributes.skills):
        score += RELEVANCE_WEIGHTS["skills"]
    return min(score, 1.0)
