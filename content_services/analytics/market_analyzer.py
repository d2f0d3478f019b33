"""
Market Analyzer

Derives job-market aggregates for a skill from a set of job records. All
functions are pure: they only read the records they are given, so results
can be recomputed and cached independently of the aggregation that produced
the records.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from ..shared.models import (
    DEMAND_HIGH,
    DEMAND_LOW,
    DEMAND_MEDIUM,
    AnalyticsResult,
    LocationCount,
    NormalizedRecord,
    SkillFrequency,
)

HIGH_DEMAND_THRESHOLD = 100
MEDIUM_DEMAND_THRESHOLD = 50
TOP_LOCATIONS = 5
TOP_SKILLS = 10
UNKNOWN_LOCATION = "Remote"

# Estimated yearly growth in demand, in percent. Not derived from the sample.
GROWTH_RATES = {
    "javascript": 15,
    "python": 20,
    "react": 18,
    "machine learning": 25,
    "cloud computing": 22,
    "data science": 28,
    "cybersecurity": 31,
    "artificial intelligence": 35,
}
DEFAULT_GROWTH_RATE = 10


def demand_level(job_count: int) -> str:
    if job_count > HIGH_DEMAND_THRESHOLD:
        return DEMAND_HIGH
    if job_count > MEDIUM_DEMAND_THRESHOLD:
        return DEMAND_MEDIUM
    return DEMAND_LOW


def average_salary(records: Sequence[NormalizedRecord]) -> float | None:
    """
    Mean salary midpoint over records with both salary bounds.

    Returns:
        Average rounded to a whole number, or None if no record has a range
    """
    midpoints = []
    for record in records:
        salary = record.attributes.salary_range
        if salary is not None and salary.midpoint is not None:
            midpoints.append(salary.midpoint)
    if not midpoints:
        return None
    return float(round(sum(midpoints) / len(midpoints)))


def top_locations(
    records: Sequence[NormalizedRecord], limit: int = TOP_LOCATIONS
) -> tuple[LocationCount, ...]:
    """Most frequent locations, ties broken by name. Missing locations count as Remote."""
    counts = Counter(record.attributes.location or UNKNOWN_LOCATION for record in records)
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return tuple(LocationCount(location, count) for location, count in ordered[:limit])


def required_skills(
    records: Sequence[NormalizedRecord], limit: int = TOP_SKILLS
) -> tuple[SkillFrequency, ...]:
    """Most frequent lowercase skill tokens across the records' skill lists."""
    counts = Counter(
        skill.strip().lower()
        for record in records
        for skill in record.attributes.skills
        if skill.strip()
    )
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return tuple(SkillFrequency(skill, frequency) for skill, frequency in ordered[:limit])


def growth_rate(skill: str) -> float:
    return float(GROWTH_RATES.get(skill.strip().lower(), DEFAULT_GROWTH_RATE))


def analyze_skill_market(skill: str, records: Sequence[NormalizedRecord]) -> AnalyticsResult:
    """
    Build the market analytics for a skill.

    Args:
        skill: Skill the records were retrieved for
        records: Job records for the skill

    Returns:
        AnalyticsResult
    """
    return AnalyticsResult(
        skill=skill,
        demand=demand_level(len(records)),
        average_salary=average_salary(records),
        top_locations=top_locations(records),
        growth_rate_percent=growth_rate(skill),
        required_skills=required_skills(records),
        job_count=len(records),
    )
