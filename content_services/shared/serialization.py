"""
Cache Value Serialization

JSON encoding of cached values for the distributed cache tier. The local tier
stores the Python objects directly.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from .models import (
    AnalyticsResult,
    LocationCount,
    NormalizedRecord,
    RecordAttributes,
    SalaryRange,
    SkillFrequency,
)


def record_to_dict(record: NormalizedRecord) -> dict[str, Any]:
    attrs = record.attributes
    salary = attrs.salary_range
    return {
        "id": record.id,
        "kind": record.kind,
        "title": record.title,
        "description": record.description,
        "provider": record.provider,
        "url": record.url,
        "synthetic": record.synthetic,
        "attributes": {
            "rating": attrs.rating,
            "enrollments": attrs.enrollments,
            "price": attrs.price,
            "salary_range": (
                {
                    "min": salary.min,
                    "max": salary.max,
                    "currency": salary.currency,
                    "estimated": salary.estimated,
                }
                if salary
                else None
            ),
            "location": attrs.location,
            "remote": attrs.remote,
            "skills": list(attrs.skills),
            "level": attrs.level,
            "instructor": attrs.instructor,
            "duration": attrs.duration,
            "company": attrs.company,
            "language": attrs.language,
            "certificate": attrs.certificate,
            "posted_at": attrs.posted_at.isoformat() if attrs.posted_at else None,
        },
    }


def record_from_dict(data: dict[str, Any]) -> NormalizedRecord:
    attrs = dict(data.get("attributes") or {})
    salary = attrs.get("salary_range")
    posted_at = attrs.get("posted_at")
    return NormalizedRecord(
        id=data["id"],
        kind=data["kind"],
        title=data["title"],
        description=data.get("description", ""),
        provider=data["provider"],
        url=data.get("url", ""),
        synthetic=bool(data.get("synthetic", False)),
        attributes=RecordAttributes(
            rating=attrs.get("rating"),
            enrollments=attrs.get("enrollments"),
            price=attrs.get("price"),
            salary_range=SalaryRange(**salary) if salary else None,
            location=attrs.get("location"),
            remote=attrs.get("remote"),
            skills=tuple(attrs.get("skills") or ()),
            level=attrs.get("level"),
            instructor=attrs.get("instructor"),
            duration=attrs.get("duration"),
            company=attrs.get("company"),
            language=attrs.get("language"),
            certificate=attrs.get("certificate"),
            posted_at=datetime.fromisoformat(posted_at) if posted_at else None,
        ),
    )


def analytics_to_dict(result: AnalyticsResult) -> dict[str, Any]:
    return {
        "skill": result.skill,
        "demand": result.demand,
        "average_salary": result.average_salary,
        "top_locations": [
            {"location": item.location, "count": item.count} for item in result.top_locations
        ],
        "growth_rate_percent": result.growth_rate_percent,
        "required_skills": [
            {"skill": item.skill, "frequency": item.frequency} for item in result.required_skills
        ],
        "job_count": result.job_count,
    }


def analytics_from_dict(data: dict[str, Any]) -> AnalyticsResult:
    return AnalyticsResult(
        skill=data["skill"],
        demand=data["demand"],
        average_salary=data.get("average_salary"),
        top_locations=tuple(LocationCount(**item) for item in data.get("top_locations", [])),
        growth_rate_percent=data["growth_rate_percent"],
        required_skills=tuple(SkillFrequency(**item) for item in data.get("required_skills", [])),
        job_count=data["job_count"],
    )


def encode_cache_value(value: Any) -> str:
    """
    Encode a cacheable value as JSON.

    Args:
        value: A sequence of NormalizedRecord or a single AnalyticsResult

    Raises:
        TypeError: For any other value type
    """
    if isinstance(value, AnalyticsResult):
        return json.dumps({"type": "analytics", "data": analytics_to_dict(value)})
    if isinstance(value, (list, tuple)) and all(isinstance(v, NormalizedRecord) for v in value):
        return json.dumps({"type": "records", "data": [record_to_dict(v) for v in value]})
    raise TypeError(f"Unsupported cache value type: {type(value).__name__}")


def decode_cache_value(raw: str | bytes) -> Any:
    """
    Decode a value produced by encode_cache_value.

    Raises:
        ValueError: If the payload is not valid JSON or has an unknown shape
    """
    try:
        payload = json.loads(raw)
        value_type = payload["type"]
        data = payload["data"]
        if value_type == "analytics":
            return analytics_from_dict(data)
        if value_type == "records":
            return tuple(record_from_dict(item) for item in data)
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        raise ValueError(f"Invalid cached payload: {e}") from e
    raise ValueError(f"Unknown cached value type: {value_type!r}")
