"""
Record Normalizer

Maps provider-specific RawRecords onto the NormalizedRecord schema. Every
attribute is filled in; values a provider did not supply are None (or an
empty skills tuple) so downstream consumers see a uniform shape.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from ..shared.models import NormalizedRecord, RawRecord, RecordAttributes, SalaryRange

logger = logging.getLogger(__name__)


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _to_int(value: Any) -> int | None:
    number = _to_float(value)
    return int(number) if number is not None else None


def _to_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
        return None
    if isinstance(value, (int, float)):
        return bool(value)
    return None


def _to_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _to_datetime(value: Any) -> datetime | None:
    """Parse a timestamp; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            logger.debug(f"Unparseable timestamp: {value!r}")
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _to_skills(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    skills = []
    for item in value:
        skill = _to_str(item)
        if skill and skill not in skills:
            skills.append(skill)
    return tuple(skills)


def _salary_range(fields: dict[str, Any]) -> SalaryRange | None:
    salary_min = _to_float(fields.get("salary_min"))
    salary_max = _to_float(fields.get("salary_max"))
    if salary_min is None and salary_max is None:
        return None
    return SalaryRange(
        min=salary_min,
        max=salary_max,
        currency=_to_str(fields.get("salary_currency")) or "USD",
        estimated=bool(_to_bool(fields.get("salary_estimated"))),
    )


def normalize_record(raw: RawRecord) -> NormalizedRecord:
    """Normalize a single raw record."""
    fields = raw.fields or {}
    attributes = RecordAttributes(
        rating=_to_float(fields.get("rating")),
        enrollments=_to_int(fields.get("enrollments")),
        price=_to_float(fields.get("price")),
        salary_range=_salary_range(fields),
        location=_to_str(fields.get("location")),
        remote=_to_bool(fields.get("remote")),
        skills=_to_skills(fields.get("skills")),
        level=_to_str(fields.get("level")),
        instructor=_to_str(fields.get("instructor")),
        duration=_to_str(fields.get("duration")),
        company=_to_str(fields.get("company")),
        language=_to_str(fields.get("language")),
        certificate=_to_bool(fields.get("certificate")),
        posted_at=_to_datetime(fields.get("posted_at")),
    )
    return NormalizedRecord(
        id=f"{raw.provider}_{raw.external_id}",
        kind=raw.kind,
        title=(raw.title or "").strip(),
        description=(raw.description or "").strip(),
        provider=raw.provider,
        attributes=attributes,
        url=raw.url or "",
        synthetic=raw.synthetic,
    )


def normalize_records(raw_records: Iterable[RawRecord]) -> list[NormalizedRecord]:
    """
    Normalize and deduplicate raw records.

    Records sharing (provider, external_id) collapse to the first occurrence.
    """
    seen: set[tuple[str, str]] = set()
    normalized = []
    duplicates = 0
    for raw in raw_records:
        key = (raw.provider, raw.external_id)
        if key in seen:
            duplicates += 1
            continue
        seen.add(key)
        normalized.append(normalize_record(raw))

    if duplicates:
        logger.debug(f"Dropped {duplicates} duplicate record(s) during normalization")
    return normalized
