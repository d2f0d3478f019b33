"""
Configuration

Reads provider credentials, cache and timeout settings from the environment.
A `.env.<ENVIRONMENT>` file (or `.env`) at the repository root is loaded
first when present.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Hourly request budgets per provider
DEFAULT_RATE_LIMITS = {
    "coursera": 100,
    "udemy": 200,
    "edx": 1000,
    "nptel": 200,
    "adzuna": 1000,
    "github": 60,
}

DEFAULT_COURSE_PROVIDERS = ("coursera", "udemy", "edx")


def load_environment() -> None:
    """Load environment variables from the environment-specific .env file."""
    repo_root = Path(__file__).resolve().parents[2]
    environment = os.getenv("ENVIRONMENT", "development")
    env_file = repo_root / f".env.{environment}"
    if env_file.exists():
        load_dotenv(env_file, override=True)
    else:
        env_path = repo_root / ".env"
        if env_path.exists():
            load_dotenv(env_path, override=True)
    load_dotenv()


def _get_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got: {raw!r}") from e
    if value < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got: {value}")
    return value


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got: {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got: {value}")
    return value


@dataclass
class AggregatorSettings:
    """
    Settings for the aggregation service.

    Empty credentials mean "not configured": the registry then builds a
    SyntheticAdapter for that provider.
    """

    coursera_api_key: str = ""
    udemy_client_id: str = ""
    udemy_client_secret: str = ""
    edx_api_key: str = ""
    adzuna_app_id: str = ""
    adzuna_app_key: str = ""
    adzuna_country: str = "gb"
    redis_url: str = ""
    cache_ttl_seconds: int = 3600
    aggregation_timeout_seconds: float = 10.0
    provider_timeout_seconds: float = 8.0
    provider_max_retries: int = 2
    trends_sample_limit: int = 200
    rate_limits: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_RATE_LIMITS))

    @classmethod
    def from_env(cls) -> AggregatorSettings:
        """
        Build settings from environment variables.

        Raises:
            ValueError: If a numeric variable is malformed or not positive
        """
        load_environment()

        rate_limits = {
            provider: _get_int(f"{provider.upper()}_RATE_LIMIT_PER_HOUR", default)
            for provider, default in DEFAULT_RATE_LIMITS.items()
        }

        return cls(
            coursera_api_key=os.getenv("COURSERA_API_KEY", ""),
            udemy_client_id=os.getenv("UDEMY_CLIENT_ID", ""),
            udemy_client_secret=os.getenv("UDEMY_CLIENT_SECRET", ""),
            edx_api_key=os.getenv("EDX_API_KEY", ""),
            adzuna_app_id=os.getenv("ADZUNA_APP_ID", ""),
            adzuna_app_key=os.getenv("ADZUNA_APP_KEY", ""),
            adzuna_country=os.getenv("ADZUNA_COUNTRY", "gb").strip().lower() or "gb",
            redis_url=os.getenv("REDIS_URL", "").strip(),
            cache_ttl_seconds=_get_int("CACHE_TTL_SECONDS", 3600),
            aggregation_timeout_seconds=_get_float("AGGREGATION_TIMEOUT_SECONDS", 10.0),
            provider_timeout_seconds=_get_float("PROVIDER_TIMEOUT_SECONDS", 8.0),
            provider_max_retries=_get_int("PROVIDER_MAX_RETRIES", 2, minimum=0),
            trends_sample_limit=_get_int("TRENDS_SAMPLE_LIMIT", 200),
            rate_limits=rate_limits,
        )
