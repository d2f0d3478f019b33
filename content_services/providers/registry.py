"""
Provider Registry

Builds one adapter per known provider from settings, choosing the real
client when credentials are present and SyntheticAdapter otherwise.
"""

from __future__ import annotations

import logging

from ..shared.config import DEFAULT_RATE_LIMITS, AggregatorSettings
from ..shared.models import COURSE, JOB
from .adzuna_client import AdzunaClient
from .base_client import BaseProviderAdapter
from .coursera_client import CourseraClient
from .edx_client import EdxClient
from .nptel_client import NptelCatalogAdapter
from .synthetic import SyntheticAdapter
from .udemy_client import UdemyClient

logger = logging.getLogger(__name__)

# Provider name -> record kind, in registry order
PROVIDER_KINDS = {
    "coursera": COURSE,
    "udemy": COURSE,
    "edx": COURSE,
    "nptel": COURSE,
    "adzuna": JOB,
    "github": JOB,
}


def build_adapters(settings: AggregatorSettings) -> dict[str, BaseProviderAdapter]:
    """
    Build the adapter set for the given settings.

    GitHub Jobs was retired upstream, so "github" is always synthetic.

    Returns:
        Adapters keyed by provider name
    """
    limits = {**DEFAULT_RATE_LIMITS, **settings.rate_limits}
    http_kwargs = {
        "timeout": settings.provider_timeout_seconds,
        "max_retries": settings.provider_max_retries,
    }
    adapters: dict[str, BaseProviderAdapter] = {}

    if settings.coursera_api_key:
        adapters["coursera"] = CourseraClient(
            settings.coursera_api_key, rate_limit_per_hour=limits["coursera"], **http_kwargs
        )
    if settings.udemy_client_id and settings.udemy_client_secret:
        adapters["udemy"] = UdemyClient(
            settings.udemy_client_id,
            settings.udemy_client_secret,
            rate_limit_per_hour=limits["udemy"],
            **http_kwargs,
        )
    if settings.edx_api_key:
        adapters["edx"] = EdxClient(
            settings.edx_api_key, rate_limit_per_hour=limits["edx"], **http_kwargs
        )
    adapters["nptel"] = NptelCatalogAdapter(rate_limit_per_hour=limits["nptel"])
    if settings.adzuna_app_id and settings.adzuna_app_key:
        adapters["adzuna"] = AdzunaClient(
            settings.adzuna_app_id,
            settings.adzuna_app_key,
            country=settings.adzuna_country,
            rate_limit_per_hour=limits["adzuna"],
            **http_kwargs,
        )

    for name, kind in PROVIDER_KINDS.items():
        if name not in adapters:
            logger.info(f"No credentials for {name}, using sample data")
            adapters[name] = SyntheticAdapter(name, kind, rate_limit_per_hour=limits[name])

    # Keep registry order regardless of which branch built each adapter
    return {name: adapters[name] for name in PROVIDER_KINDS}
