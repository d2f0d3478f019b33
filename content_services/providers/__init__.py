"""
Provider adapters.

One adapter per external course or job source, the per-provider rate
limiter, and the synthetic variant used when a provider is not configured.
"""

from .base_client import BaseProviderAdapter, HttpProviderAdapter
from .rate_limiter import RateLimiter
from .registry import PROVIDER_KINDS, build_adapters
from .skills import extract_skills
from .synthetic import SyntheticAdapter, generate_fallback_records

__all__ = [
    "BaseProviderAdapter",
    "HttpProviderAdapter",
    "PROVIDER_KINDS",
    "RateLimiter",
    "SyntheticAdapter",
    "build_adapters",
    "extract_skills",
    "generate_fallback_records",
]
