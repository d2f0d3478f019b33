"""
Shared infrastructure for services.

This package contains shared building blocks used across multiple services,
such as models, errors, configuration and the tiered cache.
"""

from .config import AggregatorSettings
from .errors import (
    AggregationExhausted,
    CacheUnavailable,
    ContentServiceError,
    InvalidQuery,
    ProviderError,
    RateLimitExceeded,
)
from .redis_cache import RedisCache
from .tiered_cache import TieredCache

__all__ = [
    "AggregatorSettings",
    "AggregationExhausted",
    "CacheUnavailable",
    "ContentServiceError",
    "InvalidQuery",
    "ProviderError",
    "RateLimitExceeded",
    "RedisCache",
    "TieredCache",
]
