"""
Error Types

Exception taxonomy shared by the providers, cache tiers and aggregation
service. Only InvalidQuery is meant to reach callers; the others are absorbed
where they occur and degrade the outcome instead.
"""

from __future__ import annotations


class ContentServiceError(Exception):
    """Base class for all content service errors."""


class ProviderError(ContentServiceError):
    """
    A single provider call failed.

    Recorded in the aggregation outcome, never propagated to the caller.

    Attributes:
        provider: Provider name (e.g., "coursera")
        reason: Short machine-readable reason ("timeout", "http_503", ...)
    """

    def __init__(self, provider: str, reason: str, message: str | None = None):
        self.provider = provider
        self.reason = reason
        super().__init__(message or f"{provider} failed: {reason}")


class RateLimitExceeded(ContentServiceError):
    """A provider was not admitted for this round."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"{provider} rate limit exceeded")


class CacheUnavailable(ContentServiceError):
    """The distributed cache tier could not be reached or returned bad data."""


class InvalidQuery(ContentServiceError, ValueError):
    """Caller input is malformed (empty text, non-positive limit, unknown provider)."""


class AggregationExhausted(ContentServiceError):
    """Every provider failed and fallback generation failed too."""
