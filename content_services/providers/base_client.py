"""
Base Provider Adapter

Abstract base classes for content provider adapters with common functionality:
- Retry logic with exponential backoff
- Bounded request timeout
- Error translation into ProviderError
- Logging
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.exceptions import ReadTimeoutError
from urllib3.util.retry import Retry

from ..shared.errors import ProviderError
from ..shared.models import ProviderConfig, Query, RawRecord

logger = logging.getLogger(__name__)

# Parameter and header names never written to the logs
SENSITIVE_KEYS = {"api_key", "app_key", "app_id", "token", "authorization", "x-coursera-api-key"}


class BaseProviderAdapter(ABC):
    """
    Abstract base class for provider adapters.

    One adapter per content source. Adapters are called only after the rate
    limiter has admitted them and never talk to each other.
    """

    name: str = ""
    kind: str = ""
    synthetic: bool = False

    def __init__(self, rate_limit_per_hour: int):
        self.rate_limit_per_hour = rate_limit_per_hour

    @property
    def configured(self) -> bool:
        """True when the adapter talks to the real provider."""
        return not self.synthetic

    def provider_config(self) -> ProviderConfig:
        return ProviderConfig(name=self.name, rate_limit_per_hour=self.rate_limit_per_hour)

    @abstractmethod
    def search(self, query: Query, limit: int) -> list[RawRecord]:
        """
        Search the provider.

        Args:
            query: Caller query
            limit: Maximum number of records to request

        Returns:
            Records extracted from the provider reply

        Raises:
            ProviderError: If the call fails for any reason
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, kind={self.kind!r})"


class HttpProviderAdapter(BaseProviderAdapter):
    """
    Adapter backed by an HTTP JSON API.

    Subclasses provide the endpoint, request parameters and payload parsing;
    this class owns the session, retries, timeout and error translation.
    """

    base_url: str = ""

    def __init__(
        self,
        rate_limit_per_hour: int,
        timeout: float = 8.0,
        max_retries: int = 2,
        retry_backoff_factor: float = 0.5,
    ):
        """
        Initialize the adapter.

        Args:
            rate_limit_per_hour: Hourly request budget for this provider
            timeout: Per-request timeout in seconds
            max_retries: Maximum number of retry attempts
            retry_backoff_factor: Multiplier for exponential backoff
        """
        super().__init__(rate_limit_per_hour)
        self.timeout = timeout
        self.max_retries = max_retries

        # Configure session with retry strategy
        self.session = requests.Session()
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=retry_backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def _get_headers(self) -> dict[str, str]:
        """
        Get default headers for API requests.

        Subclasses override this to add provider-specific authentication.
        """
        return {"Accept": "application/json"}

    @abstractmethod
    def _build_params(self, query: Query, limit: int) -> dict[str, Any]:
        """Build query parameters for a search request."""
        pass

    @abstractmethod
    def _parse_payload(self, payload: dict[str, Any], query: Query) -> list[RawRecord]:
        """
        Extract records from a decoded response body.

        Raises:
            AttributeError, KeyError, TypeError, ValueError: If the payload
                has an unexpected shape
        """
        pass

    def _search_url(self, query: Query) -> str:
        return self.base_url

    def search(self, query: Query, limit: int) -> list[RawRecord]:
        params = self._build_params(query, limit)
        payload = self._make_request(self._search_url(query), params)
        try:
            records = self._parse_payload(payload, query)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"{self.name} returned an unexpected payload shape: {e}")
            raise ProviderError(self.name, "malformed_payload", str(e)) from e
        return records[:limit]

    def _make_request(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Make a GET request and decode the JSON body.

        Returns:
            Parsed JSON response

        Raises:
            ProviderError: On timeout, connection failure, non-2xx status or
                a body that is not a JSON object
        """
        try:
            response = self.session.get(
                url, headers=self._get_headers(), params=params, timeout=self.timeout
            )
        except requests.Timeout as e:
            logger.warning(f"{self.name} request timed out after {self.timeout}s")
            raise ProviderError(self.name, "timeout", str(e)) from e
        except requests.ConnectionError as e:
            # Read timeouts surface as ConnectionError once retries are exhausted
            if isinstance(getattr(e.args[0] if e.args else None, "reason", None), ReadTimeoutError):
                logger.warning(f"{self.name} request timed out after retries")
                raise ProviderError(self.name, "timeout", str(e)) from e
            logger.warning(f"{self.name} connection failed: {e}")
            raise ProviderError(self.name, "connection_error", str(e)) from e
        except requests.RequestException as e:
            logger.error(f"{self.name} request failed: {e}")
            raise ProviderError(self.name, "request_error", str(e)) from e

        self._log_request(url, params, response.status_code)
        return self._handle_response(response)

    def _handle_response(self, response: requests.Response) -> dict[str, Any]:
        """
        Check the status and extract JSON data.

        Raises:
            ProviderError: If the status is not 2xx or the body is not a JSON object
        """
        if not 200 <= response.status_code < 300:
            logger.error(f"{self.name} returned HTTP {response.status_code}")
            logger.debug(f"Response text: {response.text[:500]}")
            raise ProviderError(self.name, f"http_{response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Failed to parse {self.name} JSON response: {e}")
            logger.debug(f"Response text: {response.text[:500]}")
            raise ProviderError(self.name, "malformed_payload", str(e)) from e

        if not isinstance(data, dict):
            raise ProviderError(
                self.name, "malformed_payload", f"Expected JSON object, got {type(data).__name__}"
            )
        return data

    def _log_request(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        status_code: int | None = None,
    ):
        """Log API request details."""
        if params:
            # Don't log credentials
            safe_params = {k: v for k, v in params.items() if k.lower() not in SENSITIVE_KEYS}
            logger.info(f"{self.name} request: {url} with params: {safe_params}")
        else:
            logger.info(f"{self.name} request: {url}")

        if status_code:
            logger.debug(f"Response status: {status_code}")

    def close(self) -> None:
        self.session.close()
