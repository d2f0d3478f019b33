"""
Rate Limiter

Per-provider admission gate. A call is admitted only if enough time has
passed since the provider's last admitted call; denied calls return
immediately so the orchestrator can skip the provider for this round.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from ..shared.errors import RateLimitExceeded
from ..shared.models import ProviderConfig

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    In-memory, per-process rate limiter.

    State is lost on restart and is not shared between processes. The
    check-then-update in try_admit holds the provider's own lock so two
    concurrent queries cannot both take the same slot.
    """

    def __init__(
        self,
        configs: list[ProviderConfig] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the rate limiter.

        Args:
            configs: Provider configurations to register
            clock: Monotonic time source (seconds)
        """
        self._clock = clock
        self._configs: dict[str, ProviderConfig] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        for config in configs or []:
            self.register(config)

    def register(self, config: ProviderConfig) -> None:
        """Register a provider; re-registering a name keeps its current window."""
        with self._registry_lock:
            if config.name in self._configs:
                logger.debug(f"Provider {config.name} already registered with rate limiter")
                return
            self._configs[config.name] = config
            self._locks[config.name] = threading.Lock()

    def configs(self) -> list[ProviderConfig]:
        with self._registry_lock:
            return list(self._configs.values())

    def try_admit(self, provider: str) -> bool:
        """
        Admit a call to provider if its minimum interval has elapsed.

        Returns:
            True (and records the admission) if admitted, False otherwise.
            Unknown providers are never admitted.
        """
        try:
            self.admit(provider)
        except RateLimitExceeded:
            return False
        return True

    def admit(self, provider: str) -> None:
        """
        Record an admission for provider.

        Raises:
            RateLimitExceeded: If the minimum interval has not elapsed or the
                provider is not registered
        """
        config = self._configs.get(provider)
        lock = self._locks.get(provider)
        if config is None or lock is None:
            logger.warning(f"Rate limiter has no configuration for provider {provider}")
            raise RateLimitExceeded(provider)

        with lock:
            now = self._clock()
            last = config.last_admitted_at
            if last is not None and now - last < config.min_interval_seconds:
                wait = config.min_interval_seconds - (now - last)
                logger.debug(f"Rate limit: {provider} not admitted, next slot in {wait:.2f}s")
                raise RateLimitExceeded(provider)
            config.last_admitted_at = now if last is None else max(last, now)
