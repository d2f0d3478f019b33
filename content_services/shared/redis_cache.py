"""
Redis Cache Tier

Distributed tier of the tiered cache. Shares cached results across process
instances; consistency is Redis' own last-write-wins.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import redis
from redis.exceptions import RedisError

from .errors import CacheUnavailable
from .serialization import decode_cache_value, encode_cache_value

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "content-services:"


class RedisCache:
    """
    Thin wrapper around a redis client.

    Every failure (connection, timeout, undecodable payload) is raised as
    CacheUnavailable so the caller can degrade to its local tier.
    """

    def __init__(
        self,
        client: redis.Redis,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        encode: Callable[[Any], str] = encode_cache_value,
        decode: Callable[[str | bytes], Any] = decode_cache_value,
    ):
        """
        Initialize the Redis tier.

        Args:
            client: redis-py client instance
            key_prefix: Namespace prepended to every key stored in Redis
            encode: Serializer for stored values
            decode: Deserializer for stored values
        """
        if client is None:
            raise ValueError("Redis client is required")
        self.client = client
        self.key_prefix = key_prefix
        self._encode = encode
        self._decode = decode

    @classmethod
    def from_url(cls, url: str, socket_timeout: float = 2.0) -> RedisCache:
        """Create a tier from a redis:// URL. Connection happens lazily on first use."""
        client = redis.Redis.from_url(
            url,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client)

    def _full_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> tuple[Any, int | None] | None:
        """
        Look up a key.

        Returns:
            None on a miss, otherwise (value, remaining_ttl_seconds). The TTL
            is None when Redis does not report a positive expiry.

        Raises:
            CacheUnavailable: If Redis is unreachable or the payload is corrupt
        """
        full_key = self._full_key(key)
        try:
            raw = self.client.get(full_key)
            if raw is None:
                return None
            ttl = self.client.ttl(full_key)
        except RedisError as e:
            raise CacheUnavailable(f"Redis get failed for {key}: {e}") from e

        try:
            value = self._decode(raw)
        except ValueError as e:
            raise CacheUnavailable(f"Corrupt cached value for {key}: {e}") from e

        remaining = ttl if isinstance(ttl, int) and ttl > 0 else None
        return value, remaining

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """
        Store a value with an expiry.

        Raises:
            CacheUnavailable: If Redis is unreachable
        """
        payload = self._encode(value)
        try:
            self.client.setex(self._full_key(key), ttl_seconds, payload)
        except RedisError as e:
            raise CacheUnavailable(f"Redis set failed for {key}: {e}") from e

    def clear(self, prefix: str | None = None) -> int:
        """
        Delete every key in this tier's namespace, or those under `<prefix>:`.

        Returns:
            Number of keys deleted

        Raises:
            CacheUnavailable: If Redis is unreachable
        """
        pattern = self._full_key(f"{prefix}:*" if prefix else "*")
        deleted = 0
        try:
            batch = []
            for key in self.client.scan_iter(match=pattern, count=500):
                batch.append(key)
                if len(batch) >= 500:
                    deleted += self.client.delete(*batch)
                    batch = []
            if batch:
                deleted += self.client.delete(*batch)
        except RedisError as e:
            raise CacheUnavailable(f"Redis clear failed for pattern {pattern}: {e}") from e

        logger.info(f"Deleted {deleted} key(s) from Redis matching {pattern}")
        return deleted
