"""
Redis Cache Adapter - Redis-backed cache store.
"""

import math
from datetime import datetime
from typing import Any, Optional

from gcp_credkit.adapters import cache_codec
from gcp_credkit.domain import clock
from gcp_credkit.logging import get_logger
from gcp_credkit.ports.cache_port import CacheLookup, CachePort, MISS

logger = get_logger(__name__)


class RedisCacheAdapter(CachePort):
    """
    Redis-backed cache store.

    Values are stored as tagged JSON with a TTL derived from expires_at.
    Shared across processes and hosts.
    """

    def __init__(self, redis_client=None, prefix: str = "gcp_credkit:"):
        """
        Initialize Redis cache adapter.

        Args:
            redis_client: Redis client instance (redis.Redis)
            prefix: Key prefix for cache entries
        """
        self._redis = redis_client
        self._prefix = prefix

    def _get_redis(self):
        """Lazy load Redis client."""
        if self._redis is None:
            try:
                import redis
                self._redis = redis.Redis(
                    host="localhost",
                    port=6379,
                    db=0,
                    decode_responses=True,
                )
            except ImportError:
                raise ImportError("redis package required: pip install redis")
        return self._redis

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> CacheLookup:
        raw = self._get_redis().get(self._key(key))
        if raw is None:
            return MISS

        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")

        try:
            return CacheLookup(hit=True, value=cache_codec.decode(raw))
        except ValueError as e:
            logger.warning("cache_entry_undecodable", key=key, error=str(e))
            return MISS

    def set(self, key: str, value: Any, expires_at: Optional[datetime] = None) -> None:
        redis = self._get_redis()
        payload = cache_codec.encode(value)

        if expires_at is None:
            redis.set(self._key(key), payload)
            return

        ttl_ms = math.floor((expires_at - clock.now()).total_seconds() * 1000)
        if ttl_ms <= 0:
            # Already expired; make sure no stale copy survives
            redis.delete(self._key(key))
            return

        redis.set(self._key(key), payload, px=ttl_ms)

    def delete(self, key: str) -> bool:
        return bool(self._get_redis().delete(self._key(key)))
