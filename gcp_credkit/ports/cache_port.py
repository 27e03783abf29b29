"""
Cache Port - Interface for the token cache store.

Implementations:
- MemoryCacheAdapter: In-process dict (testing, single process)
- RedisCacheAdapter: Redis-backed cache
- DynamoDBCacheAdapter: AWS DynamoDB cache
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class CacheLookup:
    """Result of a cache read."""
    hit: bool
    value: Any = None


MISS = CacheLookup(hit=False)


class CachePort(ABC):
    """Port: Key/value cache with optional absolute expiry per entry."""

    @abstractmethod
    def get(self, key: str) -> CacheLookup:
        """
        Read a cache entry.

        Args:
            key: Cache key

        Returns:
            CacheLookup with hit=False if absent or expired
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any, expires_at: Optional[datetime] = None) -> None:
        """
        Write a cache entry.

        Args:
            key: Cache key
            value: Value to store
            expires_at: Absolute expiry, or None for no explicit expiry
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a cache entry.

        Returns:
            True if deleted, False if not found
        """
        pass
