"""
Memory Cache Adapter - In-process cache store.

Entries live for the life of the process. Not shared across workers.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from gcp_credkit.domain import clock
from gcp_credkit.ports.cache_port import CacheLookup, CachePort, MISS


class MemoryCacheAdapter(CachePort):
    """
    Dict-backed cache store.

    An entry is invalid once clock.now() >= its expires_at.
    """

    def __init__(self):
        """Initialize in-memory storage."""
        self._entries: Dict[str, Tuple[Any, Optional[datetime]]] = {}

    def get(self, key: str) -> CacheLookup:
        entry = self._entries.get(key)
        if entry is None:
            return MISS

        value, expires_at = entry
        if expires_at is not None and clock.now() >= expires_at:
            # Auto-cleanup expired entry
            del self._entries[key]
            return MISS

        return CacheLookup(hit=True, value=value)

    def set(self, key: str, value: Any, expires_at: Optional[datetime] = None) -> None:
        self._entries[key] = (value, expires_at)

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def cleanup_expired(self) -> int:
        """Drop expired entries. Returns the number removed."""
        now = clock.now()
        expired = [
            key for key, (_, expires_at) in self._entries.items()
            if expires_at is not None and now >= expires_at
        ]

        for key in expired:
            del self._entries[key]

        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
