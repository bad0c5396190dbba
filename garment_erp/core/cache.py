"""
In-process TTL cache for read-heavy queries.

List endpoints for reference data (customers, fabrics, batches, size types, the
sidebar tree, dashboard metrics) keep their results here for a time that
depends on how volatile the data is. Writes invalidate by data type.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Awaitable, Callable, Dict, Optional

from garment_erp.core.settings import get_app_settings

logger = logging.getLogger(__name__)

MINUTE = 60
HOUR = 60 * MINUTE

DEFAULT_TTL = 30 * MINUTE

PAGE_TTLS: Dict[str, int] = {
    "dashboard": 5 * MINUTE,
    "orders": 5 * MINUTE,
    "customers": 10 * MINUTE,
    "inventory": 15 * MINUTE,
    "production": 2 * MINUTE,
    "quality": 5 * MINUTE,
    "warehouse": 10 * MINUTE,
    "procurement": 15 * MINUTE,
    "analytics": 30 * MINUTE,
    "settings": 60 * MINUTE,
}

DATA_TYPE_TTLS: Dict[str, int] = {
    # User data
    "user_profile": HOUR,
    "user_permissions": 30 * MINUTE,
    "company_settings": HOUR,
    # Master data
    "customers": 15 * MINUTE,
    "products": 30 * MINUTE,
    "employees": HOUR,
    "suppliers": 30 * MINUTE,
    "fabrics": 20 * MINUTE,
    # Transactional
    "orders": 5 * MINUTE,
    "order_items": 5 * MINUTE,
    "purchase_orders": 10 * MINUTE,
    "invoices": 15 * MINUTE,
    # Production
    "production_orders": 2 * MINUTE,
    "batches": 3 * MINUTE,
    "quality_checks": 5 * MINUTE,
    # Inventory
    "inventory_items": 10 * MINUTE,
    "warehouse_inventory": 5 * MINUTE,
    # Analytics
    "dashboard_metrics": 5 * MINUTE,
    "reports": 30 * MINUTE,
}


@dataclass
class _Entry:
    value: Any
    expires_at: float
    data_type: Optional[str]


class QueryCache:
    """
    Bounded TTL cache with LRU eviction.

    Keys are built from query-key parts joined with '_' (see build_key). The first
    part is conventionally the data type, which is what invalidate_data_type matches.
    """

    def __init__(
        self,
        max_entries: int = 500,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_entries = max_entries
        self.enabled = enabled
        self._clock = clock
        self._entries: "OrderedDict[str, _Entry]" = OrderedDict()
        self._locks: Dict[str, asyncio.Lock] = {}
        self._hits = 0
        self._misses = 0

    # PUBLIC_INTERFACE
    @staticmethod
    def build_key(*parts: Any) -> str:
        """Join query-key parts into a cache key, skipping None parts."""
        return "_".join(str(p) for p in parts if p is not None)

    # PUBLIC_INTERFACE
    @staticmethod
    def ttl_for(data_type: Optional[str]) -> int:
        """Return the TTL in seconds for a data type (default 30 minutes)."""
        if not data_type:
            return DEFAULT_TTL
        return DATA_TYPE_TTLS.get(data_type, PAGE_TTLS.get(data_type, DEFAULT_TTL))

    # PUBLIC_INTERFACE
    def get(self, key: str, default: Any = None) -> Any:
        """Return a cached value, or default when missing or expired."""
        if not self.enabled:
            return default
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return default
        if entry.expires_at <= self._clock():
            del self._entries[key]
            self._misses += 1
            return default
        self._entries.move_to_end(key)
        self._hits += 1
        return entry.value

    # PUBLIC_INTERFACE
    def set(
        self,
        key: str,
        value: Any,
        data_type: Optional[str] = None,
        ttl: Optional[int] = None,
    ) -> None:
        """Store a value with a TTL taken from ttl, or from the data type."""
        if not self.enabled:
            return
        seconds = ttl if ttl is not None else self.ttl_for(data_type)
        self._entries[key] = _Entry(value=value, expires_at=self._clock() + seconds, data_type=data_type)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Query cache evicted key=%s", evicted)

    # PUBLIC_INTERFACE
    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
        data_type: Optional[str] = None,
        ttl: Optional[int] = None,
    ) -> Any:
        """
        Return the cached value for key, loading and caching it on a miss.

        Concurrent misses for the same key await a single loader call.
        """
        missing = object()
        value = self.get(key, missing)
        if value is not missing:
            return value
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            try:
                value = self.get(key, missing)
                if value is not missing:
                    return value
                value = await loader()
                self.set(key, value, data_type=data_type, ttl=ttl)
                return value
            finally:
                if self._locks.get(key) is lock:
                    del self._locks[key]

    # PUBLIC_INTERFACE
    def invalidate(self, key: str) -> bool:
        """Drop a single key. Returns True when something was removed."""
        return self._entries.pop(key, None) is not None

    # PUBLIC_INTERFACE
    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every key starting with prefix and return how many were removed."""
        doomed = [k for k in self._entries if k.startswith(prefix)]
        for k in doomed:
            del self._entries[k]
        return len(doomed)

    # PUBLIC_INTERFACE
    def invalidate_data_type(self, *data_types: str) -> int:
        """Drop all keys belonging to the given data types."""
        removed = 0
        for dt in data_types:
            removed += self.invalidate(dt)
            removed += self.invalidate_prefix(f"{dt}_")
        if removed:
            logger.debug("Query cache invalidated %d entries for %s", removed, ",".join(data_types))
        return removed

    # PUBLIC_INTERFACE
    def clear(self) -> None:
        """Drop all entries and reset counters."""
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    # PUBLIC_INTERFACE
    def stats(self) -> Dict[str, int]:
        """Return hit/miss counters and the current entry count."""
        return {"hits": self._hits, "misses": self._misses, "size": len(self._entries)}


# PUBLIC_INTERFACE
@lru_cache
def get_query_cache() -> QueryCache:
    """Return the process-wide QueryCache configured from settings."""
    settings = get_app_settings()
    return QueryCache(max_entries=settings.CACHE_MAX_ENTRIES, enabled=settings.CACHE_ENABLED)
