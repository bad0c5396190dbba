from __future__ import annotations

import asyncio
import unittest

from garment_erp.core.cache import DEFAULT_TTL, QueryCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class QueryCacheTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.cache = QueryCache(max_entries=3, clock=self.clock)

    def test_build_key_skips_none(self) -> None:
        self.assertEqual(QueryCache.build_key("customers", None, "acme", 2), "customers_acme_2")

    def test_ttl_lookup(self) -> None:
        self.assertEqual(QueryCache.ttl_for("batches"), 180)
        self.assertEqual(QueryCache.ttl_for("settings"), 3600)
        self.assertEqual(QueryCache.ttl_for("unknown"), DEFAULT_TTL)
        self.assertEqual(QueryCache.ttl_for(None), DEFAULT_TTL)

    def test_entries_expire(self) -> None:
        self.cache.set("batches_all", [1], data_type="batches")
        self.clock.now += 179
        self.assertEqual(self.cache.get("batches_all"), [1])
        self.clock.now += 1
        self.assertIsNone(self.cache.get("batches_all"))
        self.assertEqual(self.cache.stats(), {"hits": 1, "misses": 1, "size": 0})

    def test_least_recently_used_is_evicted(self) -> None:
        for key in ("a", "b", "c"):
            self.cache.set(key, key, ttl=60)
        self.cache.get("a")
        self.cache.set("d", "d", ttl=60)
        self.assertIsNone(self.cache.get("b"))
        self.assertEqual(self.cache.get("a"), "a")

    def test_invalidate_data_type(self) -> None:
        self.cache.set("customers", 1, ttl=60)
        self.cache.set("customers_acme", 2, ttl=60)
        self.cache.set("customers2_x", 3, ttl=60)
        self.assertEqual(self.cache.invalidate_data_type("customers"), 2)
        self.assertEqual(self.cache.get("customers2_x"), 3)

    def test_disabled_cache_stores_nothing(self) -> None:
        cache = QueryCache(enabled=False)
        cache.set("k", 1)
        self.assertIsNone(cache.get("k"))

    def test_get_or_load_calls_loader_once(self) -> None:
        calls = []

        async def loader():
            calls.append(1)
            await asyncio.sleep(0)
            return "value"

        async def run():
            return await asyncio.gather(*(self.cache.get_or_load("fabrics_all", loader, "fabrics") for _ in range(3)))

        self.assertEqual(asyncio.run(run()), ["value"] * 3)
        self.assertEqual(len(calls), 1)

    def test_failed_load_releases_the_key(self) -> None:
        async def broken():
            raise RuntimeError("db down")

        async def loader():
            return "value"

        async def run():
            with self.assertRaises(RuntimeError):
                await self.cache.get_or_load("fabrics_all", broken, "fabrics")
            self.assertEqual(self.cache._locks, {})
            return await self.cache.get_or_load("fabrics_all", loader, "fabrics")

        self.assertEqual(asyncio.run(run()), "value")
        self.assertEqual(self.cache._locks, {})
