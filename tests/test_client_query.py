# -*- coding: utf-8 -*-

from __future__ import annotations

import asyncio
import json
import unittest

import httpx

from caltrack.client import ApiClient, ApiError, Poller, QueryCache, QueryState, query_key


class FakeMealsBackend:
    """In-memory stand-in for the meals endpoints."""

    def __init__(self) -> None:
        self.meals = {"m1": {"id": "m1", "food_name": "Oatmeal", "calories": 300}}
        self.calls: list[tuple[str, str]] = []
        self.fail_next_put = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append((request.method, request.url.path))
        if request.url.path == "/api/meals" and request.method == "GET":
            meals = list(self.meals.values())
            return httpx.Response(200, json={"count": len(meals), "meals": meals})
        if request.url.path.startswith("/api/meals/") and request.method == "PUT":
            if self.fail_next_put:
                self.fail_next_put = False
                return httpx.Response(500, json={"detail": "Failed to save meal"})
            meal_id = request.url.path.rsplit("/", 1)[1]
            if meal_id not in self.meals:
                return httpx.Response(404, json={"detail": "Meal not found"})
            self.meals[meal_id].update(json.loads(request.content))
            return httpx.Response(200, json=self.meals[meal_id])
        if request.url.path == "/api/admin/system/health":
            return httpx.Response(200, json={"status": "ok"})
        return httpx.Response(404, json={"detail": "Not found"})

    def gets(self, path: str) -> int:
        return sum(1 for method, p in self.calls if method == "GET" and p == path)


class TestQueryCache(unittest.IsolatedAsyncioTestCase):
    async def test_pending_until_settled_then_success(self) -> None:
        cache = QueryCache()
        release = asyncio.Event()

        async def fetch():
            await release.wait()
            return {"ok": True}

        task = asyncio.create_task(cache.fetch("/api/x", fetch))
        await asyncio.sleep(0)
        self.assertEqual(cache.get("/api/x").state, QueryState.pending)

        release.set()
        result = await task
        self.assertEqual(result.state, QueryState.success)
        self.assertEqual(result.data, {"ok": True})
        self.assertIsNone(result.error)

    async def test_error_state_carries_api_error(self) -> None:
        cache = QueryCache()

        async def fetch():
            raise ApiError(503, "Service unavailable")

        result = await cache.fetch("/api/x", fetch)
        self.assertEqual(result.state, QueryState.error)
        self.assertEqual(result.error.status, 503)
        self.assertEqual(result.error.detail, "Service unavailable")

    async def test_success_is_reused_until_invalidated(self) -> None:
        cache = QueryCache()
        calls = []

        async def fetch():
            calls.append(1)
            return len(calls)

        await cache.fetch("/api/meals", fetch)
        await cache.fetch("/api/meals", fetch)
        self.assertEqual(len(calls), 1)

        self.assertEqual(cache.invalidate("/api/meals"), ["/api/meals"])
        result = await cache.fetch("/api/meals", fetch)
        self.assertEqual(len(calls), 2)
        self.assertEqual(result.data, 2)
        self.assertFalse(result.stale)

    async def test_invalidate_matches_prefix_only(self) -> None:
        cache = QueryCache()

        async def fetch():
            return 1

        for key in ("/api/meals", "/api/meals?start=2024-01-01", "/api/meals/summary", "/api/analytics/daily"):
            await cache.fetch(key, fetch)

        hit = cache.invalidate("/api/meals")
        self.assertEqual(sorted(hit), ["/api/meals", "/api/meals/summary", "/api/meals?start=2024-01-01"])
        self.assertFalse(cache.get("/api/analytics/daily").stale)

    async def test_invalidate_during_fetch_forces_refetch(self) -> None:
        cache = QueryCache()
        server = {"value": "old"}
        release = asyncio.Event()

        async def slow():
            snapshot = server["value"]
            await release.wait()
            return snapshot

        task = asyncio.create_task(cache.fetch("/api/meals", slow))
        await asyncio.sleep(0)
        server["value"] = "new"
        cache.invalidate("/api/meals")
        release.set()

        settled = await task
        self.assertEqual(settled.data, "old")
        self.assertTrue(settled.stale)

        async def fresh():
            return server["value"]

        result = await cache.fetch("/api/meals", fresh)
        self.assertEqual(result.data, "new")
        self.assertFalse(result.stale)
        self.assertEqual(result.fetch_count, 2)

    async def test_unexpected_exception_settles_as_error(self) -> None:
        cache = QueryCache()

        async def broken():
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            await cache.fetch("/api/x", broken)
        result = cache.get("/api/x")
        self.assertEqual(result.state, QueryState.error)
        self.assertIsNone(result.error.status)
        self.assertIn("boom", result.error.detail)

    def test_query_key_is_stable(self) -> None:
        self.assertEqual(query_key("/api/meals"), "/api/meals")
        self.assertEqual(query_key("/api/meals", {"start": None}), "/api/meals")
        self.assertEqual(
            query_key("/api/meals", {"end": "2024-01-31", "start": "2024-01-01"}),
            "/api/meals?end=2024-01-31&start=2024-01-01",
        )


class TestApiClient(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.backend = FakeMealsBackend()
        self.client = ApiClient(
            "http://caltrack.test",
            token="t",
            transport=httpx.MockTransport(self.backend.handler),
        )

    async def asyncTearDown(self) -> None:
        await self.client.aclose()

    async def test_get_json_raises_api_error_on_non_2xx(self) -> None:
        with self.assertRaises(ApiError) as ctx:
            await self.client.get_json("/api/unknown")
        self.assertEqual(ctx.exception.status, 404)
        self.assertEqual(ctx.exception.detail, "Not found")

    async def test_network_failure_has_no_status(self) -> None:
        def broken(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = ApiClient("http://caltrack.test", transport=httpx.MockTransport(broken))
        try:
            with self.assertRaises(ApiError) as ctx:
                await client.get_json("/api/meals")
        finally:
            await client.aclose()
        self.assertIsNone(ctx.exception.status)
        self.assertTrue(ctx.exception.is_network_error)

    async def test_non_json_success_body_is_an_error(self) -> None:
        def html(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        client = ApiClient("http://caltrack.test", transport=httpx.MockTransport(html))
        try:
            result = await client.query("/api/meals")
        finally:
            await client.aclose()
        self.assertEqual(result.state, QueryState.error)
        self.assertEqual(result.error.status, 200)

    async def test_successful_mutation_refetches_updated_list(self) -> None:
        first = await self.client.meals()
        self.assertEqual(first.data["meals"][0]["calories"], 300)

        await self.client.update_meal("m1", {"calories": 350})
        self.assertTrue(self.client.cache.get("/api/meals").stale)

        refreshed = await self.client.meals()
        self.assertEqual(refreshed.state, QueryState.success)
        self.assertEqual(refreshed.data["meals"][0]["calories"], 350)
        self.assertEqual(self.backend.gets("/api/meals"), 2)

    async def test_failed_mutation_invalidates_nothing(self) -> None:
        await self.client.meals()
        self.backend.fail_next_put = True

        with self.assertRaises(ApiError) as ctx:
            await self.client.update_meal("m1", {"calories": 999})
        self.assertEqual(ctx.exception.status, 500)
        self.assertFalse(self.client.cache.get("/api/meals").stale)

        cached = await self.client.meals()
        self.assertEqual(cached.data["meals"][0]["calories"], 300)
        self.assertEqual(self.backend.gets("/api/meals"), 1)

    async def test_mutate_rejects_get(self) -> None:
        with self.assertRaises(ValueError):
            await self.client.mutate("GET", "/api/meals")

    async def test_poller_refetches_on_interval_and_stops(self) -> None:
        poller = self.client.poll("/api/admin/system/health", interval=0.01)
        await asyncio.sleep(0.08)
        await poller.stop()

        self.assertFalse(poller.running)
        self.assertGreaterEqual(poller.ticks, 2)
        count = self.backend.gets("/api/admin/system/health")
        self.assertGreaterEqual(count, 2)
        self.assertEqual(self.client.cache.get("/api/admin/system/health").data, {"status": "ok"})

        await asyncio.sleep(0.03)
        self.assertEqual(self.backend.gets("/api/admin/system/health"), count)

    async def test_pollers_are_independent(self) -> None:
        cache = QueryCache()
        seen = {"a": 0, "b": 0}

        def counter(name):
            async def fetch():
                seen[name] += 1
                return seen[name]
            return fetch

        fast = Poller(cache, "a", counter("a"), 0.01).start()
        slow = Poller(cache, "b", counter("b"), 10).start()
        await asyncio.sleep(0.06)
        await fast.stop()
        await slow.stop()
        self.assertGreater(seen["a"], seen["b"])
        self.assertEqual(seen["b"], 1)

    async def test_poller_keeps_running_after_failed_fetch(self) -> None:
        cache = QueryCache()

        async def broken():
            raise RuntimeError("boom")

        poller = Poller(cache, "k", broken, 0.01).start()
        await asyncio.sleep(0.05)
        self.assertTrue(poller.running)
        await poller.stop()
        self.assertGreaterEqual(poller.ticks, 2)
        self.assertEqual(cache.get("k").state, QueryState.error)

    def test_poller_rejects_non_positive_interval(self) -> None:
        with self.assertRaises(ValueError):
            Poller(QueryCache(), "k", None, 0)  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
