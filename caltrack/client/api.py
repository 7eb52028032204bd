# -*- coding: utf-8 -*-
"""Async HTTP client for the caltrack API with a query cache attached."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional
from urllib.parse import urlencode

import httpx

from .errors import ApiError
from .query import Poller, QueryCache, QueryResult

# Refresh periods (seconds) used by the admin dashboards.
POLL_INTERVALS: Dict[str, float] = {
    "/api/admin/system/health": 5.0,
    "/api/admin/security/metrics": 10.0,
    "/api/admin/activity": 15.0,
    "/api/admin/notifications/stats": 30.0,
}

MUTATION_METHODS = ("POST", "PUT", "PATCH", "DELETE")


def query_key(path: str, params: Optional[Dict[str, Any]] = None) -> str:
    clean = {k: v for k, v in (params or {}).items() if v is not None}
    if not clean:
        return path
    return f"{path}?{urlencode(sorted(clean.items()))}"


def _detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("message") or body)
    return str(body)


class ApiClient:
    """
    Thin wrapper over `httpx.AsyncClient`.

    No retries: every failure surfaces as `ApiError` to the caller.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        cache: Optional[QueryCache] = None,
    ) -> None:
        self.cache = cache or QueryCache()
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )
        self.token = token

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._http.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as exc:
            raise ApiError(None, str(exc) or exc.__class__.__name__) from exc
        if resp.status_code >= 400:
            raise ApiError(resp.status_code, _detail(resp))
        if resp.status_code == 204 or not resp.content:
            return None
        if "text/csv" in (resp.headers.get("content-type") or ""):
            return resp.text
        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError(resp.status_code, "Response body is not valid JSON") from exc

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        clean = {k: v for k, v in (params or {}).items() if v is not None}
        return await self.request("GET", path, params=clean or None)

    async def query(self, path: str, params: Optional[Dict[str, Any]] = None) -> QueryResult:
        """Cached GET keyed by path and params."""
        return await self.cache.fetch(query_key(path, params), lambda: self.get_json(path, params))

    async def mutate(
        self,
        method: str,
        path: str,
        json: Any = None,
        *,
        invalidates: Iterable[str] = (),
    ) -> Any:
        """
        POST/PUT/PATCH/DELETE; on success mark `invalidates` prefixes stale.

        A failed mutation raises ApiError and leaves the cache untouched.
        """
        method = method.upper()
        if method not in MUTATION_METHODS:
            raise ValueError(f"not a mutation method: {method}")
        data = await self.request(method, path, json=json)
        for prefix in invalidates:
            self.cache.invalidate(prefix)
        return data

    def poll(self, path: str, interval: Optional[float] = None, params: Optional[Dict[str, Any]] = None) -> Poller:
        """Start polling `path`; defaults to the dashboard period for known paths."""
        period = interval if interval is not None else POLL_INTERVALS.get(path, 30.0)
        return Poller(self.cache, query_key(path, params), lambda: self.get_json(path, params), period).start()

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        data = await self.request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        self.cache.invalidate()
        return data["user"]

    async def meals(self, start: Optional[str] = None, end: Optional[str] = None) -> QueryResult:
        return await self.query("/api/meals", {"start": start, "end": end})

    async def update_meal(self, meal_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return await self.mutate(
            "PUT", f"/api/meals/{meal_id}", changes, invalidates=("/api/meals", "/api/analytics")
        )

    async def update_goals(self, goals: Dict[str, Any]) -> Dict[str, Any]:
        return await self.mutate(
            "PUT", "/api/nutrition-goals", goals, invalidates=("/api/nutrition-goals", "/api/analytics")
        )

    async def update_referral_settings(self, commission_percent: float, is_recurring: bool) -> Dict[str, Any]:
        return await self.mutate(
            "PUT",
            "/api/admin/referral/settings",
            {"commission_percent": commission_percent, "is_recurring": is_recurring},
            invalidates=("/api/admin/referral/settings",),
        )
