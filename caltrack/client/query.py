# -*- coding: utf-8 -*-
"""
Query cache and pollers for dashboard-style data fetching.

A fetch moves a key through pending -> success | error. Successful results
are reused until `invalidate` marks them stale; errors are never reused.
Pollers re-issue a fetch on a fixed period as independent asyncio tasks.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .errors import ApiError

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]


class QueryState(str, Enum):
    pending = "pending"
    success = "success"
    error = "error"


@dataclass
class QueryResult:
    key: str
    state: QueryState = QueryState.pending
    data: Any = None
    error: Optional[ApiError] = None
    stale: bool = False
    updated_at: Optional[float] = None
    fetch_count: int = field(default=0)

    @property
    def is_pending(self) -> bool:
        return self.state == QueryState.pending


class QueryCache:
    """Keyed results, one entry per query key (typically the request path)."""

    def __init__(self) -> None:
        self._results: Dict[str, QueryResult] = {}
        # Bumped by invalidate; a fetch that started under an older generation settles stale.
        self._generations: Dict[str, int] = {}

    def get(self, key: str) -> Optional[QueryResult]:
        return self._results.get(key)

    def keys(self) -> List[str]:
        return list(self._results)

    async def fetch(self, key: str, fn: Fetcher, *, force: bool = False) -> QueryResult:
        """
        Return the cached result for `key`, or run `fn` and cache its outcome.

        Args:
            key: query key
            fn: coroutine function producing the data; raises ApiError on failure
            force: ignore a fresh cached result (used by pollers)

        Any other exception from `fn` still settles the result as an error
        before it propagates.
        """
        current = self._results.get(key)
        if (
            not force
            and current is not None
            and current.state == QueryState.success
            and not current.stale
        ):
            return current

        result = current or QueryResult(key=key)
        result.state = QueryState.pending
        result.error = None
        result.fetch_count += 1
        self._results[key] = result
        generation = self._generations.get(key, 0)
        try:
            data = await fn()
        except ApiError as exc:
            result.state = QueryState.error
            result.error = exc
            logger.debug("query %s failed: %s", key, exc)
        except Exception as exc:
            result.state = QueryState.error
            result.error = ApiError(None, f"{exc.__class__.__name__}: {exc}")
            raise
        else:
            result.state = QueryState.success
            result.data = data
            result.stale = self._generations.get(key, 0) != generation
            result.updated_at = time.time()
        return result

    def invalidate(self, prefix: str = "") -> List[str]:
        """Mark every key starting with `prefix` stale; returns the affected keys."""
        hit = [k for k in self._results if k.startswith(prefix)]
        for key in hit:
            self._results[key].stale = True
            self._generations[key] = self._generations.get(key, 0) + 1
        return hit


class Poller:
    """Re-fetch one query every `interval` seconds until stopped."""

    def __init__(self, cache: QueryCache, key: str, fn: Fetcher, interval: float) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.cache = cache
        self.key = key
        self.fn = fn
        self.interval = interval
        self.ticks = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "Poller":
        if not self.running:
            self._task = asyncio.create_task(self._run())
        return self

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        try:
            while True:
                try:
                    await self.cache.fetch(self.key, self.fn, force=True)
                except Exception as exc:
                    logger.error("poller for %s: fetch failed: %s", self.key, exc)
                self.ticks += 1
                await asyncio.sleep(self.interval)
        except asyncio.CancelledError:
            logger.debug("poller for %s stopped after %d tick(s)", self.key, self.ticks)
            raise
