"""Async client for the caltrack API (query cache, mutations, polling)."""

from .api import POLL_INTERVALS, ApiClient, query_key
from .errors import ApiError
from .query import Poller, QueryCache, QueryResult, QueryState

__all__ = [
    "POLL_INTERVALS",
    "ApiClient",
    "ApiError",
    "Poller",
    "QueryCache",
    "QueryResult",
    "QueryState",
    "query_key",
]
