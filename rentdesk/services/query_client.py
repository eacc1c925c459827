"""
Request-keyed cache for backend reads.

Reads are addressed by tuple keys such as ``("rentals",)`` or
``("analytics", "financial-summary", 2024, 6)``. Concurrent reads of one key
share a single backend call, results are cached until invalidated, and
writes go through ``mutate`` so the keys they make stale are dropped before
the caller sees the write complete.

Blocking resource calls run in worker threads via ``asyncio.to_thread``.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from errors import QueryDisabledError

logger = logging.getLogger(__name__)

QueryKey = Tuple[Any, ...]


def matches_prefix(key: QueryKey, prefix: QueryKey) -> bool:
    return key[:len(prefix)] == tuple(prefix)


class QueryClient:
    """Cache of read results with in-flight deduplication.

    Args:
        session: Optional AuthSession gating reads. Reads wait for an
            outstanding verification and are refused without a session.
    """

    def __init__(self, session=None):
        self.session = session
        self._cache: Dict[QueryKey, Any] = {}
        self._in_flight: Dict[QueryKey, asyncio.Future] = {}
        # Bumped on every invalidation touching the key; a fetch started
        # under an older generation must not store its result.
        self._generations: Dict[QueryKey, int] = {}

    def _generation(self, key: QueryKey) -> int:
        return self._generations.get(key, 0)

    async def _ensure_enabled(self, key: QueryKey):
        if self.session is None:
            return
        await self.session.wait_until_verified()
        if not self.session.is_authenticated:
            logger.debug(f"Query {key} disabled, session is {self.session.status.value}")
            raise QueryDisabledError(key)

    async def fetch(self, key: QueryKey, fn: Callable[..., Any], *args) -> Any:
        """Return the cached value for key, fetching it with fn on a miss.

        Args:
            key: Query key
            fn: Blocking function returning the value
            *args: Positional arguments for fn

        Raises:
            QueryDisabledError: If the session is not authenticated
            Exception: Whatever fn raised; failures are not cached
        """
        key = tuple(key)
        await self._ensure_enabled(key)

        if key in self._cache:
            return self._cache[key]

        pending = self._in_flight.get(key)
        if pending is not None:
            logger.debug(f"Joining in-flight query {key}")
            return await asyncio.shield(pending)

        future = asyncio.ensure_future(self._run(key, fn, args))
        self._in_flight[key] = future
        return await asyncio.shield(future)

    async def _run(self, key: QueryKey, fn: Callable[..., Any], args: tuple) -> Any:
        generation = self._generation(key)
        task = asyncio.current_task()
        try:
            logger.debug(f"Fetching {key}")
            result = await asyncio.to_thread(fn, *args)
        finally:
            # A newer fetch may have replaced this one after an invalidation
            if self._in_flight.get(key) is task:
                del self._in_flight[key]

        if self._generation(key) == generation:
            self._cache[key] = result
        else:
            logger.debug(f"Result for {key} arrived after invalidation, not cached")
        return result

    def get_cached(self, key: QueryKey, default: Any = None) -> Any:
        return self._cache.get(tuple(key), default)

    def is_cached(self, key: QueryKey) -> bool:
        return tuple(key) in self._cache

    def set_cached(self, key: QueryKey, value: Any):
        self._cache[tuple(key)] = value

    def invalidate(self, prefix: QueryKey) -> int:
        """Drop every cached key that starts with prefix.

        In-flight fetches for matching keys still resolve for the waiters
        that already joined them, but their results are not cached and
        later reads start a fresh fetch.

        Returns:
            int: Number of cached entries dropped
        """
        prefix = tuple(prefix)
        stale = [key for key in self._cache if matches_prefix(key, prefix)]
        for key in stale:
            del self._cache[key]

        in_flight = [key for key in self._in_flight if matches_prefix(key, prefix)]
        for key in in_flight:
            del self._in_flight[key]

        for key in set(stale) | set(in_flight):
            self._generations[key] = self._generation(key) + 1

        if stale:
            logger.debug(f"Invalidated {len(stale)} cached queries under {prefix}")
        return len(stale)

    async def mutate(
        self,
        fn: Callable[..., Any],
        *args,
        invalidates: Iterable[QueryKey] = ()
    ) -> Any:
        """Run a blocking write, then invalidate the given key prefixes.

        Invalidation happens only when the write succeeds and before this
        coroutine returns, so reads issued afterwards refetch.
        """
        result = await asyncio.to_thread(fn, *args)
        for prefix in invalidates:
            self.invalidate(prefix)
        return result

    def clear(self):
        """Drop all cached data, e.g. when the session ends."""
        for key in list(self._in_flight):
            self._generations[key] = self._generation(key) + 1
        self._in_flight.clear()
        self._cache.clear()
        logger.debug("Query cache cleared")
