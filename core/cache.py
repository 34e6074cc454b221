"""
Keyed Caches

Append-only key/value stores with a resolve-or-compute-then-insert operation.
With single flight enabled, concurrent first requests for one key share a
single in-flight computation; failures are not cached.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Generic, Optional, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class KeyedCache(Generic[K, V]):
    """Cache with single-flight population"""

    def __init__(self, name: str, single_flight: bool = True):
        """
        Initialize cache

        Args:
            name: Cache name used in log messages
            single_flight: Share in-flight computations between concurrent callers
        """
        self.name = name
        self.single_flight = single_flight
        self._values: Dict[K, V] = {}
        self._pending: Dict[K, asyncio.Future] = {}
        self.logger = logging.getLogger(f"{__name__}.{name}")

    def __contains__(self, key: K) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        return self._values.get(key, default)

    def set(self, key: K, value: V) -> V:
        self._values[key] = value
        return value

    async def get_or_compute(self, key: K, compute: Callable[[], Awaitable[V]]) -> V:
        """
        Return the cached value, computing and inserting it on a miss

        Args:
            key: Cache key
            compute: Coroutine factory producing the value

        Returns:
            Cached or freshly computed value

        Raises:
            Whatever compute() raises; nothing is cached in that case
        """
        if key in self._values:
            self.logger.debug(f"Cache hit [{self.name}]: {key}")
            return self._values[key]

        if not self.single_flight:
            value = await compute()
            self._values[key] = value
            return value

        pending = self._pending.get(key)
        while pending is not None:
            self.logger.debug(f"Awaiting in-flight computation [{self.name}]: {key}")
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                if not pending.cancelled():
                    raise
            # Computing caller was cancelled: rejoin a newer computation or take over
            if key in self._values:
                return self._values[key]
            pending = self._pending.get(key)

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        try:
            value = await compute()
        except BaseException as e:
            if isinstance(e, Exception):
                future.set_exception(e)
                # Mark retrieved so an unawaited future does not warn
                future.exception()
            else:
                future.cancel()
            raise
        else:
            self._values[key] = value
            future.set_result(value)
            return value
        finally:
            self._pending.pop(key, None)

