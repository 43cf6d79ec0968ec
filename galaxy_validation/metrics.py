"""Service metrics, a request rate limiter and an LRU cache."""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Hashable
from typing import Any, Generic, TypeVar, Union

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class Counter:
    """A monotonically increasing metric."""

    def __init__(self, name: str, description: str = "") -> None:
        self.name = name
        self.description = description
        self._value = 0.0

    def inc(self, amount: float = 1.0) -> None:
        if amount < 0:
            raise ValueError("counters can only increase")
        self._value += amount

    def get(self) -> float:
        return self._value


class Gauge:
    """A metric holding the last value set."""

    def __init__(self, name: str, description: str = "") -> None:
        self.name = name
        self.description = description
        self._value = 0.0

    def set(self, value: float) -> None:
        self._value = float(value)

    def get(self) -> float:
        return self._value


Metric = Union[Counter, Gauge]


class Registry:
    """A collection of uniquely named metrics."""

    def __init__(self) -> None:
        self._metrics: dict[str, Metric] = {}

    def register(self, metric: Metric) -> None:
        if metric.name in self._metrics:
            raise ValueError(f"metric {metric.name!r} is already registered")
        self._metrics[metric.name] = metric

    def gather(self) -> dict[str, float]:
        """Current values of all metrics, ordered by name."""
        return {name: self._metrics[name].get() for name in sorted(self._metrics)}


class RateLimiter:
    """Token bucket allowing ``per_second`` requests per second with an equal burst."""

    def __init__(
        self,
        per_second: int,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if per_second <= 0:
            raise ValueError("rate must be positive")
        self._rate = float(per_second)
        self._burst = float(per_second)
        self._tokens = self._burst
        self._clock = clock
        self._sleep = sleep
        self._updated: float | None = None
        self._lock = asyncio.Lock()

    async def until_ready(self) -> None:
        """Wait until a request may proceed, then consume one permit."""
        async with self._lock:
            while True:
                now = self._clock()
                if self._updated is not None:
                    elapsed = max(0.0, now - self._updated)
                    self._tokens = min(self._burst, self._tokens + elapsed * self._rate)
                self._updated = now
                if self._tokens >= 1.0:
                    self._tokens -= 1.0
                    return
                await self._sleep((1.0 - self._tokens) / self._rate)


class LRUCache(Generic[K, V]):
    """Bounded mapping that evicts the least recently used entry."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._items: OrderedDict[K, V] = OrderedDict()

    def get(self, key: K) -> V | None:
        """Return the value for ``key`` and mark it recently used, or None."""
        if key not in self._items:
            return None
        self._items.move_to_end(key)
        return self._items[key]

    def put(self, key: K, value: V) -> None:
        self._items[key] = value
        self._items.move_to_end(key)
        while len(self._items) > self.capacity:
            self._items.popitem(last=False)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items