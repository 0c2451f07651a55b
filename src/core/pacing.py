"""
Pacing policies for sequential storefront calls.

The sync loops ask a pacer to `wait()` before each call (or iterate through
`paced()`), so the pacing strategy can change without touching the
reconciliation logic. Sleep and clock are injectable for tests.
"""

import time
from typing import Callable, Iterable, Iterator, TypeVar

T = TypeVar("T")


class Pacer:
    """Base policy: never waits."""

    def wait(self) -> None:
        return None

    def paced(self, items: Iterable[T]) -> Iterator[T]:
        """Yield items, calling wait() before each one."""
        for item in items:
            self.wait()
            yield item


NoPacing = Pacer


class FixedIntervalPacer(Pacer):
    """
    Ticker that keeps at least `interval` seconds between consecutive ticks.

    The first tick never waits. Time spent doing work between ticks counts
    towards the interval.
    """

    def __init__(
        self,
        interval: float,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self.interval = interval
        self._sleep = sleep
        self._clock = clock
        self._last_tick: float | None = None

    def wait(self) -> None:
        now = self._clock()
        if self._last_tick is not None:
            remaining = self.interval - (now - self._last_tick)
            if remaining > 0:
                self._sleep(remaining)
                now = self._clock()
        self._last_tick = now


class TokenBucketPacer(Pacer):
    """
    Token bucket: bursts of up to `capacity` calls, refilled at `rate` per second.

    Shopify's REST limit is a leaky bucket of 40 calls refilled at 2/s on
    standard plans, which maps to TokenBucketPacer(rate=2, capacity=40).
    """

    def __init__(
        self,
        rate: float,
        capacity: int,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        if rate <= 0 or capacity < 1:
            raise ValueError("rate must be > 0 and capacity >= 1")
        self.rate = rate
        self.capacity = capacity
        self._sleep = sleep
        self._clock = clock
        self._tokens = float(capacity)
        self._updated = clock()

    def _refill(self) -> None:
        now = self._clock()
        self._tokens = min(self.capacity, self._tokens + (now - self._updated) * self.rate)
        self._updated = now

    def wait(self) -> None:
        self._refill()
        if self._tokens < 1:
            self._sleep((1 - self._tokens) / self.rate)
            self._refill()
            # Sleep may return a hair early on some platforms
            self._tokens = max(self._tokens, 1.0)
        self._tokens -= 1
