"""Politeness gates that space out requests to the same origin."""

from __future__ import annotations

import time
from typing import Callable, Protocol


class PolitenessPolicy(Protocol):
    def wait(self, key: str) -> None: ...


class FixedIntervalGate:
    """Enforce a minimum interval between calls sharing the same key.

    The key is normally a hostname. The first call for a key returns
    immediately; later calls sleep for whatever remains of the interval.
    """

    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._last: dict[str, float] = {}

    def wait(self, key: str) -> None:
        now = self._clock()
        last = self._last.get(key)
        if last is not None:
            remaining = self.interval - (now - last)
            if remaining > 0:
                self._sleep(remaining)
                now = self._clock()
        self._last[key] = now


class NoDelay:
    def wait(self, key: str) -> None:
        return None
