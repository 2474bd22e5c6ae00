"""Lightweight in-process metrics for development and tests.

Dispatch components record counters here so tests can verify how many
pushes or handler invocations a single model change produced. Watch
handlers and binding pushes are also timed, under ``watch.invoke_duration``
and ``binding.push_duration``.

Usage:
    from modelbind.metrics import metrics
    metrics.inc("binding.push")
    with metrics.timed("watch.invoke_duration"):
        ...
    snapshot = metrics.snapshot()
"""

from __future__ import annotations

import time
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from threading import RLock
from typing import Any


class _Metrics:
    def __init__(self) -> None:
        self._counters: dict[str, int] = defaultdict(int)
        self._timings: dict[str, list[float]] = defaultdict(list)
        self._lock = RLock()

    def inc(self, key: str, amount: int = 1) -> None:
        with self._lock:
            self._counters[key] += int(amount)

    def count(self, key: str) -> int:
        with self._lock:
            return self._counters.get(key, 0)

    @contextmanager
    def timed(self, key: str) -> Iterator[None]:
        """Record the wall time of the block, also when it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            with self._lock:
                self._timings[key].append(elapsed)

    def snapshot(self) -> dict[str, Any]:
        """Copy of all counters and recorded durations (seconds)."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "timings": {k: list(v) for k, v in self._timings.items()},
            }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()


metrics = _Metrics()
