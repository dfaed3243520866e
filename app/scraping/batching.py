"""
Fixed-size batch execution with a pause between batches.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


class BatchPacer:
    """
    Runs at most ``batch_size`` calls concurrently, one batch at a time.

    Batches execute strictly in sequence and ``sleep(pause_seconds)`` is
    called between batches, never after the last one. Results keep the
    input order. The pacing is fixed: it does not react to latency or
    error rate.
    """

    def __init__(
        self,
        *,
        batch_size: int,
        pause_seconds: float,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1.")
        self.batch_size = batch_size
        self.pause_seconds = max(0.0, pause_seconds)
        self._sleep = sleep

    def batches(self, items: Sequence[T]) -> list[list[T]]:
        return [
            list(items[start : start + self.batch_size])
            for start in range(0, len(items), self.batch_size)
        ]

    def run(self, items: Sequence[T], func: Callable[[T], R]) -> list[R]:
        """
        Apply ``func`` to every item and return results in input order.

        ``func`` is expected to handle its own failures; an exception
        raised by it propagates after the current batch finishes.
        """

        batches = self.batches(items)
        if not batches:
            return []

        results: list[R] = []
        with ThreadPoolExecutor(max_workers=self.batch_size) as executor:
            for index, batch in enumerate(batches):
                results.extend(executor.map(func, batch))
                if index < len(batches) - 1 and self.pause_seconds > 0:
                    self._sleep(self.pause_seconds)
        return results
