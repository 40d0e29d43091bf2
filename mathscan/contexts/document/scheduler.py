"""
Cooperative idle scheduling.

Models an idle-callback primitive on a single thread: callbacks are queued and
run one at a time, each with a Deadline describing how much of its time budget
is left. Long jobs process work until the deadline expires and then re-request
themselves, so nothing else waits behind one large batch. Cancellation is
simply dropping the queued callbacks.
"""

import time
from collections import deque
from typing import Callable, Deque

IdleCallback = Callable[["Deadline"], None]


class Deadline:
    """Time budget for one idle callback."""

    def __init__(self, budget_s: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._end = clock() + budget_s

    def time_remaining(self) -> float:
        """Seconds left in this budget (never negative)."""
        return max(0.0, self._end - self._clock())


class IdleScheduler:
    """
    FIFO queue of idle callbacks.

    Args:
        batch_budget_ms: Time budget handed to each callback
        clock: Monotonic clock (injectable for tests)

    Example:
        >>> scheduler = IdleScheduler()
        >>> calls = []
        >>> scheduler.request_idle(lambda deadline: calls.append("ran"))
        >>> scheduler.run_until_idle()
        1
        >>> calls
        ['ran']
    """

    def __init__(self, batch_budget_ms: float = 16, clock: Callable[[], float] = time.monotonic):
        self.batch_budget_s = batch_budget_ms / 1000
        self._clock = clock
        self._queue: Deque[IdleCallback] = deque()

    @property
    def pending(self) -> int:
        return len(self._queue)

    def request_idle(self, callback: IdleCallback) -> None:
        self._queue.append(callback)

    def cancel(self) -> int:
        """Drop every queued callback. Returns how many were dropped."""
        dropped = len(self._queue)
        self._queue.clear()
        return dropped

    def run_once(self) -> bool:
        """Run the next queued callback. Returns False if the queue was empty."""
        if not self._queue:
            return False
        callback = self._queue.popleft()
        callback(Deadline(self.batch_budget_s, self._clock))
        return True

    def run_until_idle(self, max_callbacks: int = None) -> int:
        """
        Run callbacks until the queue is empty (or max_callbacks have run).

        Returns:
            Number of callbacks run
        """
        count = 0
        while max_callbacks is None or count < max_callbacks:
            if not self.run_once():
                break
            count += 1
        return count
