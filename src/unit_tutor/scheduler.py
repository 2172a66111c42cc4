"""Single-threaded event queue for delayed and repeating callbacks.

Nothing runs on its own: the owner pumps the queue with :meth:`EventQueue.run_due`
(wall clock) or :meth:`EventQueue.advance` (manual clock, used in tests).
"""
import heapq
import itertools
from typing import Callable, Optional


class ScheduledCall:
    """Handle for a pending callback. Cancelling is idempotent."""

    def __init__(self, when: float, callback: Callable[[], None],
                 interval: Optional[float] = None):
        self.when = when
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not self.cancelled

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "pending"
        return f"<ScheduledCall at={self.when:.3f} every={self.interval} {state}>"


class EventQueue:
    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._manual_now = 0.0
        self._clock = clock
        self._heap = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._clock() if self._clock else self._manual_now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(self.now() + delay, callback)
        self._push(call)
        return call

    def call_every(self, interval: float, callback: Callable[[], None]) -> ScheduledCall:
        if interval <= 0:
            raise ValueError("interval must be positive")
        call = ScheduledCall(self.now() + interval, callback, interval=interval)
        self._push(call)
        return call

    @property
    def pending(self) -> int:
        return sum(1 for _, _, call in self._heap if call.active)

    def run_due(self) -> int:
        """Run every callback whose deadline has passed. Returns how many ran."""
        return self._run_until(self.now())

    def advance(self, seconds: float) -> int:
        """Move the manual clock forward, firing callbacks in deadline order."""
        if self._clock is not None:
            raise RuntimeError("advance() only works with the manual clock")
        target = self._manual_now + seconds
        ran = self._run_until(target)
        self._manual_now = target
        return ran

    def _push(self, call: ScheduledCall) -> None:
        heapq.heappush(self._heap, (call.when, next(self._counter), call))

    def _run_until(self, deadline: float) -> int:
        ran = 0
        while self._heap and self._heap[0][0] <= deadline:
            when, _, call = heapq.heappop(self._heap)
            if call.cancelled:
                continue
            if self._clock is None:
                self._manual_now = when
            if call.interval is not None:
                call.when = when + call.interval
                self._push(call)
            call.callback()
            ran += 1
        return ran
