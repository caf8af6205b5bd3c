"""Rolling window tracker — hard cap on work inside any window."""

from collections import deque

from ratesched.models.task import ExecutionRecord
from ratesched.schedulers.base import BaseWindowTracker


class RollingWindowTracker(BaseWindowTracker):
    """Keeps the work overlapping every [t - window, t) at or below the limit.

    A start s is feasible when the work already inside [s - window, s) plus
    the new task's duration fits the limit. Intervals are kept in start
    order; those ending at or before the window's lower edge are dropped,
    and `_held` is the summed duration of what remains.
    """

    def __init__(self, rate_limit_ms: int, window_ms: int = 1000):
        super().__init__(rate_limit_ms, window_ms)
        self._intervals: deque[tuple[int, int]] = deque()
        self._held = 0

    def usage(self, at: int) -> int:
        """Work overlapping [at - window, at) among retained intervals."""
        floor = at - self.window_ms
        return sum(
            max(0, min(end, at) - max(start, floor))
            for start, end in self._intervals
        )

    def earliest_feasible_start(self, candidate_time: int, duration: int) -> int:
        start = max(candidate_time, self._last_end)
        floor = start - self.window_ms
        self._trim(floor)

        # A task longer than the limit waits for an empty window.
        budget = max(self.rate_limit_ms - duration, 0)
        excess = self._usage_above(floor) - budget
        if excess <= 0:
            return start

        # Slide the window's lower edge forward. Only one interval drains at
        # a time (they never overlap), so usage drops 1ms per ms while the
        # edge is inside an interval and stays flat across gaps.
        for iv_start, iv_end in self._intervals:
            lower = max(iv_start, floor)
            inside = iv_end - lower
            if excess <= inside:
                floor = lower + excess
                break
            excess -= inside
            floor = iv_end

        return floor + self.window_ms

    def _record(self, record: ExecutionRecord) -> None:
        self._intervals.append((record.start, record.end))
        self._held += record.duration

    def _usage_above(self, floor: int) -> int:
        # After trimming every interval ends above floor; only the first
        # can straddle it.
        if not self._intervals:
            return 0
        first_start = self._intervals[0][0]
        return self._held - max(0, floor - first_start)

    def _trim(self, floor: int) -> None:
        while self._intervals and self._intervals[0][1] <= floor:
            start, end = self._intervals.popleft()
            self._held -= end - start
