"""Admission window tracker — budget is checked when a task starts."""

from collections import deque

from ratesched.models.task import ExecutionRecord
from ratesched.schedulers.base import BaseWindowTracker


class AdmissionWindowTracker(BaseWindowTracker):
    """Admits a task while the trailing window's budget is not used up.

    Each started task charges its whole duration at its start instant, and
    the charge stays for one window: a task started at x stops counting at
    x + window. A task may start at s while the charges still counted at s
    total less than the limit. Because a started task is never cut short,
    the last task admitted into a window may carry it past the limit.

    Tasks longer than the limit itself wait until no earlier work overlaps
    the trailing window at all.
    """

    def __init__(self, rate_limit_ms: int, window_ms: int = 1000):
        super().__init__(rate_limit_ms, window_ms)
        self._charges: deque[tuple[int, int]] = deque()
        self._charged = 0

    def earliest_feasible_start(self, candidate_time: int, duration: int) -> int:
        start = max(candidate_time, self._last_end)
        if duration > self.rate_limit_ms:
            # records never overlap, so the window is empty once the
            # last one ended a full window ago
            if self._last_end:
                start = max(start, self._last_end + self.window_ms)
            return start

        self._trim(start)
        charged = self._charged
        if charged < self.rate_limit_ms:
            return start

        for charge_start, charge_duration in self._charges:
            charged -= charge_duration
            start = max(start, charge_start + self.window_ms)
            if charged < self.rate_limit_ms:
                break

        return start

    def _record(self, record: ExecutionRecord) -> None:
        self._charges.append((record.start, record.duration))
        self._charged += record.duration

    def _trim(self, at: int) -> None:
        while self._charges and self._charges[0][0] <= at - self.window_ms:
            _, duration = self._charges.popleft()
            self._charged -= duration
