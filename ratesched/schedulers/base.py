"""Base window tracker — abstract interface for rate-window accounting."""

from abc import ABC, abstractmethod

from ratesched.models.task import ExecutionRecord
from ratesched.utils.logging import get_logger

log = get_logger("schedulers")


class BaseWindowTracker(ABC):
    """Remembers committed work and answers "when may this task start?".

    Callers must query with non-decreasing candidate times; trackers rely on
    that to discard history that has left the window for good. Only one
    task runs at a time, so a start is never placed before the end of the
    last committed record.
    """

    def __init__(self, rate_limit_ms: int, window_ms: int = 1000):
        if rate_limit_ms <= 0:
            raise ValueError(f"rate_limit_ms must be positive, got {rate_limit_ms}")
        if window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {window_ms}")
        self.rate_limit_ms = rate_limit_ms
        self.window_ms = window_ms
        self._last_end = 0

    @abstractmethod
    def earliest_feasible_start(self, candidate_time: int, duration: int) -> int:
        """Earliest start >= candidate_time that keeps the window within limits."""
        ...

    @abstractmethod
    def _record(self, record: ExecutionRecord) -> None:
        """Add a committed record to the tracker's history."""
        ...

    def commit(self, record: ExecutionRecord) -> None:
        """Record that `record` now occupies the timeline."""
        if record.start < self._last_end:
            raise ValueError(
                f"record {record.id!r} starts at {record.start}, before the "
                f"previous record ends at {self._last_end}"
            )
        self._record(record)
        self._last_end = record.end
        if record.duration > self.rate_limit_ms:
            log.warning(
                "task %r runs %dms, more than the %dms per %dms limit on its own; "
                "placed at %d in an otherwise empty window",
                record.id, record.duration, self.rate_limit_ms, self.window_ms, record.start,
            )

    @property
    def name(self) -> str:
        """Human-readable tracker name for reports."""
        return self.__class__.__name__
