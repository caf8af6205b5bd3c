"""Arrival gate and priority selector — which task runs next."""

import heapq
from typing import Optional

from ratesched.models.task import Task


class ArrivalGate:
    """Releases tasks once the clock reaches their created_at.

    Tasks are held sorted by (created_at, submission index) and handed out
    through a cursor, so each task passes the gate exactly once.
    """

    def __init__(self, tasks: list[Task]):
        self._pending: list[tuple[int, Task]] = sorted(
            enumerate(tasks), key=lambda item: (item[1].created_at, item[0])
        )
        self._cursor = 0

    def release(self, now: int) -> list[tuple[int, Task]]:
        """Pop every (submission index, task) that has arrived by `now`."""
        released: list[tuple[int, Task]] = []
        while (
            self._cursor < len(self._pending)
            and self._pending[self._cursor][1].created_at <= now
        ):
            released.append(self._pending[self._cursor])
            self._cursor += 1
        return released

    def next_arrival(self) -> Optional[int]:
        """Earliest created_at not yet released, or None when all have arrived."""
        if self._cursor < len(self._pending):
            return self._pending[self._cursor][1].created_at
        return None

    def __len__(self) -> int:
        return len(self._pending) - self._cursor


class PrioritySelector:
    """Heap of arrived tasks ordered for selection.

    Order: highest priority, then earliest created_at, then submission
    order, which makes the choice total and deterministic.
    """

    def __init__(self):
        self._heap: list[tuple[int, int, int, Task]] = []

    def push(self, index: int, task: Task) -> None:
        heapq.heappush(self._heap, (-task.priority, task.created_at, index, task))

    def peek(self) -> Optional[Task]:
        """Best ready task without removing it."""
        if not self._heap:
            return None
        return self._heap[0][3]

    def pop(self) -> Task:
        return heapq.heappop(self._heap)[3]

    def __len__(self) -> int:
        return len(self._heap)


def select_next(now: int, unscheduled: list[Task]) -> Optional[Task]:
    """Pick the task that should run at `now` from a plain list.

    Returns None when nothing in `unscheduled` has arrived yet. The list
    order counts as submission order. The scheduler itself uses the
    incremental ArrivalGate/PrioritySelector pair; this is the same rule
    for one-off queries.
    """
    eligible = [(i, t) for i, t in enumerate(unscheduled) if t.created_at <= now]
    if not eligible:
        return None
    _, best = min(eligible, key=lambda item: (-item[1].priority, item[1].created_at, item[0]))
    return best
