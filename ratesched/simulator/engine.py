"""Timeline scheduler — the driving loop that turns a batch into records."""

from typing import Iterable, Iterator, Mapping, Optional, Union

from ratesched.models.batch import DEFAULT_WINDOW_MS, RatePolicy, TaskBatch
from ratesched.models.task import ExecutionRecord, Task
from ratesched.schedulers import ArrivalGate, PrioritySelector, get_tracker
from ratesched.simulator.events import Event, EventType
from ratesched.utils.logging import get_logger

log = get_logger("engine")

TaskLike = Union[Task, Mapping]


class TimelineScheduler:
    """Discrete-event scheduler for one batch.

    Owns the simulated clock. Each step narrows the candidates through the
    arrival gate, picks the best one, asks the window tracker when it may
    start, and either commits it or moves the clock and selects again:

        Selecting -> Delaying -> Committing -> Selecting ... -> Done

    An instance is single-use; build a new one to recompute.
    """

    def __init__(self, batch: TaskBatch):
        self.batch = batch
        self.tracker = get_tracker(batch.policy, batch.rate_limit_ms, batch.window_ms)
        self.records: list[ExecutionRecord] = []
        self.event_log: list[Event] = []

        self._gate = ArrivalGate(list(batch.tasks))
        self._ready = PrioritySelector()
        self._now: int = batch.start_time
        self._event_counter: int = 0
        self._started = False

    @property
    def now(self) -> int:
        return self._now

    @property
    def done(self) -> bool:
        return not self._gate and not self._ready

    def run(self) -> list[ExecutionRecord]:
        """Schedule every task and return the records in start order."""
        for _ in self.iter_records():
            pass
        return self.records

    def iter_records(self) -> Iterator[ExecutionRecord]:
        """Yield records as they are committed."""
        if self._started:
            raise RuntimeError("TimelineScheduler instances are single-use")
        self._started = True

        log.debug("scheduling %r with %s", self.batch, self.tracker.name)
        while not self.done:
            record = self._step()
            if record is not None:
                yield record

        log.info(
            "scheduled %d tasks, makespan ends at %d (%d events)",
            len(self.records), self._now, len(self.event_log),
        )

    # ── Steps ─────────────────────────────────────────────────────────

    def _step(self) -> Optional[ExecutionRecord]:
        """One pass of Selecting/Delaying/Committing; returns a record on commit."""
        for index, task in self._gate.release(self._now):
            self._ready.push(index, task)
            self._push_event(EventType.TASK_ARRIVAL, task.id, created_at=task.created_at)

        task = self._ready.peek()
        if task is None:
            self._fast_forward()
            return None

        start = self.tracker.earliest_feasible_start(
            max(self._now, task.created_at), task.duration
        )
        if start > self._now:
            # Something better may arrive while we wait; select again there.
            self._push_event(EventType.RATE_DELAY, task.id, until=start)
            log.debug("t=%d: %s delayed until %d by rate window", self._now, task.id, start)
            self._now = start
            return None

        return self._commit(self._ready.pop(), start)

    def _fast_forward(self) -> None:
        next_arrival = self._gate.next_arrival()
        self._push_event(EventType.FAST_FORWARD, until=next_arrival)
        log.debug("t=%d: idle, jumping to next arrival at %d", self._now, next_arrival)
        self._now = next_arrival

    def _commit(self, task: Task, start: int) -> ExecutionRecord:
        record = ExecutionRecord(id=task.id, start=start, end=start + task.duration)
        self.tracker.commit(record)
        self.records.append(record)
        self._push_event(EventType.TASK_COMMIT, task.id, end=record.end)
        log.debug("t=%d: %s runs [%d, %d)", self._now, task.id, record.start, record.end)
        self._now = record.end
        return record

    # ── Utilities ─────────────────────────────────────────────────────

    def _push_event(self, event_type: EventType, task_id: Optional[str] = None,
                    **metadata) -> None:
        self._event_counter += 1
        self.event_log.append(Event(
            time=self._now,
            sequence=self._event_counter,
            event_type=event_type,
            task_id=task_id,
            metadata=metadata,
        ))


def build_batch(
    tasks: Iterable[TaskLike],
    rate_limit_ms: int,
    start_time: int = 0,
    *,
    window_ms: int = DEFAULT_WINDOW_MS,
    policy: Union[RatePolicy, str] = RatePolicy.ADMISSION,
) -> TaskBatch:
    """Validate raw arguments into a TaskBatch (raises pydantic.ValidationError)."""
    return TaskBatch(
        tasks=list(tasks),
        rate_limit_ms=rate_limit_ms,
        start_time=start_time,
        window_ms=window_ms,
        policy=policy,
    )


def schedule_batch(batch: TaskBatch) -> list[ExecutionRecord]:
    return TimelineScheduler(batch).run()


def iter_schedule(
    tasks: Iterable[TaskLike],
    rate_limit_ms: int,
    start_time: int = 0,
    *,
    window_ms: int = DEFAULT_WINDOW_MS,
    policy: Union[RatePolicy, str] = RatePolicy.ADMISSION,
) -> Iterator[ExecutionRecord]:
    """Lazily yield the timeline for `tasks`.

    Input is validated immediately, so a bad batch fails here rather than
    on first iteration. Every call recomputes from scratch.
    """
    batch = build_batch(tasks, rate_limit_ms, start_time, window_ms=window_ms, policy=policy)
    return TimelineScheduler(batch).iter_records()


def schedule(
    tasks: Iterable[TaskLike],
    rate_limit_ms: int,
    start_time: int = 0,
    *,
    window_ms: int = DEFAULT_WINDOW_MS,
    policy: Union[RatePolicy, str] = RatePolicy.ADMISSION,
) -> list[ExecutionRecord]:
    """Compute the complete execution timeline for `tasks`.

    Returns one ExecutionRecord per task, ascending by start. Invalid input
    raises pydantic.ValidationError before anything is scheduled.
    """
    batch = build_batch(tasks, rate_limit_ms, start_time, window_ms=window_ms, policy=policy)
    return schedule_batch(batch)
