"""
Tests for the TimelineScheduler and the schedule() entry points.

These tests verify:
    1. The exercise's worked example, under both policies
    2. Priority / arrival / submission-order tie-breaks
    3. Fast-forwarding over idle time and re-selection after a delay
    4. Validation happens before scheduling; no partial output
    5. Completeness, non-overlap and window invariants on generated batches
    6. Determinism and the 10,000-task scale target
"""

import json

import pytest
from pydantic import ValidationError

from ratesched import iter_schedule, schedule
from ratesched.metrics.checks import check_timeline, peak_window_usage
from ratesched.models.batch import RatePolicy, TaskBatch
from ratesched.models.task import ExecutionRecord, Task
from ratesched.simulator.engine import TimelineScheduler, build_batch, schedule_batch
from ratesched.simulator.events import EventType
from ratesched.simulator.generator import ScenarioGenerator

EXAMPLE_TASKS = [
    {"id": "A", "priority": 2, "createdAt": 0, "duration": 400},
    {"id": "B", "priority": 1, "createdAt": 100, "duration": 300},
    {"id": "C", "priority": 2, "createdAt": 200, "duration": 500},
]


def _spans(records: list[ExecutionRecord]) -> list[tuple[str, int, int]]:
    return [(r.id, r.start, r.end) for r in records]


class TestWorkedExample:
    """The exercise's example input."""

    def test_default_policy_matches_expected_output(self):
        records = schedule(EXAMPLE_TASKS, rate_limit_ms=700, start_time=0)
        assert [r.to_dict() for r in records] == [
            {"id": "A", "start": 0, "end": 400},
            {"id": "C", "start": 400, "end": 900},
            {"id": "B", "start": 1000, "end": 1300},
        ]

    def test_strict_policy(self):
        """Under the hard cap C must wait until A has mostly left the window."""
        records = schedule(EXAMPLE_TASKS, rate_limit_ms=700, policy=RatePolicy.STRICT)
        assert _spans(records) == [("A", 0, 400), ("C", 1200, 1700), ("B", 2300, 2600)]
        assert peak_window_usage(records) <= 700

    def test_from_json_batch(self):
        batch = TaskBatch.from_json(json.dumps({
            "rateLimitMs": 700, "startTime": 0, "tasks": EXAMPLE_TASKS,
        }))
        assert _spans(schedule_batch(batch)) == [("A", 0, 400), ("C", 400, 900), ("B", 1000, 1300)]


class TestTimelineScheduler:
    """Selection, delay and fast-forward behaviour."""

    def _make_task(self, id: str, priority: int = 1, created_at: int = 0,
                   duration: int = 100) -> Task:
        """Helper to create a task with sensible defaults."""
        return Task(id=id, priority=priority, created_at=created_at, duration=duration)

    def test_empty_batch(self):
        assert schedule([], rate_limit_ms=700) == []

    def test_single_task_starts_at_arrival(self):
        records = schedule([self._make_task("a", created_at=300, duration=5000)], rate_limit_ms=10)
        assert _spans(records) == [("a", 300, 5300)]

    def test_single_task_waits_for_start_time(self):
        records = schedule([self._make_task("a", created_at=50)], rate_limit_ms=700, start_time=200)
        assert _spans(records) == [("a", 200, 300)]

    def test_higher_priority_runs_first(self):
        tasks = [
            self._make_task("low", priority=1, created_at=10),
            self._make_task("high", priority=9, created_at=90),
        ]
        records = schedule(tasks, rate_limit_ms=1000, start_time=100)
        assert [r.id for r in records] == ["high", "low"]

    def test_equal_priority_earliest_arrival_first(self):
        tasks = [
            self._make_task("first", priority=1, created_at=0, duration=100),
            self._make_task("q", priority=5, created_at=50, duration=50),
            self._make_task("r", priority=5, created_at=20, duration=50),
        ]
        records = schedule(tasks, rate_limit_ms=1000)
        assert _spans(records) == [("first", 0, 100), ("r", 100, 150), ("q", 150, 200)]

    def test_full_tie_uses_submission_order(self):
        x = self._make_task("x", priority=3, created_at=0)
        y = self._make_task("y", priority=3, created_at=0)
        assert [r.id for r in schedule([x, y], rate_limit_ms=1000)] == ["x", "y"]
        assert [r.id for r in schedule([y, x], rate_limit_ms=1000)] == ["y", "x"]

    def test_fast_forward_over_idle_time(self):
        scheduler = TimelineScheduler(build_batch(
            [self._make_task("late", created_at=5000)], rate_limit_ms=700,
        ))
        records = scheduler.run()

        assert _spans(records) == [("late", 5000, 5100)]
        fast_forwards = [e for e in scheduler.event_log if e.event_type == EventType.FAST_FORWARD]
        assert len(fast_forwards) == 1
        assert fast_forwards[0].metadata["until"] == 5000

    def test_idle_gap_between_arrivals(self):
        tasks = [
            self._make_task("a", created_at=0, duration=100),
            self._make_task("b", created_at=3000, duration=100),
        ]
        assert _spans(schedule(tasks, rate_limit_ms=700)) == [("a", 0, 100), ("b", 3000, 3100)]

    def test_selection_rechecked_after_delay_admission(self):
        """While B waits for budget, higher-priority C arrives and goes first."""
        tasks = [
            self._make_task("A", priority=5, created_at=0, duration=500),
            self._make_task("B", priority=1, created_at=0, duration=100),
            self._make_task("C", priority=9, created_at=600, duration=100),
        ]
        scheduler = TimelineScheduler(build_batch(tasks, rate_limit_ms=500))
        records = scheduler.run()

        assert _spans(records) == [("A", 0, 500), ("C", 1000, 1100), ("B", 1100, 1200)]
        delays = [e for e in scheduler.event_log if e.event_type == EventType.RATE_DELAY]
        assert delays[0].task_id == "B"
        assert delays[0].metadata["until"] == 1000

    def test_selection_rechecked_after_delay_strict(self):
        tasks = [
            self._make_task("A", priority=5, created_at=0, duration=500),
            self._make_task("B", priority=1, created_at=0, duration=100),
            self._make_task("C", priority=9, created_at=600, duration=100),
        ]
        records = schedule(tasks, rate_limit_ms=500, policy="strict")
        assert _spans(records) == [("A", 0, 500), ("C", 1100, 1200), ("B", 1200, 1300)]

    def test_overlong_task_is_not_split(self):
        tasks = [
            self._make_task("small", priority=5, created_at=0, duration=100),
            self._make_task("huge", priority=1, created_at=0, duration=2500),
        ]
        for policy in RatePolicy:
            records = schedule(tasks, rate_limit_ms=700, policy=policy)
            huge = next(r for r in records if r.id == "huge")
            assert huge.end - huge.start == 2500
            assert huge.start == 1100  # "small" must have left the window first

    @pytest.mark.parametrize("policy", list(RatePolicy))
    def test_overlong_task_waits_for_long_predecessor(self, policy):
        """A task still running into the window keeps an overlong task out."""
        tasks = [
            self._make_task("X", priority=2, created_at=0, duration=2000),
            self._make_task("Y", priority=1, created_at=0, duration=1500),
        ]
        batch = build_batch(tasks, rate_limit_ms=700, policy=policy)
        records = schedule_batch(batch)

        assert _spans(records) == [("X", 0, 2000), ("Y", 3000, 4500)]
        assert check_timeline(batch, records) == []

    def test_events_in_chronological_order(self):
        gen = ScenarioGenerator(seed=3)
        scheduler = TimelineScheduler(gen.generate_batch(num_tasks=100))
        scheduler.run()

        times = [e.time for e in scheduler.event_log]
        assert times == sorted(times), "Events were not in chronological order"
        assert [e.sequence for e in scheduler.event_log] == list(range(1, len(times) + 1))
        commits = [e for e in scheduler.event_log if e.event_type == EventType.TASK_COMMIT]
        assert len(commits) == 100

    def test_scheduler_is_single_use(self):
        scheduler = TimelineScheduler(build_batch([self._make_task("a")], rate_limit_ms=700))
        scheduler.run()
        with pytest.raises(RuntimeError):
            scheduler.run()


class TestValidation:
    """Bad input fails before anything is scheduled."""

    def test_duplicate_ids(self):
        tasks = [
            {"id": "A", "priority": 1, "createdAt": 0, "duration": 10},
            {"id": "A", "priority": 2, "createdAt": 5, "duration": 10},
        ]
        with pytest.raises(ValidationError):
            schedule(tasks, rate_limit_ms=700)

    def test_non_positive_duration(self):
        with pytest.raises(ValidationError):
            schedule([{"id": "A", "priority": 1, "createdAt": 0, "duration": 0}], rate_limit_ms=700)

    def test_bad_rate_limit(self):
        with pytest.raises(ValidationError):
            schedule(EXAMPLE_TASKS, rate_limit_ms=0)

    def test_iter_schedule_validates_eagerly(self):
        """The error surfaces at the call, not on first iteration."""
        with pytest.raises(ValidationError):
            iter_schedule([{"id": "A", "priority": "x", "createdAt": 0, "duration": 10}], 700)


class TestLazySchedule:
    """iter_schedule() yields the same timeline lazily."""

    def test_matches_schedule(self):
        assert list(iter_schedule(EXAMPLE_TASKS, 700)) == schedule(EXAMPLE_TASKS, 700)

    def test_lazy_consumption(self):
        stream = iter_schedule(EXAMPLE_TASKS, 700)
        assert next(stream) == ExecutionRecord(id="A", start=0, end=400)
        assert next(stream).id == "C"

    def test_restartable(self):
        first = iter_schedule(EXAMPLE_TASKS, 700)
        next(first)
        second = iter_schedule(EXAMPLE_TASKS, 700)
        assert [r.id for r in second] == ["A", "C", "B"]


@pytest.mark.parametrize("policy", list(RatePolicy))
class TestTimelineProperties:
    """Invariants over generated batches, for each policy."""

    def _batch(self, policy, seed=42, num_tasks=300, **kwargs):
        return ScenarioGenerator(seed=seed).generate_batch(
            num_tasks=num_tasks, rate_limit_ms=700, policy=policy, **kwargs,
        )

    def test_all_invariants_hold(self, policy):
        batch = self._batch(policy)
        records = schedule_batch(batch)
        assert check_timeline(batch, records) == []

    def test_invariants_with_overlong_tasks(self, policy):
        batch = self._batch(policy, seed=11, duration_range=(50, 1500), max_arrival_spread=60000)
        records = schedule_batch(batch)
        assert any(r.duration > 700 for r in records)
        assert check_timeline(batch, records) == []

    def test_invariants_with_late_start(self, policy):
        batch = ScenarioGenerator(seed=5).generate_batch(
            num_tasks=100, rate_limit_ms=300, start_time=2500, policy=policy,
        )
        records = schedule_batch(batch)
        assert min(r.start for r in records) >= 2500
        assert check_timeline(batch, records) == []

    def test_completeness_and_order(self, policy):
        batch = self._batch(policy, seed=8)
        records = schedule_batch(batch)

        assert len(records) == len(batch.tasks)
        assert {r.id for r in records} == {t.id for t in batch.tasks}
        starts = [r.start for r in records]
        assert starts == sorted(starts)
        for prev, cur in zip(records, records[1:]):
            assert prev.end <= cur.start

    def test_deterministic(self, policy):
        batch = self._batch(policy, seed=21)
        first = json.dumps([r.to_dict() for r in schedule_batch(batch)])
        second = json.dumps([r.to_dict() for r in schedule_batch(batch)])
        assert first == second

    def test_scale_ten_thousand_tasks(self, policy):
        batch = self._batch(policy, seed=1, num_tasks=10_000, max_arrival_spread=2_000_000)
        records = schedule_batch(batch)
        assert len(records) == 10_000
        assert check_timeline(batch, records) == []


class TestStrictWindowBound:
    """The hard cap holds at every instant under STRICT."""

    def test_peak_usage_within_limit(self):
        batch = ScenarioGenerator(seed=99).generate_batch(
            num_tasks=500, rate_limit_ms=650, policy=RatePolicy.STRICT,
        )
        records = schedule_batch(batch)
        assert peak_window_usage(records) <= 650
