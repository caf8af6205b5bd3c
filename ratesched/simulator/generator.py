"""Scenario generator — creates reproducible task batches for scheduling runs."""

import random

from ratesched.models.batch import DEFAULT_WINDOW_MS, RatePolicy, TaskBatch
from ratesched.models.task import Task


class ScenarioGenerator:
    """Generates deterministic batches using a seeded RNG."""

    def __init__(self, seed: int = 42):
        self.rng = random.Random(seed)
        self._task_counter = 0

    def generate_tasks(
        self,
        num_tasks: int = 50,
        max_arrival_spread: int = 5000,
        duration_range: tuple[int, int] = (50, 400),
        priority_range: tuple[int, int] = (1, 5),
        deadline_slack: float | None = None,
    ) -> list[Task]:
        """Generate tasks in submission order (not sorted by arrival).

        With `deadline_slack`, each task gets a deadline of
        created_at + duration * slack.
        """
        tasks: list[Task] = []

        for _ in range(num_tasks):
            task_id = f"task-{self._task_counter:04d}"
            self._task_counter += 1

            created_at = self.rng.randint(0, max_arrival_spread)
            duration = self.rng.randint(*duration_range)
            priority = self.rng.randint(*priority_range)

            deadline = None
            if deadline_slack is not None:
                deadline = created_at + int(duration * deadline_slack)

            tasks.append(Task(
                id=task_id,
                priority=priority,
                created_at=created_at,
                duration=duration,
                deadline=deadline,
            ))

        return tasks

    def generate_batch(
        self,
        num_tasks: int = 50,
        rate_limit_ms: int = 700,
        start_time: int = 0,
        policy: RatePolicy = RatePolicy.ADMISSION,
        window_ms: int = DEFAULT_WINDOW_MS,
        **task_kwargs,
    ) -> TaskBatch:
        """Generate a validated batch; extra kwargs go to generate_tasks()."""
        return TaskBatch(
            tasks=self.generate_tasks(num_tasks=num_tasks, **task_kwargs),
            rate_limit_ms=rate_limit_ms,
            start_time=start_time,
            window_ms=window_ms,
            policy=policy,
        )
