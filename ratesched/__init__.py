"""ratesched — rate-limited, priority-ordered, non-preemptive task scheduling."""

from ratesched.errors import TimelineViolation, ValidationError
from ratesched.models import DEFAULT_WINDOW_MS, ExecutionRecord, RatePolicy, Task, TaskBatch
from ratesched.simulator.engine import (
    TimelineScheduler, build_batch, iter_schedule, schedule, schedule_batch,
)

__version__ = "0.1.0"

__all__ = [
    "Task", "ExecutionRecord", "TaskBatch", "RatePolicy", "DEFAULT_WINDOW_MS",
    "TimelineScheduler", "schedule", "iter_schedule", "schedule_batch", "build_batch",
    "ValidationError", "TimelineViolation",
]
