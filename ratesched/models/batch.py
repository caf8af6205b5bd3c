"""TaskBatch — the validated, immutable input of one scheduling run."""

from enum import Enum
from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ratesched.models.task import Task

DEFAULT_WINDOW_MS = 1000


class RatePolicy(str, Enum):
    """How execution time is counted against the rolling window.

    ADMISSION: a task may start while the window's budget is not used up;
               its full duration is charged at start and may overshoot.
    STRICT:    work overlapping any window never exceeds the limit.
    """
    ADMISSION = "admission"
    STRICT = "strict"


class TaskBatch(BaseModel):
    """Tasks plus the rate limit and start time they are scheduled under.

    Accepts the exercise's wire format as well as Python field names:

        {"rateLimitMs": 700, "startTime": 0,
         "tasks": [{"id": "A", "priority": 2, "createdAt": 0, "duration": 400}]}

    Any malformed task or setting raises pydantic.ValidationError here,
    before the scheduler ever runs.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tasks: tuple[Task, ...] = Field(default=(), description="Tasks in submission order")
    rate_limit_ms: int = Field(strict=True, gt=0, alias="rateLimitMs", description="Max execution ms per window")
    start_time: int = Field(default=0, strict=True, ge=0, alias="startTime", description="Scheduler start (ms)")
    window_ms: int = Field(default=DEFAULT_WINDOW_MS, strict=True, gt=0, alias="windowMs", description="Rolling window length (ms)")
    policy: RatePolicy = Field(default=RatePolicy.ADMISSION, description="Window accounting policy")

    @model_validator(mode="after")
    def _unique_ids(self) -> "TaskBatch":
        seen: set[str] = set()
        duplicates: list[str] = []
        for task in self.tasks:
            if task.id in seen:
                duplicates.append(task.id)
            seen.add(task.id)
        if duplicates:
            raise ValueError(f"duplicate task ids: {', '.join(sorted(set(duplicates)))}")
        return self

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "TaskBatch":
        return cls.model_validate_json(text)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "TaskBatch":
        """Load a batch from a JSON file in the exercise's format."""
        return cls.from_json(Path(path).read_text(encoding="utf-8"))

    @property
    def is_empty(self) -> bool:
        return not self.tasks

    def task_map(self) -> dict[str, Task]:
        """Task id → Task."""
        return {t.id: t for t in self.tasks}

    def __repr__(self) -> str:
        return (
            f"TaskBatch(tasks={len(self.tasks)}, rate_limit_ms={self.rate_limit_ms}, "
            f"start_time={self.start_time}, policy={self.policy.value})"
        )
