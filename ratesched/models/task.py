"""Task model — the unit of work the scheduler places on the timeline."""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Task(BaseModel):
    """A non-preemptible job: runs once, for exactly `duration` ms."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1, description="Unique task identifier within a batch")
    priority: int = Field(strict=True, description="Scheduling priority (higher = more important)")
    created_at: int = Field(strict=True, ge=0, alias="createdAt", description="Arrival time in ms")
    duration: int = Field(strict=True, gt=0, description="Execution time in ms")
    deadline: Optional[int] = Field(default=None, strict=True, ge=0, description="Soft deadline, reported only")

    def __repr__(self) -> str:
        return (
            f"Task(id={self.id!r}, priority={self.priority}, "
            f"created_at={self.created_at}, duration={self.duration})"
        )


@dataclass(frozen=True)
class ExecutionRecord:
    """Immutable outcome for one task: when it ran on the timeline."""
    id: str
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start

    def to_dict(self) -> dict:
        return {"id": self.id, "start": self.start, "end": self.end}
