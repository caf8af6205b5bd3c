"""Event types recorded while the scheduler walks the timeline."""

from enum import Enum
from dataclasses import dataclass, field
from typing import Optional


class EventType(str, Enum):
    """Decisions the timeline scheduler makes."""
    TASK_ARRIVAL = "task_arrival"      # task passed the arrival gate
    FAST_FORWARD = "fast_forward"      # nothing ready; clock jumps to next arrival
    RATE_DELAY = "rate_delay"          # best task must wait for window capacity
    TASK_COMMIT = "task_commit"        # execution record emitted


@dataclass
class Event:
    """One entry of the scheduler's decision log, in the order it was made."""
    time: int
    sequence: int
    event_type: EventType
    task_id: Optional[str] = None
    metadata: dict = field(default_factory=dict)

    def __repr__(self) -> str:
        parts = [f"Event(t={self.time}, type={self.event_type.value}"]
        if self.task_id:
            parts.append(f", task={self.task_id}")
        if self.metadata:
            parts.append(f", {self.metadata}")
        parts.append(")")
        return "".join(parts)
