from ratesched.simulator.events import Event, EventType
from ratesched.simulator.engine import (
    TimelineScheduler, build_batch, iter_schedule, schedule, schedule_batch,
)
from ratesched.simulator.generator import ScenarioGenerator

__all__ = [
    "Event", "EventType", "TimelineScheduler", "ScenarioGenerator",
    "build_batch", "iter_schedule", "schedule", "schedule_batch",
]
