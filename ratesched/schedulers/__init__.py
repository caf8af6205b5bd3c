from ratesched.models.batch import RatePolicy
from ratesched.schedulers.base import BaseWindowTracker
from ratesched.schedulers.admission import AdmissionWindowTracker
from ratesched.schedulers.rolling import RollingWindowTracker
from ratesched.schedulers.selector import ArrivalGate, PrioritySelector, select_next


def get_tracker(policy: RatePolicy, rate_limit_ms: int, window_ms: int = 1000) -> BaseWindowTracker:
    """Factory: build the window tracker for a rate policy."""
    trackers = {
        RatePolicy.ADMISSION: AdmissionWindowTracker,
        RatePolicy.STRICT: RollingWindowTracker,
    }
    policy = RatePolicy(policy)
    return trackers[policy](rate_limit_ms, window_ms)


__all__ = [
    "BaseWindowTracker", "AdmissionWindowTracker", "RollingWindowTracker",
    "ArrivalGate", "PrioritySelector", "select_next", "get_tracker",
]
