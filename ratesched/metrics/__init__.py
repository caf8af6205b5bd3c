from ratesched.metrics.checks import check_timeline, peak_window_usage, window_usage
from ratesched.metrics.collector import MetricsCollector, TimelineReport

__all__ = [
    "check_timeline", "peak_window_usage", "window_usage",
    "MetricsCollector", "TimelineReport",
]
