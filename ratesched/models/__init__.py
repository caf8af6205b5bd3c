from ratesched.models.task import Task, ExecutionRecord
from ratesched.models.batch import TaskBatch, RatePolicy, DEFAULT_WINDOW_MS

__all__ = ["Task", "ExecutionRecord", "TaskBatch", "RatePolicy", "DEFAULT_WINDOW_MS"]
