from .result import TaskResponseStatus, TaskResult
from .handler import ResultsHandler
from .store import ResultStore

__all__ = [
    "TaskResponseStatus",
    "TaskResult",
    "ResultsHandler",
    "ResultStore",
]
