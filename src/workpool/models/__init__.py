"""
Модели данных для пула воркеров.
"""

from .task import Task, TaskStatus
from .worker import Worker, WorkerStatus, WorkerMetrics
from .pool_metrics import PoolMetrics, PoolStatus

__all__ = [
    "Task",
    "TaskStatus",
    "Worker",
    "WorkerStatus",
    "WorkerMetrics",
    "PoolMetrics",
    "PoolStatus"
]
