"""
Основные компоненты пула воркеров.
"""

from .bounded_channel import BoundedChannel
from .result_handle import ResultHandle, combine
from .worker_pool import WorkerPool
from .graceful_shutdown import GracefulShutdown
from .task_executor import TaskExecutor
from .worker_manager import WorkerManager

__all__ = [
    "BoundedChannel",
    "ResultHandle",
    "combine",
    "WorkerPool",
    "GracefulShutdown",
    "TaskExecutor",
    "WorkerManager"
]
