"""
Ограниченный канал и пул воркеров фиксированного размера.

Основные компоненты:
- BoundedChannel: очередь фиксированной емкости с блокирующими put/take
- WorkerPool: фиксированный набор воркеров, выполняющих отправленные задачи
- ResultHandle: одноразовый контейнер результата задачи
"""

from .core.bounded_channel import BoundedChannel
from .core.result_handle import ResultHandle, combine
from .core.worker_pool import WorkerPool
from .models.task import Task, TaskStatus
from .models.worker import Worker, WorkerStatus
from .models.pool_metrics import PoolMetrics, PoolStatus
from .utils.config import WorkerPoolConfig, load_config, load_config_from_env
from .utils.logger import get_logger, setup_logging
from .exceptions import (
    WorkerPoolError,
    ConfigurationError,
    PoolClosedError,
    TaskExecutionError,
    TaskTimeoutError,
    TaskCancelledError,
    InvalidStateError,
    ChannelClosedError,
    ChannelTimeoutError
)

__version__ = "1.0.0"

__all__ = [
    "BoundedChannel",
    "ResultHandle",
    "combine",
    "WorkerPool",
    "Task",
    "TaskStatus",
    "Worker",
    "WorkerStatus",
    "PoolMetrics",
    "PoolStatus",
    "WorkerPoolConfig",
    "load_config",
    "load_config_from_env",
    "get_logger",
    "setup_logging",
    "WorkerPoolError",
    "ConfigurationError",
    "PoolClosedError",
    "TaskExecutionError",
    "TaskTimeoutError",
    "TaskCancelledError",
    "InvalidStateError",
    "ChannelClosedError",
    "ChannelTimeoutError"
]
