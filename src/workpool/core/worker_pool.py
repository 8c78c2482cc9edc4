"""
Пул воркеров фиксированного размера.
"""

import sys
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

from .bounded_channel import BoundedChannel
from .graceful_shutdown import GracefulShutdown
from .result_handle import ResultHandle
from .task_executor import TaskExecutor
from .worker_manager import WorkerManager

from ..models.task import Task
from ..models.worker import Worker
from ..models.pool_metrics import PoolMetrics, PoolStatus

from ..utils.config import WorkerPoolConfig
from ..utils.logger import get_logger
from ..exceptions import ChannelClosedError, PoolClosedError


logger = get_logger(__name__)


class WorkerPool:
    """Фиксированный набор воркеров, выполняющих отправленные задачи.

    ``submit()`` сразу возвращает ResultHandle в состоянии PENDING.
    Воркеры запускаются в конструкторе. После ``shutdown()`` новые
    задачи отклоняются с PoolClosedError (handle не создается), уже
    поставленные в очередь задачи выполняются до конца.

    Порядок: каждый воркер берет задачи из общей очереди в порядке
    отправки, но глобальный порядок завершения не гарантируется.
    Отмена поддерживается только для задач, которые еще не начали
    выполняться (``ResultHandle.cancel()``); ``get(timeout)`` прекращает
    лишь ожидание, а не саму задачу.
    """

    def __init__(self, num_workers: Optional[int] = None, config: Optional[WorkerPoolConfig] = None):
        self.config = config or WorkerPoolConfig()
        if num_workers is not None:
            self.config = self.config.update(num_workers=num_workers)
        self.config.validate()

        self._pool_metrics = PoolMetrics()

        capacity = self.config.queue_capacity or sys.maxsize
        self._task_channel = BoundedChannel(capacity)

        self._graceful_shutdown = GracefulShutdown()
        self._graceful_shutdown.add_initiate_callback(self._task_channel.close)
        self._graceful_shutdown.add_cleanup_callback(self._pool_metrics.stop_pool)

        self._task_executor = TaskExecutor(self._pool_metrics)
        self._worker_manager = WorkerManager(
            channel=self._task_channel,
            executor=self._task_executor,
            num_workers=self.config.num_workers,
            thread_name_prefix=self.config.thread_name_prefix,
            daemon=self.config.daemon,
            on_all_stopped=self._graceful_shutdown.mark_stopped
        )

        self._worker_manager.start()
        self._pool_metrics.start_pool()

        logger.info(
            f"WorkerPool started with {self.config.num_workers} workers "
            f"(queue capacity: {self.config.queue_capacity or 'unbounded'})"
        )

    def submit(self, func: Callable, *args, name: str = "", **kwargs) -> ResultHandle:
        """
        Отправка задачи в пул.

        Блокирует вызывающего только при заполненной ограниченной очереди.

        Args:
            func: Функция для выполнения
            *args: Аргументы функции
            name: Имя задачи (по умолчанию имя функции)
            **kwargs: Именованные аргументы функции

        Returns:
            ResultHandle в состоянии PENDING

        Raises:
            PoolClosedError: пул уже в процессе shutdown или остановлен
        """
        if self._graceful_shutdown.is_shutdown_initiated():
            self._pool_metrics.record_rejected()
            raise PoolClosedError("Pool is shut down, new tasks are not accepted")

        task = Task(name=name, func=func, args=args, kwargs=kwargs)
        task.handle = ResultHandle(task_id=task.id, name=task.name)

        # Учитывается до put(): воркер может завершить задачу раньше, чем submit() вернется
        self._pool_metrics.record_submitted()
        try:
            self._task_channel.put(task)
        except ChannelClosedError as e:
            self._pool_metrics.record_rejected(undo_submit=True)
            raise PoolClosedError("Pool was shut down while submitting the task") from e

        logger.debug(f"Task {task.id} ({task.name}) submitted to pool")
        return task.handle

    def map(self, func: Callable, iterable: Iterable) -> List[ResultHandle]:
        """Отправка ``func(item)`` для каждого элемента."""
        return [self.submit(func, item) for item in iterable]

    def invoke_all(self, callables: Iterable[Callable[[], Any]], timeout: Optional[float] = None) -> List[Any]:
        """
        Выполнение набора задач и сбор значений в порядке отправки.

        Args:
            callables: Задачи без аргументов
            timeout: Общий таймаут ожидания всех результатов

        Returns:
            Список значений

        Raises:
            TaskExecutionError: первая обнаруженная ошибка задачи
            TaskTimeoutError: результаты не получены за timeout
        """
        handles = [self.submit(c) for c in callables]
        if timeout is None:
            return [h.get() for h in handles]

        deadline = time.monotonic() + timeout
        results = []
        for handle in handles:
            remaining = max(deadline - time.monotonic(), 0)
            results.append(handle.get(timeout=remaining))
        return results

    def shutdown(self, wait: bool = False, timeout: Optional[float] = None) -> bool:
        """
        Начало graceful shutdown. Идемпотентно.

        Новые задачи больше не принимаются, очередь дорабатывается,
        после выхода последнего воркера пул переходит в STOPPED.

        Args:
            wait: Дождаться остановки
            timeout: Таймаут ожидания при wait=True

        Returns:
            True если пул остановлен (всегда False без wait, пока воркеры работают)
        """
        if self._graceful_shutdown.initiate():
            logger.info(f"Shutting down WorkerPool ({len(self._task_channel)} tasks queued)")
        if self._worker_manager.alive_count() == 0:
            self._graceful_shutdown.mark_stopped()

        if wait:
            return self.await_termination(timeout)
        return self.is_terminated()

    def await_termination(self, timeout: Optional[float] = None) -> bool:
        """
        Ожидание остановки пула.

        Args:
            timeout: Таймаут ожидания (None - бесконечно)

        Returns:
            True если пул остановлен, False если таймаут
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        terminated = self._graceful_shutdown.wait_for_completion(timeout)
        if terminated:
            remaining = None if deadline is None else max(deadline - time.monotonic(), 0)
            self._worker_manager.join(remaining)
        return terminated

    @property
    def status(self) -> PoolStatus:
        return self._graceful_shutdown.status

    @property
    def num_workers(self) -> int:
        return self.config.num_workers

    def queue_size(self) -> int:
        """Количество задач, ожидающих в очереди."""
        return len(self._task_channel)

    def is_running(self) -> bool:
        return self.status == PoolStatus.RUNNING

    def is_shutting_down(self) -> bool:
        return self.status == PoolStatus.SHUTTING_DOWN

    def is_terminated(self) -> bool:
        return self.status == PoolStatus.STOPPED

    def get_workers(self) -> List[Worker]:
        return self._worker_manager.get_workers()

    def get_metrics(self) -> Dict[str, Any]:
        """Получение метрик пула."""
        metrics = self._pool_metrics.to_dict()
        metrics.update({
            'status': self.status.value,
            'current_queue_size': self.queue_size(),
            'channel_metrics': self._task_channel.get_metrics(),
            'worker_metrics': self._worker_manager.get_worker_stats()
        })
        return metrics

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown(wait=True)

    def __repr__(self) -> str:
        return (f"WorkerPool(status={self.status.value}, "
                f"workers={self.num_workers}, "
                f"queue_size={self.queue_size()})")
