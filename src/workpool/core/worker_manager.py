"""
Менеджер воркеров для пула.
"""

import threading
import time
from typing import Callable, Dict, List, Optional, Any

from .bounded_channel import BoundedChannel
from .task_executor import TaskExecutor
from ..models.worker import Worker, WorkerStatus
from ..utils.logger import get_logger
from ..exceptions import ChannelClosedError, WorkerPoolError


logger = get_logger(__name__)


class WorkerManager:
    """Фиксированный набор потоков-воркеров, читающих задачи из канала.

    Каждый воркер забирает задачи из общего канала в порядке FIFO;
    глобальный порядок завершения между воркерами не гарантируется.
    Воркер завершается, когда канал закрыт и пуст.
    """

    def __init__(
        self,
        channel: BoundedChannel,
        executor: TaskExecutor,
        num_workers: int,
        thread_name_prefix: str = "workpool-worker",
        daemon: bool = True,
        on_all_stopped: Optional[Callable[[], None]] = None
    ):
        self._channel = channel
        self._executor = executor
        self._num_workers = num_workers
        self._thread_name_prefix = thread_name_prefix
        self._daemon = daemon
        self._on_all_stopped = on_all_stopped

        self._workers: List[Worker] = []
        self._worker_threads: Dict[str, threading.Thread] = {}
        self._lock = threading.Lock()
        self._alive = 0

    def start(self):
        """Запуск всех воркеров.

        Если поток не удалось создать, уже запущенные воркеры
        останавливаются через закрытие канала.
        """
        logger.debug(f"Starting {self._num_workers} workers")

        for index in range(self._num_workers):
            worker = Worker(name=f"{self._thread_name_prefix}-{index + 1}")
            thread = threading.Thread(
                target=self._worker_loop,
                args=(worker,),
                name=worker.name,
                daemon=self._daemon
            )

            with self._lock:
                self._workers.append(worker)
                self._worker_threads[worker.id] = thread
                self._alive += 1

            worker.start()
            try:
                thread.start()
            except RuntimeError as e:
                with self._lock:
                    self._alive -= 1
                worker.stop()
                self._channel.close()
                raise WorkerPoolError(f"Failed to start worker {worker.name}: {e}") from e

        logger.debug(f"WorkerManager started {self._num_workers} workers")

    def _worker_loop(self, worker: Worker):
        """Основной цикл воркера."""
        logger.debug(f"Worker {worker.name} started")

        try:
            while True:
                try:
                    task = self._channel.take()
                except ChannelClosedError:
                    break

                try:
                    self._executor.execute(task, worker)
                except Exception:
                    # Сюда попадают только ошибки самого пула, не задач
                    logger.exception(f"Unexpected error in worker {worker.name}")
        finally:
            worker.stop()
            logger.debug(f"Worker {worker.name} stopped")
            self._on_worker_exit()

    def _on_worker_exit(self):
        with self._lock:
            self._alive -= 1
            last = self._alive == 0

        if last and self._on_all_stopped:
            self._on_all_stopped()

    def join(self, timeout: Optional[float] = None):
        """Ожидание завершения потоков воркеров."""
        deadline = None if timeout is None else time.monotonic() + timeout
        for thread in list(self._worker_threads.values()):
            if not thread.is_alive() or thread is threading.current_thread():
                continue
            if deadline is None:
                thread.join()
                continue
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            thread.join(min(remaining, threading.TIMEOUT_MAX))

    def get_workers(self) -> List[Worker]:
        """Получение списка воркеров."""
        with self._lock:
            return self._workers.copy()

    def alive_count(self) -> int:
        with self._lock:
            return self._alive

    def get_worker_stats(self) -> Dict[str, Any]:
        """Получение статистики воркеров."""
        workers = self.get_workers()
        total_workers = len(workers)
        busy_workers = sum(1 for w in workers if w.status == WorkerStatus.BUSY)
        idle_workers = sum(1 for w in workers if w.status == WorkerStatus.IDLE)
        total_tasks = sum(w.metrics.tasks_completed for w in workers)
        total_failed = sum(w.metrics.tasks_failed for w in workers)

        return {
            'total_workers': total_workers,
            'alive_workers': self.alive_count(),
            'idle_workers': idle_workers,
            'busy_workers': busy_workers,
            'total_tasks_completed': total_tasks,
            'total_tasks_failed': total_failed,
            'worker_utilization': (busy_workers / total_workers * 100) if total_workers > 0 else 0
        }

    def __repr__(self) -> str:
        stats = self.get_worker_stats()
        return f"WorkerManager(workers={stats['total_workers']}, alive={stats['alive_workers']}, busy={stats['busy_workers']})"
