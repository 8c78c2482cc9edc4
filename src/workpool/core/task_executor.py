"""
Исполнитель задач для пула воркеров.
"""

import time
from datetime import datetime
from typing import Optional

from ..models.task import Task
from ..models.worker import Worker
from ..models.pool_metrics import PoolMetrics
from ..utils.logger import get_logger


logger = get_logger(__name__)


class TaskExecutor:
    """Выполняет задачу и записывает результат в ее ResultHandle.

    Ошибка тела задачи изолирована в ее handle и никогда не выходит
    за пределы execute().
    """

    def __init__(self, metrics: Optional[PoolMetrics] = None):
        self._metrics = metrics or PoolMetrics()

    def execute(self, task: Task, worker: Worker) -> bool:
        """
        Выполнение задачи на воркере.

        Args:
            task: Задача для выполнения
            worker: Воркер, выполняющий задачу

        Returns:
            True если задача выполнялась, False если она была отменена до старта
        """
        handle = task.handle

        if not handle.set_running():
            worker.record_skip()
            self._metrics.record_cancelled()
            logger.debug(f"Task {task.id} ({task.name}) was cancelled, skipping")
            return False

        worker.set_busy()
        task.started_at = datetime.now()
        start_time = time.perf_counter()
        result = None
        error = None

        try:
            logger.debug(f"Executing task {task.id} ({task.name}) on {worker.name}")
            result = task.run()
        except BaseException as e:
            # SystemExit и KeyboardInterrupt тоже остаются в handle задачи
            error = e
        finally:
            execution_time = time.perf_counter() - start_time
            task.completed_at = datetime.now()
            worker.set_idle()

        # Метрики обновляются до записи в handle, чтобы get() видел их актуальными
        worker.record_execution(execution_time, error is None)
        self._metrics.record_completion(execution_time, error is None)

        if error is not None:
            logger.error(f"Task {task.id} ({task.name}) failed on {worker.name} after {execution_time:.3f}s: {error!r}")
            handle.set_exception(error)
        else:
            logger.debug(f"Task {task.id} completed on {worker.name} in {execution_time:.3f}s")
            handle.set_result(result)
        return True