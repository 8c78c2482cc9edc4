"""
Метрики пула воркеров.
"""

import threading
from enum import Enum
from typing import Dict, Optional
from dataclasses import dataclass, field
from datetime import datetime


class PoolStatus(Enum):
    """Статусы пула."""
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


@dataclass
class PoolMetrics:
    """Метрики пула воркеров.

    Счетчики принадлежат конкретному экземпляру пула.
    """

    total_tasks_submitted: int = 0
    total_tasks_completed: int = 0
    total_tasks_failed: int = 0
    total_tasks_cancelled: int = 0
    total_tasks_rejected: int = 0

    total_execution_time: float = 0.0
    max_execution_time: float = 0.0
    min_execution_time: float = float('inf')

    pool_start_time: Optional[datetime] = None
    pool_stop_time: Optional[datetime] = None

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def start_pool(self):
        """Запуск пула."""
        self.pool_start_time = datetime.now()

    def stop_pool(self):
        """Остановка пула."""
        self.pool_stop_time = datetime.now()

    def record_submitted(self):
        with self._lock:
            self.total_tasks_submitted += 1

    def record_rejected(self, undo_submit: bool = False):
        """Отклоненная задача; undo_submit снимает ранее учтенную отправку."""
        with self._lock:
            self.total_tasks_rejected += 1
            if undo_submit:
                self.total_tasks_submitted -= 1

    def record_cancelled(self):
        with self._lock:
            self.total_tasks_cancelled += 1

    def record_completion(self, execution_time: float, success: bool = True):
        """Обновление после завершения задачи."""
        with self._lock:
            if success:
                self.total_tasks_completed += 1
            else:
                self.total_tasks_failed += 1
            self.total_execution_time += execution_time
            self.max_execution_time = max(self.max_execution_time, execution_time)
            self.min_execution_time = min(self.min_execution_time, execution_time)

    def get_uptime(self) -> float:
        """Получение времени работы пула."""
        if not self.pool_start_time:
            return 0.0
        end = self.pool_stop_time or datetime.now()
        return (end - self.pool_start_time).total_seconds()

    def to_dict(self) -> Dict:
        """Преобразование в словарь."""
        with self._lock:
            processed = self.total_tasks_completed + self.total_tasks_failed
            return {
                'total_tasks_submitted': self.total_tasks_submitted,
                'total_tasks_completed': self.total_tasks_completed,
                'total_tasks_failed': self.total_tasks_failed,
                'total_tasks_cancelled': self.total_tasks_cancelled,
                'total_tasks_rejected': self.total_tasks_rejected,
                'total_execution_time': self.total_execution_time,
                'average_execution_time': self.total_execution_time / processed if processed else 0.0,
                'max_execution_time': self.max_execution_time,
                'min_execution_time': self.min_execution_time if self.min_execution_time != float('inf') else 0,
                'success_rate': (self.total_tasks_completed / processed) * 100 if processed else 0.0,
                'error_rate': (self.total_tasks_failed / processed) * 100 if processed else 0.0,
                'uptime': self.get_uptime()
            }
