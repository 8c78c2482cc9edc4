"""
Модели воркеров для пула.
"""

import uuid
from enum import Enum
from typing import Optional
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock


class WorkerStatus(Enum):
    """Статусы воркеров."""
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class WorkerMetrics:
    """Метрики воркера."""

    tasks_completed: int = 0
    tasks_failed: int = 0
    tasks_skipped: int = 0
    total_execution_time: float = 0.0
    last_task_at: Optional[datetime] = None

    @property
    def tasks_processed(self) -> int:
        return self.tasks_completed + self.tasks_failed

    @property
    def average_execution_time(self) -> float:
        if self.tasks_processed == 0:
            return 0.0
        return self.total_execution_time / self.tasks_processed


@dataclass
class Worker:
    """Представление воркера."""

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    status: WorkerStatus = WorkerStatus.IDLE
    started_at: Optional[datetime] = None
    stopped_at: Optional[datetime] = None
    metrics: WorkerMetrics = field(default_factory=WorkerMetrics)
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def start(self):
        """Запуск воркера."""
        with self._lock:
            self.status = WorkerStatus.IDLE
            self.started_at = datetime.now()

    def stop(self):
        """Остановка воркера."""
        with self._lock:
            self.status = WorkerStatus.STOPPED
            self.stopped_at = datetime.now()

    def set_busy(self):
        with self._lock:
            if self.status == WorkerStatus.IDLE:
                self.status = WorkerStatus.BUSY

    def set_idle(self):
        with self._lock:
            if self.status == WorkerStatus.BUSY:
                self.status = WorkerStatus.IDLE

    def record_execution(self, execution_time: float, success: bool = True):
        """Обновление метрик после выполнения задачи."""
        with self._lock:
            if success:
                self.metrics.tasks_completed += 1
            else:
                self.metrics.tasks_failed += 1
            self.metrics.total_execution_time += execution_time
            self.metrics.last_task_at = datetime.now()

    def record_skip(self):
        """Задача была отменена до начала выполнения."""
        with self._lock:
            self.metrics.tasks_skipped += 1

    def is_alive(self) -> bool:
        return self.status != WorkerStatus.STOPPED
