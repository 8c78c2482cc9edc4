"""
Модели задач для пула воркеров.
"""

import uuid
from enum import Enum
from typing import Any, Callable, Optional, Dict
from dataclasses import dataclass, field
from datetime import datetime


class TaskStatus(Enum):
    """Статусы задач (и их ResultHandle)."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    def is_terminal(self) -> bool:
        """Проверка финального состояния."""
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.CANCELLED)


@dataclass
class Task:
    """Представление задачи.

    После отправки в пул задача принадлежит пулу и связана 1:1
    со своим ResultHandle.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    func: Callable = None
    args: tuple = field(default_factory=tuple)
    kwargs: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    handle: Optional[Any] = None

    def __post_init__(self):
        """Валидация после инициализации."""
        if self.func is None:
            raise ValueError("Task function is required")
        if not callable(self.func):
            raise ValueError("Task function must be callable")
        if not self.name:
            self.name = getattr(self.func, "__name__", "task")

    def run(self) -> Any:
        """Вызов тела задачи."""
        return self.func(*self.args, **self.kwargs)
