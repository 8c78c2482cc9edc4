"""
Механизм graceful shutdown для пула воркеров.
"""

import threading
import time
from typing import Callable, List, Optional
from datetime import datetime

from ..models.pool_metrics import PoolStatus
from ..utils.logger import get_logger


logger = get_logger(__name__)


class GracefulShutdown:
    """Жизненный цикл пула: RUNNING -> SHUTTING_DOWN -> STOPPED.

    Переходы выполняются только вперед и ровно один раз; ожидающие
    await_termination() будятся через условие.
    """

    def __init__(self):
        self._condition = threading.Condition()
        self._status = PoolStatus.RUNNING
        self._initiated_at: Optional[datetime] = None
        self._stopped_at: Optional[datetime] = None
        self._on_initiate: List[Callable[[], None]] = []
        self._cleanup_callbacks: List[Callable[[], None]] = []

    @property
    def status(self) -> PoolStatus:
        with self._condition:
            return self._status

    def add_initiate_callback(self, callback: Callable[[], None]):
        """Callback, выполняемый при переходе в SHUTTING_DOWN."""
        self._on_initiate.append(callback)

    def add_cleanup_callback(self, callback: Callable[[], None]):
        """Callback, выполняемый при переходе в STOPPED."""
        self._cleanup_callbacks.append(callback)

    def initiate(self) -> bool:
        """
        Переход в SHUTTING_DOWN. Идемпотентно.

        Returns:
            True если этот вызов начал shutdown
        """
        with self._condition:
            if self._status != PoolStatus.RUNNING:
                return False
            self._status = PoolStatus.SHUTTING_DOWN
            self._initiated_at = datetime.now()
            self._condition.notify_all()

        logger.info("Graceful shutdown initiated")
        self._run_callbacks(self._on_initiate)
        return True

    def mark_stopped(self) -> bool:
        """
        Переход в STOPPED после выхода всех воркеров.

        Допустим только из SHUTTING_DOWN: без initiate() пул не останавливается.

        Returns:
            True если этот вызов перевел пул в STOPPED
        """
        with self._condition:
            if self._status == PoolStatus.RUNNING:
                logger.warning("All workers exited before shutdown was initiated")
                return False
            if self._status == PoolStatus.STOPPED:
                return False
            self._status = PoolStatus.STOPPED
            self._stopped_at = datetime.now()
            self._condition.notify_all()

        self._run_callbacks(self._cleanup_callbacks)
        logger.info(f"Graceful shutdown completed in {self.get_elapsed_time():.2f} seconds")
        return True

    def _run_callbacks(self, callbacks: List[Callable[[], None]]):
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception(f"Error in shutdown callback {callback!r}")

    def wait_for_completion(self, timeout: Optional[float] = None) -> bool:
        """
        Ожидание состояния STOPPED.

        Args:
            timeout: Таймаут ожидания (None - бесконечно)

        Returns:
            True если пул остановлен, False если таймаут
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        with self._condition:
            while self._status != PoolStatus.STOPPED:
                if deadline is None:
                    self._condition.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._condition.wait(min(remaining, threading.TIMEOUT_MAX))
            return True

    def is_shutdown_initiated(self) -> bool:
        return self.status != PoolStatus.RUNNING

    def is_shutdown_completed(self) -> bool:
        return self.status == PoolStatus.STOPPED

    def get_elapsed_time(self) -> float:
        """Время с начала shutdown."""
        if not self._initiated_at:
            return 0.0
        end = self._stopped_at or datetime.now()
        return (end - self._initiated_at).total_seconds()

    def __repr__(self) -> str:
        return f"GracefulShutdown(status={self.status.value}, elapsed={self.get_elapsed_time():.1f}s)"
