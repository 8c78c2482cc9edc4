"""
Ограниченный канал для передачи значений между производителями и потребителями.
"""

import threading
import time
from collections import deque
from typing import Any, Dict, Optional

from ..utils.logger import get_logger
from ..exceptions import ChannelClosedError, ChannelTimeoutError, ConfigurationError


logger = get_logger(__name__)


class BoundedChannel:
    """Очередь фиксированной емкости с блокирующими put/take.

    Классический монитор: один lock и два условия (``not_full``,
    ``not_empty``). Условие всегда перепроверяется в цикле после
    пробуждения. Порядок значений FIFO; справедливость между
    ожидающими потоками не гарантируется.
    """

    def __init__(self, capacity: int):
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ConfigurationError(f"Channel capacity must be an integer >= 1, got {capacity!r}")

        self._capacity = capacity
        self._buffer: deque = deque()
        self._lock = threading.Lock()
        self._not_full = threading.Condition(self._lock)
        self._not_empty = threading.Condition(self._lock)
        self._closed = False

        # Метрики
        self._metrics = {
            'puts': 0,
            'takes': 0,
            'blocked_puts': 0,
            'blocked_takes': 0,
            'max_size_reached': 0
        }

        logger.debug(f"BoundedChannel initialized with capacity {capacity}")

    @property
    def capacity(self) -> int:
        return self._capacity

    def put(self, item: Any, timeout: Optional[float] = None):
        """
        Добавление значения в канал.

        Блокирует поток, пока буфер заполнен. Если метод вернул
        управление, значение гарантированно находится в канале.

        Args:
            item: Значение
            timeout: Максимальное время ожидания в секундах (None - бесконечно)

        Raises:
            ChannelClosedError: канал закрыт
            ChannelTimeoutError: место не освободилось за timeout
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        with self._not_full:
            if self._closed:
                raise ChannelClosedError("Cannot put into a closed channel")

            if len(self._buffer) >= self._capacity:
                self._metrics['blocked_puts'] += 1

            while len(self._buffer) >= self._capacity:
                if not self._wait(self._not_full, deadline):
                    raise ChannelTimeoutError(f"put() timed out after {timeout}s")
                if self._closed:
                    raise ChannelClosedError("Channel closed while waiting to put")

            self._buffer.append(item)
            self._metrics['puts'] += 1
            self._metrics['max_size_reached'] = max(self._metrics['max_size_reached'], len(self._buffer))
            self._not_empty.notify()

    def take(self, timeout: Optional[float] = None) -> Any:
        """
        Извлечение самого старого значения из канала.

        После close() оставшиеся значения продолжают выдаваться;
        ChannelClosedError возникает только когда буфер пуст.

        Args:
            timeout: Максимальное время ожидания в секундах (None - бесконечно)

        Returns:
            Значение из начала очереди

        Raises:
            ChannelClosedError: канал закрыт и пуст
            ChannelTimeoutError: значение не появилось за timeout
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        with self._not_empty:
            if not self._buffer and not self._closed:
                self._metrics['blocked_takes'] += 1

            while not self._buffer:
                if self._closed:
                    raise ChannelClosedError("Channel is closed and drained")
                if not self._wait(self._not_empty, deadline):
                    raise ChannelTimeoutError(f"take() timed out after {timeout}s")

            item = self._buffer.popleft()
            self._metrics['takes'] += 1
            self._not_full.notify()
            return item

    @staticmethod
    def _wait(condition: threading.Condition, deadline: Optional[float]) -> bool:
        """Ожидание условия до дедлайна. False - дедлайн истек."""
        if deadline is None:
            condition.wait()
            return True
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        condition.wait(min(remaining, threading.TIMEOUT_MAX))
        return True

    def close(self):
        """Закрытие канала. Идемпотентно."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            # Будим всех: производители получат ошибку, потребители дочитают буфер
            self._not_full.notify_all()
            self._not_empty.notify_all()

        logger.debug("BoundedChannel closed")

    def is_closed(self) -> bool:
        with self._lock:
            return self._closed

    def is_empty(self) -> bool:
        with self._lock:
            return not self._buffer

    def is_full(self) -> bool:
        with self._lock:
            return len(self._buffer) >= self._capacity

    def get_metrics(self) -> Dict[str, Any]:
        """Получение метрик канала."""
        with self._lock:
            metrics = self._metrics.copy()
            metrics['current_size'] = len(self._buffer)
            metrics['capacity'] = self._capacity
            metrics['closed'] = self._closed
            return metrics

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)

    def __repr__(self) -> str:
        return f"BoundedChannel(size={len(self)}, capacity={self._capacity}, closed={self.is_closed()})"
