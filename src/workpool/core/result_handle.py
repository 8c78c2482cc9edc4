"""
Одноразовый контейнер результата задачи (future).
"""

import threading
import time
from typing import Any, Callable, List, Optional

from ..models.task import TaskStatus
from ..utils.logger import get_logger
from ..exceptions import (
    InvalidStateError,
    TaskCancelledError,
    TaskExecutionError,
    TaskTimeoutError
)


logger = get_logger(__name__)


class ResultHandle:
    """Результат задачи, записываемый ровно один раз.

    Пишет воркер, выполнивший задачу; читать может любое количество
    потоков. Все изменения состояния происходят под собственным
    условием handle, поэтому значение видно читателю только после записи.
    """

    def __init__(self, task_id: str = "", name: str = ""):
        self.task_id = task_id
        self.name = name
        self._condition = threading.Condition()
        self._status = TaskStatus.PENDING
        self._result: Any = None
        self._exception: Optional[BaseException] = None
        self._callbacks: List[Callable[['ResultHandle'], Any]] = []

    @property
    def status(self) -> TaskStatus:
        with self._condition:
            return self._status

    def done(self) -> bool:
        """Задача в финальном состоянии."""
        with self._condition:
            return self._status.is_terminal()

    def running(self) -> bool:
        with self._condition:
            return self._status == TaskStatus.RUNNING

    def cancelled(self) -> bool:
        with self._condition:
            return self._status == TaskStatus.CANCELLED

    def failed(self) -> bool:
        with self._condition:
            return self._status == TaskStatus.FAILED

    def get(self, timeout: Optional[float] = None) -> Any:
        """
        Получение результата задачи.

        Args:
            timeout: Таймаут ожидания в секундах (None - ждать бесконечно)

        Returns:
            Значение, вычисленное задачей

        Raises:
            TaskTimeoutError: задача не завершилась за timeout (сама задача продолжает работу)
            TaskExecutionError: задача завершилась с ошибкой (исходная ошибка в ``cause``)
            TaskCancelledError: задача была отменена
        """
        with self._condition:
            self._wait_terminal(timeout)

            if self._status == TaskStatus.CANCELLED:
                raise TaskCancelledError(f"Task {self.task_id} was cancelled")
            if self._status == TaskStatus.FAILED:
                cause = self._exception
                raise TaskExecutionError(
                    f"Task {self.task_id} failed: {cause!r}",
                    cause=cause,
                    task_id=self.task_id
                ) from cause
            return self._result

    def exception(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        """
        Получение исходной ошибки задачи.

        Returns:
            Исключение задачи или None при успешном завершении

        Raises:
            TaskTimeoutError: задача не завершилась за timeout
            TaskCancelledError: задача была отменена
        """
        with self._condition:
            self._wait_terminal(timeout)
            if self._status == TaskStatus.CANCELLED:
                raise TaskCancelledError(f"Task {self.task_id} was cancelled")
            return self._exception

    def _wait_terminal(self, timeout: Optional[float]):
        """Ожидание финального состояния. Вызывается под self._condition."""
        if timeout is None:
            while not self._status.is_terminal():
                self._condition.wait()
            return

        deadline = time.monotonic() + timeout
        while not self._status.is_terminal():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise TaskTimeoutError(f"Task {self.task_id} did not complete within {timeout}s")
            self._condition.wait(min(remaining, threading.TIMEOUT_MAX))

    def cancel(self) -> bool:
        """
        Отмена задачи, которая еще не начала выполняться.

        Returns:
            True если задача отменена (или уже была отменена), False если
            она уже выполняется или завершена
        """
        with self._condition:
            if self._status == TaskStatus.CANCELLED:
                return True
            if self._status != TaskStatus.PENDING:
                return False
            self._status = TaskStatus.CANCELLED
            self._condition.notify_all()

        logger.debug(f"Task {self.task_id} cancelled")
        self._invoke_callbacks()
        return True

    def set_running(self) -> bool:
        """
        Перевод в состояние RUNNING перед выполнением.

        Returns:
            False если задача была отменена и выполнять ее не нужно
        """
        with self._condition:
            if self._status == TaskStatus.CANCELLED:
                return False
            if self._status != TaskStatus.PENDING:
                raise InvalidStateError(f"Task {self.task_id} is already {self._status.value}")
            self._status = TaskStatus.RUNNING
            return True

    def set_result(self, result: Any):
        """Завершение handle значением."""
        self._resolve(TaskStatus.COMPLETED, result=result)

    def set_exception(self, exception: BaseException):
        """Завершение handle ошибкой."""
        self._resolve(TaskStatus.FAILED, exception=exception)

    def _resolve(self, status: TaskStatus, result: Any = None, exception: Optional[BaseException] = None):
        with self._condition:
            if self._status.is_terminal():
                raise InvalidStateError(f"Task {self.task_id} is already {self._status.value}")
            self._status = status
            self._result = result
            self._exception = exception
            self._condition.notify_all()

        self._invoke_callbacks()

    def add_done_callback(self, fn: Callable[['ResultHandle'], Any]):
        """
        Регистрация callback'а на завершение.

        Если handle уже завершен, callback вызывается сразу в текущем
        потоке, иначе - в потоке, завершившем handle.
        """
        with self._condition:
            if not self._status.is_terminal():
                self._callbacks.append(fn)
                return
        self._run_callback(fn)

    def _invoke_callbacks(self):
        with self._condition:
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            self._run_callback(callback)

    def _run_callback(self, callback: Callable[['ResultHandle'], Any]):
        try:
            callback(self)
        except Exception:
            logger.exception(f"Error in done callback {callback!r} of task {self.task_id}")

    def then(self, fn: Callable[[Any], Any]) -> 'ResultHandle':
        """
        Производный handle со значением ``fn(value)``.

        Ошибка и отмена исходного handle передаются в производный.
        """
        derived = ResultHandle(task_id=f"{self.task_id}:then", name=self.name)

        def _on_done(source: 'ResultHandle'):
            _forward(source, derived, fn)

        self.add_done_callback(_on_done)
        return derived

    def recover(self, fn: Callable[[BaseException], Any]) -> 'ResultHandle':
        """
        Производный handle: при ошибке значение ``fn(cause)``, иначе исходное значение.
        """
        derived = ResultHandle(task_id=f"{self.task_id}:recover", name=self.name)

        def _on_done(source: 'ResultHandle'):
            if source.failed():
                _settle(derived, fn, source._exception)
            else:
                _forward(source, derived, lambda value: value)

        self.add_done_callback(_on_done)
        return derived

    def __repr__(self) -> str:
        return f"ResultHandle(task_id={self.task_id!r}, status={self.status.value})"


def _settle(target: ResultHandle, fn: Callable, *args):
    """Завершение target результатом fn(*args) или его ошибкой."""
    if target.done():
        return
    try:
        value = fn(*args)
    except Exception as e:
        target.set_exception(e)
    else:
        target.set_result(value)


def _forward(source: ResultHandle, target: ResultHandle, fn: Callable[[Any], Any]):
    # производный handle мог быть отменен вызывающим
    if target.done():
        return
    if source.cancelled():
        target.cancel()
    elif source.failed():
        target.set_exception(source._exception)
    else:
        _settle(target, fn, source._result)


def combine(first: ResultHandle, second: ResultHandle, fn: Callable[[Any, Any], Any]) -> ResultHandle:
    """
    Объединение двух handle: значение ``fn(first_value, second_value)``.

    Первая обнаруженная ошибка (или отмена) передается в результат.
    """
    derived = ResultHandle(task_id=f"{first.task_id}+{second.task_id}")
    lock = threading.Lock()
    remaining = [2]

    def _on_done(_source: ResultHandle):
        with lock:
            remaining[0] -= 1
            if remaining[0]:
                return
        if derived.done():
            return
        for source in (first, second):
            if source.cancelled():
                derived.cancel()
                return
            if source.failed():
                derived.set_exception(source._exception)
                return
        _settle(derived, fn, first._result, second._result)

    first.add_done_callback(_on_done)
    second.add_done_callback(_on_done)
    return derived
