"""
Исключения для пула воркеров и канала.
"""


class WorkerPoolError(Exception):
    """Базовое исключение для пула воркеров."""
    pass


class ConfigurationError(WorkerPoolError):
    """Ошибка конфигурации (неверная емкость, количество воркеров и т.д.)."""
    pass


class PoolClosedError(WorkerPoolError):
    """Задача отправлена после начала shutdown."""
    pass


class TaskExecutionError(WorkerPoolError):
    """Ошибка выполнения задачи.

    Исходное исключение доступно через атрибут ``cause`` и ``__cause__``.
    """

    def __init__(self, message: str, cause: BaseException = None, task_id: str = ""):
        super().__init__(message)
        self.cause = cause
        self.task_id = task_id


class TaskTimeoutError(WorkerPoolError):
    """Ожидание результата задачи превысило таймаут.

    Сама задача при этом не отменяется.
    """
    pass


class TaskCancelledError(WorkerPoolError):
    """Задача была отменена до начала выполнения."""
    pass


class InvalidStateError(WorkerPoolError):
    """Попытка повторно завершить уже завершенный ResultHandle."""
    pass


class ChannelClosedError(WorkerPoolError):
    """Канал закрыт."""
    pass


class ChannelTimeoutError(WorkerPoolError):
    """Таймаут операции put/take канала."""
    pass
