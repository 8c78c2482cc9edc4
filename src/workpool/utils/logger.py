"""
Система логирования для пула воркеров.
"""

import logging
import sys
import threading
from typing import Optional, Dict
from pathlib import Path


class WorkerPoolFormatter(logging.Formatter):
    """Форматтер логов с именем потока."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)-28s | %(threadName)-20s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def format(self, record):
        if not getattr(record, 'threadName', None):
            record.threadName = threading.current_thread().name

        return super().format(record)


class MetricsHandler(logging.Handler):
    """Обработчик логов для подсчета записей по уровням."""

    def __init__(self):
        super().__init__()
        self._lock_metrics = threading.Lock()
        self._metrics = self._empty_metrics()

    @staticmethod
    def _empty_metrics() -> Dict[str, int]:
        return {
            'total_logs': 0,
            'error_count': 0,
            'warning_count': 0,
            'info_count': 0,
            'debug_count': 0
        }

    def emit(self, record):
        with self._lock_metrics:
            self._metrics['total_logs'] += 1

            if record.levelno >= logging.ERROR:
                self._metrics['error_count'] += 1
            elif record.levelno >= logging.WARNING:
                self._metrics['warning_count'] += 1
            elif record.levelno >= logging.INFO:
                self._metrics['info_count'] += 1
            else:
                self._metrics['debug_count'] += 1

    def get_metrics(self) -> Dict[str, int]:
        """Получение метрик логов."""
        with self._lock_metrics:
            return self._metrics.copy()

    def reset_metrics(self):
        """Сброс метрик."""
        with self._lock_metrics:
            self._metrics = self._empty_metrics()


_metrics_handler = MetricsHandler()

# Корневой логгер библиотеки
PACKAGE_LOGGER = "workpool"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    enable_console: bool = True,
    enable_metrics: bool = True,
    log_format: Optional[str] = None
) -> logging.Logger:
    """
    Настройка логирования библиотеки.

    Args:
        level: Уровень логирования
        log_file: Путь к файлу логов
        enable_console: Включить вывод в консоль
        enable_metrics: Включить подсчет записей по уровням
        log_format: Кастомный формат логов

    Returns:
        Логгер пакета ``workpool``
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(numeric_level)
    package_logger.handlers.clear()

    if log_format:
        formatter = logging.Formatter(log_format)
    else:
        formatter = WorkerPoolFormatter()

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        package_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    if enable_metrics:
        _metrics_handler.setLevel(logging.DEBUG)
        package_logger.addHandler(_metrics_handler)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """
    Получение логгера для модуля.

    Args:
        name: Имя модуля

    Returns:
        Объект логгера
    """
    return logging.getLogger(name)


def get_log_metrics() -> Dict[str, int]:
    """Получение метрик логов."""
    return _metrics_handler.get_metrics()


def reset_log_metrics():
    """Сброс метрик логов."""
    _metrics_handler.reset_metrics()
