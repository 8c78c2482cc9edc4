"""
Мониторинг пула воркеров и процесса.
"""

import os
from typing import List
from dataclasses import dataclass, field
from datetime import datetime

import psutil

from ..models.pool_metrics import PoolStatus
from ..utils.logger import get_logger


logger = get_logger(__name__)


@dataclass
class SystemMetrics:
    """Метрики системы и текущего процесса."""
    cpu_percent: float = 0.0
    memory_percent: float = 0.0
    process_rss_mb: float = 0.0
    process_threads: int = 0
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class HealthStatus:
    """Статус здоровья пула."""
    is_healthy: bool = True
    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)


def collect_system_metrics() -> SystemMetrics:
    """Сбор системных метрик через psutil."""
    try:
        process = psutil.Process(os.getpid())
        return SystemMetrics(
            cpu_percent=psutil.cpu_percent(interval=0.1),
            memory_percent=psutil.virtual_memory().percent,
            process_rss_mb=process.memory_info().rss / (1024 * 1024),
            process_threads=process.num_threads()
        )
    except psutil.Error as e:
        logger.error(f"Error collecting system metrics: {e}")
        return SystemMetrics()


class HealthChecker:
    """Проверка здоровья пула воркеров."""

    def __init__(self, pool, max_queue_size: int = 1000, max_cpu_percent: float = 90.0):
        self.pool = pool
        self.max_queue_size = max_queue_size
        self.max_cpu_percent = max_cpu_percent

    def check(self) -> HealthStatus:
        """Выполнение проверок."""
        issues = []
        warnings = []

        status = self.pool.status
        if status == PoolStatus.STOPPED:
            issues.append("Pool is stopped")
        elif status == PoolStatus.SHUTTING_DOWN:
            warnings.append("Pool is shutting down")

        queue_size = self.pool.queue_size()
        if queue_size > self.max_queue_size:
            issues.append(f"Task queue backlog: {queue_size} > {self.max_queue_size}")
        elif queue_size > self.max_queue_size * 0.8:
            warnings.append(f"Task queue is filling up: {queue_size}")

        system_metrics = collect_system_metrics()
        if system_metrics.cpu_percent > self.max_cpu_percent:
            warnings.append(f"High CPU usage: {system_metrics.cpu_percent:.1f}%")

        health = HealthStatus(is_healthy=not issues, issues=issues, warnings=warnings)
        if issues:
            logger.warning(f"Pool health check failed: {issues}")
        return health

    def is_healthy(self) -> bool:
        """Быстрая проверка здоровья."""
        return self.check().is_healthy
