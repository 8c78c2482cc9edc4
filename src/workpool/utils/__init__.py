"""
Утилиты для пула воркеров.
"""

from .config import WorkerPoolConfig, load_config, save_config, load_config_from_env
from .logger import get_logger, setup_logging, get_log_metrics, reset_log_metrics
from .monitoring import HealthChecker, HealthStatus, SystemMetrics, collect_system_metrics

__all__ = [
    "WorkerPoolConfig",
    "load_config",
    "save_config",
    "load_config_from_env",
    "get_logger",
    "setup_logging",
    "get_log_metrics",
    "reset_log_metrics",
    "HealthChecker",
    "HealthStatus",
    "SystemMetrics",
    "collect_system_metrics"
]
