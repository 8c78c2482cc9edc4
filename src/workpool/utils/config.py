"""
Система конфигурации для пула воркеров.
"""

import json
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..exceptions import ConfigurationError


@dataclass
class WorkerPoolConfig:
    """Конфигурация пула воркеров."""

    num_workers: int = 4
    # None - практически неограниченная очередь задач
    queue_capacity: Optional[int] = None
    thread_name_prefix: str = "workpool-worker"
    daemon: bool = True
    log_level: str = "INFO"

    def validate(self) -> bool:
        """Валидация конфигурации."""
        errors = []

        if isinstance(self.num_workers, bool) or not isinstance(self.num_workers, int) or self.num_workers < 1:
            errors.append(f"num_workers must be an integer >= 1, got {self.num_workers!r}")

        if self.queue_capacity is not None and (
            isinstance(self.queue_capacity, bool)
            or not isinstance(self.queue_capacity, int)
            or self.queue_capacity < 1
        ):
            errors.append(f"queue_capacity must be None or an integer >= 1, got {self.queue_capacity!r}")

        if not self.thread_name_prefix:
            errors.append("thread_name_prefix must not be empty")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование в словарь."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WorkerPoolConfig':
        """Создание из словаря. Неизвестные ключи - ошибка конфигурации."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        return cls(**data)

    def update(self, **kwargs) -> 'WorkerPoolConfig':
        """Новая конфигурация с переопределенными значениями."""
        data = self.to_dict()
        data.update(kwargs)
        return WorkerPoolConfig.from_dict(data)


def load_config(file_path: Union[str, Path]) -> WorkerPoolConfig:
    """
    Загрузка конфигурации из файла.

    Args:
        file_path: Путь к файлу конфигурации (.yaml, .yml или .json)

    Returns:
        Объект конфигурации
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with open(file_path, 'r', encoding='utf-8') as f:
        if file_path.suffix.lower() in ['.yaml', '.yml']:
            data = yaml.safe_load(f)
        elif file_path.suffix.lower() == '.json':
            data = json.load(f)
        else:
            raise ConfigurationError(f"Unsupported configuration file format: {file_path.suffix}")

    config = WorkerPoolConfig.from_dict(data or {})
    config.validate()

    return config


def save_config(config: WorkerPoolConfig, file_path: Union[str, Path], format: str = 'yaml'):
    """
    Сохранение конфигурации в файл.

    Args:
        config: Объект конфигурации
        file_path: Путь к файлу
        format: Формат файла ('yaml' или 'json')
    """
    file_path = Path(file_path)
    data = config.to_dict()

    file_path.parent.mkdir(parents=True, exist_ok=True)

    with open(file_path, 'w', encoding='utf-8') as f:
        if format.lower() == 'yaml':
            yaml.safe_dump(data, f, default_flow_style=False, indent=2)
        elif format.lower() == 'json':
            json.dump(data, f, indent=2, ensure_ascii=False)
        else:
            raise ConfigurationError(f"Unsupported format: {format}")


def load_config_from_env() -> WorkerPoolConfig:
    """
    Загрузка конфигурации из переменных окружения.

    Поддерживаются WORKPOOL_NUM_WORKERS, WORKPOOL_QUEUE_CAPACITY,
    WORKPOOL_THREAD_NAME_PREFIX и WORKPOOL_LOG_LEVEL.
    """
    config_data = {}

    try:
        if os.getenv('WORKPOOL_NUM_WORKERS'):
            config_data['num_workers'] = int(os.getenv('WORKPOOL_NUM_WORKERS'))

        if os.getenv('WORKPOOL_QUEUE_CAPACITY'):
            config_data['queue_capacity'] = int(os.getenv('WORKPOOL_QUEUE_CAPACITY'))
    except ValueError as e:
        raise ConfigurationError(f"Invalid integer in environment: {e}") from e

    if os.getenv('WORKPOOL_THREAD_NAME_PREFIX'):
        config_data['thread_name_prefix'] = os.getenv('WORKPOOL_THREAD_NAME_PREFIX')

    if os.getenv('WORKPOOL_LOG_LEVEL'):
        config_data['log_level'] = os.getenv('WORKPOOL_LOG_LEVEL')

    config = WorkerPoolConfig.from_dict(config_data)
    config.validate()
    return config
