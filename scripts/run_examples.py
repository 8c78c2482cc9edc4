#!/usr/bin/env python3
"""
Скрипт для запуска примеров workpool.
"""

import os
import sys
import argparse
from pathlib import Path


def main():
    """Основная функция скрипта."""
    parser = argparse.ArgumentParser(description="Запуск примеров workpool")
    parser.add_argument(
        "example",
        choices=["channel", "pool"],
        help="channel - producer-consumer, pool - пул воркеров"
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Количество воркеров для примера pool"
    )
    parser.add_argument(
        "--queue-capacity",
        type=int,
        help="Емкость очереди задач для примера pool"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Уровень логирования"
    )

    args = parser.parse_args()

    # Пример pool читает конфигурацию из окружения
    if args.workers is not None:
        os.environ["WORKPOOL_NUM_WORKERS"] = str(args.workers)
    if args.queue_capacity is not None:
        os.environ["WORKPOOL_QUEUE_CAPACITY"] = str(args.queue_capacity)
    if args.log_level:
        os.environ["WORKPOOL_LOG_LEVEL"] = args.log_level

    project_root = Path(__file__).parent.parent
    sys.path.insert(0, str(project_root))

    try:
        if args.example == "channel":
            import examples.basic_usage
            examples.basic_usage.main()
        else:
            import examples.advanced_usage
            examples.advanced_usage.main()

        print("Пример завершен успешно!")

    except KeyboardInterrupt:
        print("\nПрервано пользователем")
        sys.exit(1)
    except Exception as e:
        print(f"Ошибка при выполнении примера: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
