"""
Продвинутые примеры использования пула воркеров.
"""

import random
import threading
import time
from typing import List

from workpool import (
    WorkerPool,
    TaskExecutionError,
    TaskTimeoutError,
    combine,
    load_config_from_env,
    setup_logging
)
from workpool.utils.monitoring import HealthChecker


def find_primes(start: int, end: int) -> List[int]:
    """Поиск простых чисел в диапазоне."""
    primes = []
    for n in range(max(start, 2), end + 1):
        if all(n % d for d in range(2, int(n ** 0.5) + 1)):
            primes.append(n)
    return primes


def slow_task(seconds: float) -> str:
    time.sleep(seconds)
    return "Slow task completed"


def unreliable_task() -> str:
    if random.random() < 0.5:
        raise RuntimeError("Random failure!")
    return "Success!"


def main():
    """Основная функция с продвинутыми примерами."""
    config = load_config_from_env()
    setup_logging(level=config.log_level)

    print("=== Продвинутые примеры WorkerPool ===\n")

    with WorkerPool(config=config) as pool:
        # 1. Сбор результатов нескольких задач
        print("1. Простые числа в диапазонах:")
        ranges = [(1, 100), (101, 200), (201, 300), (301, 400)]
        handles = [pool.submit(find_primes, start, end) for start, end in ranges]
        all_primes = [p for handle in handles for p in handle.get()]
        print(f"   Найдено простых: {len(all_primes)}, первые 10: {all_primes[:10]}")

        # 2. Таймаут ожидания не отменяет задачу
        print("\n2. Таймаут ожидания:")
        slow = pool.submit(slow_task, 1.0)
        try:
            slow.get(timeout=0.2)
        except TaskTimeoutError as e:
            print(f"   {e}")
        print(f"   Позже: {slow.get()}")

        # 3. Композиция результатов
        print("\n3. Композиция:")
        hello = pool.submit(lambda: (time.sleep(0.2), "Hello")[1])
        world = pool.submit(lambda: (time.sleep(0.3), "World")[1])
        print(f"   Результат: {combine(hello, world, lambda a, b: f'{a} {b}!').get()}")

        chained = pool.submit(random.randint, 0, 99).then(lambda n: n * 2).then(lambda n: n + 10)
        print(f"   Цепочка: {chained.get()}")

        recovered = pool.submit(unreliable_task).recover(lambda e: f"Error handled: {e}")
        print(f"   Обработка ошибки: {recovered.get()}")

        # 4. Изоляция ошибок
        print("\n4. Изоляция ошибок:")
        results = [pool.submit(unreliable_task) for _ in range(6)]
        for i, handle in enumerate(results):
            try:
                print(f"   Задача {i}: {handle.get()}")
            except TaskExecutionError as e:
                print(f"   Задача {i}: ошибка {e.cause!r}")

        # 5. Конкурентная отправка
        print("\n5. Отправка из нескольких потоков:")
        collected = []
        lock = threading.Lock()

        def submitter(offset: int):
            for i in range(5):
                handle = pool.submit(lambda v=offset + i: v * v)
                with lock:
                    collected.append(handle)

        threads = [threading.Thread(target=submitter, args=(k * 5,)) for k in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        print(f"   Сумма квадратов: {sum(h.get() for h in collected)}")

        health = HealthChecker(pool).check()
        print(f"\nЗдоровье пула: {'OK' if health.is_healthy else health.issues}")

        metrics = pool.get_metrics()
        print(f"Задач отправлено: {metrics['total_tasks_submitted']}")
        print(f"Завершено: {metrics['total_tasks_completed']}, с ошибками: {metrics['total_tasks_failed']}")
        print(f"Среднее время выполнения: {metrics['average_execution_time']:.3f}s")

    print("\nПул воркеров остановлен")


if __name__ == "__main__":
    main()
