"""
Базовый пример: производитель и потребитель через ограниченный канал.
"""

import random
import threading
import time

from workpool import BoundedChannel, ChannelClosedError, setup_logging


def producer(channel: BoundedChannel, count: int):
    """Производитель: кладет числа 1..count."""
    for i in range(1, count + 1):
        if channel.is_full():
            print(f"   Буфер заполнен, производитель ждет (значение {i})")
        channel.put(i)
        print(f"   Произведено: {i} (в буфере {len(channel)})")
        time.sleep(random.uniform(0.05, 0.2))
    channel.close()


def consumer(channel: BoundedChannel, received: list):
    """Потребитель работает медленнее производителя."""
    while True:
        try:
            item = channel.take()
        except ChannelClosedError:
            return
        received.append(item)
        print(f"   Потреблено: {item}")
        time.sleep(random.uniform(0.1, 0.3))


def main():
    """Основная функция с примером producer-consumer."""
    setup_logging(level="WARNING")
    print("=== Producer-Consumer через BoundedChannel ===\n")

    channel = BoundedChannel(3)
    received = []

    producer_thread = threading.Thread(target=producer, args=(channel, 10), name="producer")
    consumer_thread = threading.Thread(target=consumer, args=(channel, received), name="consumer")

    producer_thread.start()
    consumer_thread.start()
    producer_thread.join()
    consumer_thread.join()

    print(f"\nПолучено в порядке отправки: {received}")

    metrics = channel.get_metrics()
    print(f"Заблокированных put: {metrics['blocked_puts']}")
    print(f"Максимальное заполнение: {metrics['max_size_reached']} из {channel.capacity}")


if __name__ == "__main__":
    main()
