"""
Тесты для основного класса WorkerPool.
"""

import sys
import threading
import time

import pytest

from workpool import WorkerPool, WorkerPoolConfig, PoolStatus, TaskStatus
from workpool.models.worker import WorkerStatus
from workpool.exceptions import (
    ConfigurationError,
    PoolClosedError,
    TaskCancelledError,
    TaskExecutionError,
    TaskTimeoutError
)


@pytest.fixture
def pool():
    """Пул из двух воркеров, гарантированно останавливаемый после теста."""
    pool = WorkerPool(2)
    yield pool
    pool.shutdown(wait=True, timeout=10.0)


class TestWorkerPool:
    """Тесты для класса WorkerPool."""

    def test_initialization(self, pool):
        """Тест инициализации пула воркеров."""
        assert pool.status == PoolStatus.RUNNING
        assert pool.is_running()
        assert pool.num_workers == 2
        assert len(pool.get_workers()) == 2
        assert pool.queue_size() == 0

    @pytest.mark.parametrize("num_workers", [0, -1])
    def test_invalid_worker_count(self, num_workers, mocker):
        """Неверное количество воркеров - ошибка до старта потоков."""
        thread_start = mocker.spy(threading.Thread, "start")
        with pytest.raises(ConfigurationError):
            WorkerPool(num_workers)
        assert thread_start.call_count == 0

    def test_invalid_queue_capacity(self):
        with pytest.raises(ConfigurationError):
            WorkerPool(config=WorkerPoolConfig(queue_capacity=0))

    def test_submit_returns_pending_handle(self, pool):
        """submit() сразу возвращает handle."""
        release = threading.Event()
        handle = pool.submit(release.wait, 5.0)

        assert not handle.done()
        assert handle.task_id

        release.set()
        assert handle.get(timeout=5.0) is True

    def test_squares_on_two_workers(self, pool):
        """Квадраты 1..4 на двух воркерах дают {1, 4, 9, 16}."""
        handles = [pool.submit(lambda n=n: n * n) for n in range(1, 5)]
        assert sorted(h.get(timeout=5.0) for h in handles) == [1, 4, 9, 16]

    def test_many_tasks_resolve_once(self):
        """K задач на N воркерах: каждая завершается ровно один раз."""
        calls = []
        calls_lock = threading.Lock()

        def task(n):
            with calls_lock:
                calls.append(n)
            return n

        with WorkerPool(4) as pool:
            handles = pool.map(task, range(500))
            total = sum(h.get(timeout=10.0) for h in handles)

        assert total == sum(range(500))
        assert sorted(calls) == list(range(500))
        assert all(h.status == TaskStatus.COMPLETED for h in handles)

    def test_args_and_kwargs(self, pool):
        def power(base, exponent=2):
            return base ** exponent

        handle = pool.submit(power, 3, exponent=3, name="power")
        assert handle.get(timeout=5.0) == 27
        assert handle.name == "power"

    def test_timeout_does_not_cancel_task(self, pool):
        """get(timeout) прекращает ожидание, но задача доходит до конца."""
        def slow():
            time.sleep(0.5)
            return "slow result"

        handle = pool.submit(slow)
        start = time.monotonic()
        with pytest.raises(TaskTimeoutError):
            handle.get(timeout=0.1)

        assert time.monotonic() - start < 0.5
        assert not handle.done()
        assert handle.get() == "slow result"

    def test_failure_isolation(self, pool):
        """Ошибка одной задачи не мешает остальным и не убивает воркеров."""
        def failing():
            raise RuntimeError("task failed")

        bad = pool.submit(failing)
        good = [pool.submit(lambda n=n: n + 1) for n in range(10)]

        with pytest.raises(TaskExecutionError) as exc_info:
            bad.get(timeout=5.0)
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert [h.get(timeout=5.0) for h in good] == list(range(1, 11))

        # Воркеры живы и продолжают принимать задачи
        assert all(w.status != WorkerStatus.STOPPED for w in pool.get_workers())
        assert pool.submit(lambda: "still alive").get(timeout=5.0) == "still alive"

        metrics = pool.get_metrics()
        assert metrics['total_tasks_failed'] == 1
        assert metrics['total_tasks_completed'] >= 11

    @pytest.mark.parametrize("exc_type", [SystemExit, KeyboardInterrupt])
    def test_base_exception_in_task_keeps_worker(self, exc_type):
        """SystemExit и KeyboardInterrupt в задаче остаются в handle, воркер продолжает работу."""
        def interrupting():
            raise exc_type(3)

        pool = WorkerPool(1)
        try:
            bad = pool.submit(interrupting)
            with pytest.raises(TaskExecutionError) as exc_info:
                bad.get(timeout=5.0)
            assert isinstance(exc_info.value.cause, exc_type)
            assert bad.status == TaskStatus.FAILED

            assert pool.submit(lambda: "still alive").get(timeout=5.0) == "still alive"
            assert pool.is_running()
            assert pool.get_metrics()['worker_metrics']['alive_workers'] == 1
            assert pool.get_metrics()['total_tasks_failed'] == 1
        finally:
            pool.shutdown(wait=True, timeout=5.0)

    def test_sys_exit_task_does_not_stop_pool(self):
        pool = WorkerPool(1)
        handle = pool.submit(sys.exit, 3)
        assert isinstance(handle.exception(timeout=5.0), SystemExit)
        assert pool.status == PoolStatus.RUNNING
        assert pool.submit(lambda: 7).get(timeout=5.0) == 7
        assert pool.shutdown(wait=True, timeout=5.0)

    def test_get_with_infinite_timeout(self, pool):
        assert pool.submit(lambda: 5).get(timeout=float("inf")) == 5
        assert pool.shutdown(wait=True, timeout=float("inf"))

    def test_shutdown_rejects_new_tasks(self, pool):
        """После shutdown() submit() отклоняется."""
        pool.shutdown()
        pool.shutdown()

        with pytest.raises(PoolClosedError):
            pool.submit(lambda: 1)

        assert pool.await_termination(timeout=5.0)
        assert pool.status == PoolStatus.STOPPED
        assert pool.get_metrics()['total_tasks_rejected'] == 1

    def test_shutdown_drains_queued_tasks(self):
        """Задачи, поставленные до shutdown, выполняются."""
        pool = WorkerPool(2)
        gate = threading.Event()
        handles = [pool.submit(gate.wait, 5.0) for _ in range(2)]
        handles += [pool.submit(lambda n=n: n) for n in range(20)]

        pool.shutdown()
        assert pool.is_shutting_down()
        assert not pool.await_termination(timeout=0.1)

        gate.set()
        assert pool.await_termination(timeout=5.0)
        assert [h.get() for h in handles[2:]] == list(range(20))
        assert all(w.status == WorkerStatus.STOPPED for w in pool.get_workers())

    def test_shutdown_with_wait(self):
        pool = WorkerPool(3)
        handle = pool.submit(time.sleep, 0.1)
        assert pool.shutdown(wait=True, timeout=5.0)
        assert handle.done()
        assert pool.is_terminated()

    def test_context_manager(self):
        with WorkerPool(2) as pool:
            handle = pool.submit(lambda: "inside")

        assert pool.is_terminated()
        assert handle.get() == "inside"

    def test_bounded_queue_backpressure(self):
        """При ограниченной очереди submit() ждет освобождения места."""
        config = WorkerPoolConfig(num_workers=1, queue_capacity=1)
        pool = WorkerPool(config=config)
        gate = threading.Event()
        try:
            running = pool.submit(gate.wait, 5.0)
            # ждем, пока воркер заберет первую задачу
            deadline = time.monotonic() + 5.0
            while not running.running() and time.monotonic() < deadline:
                time.sleep(0.01)

            pool.submit(lambda: "queued")
            submitted = threading.Event()

            def blocked_submit():
                pool.submit(lambda: "third")
                submitted.set()

            thread = threading.Thread(target=blocked_submit, daemon=True)
            thread.start()

            assert not submitted.wait(0.2)
            gate.set()
            assert submitted.wait(5.0)
            thread.join(5.0)
        finally:
            gate.set()
            pool.shutdown(wait=True, timeout=5.0)

    def test_blocked_submit_fails_on_shutdown(self):
        """submit(), ожидающий места в очереди, получает PoolClosedError при shutdown."""
        pool = WorkerPool(config=WorkerPoolConfig(num_workers=1, queue_capacity=1))
        gate = threading.Event()
        errors = []
        try:
            running = pool.submit(gate.wait, 5.0)
            deadline = time.monotonic() + 5.0
            while not running.running() and time.monotonic() < deadline:
                time.sleep(0.01)
            pool.submit(lambda: None)

            def blocked_submit():
                try:
                    pool.submit(lambda: None)
                except PoolClosedError as e:
                    errors.append(e)

            thread = threading.Thread(target=blocked_submit, daemon=True)
            thread.start()
            time.sleep(0.1)

            pool.shutdown()
            thread.join(5.0)
            assert len(errors) == 1

            metrics = pool.get_metrics()
            assert metrics['total_tasks_submitted'] == 2
            assert metrics['total_tasks_rejected'] == 1
        finally:
            gate.set()
            pool.await_termination(timeout=5.0)

    def test_cancel_queued_task(self):
        """Отмена задачи, которая еще стоит в очереди."""
        pool = WorkerPool(1)
        gate = threading.Event()
        executed = []
        try:
            blocker = pool.submit(gate.wait, 5.0)
            deadline = time.monotonic() + 5.0
            while not blocker.running() and time.monotonic() < deadline:
                time.sleep(0.01)
            queued = pool.submit(lambda: executed.append("ran"))

            assert queued.cancel()
            assert not blocker.cancel()
            gate.set()
        finally:
            pool.shutdown(wait=True, timeout=5.0)

        with pytest.raises(TaskCancelledError):
            queued.get()
        assert executed == []
        assert pool.get_metrics()['total_tasks_cancelled'] == 1

    def test_invoke_all(self, pool):
        results = pool.invoke_all([lambda: "a", lambda: "b", lambda: "c"], timeout=5.0)
        assert results == ["a", "b", "c"]

    def test_invoke_all_propagates_failure(self, pool):
        def failing():
            raise ValueError("bad input")

        with pytest.raises(TaskExecutionError):
            pool.invoke_all([lambda: 1, failing])

    def test_async_composition(self, pool):
        """Цепочка then() и объединение результатов."""
        from workpool import combine

        def hello():
            time.sleep(0.05)
            return "Hello"

        def world():
            time.sleep(0.1)
            return "World"

        combined = combine(pool.submit(hello), pool.submit(world), lambda a, b: f"{a} {b}!")
        chained = pool.submit(lambda: 21).then(lambda n: n * 2).then(lambda n: n + 10)

        assert combined.get(timeout=5.0) == "Hello World!"
        assert chained.get(timeout=5.0) == 52

    def test_concurrent_submission(self, pool):
        """Конкурентная отправка задач из нескольких потоков."""
        handles = []
        handles_lock = threading.Lock()

        def submit_tasks(offset):
            for i in range(50):
                handle = pool.submit(lambda v=offset + i: v)
                with handles_lock:
                    handles.append(handle)

        threads = [threading.Thread(target=submit_tasks, args=(k * 50,)) for k in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(h.get(timeout=10.0) for h in handles) == list(range(200))

    def test_metrics(self, pool):
        handles = pool.map(lambda x: x * 2, range(5))
        for handle in handles:
            handle.get(timeout=5.0)

        metrics = pool.get_metrics()
        assert metrics['total_tasks_submitted'] == 5
        assert metrics['total_tasks_completed'] == 5
        assert metrics['status'] == "running"
        assert metrics['worker_metrics']['total_workers'] == 2
        assert metrics['channel_metrics']['puts'] == 5

    def test_submission_counted_before_execution(self, pool):
        """Задача видит себя учтенной как отправленная."""
        handle = pool.submit(lambda: pool.get_metrics()['total_tasks_submitted'])
        assert handle.get(timeout=5.0) == 1
        assert pool.get_metrics()['total_tasks_submitted'] == 1

    def test_await_termination_respects_overall_timeout(self, mocker):
        """join() воркеров получает лишь остаток общего таймаута."""
        pool = WorkerPool(2)
        pool.submit(time.sleep, 0.3)
        join = mocker.spy(pool._worker_manager, "join")

        pool.shutdown()
        assert pool.await_termination(timeout=2.0)

        joined_with = join.call_args[0][0]
        assert joined_with is not None
        assert joined_with <= 1.75

    def test_worker_thread_names(self):
        config = WorkerPoolConfig(num_workers=2, thread_name_prefix="squares")
        with WorkerPool(config=config) as pool:
            name = pool.submit(lambda: threading.current_thread().name).get(timeout=5.0)
        assert name.startswith("squares-")

    def test_repr(self, pool):
        assert "running" in repr(pool)
