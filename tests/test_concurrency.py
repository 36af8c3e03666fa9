import threading
import time
import types
from concurrent.futures import ThreadPoolExecutor

import pytest

from cli.commands import run_bench
from singleton_registry.registry import create_registry
from singleton_registry.utils.exceptions import ConstructionError, ReentrantConstructionError

LAZY_STRATEGIES = ["double_checked", "synchronized"]


def _race(registry, threads: int):
    """Release *threads* callers at once; return what each one got."""
    barrier = threading.Barrier(threads)

    def call():
        barrier.wait()
        return registry.get_instance()

    with ThreadPoolExecutor(max_workers=threads) as ex:
        return list(ex.map(lambda _: call(), range(threads)))


class CountingLock:
    """Lock wrapper counting how often it is entered."""

    def __init__(self, on_enter=None):
        self._lock = threading.Lock()
        self._on_enter = on_enter
        self.entered = 0

    def __enter__(self):
        if self._on_enter is not None:
            self._on_enter()
        self._lock.acquire()
        self.entered += 1
        return self

    def __exit__(self, *exc):
        self._lock.release()
        return False


@pytest.mark.parametrize("strategy", LAZY_STRATEGIES)
def test_single_construction_under_concurrency(strategy, counter):
    def factory():
        counter.increment()
        time.sleep(0.01)
        return object()

    registry = create_registry(factory, strategy=strategy)
    results = _race(registry, 100)

    assert counter.count == 1
    assert len({id(r) for r in results}) == 1


def test_fifty_threads_share_one_instance(counting_factory, counter):
    registry = create_registry(counting_factory, strategy="double_checked")
    assert not registry.is_populated

    results = _race(registry, 50)

    assert len(results) == 50
    assert all(r is results[0] for r in results)
    assert counter.count == 1
    assert registry.is_populated


@pytest.mark.parametrize("strategy", LAZY_STRATEGIES + ["eager"])
def test_identity_is_stable_across_sequential_calls(strategy, counting_factory, counter):
    registry = create_registry(counting_factory, strategy=strategy)
    first = registry.get_instance()
    assert all(registry.get_instance() is first for _ in range(100))
    assert counter.count == 1


def test_none_is_a_valid_payload(counter):
    def factory():
        counter.increment()
        return None

    registry = create_registry(factory, strategy="double_checked")
    assert registry.get_instance() is None
    assert registry.get_instance() is None
    assert registry.is_populated
    assert counter.count == 1


@pytest.mark.parametrize("strategy", LAZY_STRATEGIES)
def test_retry_after_failed_construction(strategy, counter):
    def factory():
        attempt = counter.increment()
        if attempt == 1:
            raise RuntimeError("resource unavailable")
        return object()

    registry = create_registry(factory, strategy=strategy)

    with pytest.raises(ConstructionError) as excinfo:
        registry.get_instance()
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert not registry.is_populated

    instance = registry.get_instance()
    assert registry.get_instance() is instance
    assert counter.count == 2


@pytest.mark.parametrize("strategy", LAZY_STRATEGIES)
def test_waiting_threads_observe_the_failure(strategy, counter):
    release = threading.Event()
    entered = threading.Event()
    waiter_queued = threading.Event()
    cause = RuntimeError("backend down")

    def factory():
        attempt = counter.increment()
        if attempt == 1:
            entered.set()
            release.wait(5)
            raise cause
        return object()

    registry = create_registry(factory, strategy=strategy)

    def on_enter():
        if threading.current_thread().name == "waiter":
            waiter_queued.set()

    registry._lock = CountingLock(on_enter)
    outcomes = {}

    def run(label):
        try:
            outcomes[label] = registry.get_instance()
        except ConstructionError as exc:
            outcomes[label] = exc

    first = threading.Thread(target=run, args=("first",), name="first")
    first.start()
    assert entered.wait(5)

    waiter = threading.Thread(target=run, args=("waiter",), name="waiter")
    waiter.start()
    assert waiter_queued.wait(5)

    release.set()
    first.join(5)
    waiter.join(5)

    assert isinstance(outcomes["first"], ConstructionError)
    assert isinstance(outcomes["waiter"], ConstructionError)
    assert outcomes["waiter"].__cause__ is cause
    assert not registry.is_populated
    # the waiter did not start an attempt of its own
    assert counter.count == 1

    instance = registry.get_instance()
    assert instance is registry.get_instance()
    assert counter.count == 2


def test_no_reader_sees_a_partially_built_instance():
    def factory():
        obj = types.SimpleNamespace()
        obj.host = "db.internal"
        time.sleep(0.002)
        obj.port = 5432
        time.sleep(0.002)
        obj.ready = True
        return obj

    registry = create_registry(factory, strategy="double_checked")
    start = threading.Barrier(20)
    observed = []
    observed_lock = threading.Lock()

    def reader():
        start.wait()
        seen = []
        for _ in range(200):
            obj = registry.get_instance()
            seen.append((getattr(obj, "host", None), getattr(obj, "port", None), getattr(obj, "ready", None)))
        with observed_lock:
            observed.extend(seen)

    threads = [threading.Thread(target=reader) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(observed) == 20 * 200
    assert set(observed) == {("db.internal", 5432, True)}


def test_fast_path_never_takes_the_lock(counting_factory):
    registry = create_registry(counting_factory, strategy="double_checked")
    lock = CountingLock()
    registry._lock = lock

    registry.get_instance()
    assert lock.entered == 1

    def hammer():
        for _ in range(200):
            registry.get_instance()

    with ThreadPoolExecutor(max_workers=50) as ex:
        for fut in [ex.submit(hammer) for _ in range(50)]:
            fut.result()

    assert lock.entered == 1


def test_synchronized_strategy_locks_every_call(counting_factory):
    registry = create_registry(counting_factory, strategy="synchronized")
    lock = CountingLock()
    registry._lock = lock

    for _ in range(10):
        registry.get_instance()

    assert lock.entered == 10


def test_fast_path_latency_does_not_grow_with_thread_count():
    single = run_bench(1, 20_000, ["double_checked"])["double_checked"]
    many = run_bench(16, 20_000, ["double_checked"])["double_checked"]
    # per-call cost stays in the same order of magnitude
    assert many < single * 10


def test_fast_path_is_not_slower_than_the_synchronized_accessor():
    timings = run_bench(16, 20_000, ["double_checked", "synchronized"])
    # generous margin; the synchronized accessor contends on every call
    assert timings["double_checked"] < timings["synchronized"] * 3


@pytest.mark.parametrize("strategy", LAZY_STRATEGIES)
def test_reentrant_construction_is_reported(strategy):
    registry = None

    def factory():
        return registry.get_instance()

    registry = create_registry(factory, strategy=strategy)

    with pytest.raises(ReentrantConstructionError):
        registry.get_instance()
    assert not registry.is_populated


class _Abort(BaseException):
    pass


@pytest.mark.parametrize("strategy", LAZY_STRATEGIES)
def test_base_exception_from_factory_propagates_unchanged(strategy, counter):
    def factory():
        if counter.increment() == 1:
            raise _Abort()
        return object()

    registry = create_registry(factory, strategy=strategy)

    with pytest.raises(_Abort):
        registry.get_instance()
    assert not registry.is_populated
    assert registry._failures == 1

    instance = registry.get_instance()
    assert registry.get_instance() is instance
    assert counter.count == 2
