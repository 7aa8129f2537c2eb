import threading
from concurrent.futures import Future, ThreadPoolExecutor

import pytest

from lectures.errors import StaleResultError
from lectures.services.loader import ReadingsLoader


class GatedFetch:
    """Fetch stub whose calls finish only when the test opens their gate."""

    def __init__(self):
        self.gates = {}
        self.calls = []
        self.started = threading.Event()

    def gate(self, day):
        return self.gates.setdefault(day, threading.Event())

    def __call__(self, day, zone):
        self.calls.append((day, zone))
        self.started.set()
        self.gate(day).wait(5)
        return f"readings for {day}/{zone}"


@pytest.fixture
def fetch():
    return GatedFetch()


@pytest.fixture
def loader(fetch):
    ld = ReadingsLoader(fetch)
    yield ld
    for gate in fetch.gates.values():
        gate.set()
    ld.shutdown()


def test_out_of_order_completion_keeps_latest_date(loader, fetch):
    first = loader.request("2025-01-01", "france")
    assert fetch.started.wait(5)
    second = loader.request("2025-01-02", "france")

    fetch.gate("2025-01-02").set()
    second.result(5)
    assert loader.latest() == "readings for 2025-01-02/france"

    fetch.gate("2025-01-01").set()
    first.result(5)
    assert loader.latest() == "readings for 2025-01-02/france"
    assert loader.current_key == ("2025-01-02", "france")


def test_pending_result_is_not_exposed(loader, fetch):
    loader.request("2025-01-01", "france")
    assert loader.latest() is None
    fetch.gate("2025-01-01").set()
    assert loader.wait(5) == "readings for 2025-01-01/france"


def test_same_key_is_not_refetched_unless_forced(loader, fetch):
    fetch.gate("2025-01-01").set()
    a = loader.request("2025-01-01", "france")
    b = loader.request("2025-01-01", "france")
    assert a is b
    a.result(5)
    c = loader.request("2025-01-01", "france", force=True)
    c.result(5)
    assert c is not a
    assert len(fetch.calls) == 2


class HookedFuture(Future):
    def __init__(self, executor):
        super().__init__()
        self._executor = executor

    def result(self, timeout=None):
        hook, self._executor.on_result = self._executor.on_result, None
        if hook:
            hook()
        return super().result(timeout)


class InlineExecutor:
    """Runs calls on submit; `on_result` fires while a result is being read."""

    def __init__(self):
        self.on_result = None

    def submit(self, fn, *args):
        fut = HookedFuture(self)
        try:
            fut.set_result(fn(*args))
        except Exception as e:
            fut.set_exception(e)
        return fut

    def shutdown(self, wait=True):
        pass


def test_wait_raises_when_selection_moves_on():
    executor = InlineExecutor()
    ld = ReadingsLoader(lambda day, zone: day, executor=executor)
    ld.request("2025-01-01", "france")
    # the user picks another day while the first result is being collected
    executor.on_result = lambda: ld.request("2025-01-02", "france")
    with pytest.raises(StaleResultError):
        ld.wait(1)
    assert ld.wait(1) == "2025-01-02"


def test_fetch_errors_surface_for_current_key():
    def failing(day, zone):
        raise RuntimeError("down")

    ld = ReadingsLoader(failing)
    ld.request("2025-01-01", "france")
    with pytest.raises(RuntimeError, match="down"):
        ld.wait(5)
    ld.shutdown()


def test_wait_before_any_request():
    with pytest.raises(StaleResultError):
        ReadingsLoader(lambda d, z: None).wait(0)


def test_stale_failure_is_reported_as_stale():
    def fetch(day, zone):
        if day == "2025-01-01":
            raise RuntimeError("upstream down for the old day")
        return day

    executor = InlineExecutor()
    ld = ReadingsLoader(fetch, executor=executor)
    ld.request("2025-01-01", "france")
    executor.on_result = lambda: ld.request("2025-01-02", "france")
    with pytest.raises(StaleResultError):
        ld.wait(1)
    assert ld.wait(1) == "2025-01-02"


def test_superseded_queued_fetch_never_runs(fetch):
    ld = ReadingsLoader(fetch, executor=ThreadPoolExecutor(max_workers=1))
    try:
        ld.request("2025-01-01", "france")
        assert fetch.started.wait(5)
        skipped = ld.request("2025-01-02", "france")
        last = ld.request("2025-01-03", "france")
        assert skipped.cancelled()

        fetch.gate("2025-01-01").set()
        fetch.gate("2025-01-03").set()
        assert last.result(5) == "readings for 2025-01-03/france"
        assert [day for day, _ in fetch.calls] == ["2025-01-01", "2025-01-03"]
        assert ld.latest() == "readings for 2025-01-03/france"
    finally:
        for gate in fetch.gates.values():
            gate.set()
        ld.shutdown()
