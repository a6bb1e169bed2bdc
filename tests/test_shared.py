import threading
from collections.abc import Generator

import httpx
import pytest

import replitdb
from replitdb import shared
from replitdb.client import Client
from replitdb.errors import ConfigurationError, KeyNotFoundError
from replitdb.shared import REFRESH_INTERVAL, SharedClient

from conftest import BASE_URL, FakeDatabase


class _FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0
        super().__init__()

    def __call__(self) -> float:
        return self.now


class _CountingFactory:
    def __init__(self, database: FakeDatabase) -> None:
        self.database = database
        self.calls = 0
        self.fail = False
        super().__init__()

    def __call__(self) -> Client:
        self.calls += 1
        if self.fail:
            msg = "REPLIT_DB_URL not set in environment"
            raise ConfigurationError(msg)
        http_client = httpx.Client(transport=httpx.MockTransport(self.database.handler))
        return Client(BASE_URL, http_client=http_client)


@pytest.fixture
def factory(fake_db: FakeDatabase) -> _CountingFactory:
    return _CountingFactory(fake_db)


@pytest.fixture
def default_holder(monkeypatch: pytest.MonkeyPatch, factory: _CountingFactory) -> Generator[SharedClient]:
    holder = SharedClient(factory)
    monkeypatch.setattr(shared, "_default", holder)
    try:
        yield holder
    finally:
        holder.reset()


def test_refresh_interval_is_one_hour() -> None:
    assert REFRESH_INTERVAL == 3600


def test_get_builds_once_and_reuses(factory: _CountingFactory) -> None:
    holder = SharedClient(factory)

    first = holder.get()
    second = holder.get()

    assert first is second
    assert factory.calls == 1


def test_get_rebuilds_after_refresh_interval(factory: _CountingFactory) -> None:
    clock = _FakeClock()
    holder = SharedClient(factory, refresh_interval=60, clock=clock)

    first = holder.get()
    clock.now += 59
    assert holder.get() is first

    clock.now += 1
    second = holder.get()
    assert second is not first
    assert factory.calls == 2


def test_get_never_refreshes_without_interval(factory: _CountingFactory) -> None:
    clock = _FakeClock()
    holder = SharedClient(factory, refresh_interval=None, clock=clock)

    first = holder.get()
    clock.now += 10 * REFRESH_INTERVAL

    assert holder.get() is first


def test_failed_build_leaves_holder_empty(factory: _CountingFactory) -> None:
    holder = SharedClient(factory)
    factory.fail = True

    with pytest.raises(ConfigurationError):
        _ = holder.get()

    factory.fail = False
    _ = holder.get()
    assert factory.calls == 2


def test_failed_refresh_keeps_previous_client(factory: _CountingFactory) -> None:
    clock = _FakeClock()
    holder = SharedClient(factory, refresh_interval=60, clock=clock)
    first = holder.get()

    clock.now += 60
    factory.fail = True
    with pytest.raises(ConfigurationError):
        _ = holder.get()
    assert holder._client is first

    factory.fail = False
    assert holder.get() is not first
    assert factory.calls == 3


def test_concurrent_callers_share_one_client(factory: _CountingFactory) -> None:
    holder = SharedClient(factory)
    barrier = threading.Barrier(8)
    results: list[Client] = []
    results_lock = threading.Lock()

    def worker() -> None:
        _ = barrier.wait()
        client = holder.get()
        with results_lock:
            results.append(client)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert factory.calls == 1
    assert len(results) == 8
    assert all(client is results[0] for client in results)


def test_reset_forces_rebuild(factory: _CountingFactory) -> None:
    holder = SharedClient(factory)
    first = holder.get()

    holder.reset()

    assert holder.get() is not first


@pytest.mark.usefixtures("default_holder")
def test_module_functions_delegate_to_shared_client(fake_db: FakeDatabase) -> None:
    shared.set("test-singleton-test", "value")
    assert shared.get("test-singleton-test") == "value"

    shared.delete("test-singleton-test")
    with pytest.raises(KeyNotFoundError):
        _ = shared.get("test-singleton-test")

    for index in range(50):
        shared.set(f"test-singleton-test-{index:02d}", "value")
    keys = shared.list_keys("test-singleton-test")
    assert keys == [f"test-singleton-test-{index:02d}" for index in range(50)]

    shared.set_json("doc", {"n": 1})
    assert shared.get_json("doc") == {"n": 1}
    assert len(fake_db.store) == 51


def test_module_functions_propagate_build_failure(default_holder: SharedClient, factory: _CountingFactory) -> None:
    factory.fail = True

    with pytest.raises(ConfigurationError):
        shared.set("key", "value")

    factory.fail = False
    assert shared.get_shared_client() is default_holder.get()


def test_replaced_client_is_closed_at_the_following_refresh() -> None:
    clock = _FakeClock()
    made: list[Client] = []

    def factory() -> Client:
        client = Client(BASE_URL)
        made.append(client)
        return client

    holder = SharedClient(factory, refresh_interval=60, clock=clock)
    _ = holder.get()

    clock.now += 60
    _ = holder.get()
    assert not made[0]._http.is_closed

    clock.now += 60
    _ = holder.get()
    assert made[0]._http.is_closed
    assert not made[1]._http.is_closed

    holder.reset()
    assert all(client._http.is_closed for client in made)


def test_module_set_is_not_star_exported() -> None:
    assert "set" not in replitdb.__all__
    assert replitdb.set is shared.set
