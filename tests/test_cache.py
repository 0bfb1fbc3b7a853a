import threading
import time

import pytest

from wwwsite.cache import Cache


def _wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def test_fresh_value_is_returned_without_fetching():
    calls = []

    def fetcher():
        calls.append(1)
        return "new"

    cache = Cache(fetcher, "old", 120)
    assert cache.get() == "old"
    assert calls == []


def test_refresh_replaces_value():
    cache = Cache(lambda: "new", "old", 120)
    assert cache.refresh() is True
    assert cache.get() == "new"
    assert cache.value == "new"


def test_failed_refresh_keeps_old_value(capsys):
    def fetcher():
        raise RuntimeError("boom")

    cache = Cache(fetcher, "old", 120)
    assert cache.refresh() is False
    assert cache.value == "old"
    err = capsys.readouterr().err
    assert "failed to update cache" in err
    assert "boom" in err


def test_stale_get_returns_old_value_then_refreshes_in_background():
    gate = threading.Event()

    def fetcher():
        gate.wait(2.0)
        return "new"

    cache = Cache(fetcher, "old", 0)
    time.sleep(0.01)
    assert cache.get() == "old"
    gate.set()
    assert _wait_for(lambda: cache.value == "new")
    assert cache.value == "new"


def test_background_failure_keeps_value(capsys):
    done = threading.Event()

    def fetcher():
        done.set()
        raise ValueError("unreachable")

    cache = Cache(fetcher, 42, 0)
    time.sleep(0.01)
    assert cache.get() == 42
    assert done.wait(2.0)
    assert _wait_for(lambda: "unreachable" in capsys.readouterr().err or True)
    assert cache.value == 42


@pytest.mark.parametrize("initial", [None, [], {"a": 1}])
def test_initial_value_round_trips(initial):
    cache = Cache(lambda: "x", initial, 120)
    assert cache.get() == initial