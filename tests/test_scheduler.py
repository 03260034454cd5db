"""Pruebas del planificador de ticks.

Tests for the tick scheduler.
"""

from __future__ import annotations

import threading
import time

import pytest

from votewatch.scheduler import TickScheduler


def _fast(scheduler: TickScheduler) -> TickScheduler:
    # Intervalos reales son >= 1s; se acorta para la prueba. / Shortened for tests.
    scheduler._interval_ms = 10
    return scheduler


def test_synchronous_tick_returns_callback_result():
    scheduler = TickScheduler(lambda: "done")

    assert scheduler.tick() == "done"
    assert scheduler.ticks_run == 1
    assert not scheduler.running


@pytest.mark.parametrize("interval", [0, 500, 1500, 10000])
def test_rejects_unsupported_interval(interval):
    with pytest.raises(ValueError):
        TickScheduler(lambda: None, interval)


def test_interval_setter_validates():
    scheduler = TickScheduler(lambda: None, 1000)

    scheduler.interval_ms = 5000
    assert scheduler.interval_ms == 5000

    with pytest.raises(ValueError):
        scheduler.interval_ms = 3000
    assert scheduler.interval_ms == 5000


def test_timer_runs_ticks_until_stopped():
    reached = threading.Event()
    calls = []

    def callback():
        calls.append(1)
        if len(calls) >= 3:
            reached.set()

    scheduler = _fast(TickScheduler(callback))
    scheduler.start()
    assert scheduler.running

    assert reached.wait(2.0)
    scheduler.stop(timeout=2.0)
    stopped_at = scheduler.ticks_run
    time.sleep(0.05)

    assert not scheduler.running
    assert scheduler.ticks_run == stopped_at >= 3


def test_failing_tick_does_not_stop_timer():
    recovered = threading.Event()
    calls = []

    def callback():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("first tick fails")
        recovered.set()

    scheduler = _fast(TickScheduler(callback))
    scheduler.start()
    try:
        assert recovered.wait(2.0)
    finally:
        scheduler.stop(timeout=2.0)


def test_concurrent_ticks_never_overlap():
    active = []
    peak = []
    guard = threading.Lock()

    def callback():
        with guard:
            active.append(1)
            peak.append(len(active))
        time.sleep(0.01)
        with guard:
            active.pop()

    scheduler = TickScheduler(callback)
    threads = [threading.Thread(target=scheduler.tick) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert max(peak) == 1
    assert scheduler.ticks_run == 5


def test_stop_lets_in_flight_tick_finish():
    started = threading.Event()
    release = threading.Event()
    finished = threading.Event()

    def callback():
        started.set()
        release.wait(2.0)
        finished.set()

    scheduler = _fast(TickScheduler(callback))
    scheduler.start()
    assert started.wait(2.0)

    stopper = threading.Thread(target=scheduler.stop, kwargs={"timeout": 2.0})
    stopper.start()
    stopper.join(0.05)
    assert stopper.is_alive()

    release.set()
    stopper.join(2.0)

    assert finished.is_set()
    assert scheduler.ticks_run == 1
    assert not scheduler.running


def test_failed_ticks_are_counted():
    def callback():
        raise RuntimeError("always fails")

    scheduler = _fast(TickScheduler(callback))
    scheduler.start()
    try:
        deadline = time.monotonic() + 2.0
        while scheduler.ticks_attempted < 2 and time.monotonic() < deadline:
            time.sleep(0.01)
    finally:
        scheduler.stop(timeout=2.0)

    assert scheduler.ticks_run == 0
    assert scheduler.ticks_failed >= 2
    assert scheduler.ticks_attempted == scheduler.ticks_failed
