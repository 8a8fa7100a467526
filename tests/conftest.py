import time
import threading

import pytest

from reachability_monitor.config import MonitorConfiguration
from reachability_monitor.controller import MonitorController
from reachability_monitor.probes import ReachabilityProbe
from reachability_monitor.signals import ManualConnectivitySource, ManualLifecycleSource


def wait_until(predicate, timeout: float = 2.0, interval: float = 0.005) -> bool:
    """Poll `predicate` until it returns True or `timeout` elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


class ScriptedProbe(ReachabilityProbe):
    """Return scripted results in order, repeating the last one forever."""

    def __init__(self, *results: bool):
        self.results = list(results) or [True]
        self.calls = 0
        self.closed = False
        self._lock = threading.Lock()

    def probe(self) -> bool:
        with self._lock:
            index = min(self.calls, len(self.results) - 1)
            self.calls += 1
            return self.results[index]

    def close(self) -> None:
        self.closed = True

    def __repr__(self) -> str:
        return f"ScriptedProbe({self.results})"


class RaisingSink:
    """LogSink whose every method raises, as a broken embedding app's might."""

    def __init__(self):
        self.calls = 0

    def _fail(self, tag, message, cause=None):
        self.calls += 1
        raise RuntimeError(f"sink rejected {tag}: {message}")

    debug = info = warning = error = _fail


class BlockingProbe(ReachabilityProbe):
    """Block inside probe() until released, then return `result`."""

    def __init__(self, result: bool = True):
        self.result = result
        self.entered = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def probe(self) -> bool:
        self.calls += 1
        self.entered.set()
        self.release.wait(timeout=5)
        return self.result


@pytest.fixture
def lifecycle():
    return ManualLifecycleSource()

@pytest.fixture
def connectivity():
    return ManualConnectivitySource(available=True)

@pytest.fixture
def make_monitor(lifecycle, connectivity):
    """Factory for controllers that are always stopped after the test."""
    monitors = []

    def _make(probe, interval_s: float = 0.01, **kwargs) -> MonitorController:
        config = MonitorConfiguration(probe=probe, interval_s=interval_s, **kwargs)
        monitor = MonitorController(config, lifecycle, connectivity)
        monitors.append(monitor)
        return monitor

    yield _make

    for monitor in monitors:
        monitor.stop()
