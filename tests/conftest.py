"""
Shared fixtures for the wind monitor tests. No pigpio daemon or sensor needed.
"""
import sys
from pathlib import Path

import pytest

# Modules live at the project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from wind_store import MeasurementStore  # noqa: E402


class FakeCallback:
    def __init__(self, gpio, edge, func):
        self.gpio = gpio
        self.edge = edge
        self.func = func
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakePi:
    """Stands in for pigpio.pi(); edges are fired by calling trigger()."""

    def __init__(self, connected=True):
        self.connected = connected
        self.modes = {}
        self.pulls = {}
        self.callbacks = []
        self.stopped = False

    def set_mode(self, gpio, mode):
        self.modes[gpio] = mode

    def set_pull_up_down(self, gpio, pud):
        self.pulls[gpio] = pud

    def callback(self, gpio, edge, func):
        cb = FakeCallback(gpio, edge, func)
        self.callbacks.append(cb)
        return cb

    def trigger(self, level=0, tick=0):
        for cb in self.callbacks:
            if not cb.cancelled:
                cb.func(cb.gpio, level, tick)

    def stop(self):
        self.stopped = True


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def store(tmp_path):
    s = MeasurementStore(str(tmp_path / "wind.sqlite"))
    yield s
    s.close()


@pytest.fixture
def fake_pi():
    return FakePi()


@pytest.fixture
def clock():
    return FakeClock()
