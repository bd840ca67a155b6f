"""Shared fakes for hardware-free tests."""

from __future__ import annotations

import time

import numpy as np
import pytest

from wall_follower.control import CommandSink, Controller
from wall_follower.params import Parameters
from wall_follower.perception import LaserScan

RANGE_MAX = 3.5


def make_scan(points: dict[int, float] | None = None, range_max: float = RANGE_MAX, size: int = 360) -> LaserScan:
    """Scan at range_max everywhere except the given {index: range} points."""
    ranges = np.full(size, range_max, dtype=float)
    for index, value in (points or {}).items():
        ranges[index] = value
    return LaserScan(ranges=ranges, range_max=range_max, timestamp=time.time())


def sector_scan(distances: dict[int, float], range_max: float = RANGE_MAX) -> LaserScan:
    """Scan with a single return at each sector centre angle."""
    return make_scan({angle % 360: value for angle, value in distances.items()}, range_max)


class FakeSink(CommandSink):
    def __init__(self):
        self.sent: list[tuple[float, float]] = []

    def send_velocity(self, linear, angular):
        self.sent.append((linear, angular))


class FakeLidar:
    def __init__(self, start_ok: bool = True):
        self.start_ok = start_ok
        self.subscribers = []
        self.is_running = False
        self.stopped = False

    def subscribe(self, callback):
        self.subscribers.append(callback)

    def publish(self, scan):
        for callback in self.subscribers:
            callback(scan)

    def start(self):
        self.is_running = self.start_ok
        return self.start_ok

    def stop(self):
        self.is_running = False
        self.stopped = True


class FakeBase(FakeSink):
    def __init__(self, connect_ok: bool = True):
        super().__init__()
        self.connect_ok = connect_ok
        self.subscribers = []
        self.is_connected = False
        self.stopped = False
        self.disconnected = False
        self.on_send = None

    def subscribe(self, callback):
        self.subscribers.append(callback)

    def publish(self, pose):
        for callback in self.subscribers:
            callback(pose)

    def connect(self):
        self.is_connected = self.connect_ok
        return self.connect_ok

    def disconnect(self):
        self.is_connected = False
        self.disconnected = True

    def stop(self):
        self.stopped = True
        self.send_velocity(0.0, 0.0)

    def send_velocity(self, linear, angular):
        super().send_velocity(linear, angular)
        if self.on_send:
            self.on_send(self)


@pytest.fixture
def params():
    return Parameters()


@pytest.fixture
def lidar():
    return FakeLidar()


@pytest.fixture
def base():
    return FakeBase()


@pytest.fixture
def controller(params, lidar, base):
    return Controller(params, lidar=lidar, base=base)
