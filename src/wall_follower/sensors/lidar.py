"""
LIDAR sensor - RPLIDAR C1 driver.

Provides continuous scanning with background thread.
Publishes a LaserScan to subscribers on every completed rotation.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

import numpy as np
from pyrplidar import PyRPlidar

from wall_follower.config import (
    FULL_CIRCLE,
    LIDAR_BAUDRATE,
    LIDAR_MOTOR_PWM,
    LIDAR_PORT,
    MIN_ROTATION_BINS,
)
from wall_follower.perception.scan import LaserScan

logger = logging.getLogger(__name__)

ScanCallback = Callable[[LaserScan], None]


class Lidar:
    """
    RPLIDAR C1 driver with background scanning.

    The hardware reports angles clockwise (90 = right) in mm. Published
    scans are counter-clockwise (90 = left) in metres, one bin per degree,
    with missing bins at range_max.

    Usage:
        params = Parameters.load()
        lidar = Lidar(params=params)
        lidar.subscribe(controller.on_scan)
        lidar.start()

        lidar.stop()
    """

    def __init__(self, params, port: str = LIDAR_PORT, baudrate: int = LIDAR_BAUDRATE, motor_pwm: int = LIDAR_MOTOR_PWM):
        self.params = params
        self.port = port
        self.baudrate = baudrate
        self.motor_pwm = motor_pwm

        self._lidar: PyRPlidar | None = None
        self._running = False
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._subscribers: list[ScanCallback] = []

        self._scan: LaserScan | None = None
        self._scan_count = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def scan_count(self) -> int:
        return self._scan_count

    def subscribe(self, callback: ScanCallback):
        """Register a callback for each completed scan (called from the scan thread)."""
        self._subscribers.append(callback)

    def start(self) -> bool:
        """Start LIDAR scanning in background thread."""
        if self._running:
            logger.warning("LIDAR already running")
            return True

        try:
            self._lidar = PyRPlidar()
            self._lidar.connect(port=self.port, baudrate=self.baudrate)
            self._lidar.set_motor_pwm(self.motor_pwm)
            time.sleep(1)  # Let motor spin up

            self._running = True
            self._thread = threading.Thread(target=self._scan_loop, daemon=True)
            self._thread.start()

            logger.info(f"LIDAR started on {self.port}")
            return True

        except Exception as e:
            logger.error(f"Failed to start LIDAR: {e}")
            self._running = False
            return False

    def stop(self):
        """Stop LIDAR scanning."""
        self._running = False

        if self._thread:
            self._thread.join(timeout=2.0)
            self._thread = None

        if self._lidar:
            try:
                self._lidar.stop()
                self._lidar.set_motor_pwm(0)
                self._lidar.disconnect()
            except Exception as e:
                logger.error(f"Error stopping LIDAR: {e}")
            self._lidar = None

        logger.info("LIDAR stopped")

    def get_scan(self) -> LaserScan | None:
        """Latest published scan, or None before the first rotation."""
        with self._lock:
            return self._scan

    def get_timestamp(self) -> float:
        """Get timestamp of latest scan."""
        with self._lock:
            return self._scan.timestamp if self._scan else 0.0

    def build_scan(self, bins: dict[int, list[float]], timestamp: float | None = None) -> LaserScan:
        """
        Average per-degree readings of one rotation into a LaserScan.

        Args:
            bins: Hardware angle (0-359, clockwise) -> distances in mm
            timestamp: Scan time, defaults to now

        Returns:
            LaserScan with CCW metre ranges
        """
        range_max = self.params.lidar_range_max
        ranges = np.full(FULL_CIRCLE, range_max, dtype=float)
        for angle, distances in bins.items():
            if not distances:
                continue
            index = (-int(angle)) % FULL_CIRCLE
            ranges[index] = min(sum(distances) / len(distances) / 1000.0, range_max)
        return LaserScan(
            ranges=ranges,
            range_max=range_max,
            timestamp=time.time() if timestamp is None else timestamp,
        )

    def publish(self, scan: LaserScan):
        """Store scan and hand it to every subscriber."""
        with self._lock:
            self._scan = scan
            self._scan_count += 1

        for callback in self._subscribers:
            try:
                callback(scan)
            except Exception as e:
                logger.error(f"Scan subscriber error: {e}")

    def _scan_loop(self):
        """Background scanning thread."""
        try:
            scan_generator = self._lidar.start_scan()
            current_scan: dict[int, list[float]] = {}

            for reading in scan_generator():
                if not self._running:
                    break

                angle = int(reading.angle) % FULL_CIRCLE
                distance = reading.distance

                # Filter invalid readings
                if distance < self.params.lidar_min_distance:
                    continue
                if reading.quality < self.params.lidar_min_quality:
                    continue

                current_scan.setdefault(angle, []).append(distance)

                # Full rotation: publish averaged scan
                if angle == 0 and len(current_scan) > MIN_ROTATION_BINS:
                    self.publish(self.build_scan(current_scan))
                    current_scan = {}

        except Exception as e:
            if self._running:
                logger.error(f"LIDAR scan error: {e}")

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.stop()
