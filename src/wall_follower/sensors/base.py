"""
Drive base - ESP32 differential drive over serial.

Handles:
- Sending velocity commands to the ESP32
- Reading odometry and publishing PoseSamples
- Emergency stop
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

import serial

from wall_follower.config import BASE_BAUDRATE, BASE_PORT
from wall_follower.control.emitter import CommandSink
from wall_follower.perception.pose import PoseSample

logger = logging.getLogger(__name__)

PoseCallback = Callable[[PoseSample], None]


class Base(CommandSink):
    """
    ESP32 base controller communication.

    Protocol:
        Commands (Pi -> ESP32):
            V:<linear>,<angular>\\n   - m/s, rad/s
            E\\n                      - emergency stop
            R\\n                      - reset odometry

        Status (ESP32 -> Pi):
            O:<x>,<y>,<qx>,<qy>,<qz>,<qw>\\n
            E:<error_code>\\n
    """

    def __init__(self, port: str = BASE_PORT, baudrate: int = BASE_BAUDRATE, params=None):
        self.port = port
        self.baudrate = baudrate
        self.params = params

        self._serial: serial.Serial | None = None
        self._connected = False
        self._write_lock = threading.Lock()
        self._reader: threading.Thread | None = None
        self._reading = False
        self._subscribers: list[PoseCallback] = []

        self._linear = 0.0
        self._angular = 0.0
        self._pose: PoseSample | None = None

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def linear(self) -> float:
        return self._linear

    @property
    def angular(self) -> float:
        return self._angular

    @property
    def pose(self) -> PoseSample | None:
        return self._pose

    def subscribe(self, callback: PoseCallback):
        """Register a callback for each odometry sample (called from the reader thread)."""
        self._subscribers.append(callback)

    def connect(self) -> bool:
        """Open serial connection to ESP32 and start reading odometry."""
        try:
            self._serial = serial.Serial(
                port=self.port,
                baudrate=self.baudrate,
                timeout=0.05
            )
            self._connected = True
            self.reset_odometry()
            logger.info(f"Connected to ESP32 on {self.port}")
        except Exception as e:
            logger.error(f"Failed to connect to ESP32: {e}")
            self._connected = False
            return False

        self._reading = True
        self._reader = threading.Thread(target=self._read_loop, daemon=True)
        self._reader.start()
        return True

    def disconnect(self):
        """Close serial connection."""
        self._reading = False
        if self._reader:
            self._reader.join(timeout=1.0)
            self._reader = None
        if self._serial:
            self.emergency_stop()
            self._serial.close()
            self._serial = None
        self._connected = False
        logger.info("Disconnected from ESP32")

    def send_velocity(self, linear: float, angular: float):
        """
        Send a velocity command.

        Args:
            linear: Forward speed in m/s
            angular: Turn rate in rad/s (positive = left)
        """
        self._linear = linear
        self._angular = angular
        self._write(f"V:{linear:.3f},{angular:.3f}\n")

    def stop(self):
        """Stop motors."""
        self.send_velocity(0.0, 0.0)
        logger.info("Motors stopped")

    def emergency_stop(self):
        """Emergency stop - sends E command."""
        if self._serial:
            self._write("E\n")
            self._linear = 0.0
            self._angular = 0.0
            logger.warning("EMERGENCY STOP")

    def reset_odometry(self):
        """Reset odometry origin to the current pose."""
        if self._serial:
            self._write("R\n")
            logger.info("Odometry reset")

    def update(self) -> bool:
        """
        Read one status line from ESP32.

        Returns:
            True if a status line was handled
        """
        if not self._serial:
            return False

        try:
            line = self._serial.readline().decode(errors="ignore").strip()
        except serial.SerialException as e:
            logger.error(f"Error reading ESP32 status: {e}")
            time.sleep(0.1)
            return False

        if not line:
            return False
        return self.handle_line(line)

    def handle_line(self, line: str) -> bool:
        """Parse one status line and dispatch it."""
        if line.startswith("O:"):
            # Odometry: O:<x>,<y>,<qx>,<qy>,<qz>,<qw>
            parts = line[2:].split(",")
            if len(parts) != 6:
                logger.warning(f"Malformed odometry: {line}")
                return False
            try:
                values = [float(p) for p in parts]
            except ValueError:
                logger.warning(f"Malformed odometry: {line}")
                return False
            pose = PoseSample.from_quaternion(*values, timestamp=time.time())
            self._pose = pose
            for callback in self._subscribers:
                try:
                    callback(pose)
                except Exception as e:
                    logger.error(f"Pose subscriber error: {e}")
            return True

        elif line.startswith("E:"):
            # Error from ESP32
            error_code = line[2:]
            logger.error(f"ESP32 error: {error_code}")
            return True

        logger.debug(f"Ignored line: {line}")
        return False

    def _write(self, command: str):
        if not self._serial:
            logger.warning("Not connected to ESP32")
            return
        try:
            with self._write_lock:
                self._serial.write(command.encode())
            logger.debug(f"Sent: {command.strip()}")
        except serial.SerialException as e:
            logger.error(f"Error writing to ESP32: {e}")

    def _read_loop(self):
        """Background odometry reader thread."""
        while self._reading:
            self.update()

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()
