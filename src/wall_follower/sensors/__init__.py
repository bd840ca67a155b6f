"""
Sensor Layer - Hardware interfaces.

Provides access to the robot's hardware:
- Lidar: RPLIDAR C1 scans (inbound scan feed)
- Base: ESP32 drive base (outbound velocity, inbound odometry)
"""

from .lidar import Lidar
from .base import Base

__all__ = ["Lidar", "Base"]
