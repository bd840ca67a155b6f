"""
Configuration constants for the wall follower robot.

Fixed hardware and geometry values. Tunable behaviour lives in params.py.
"""

# =============================================================================
# HARDWARE PORTS
# =============================================================================

# LIDAR (RPLIDAR C1)
LIDAR_PORT = "/dev/ttyUSB0"
LIDAR_BAUDRATE = 460800
LIDAR_MOTOR_PWM = 660

# ESP32 (differential drive base: velocity in, odometry out)
BASE_PORT = "/dev/ttyUSB1"
BASE_BAUDRATE = 115200

# =============================================================================
# SCAN GEOMETRY
# =============================================================================

FULL_CIRCLE = 360  # degrees
SCAN_SIZE = 360  # one bin per degree
SECTOR_COUNT = 12
SECTOR_SPACING = FULL_CIRCLE // SECTOR_COUNT  # 30 degrees between sector centres

# Readings needed before a rotation counts as complete
MIN_ROTATION_BINS = 180

# =============================================================================
# CONTROL LOOP
# =============================================================================

STATS_INTERVAL_S = 5.0

# =============================================================================
# WEB INTERFACE
# =============================================================================

WEB_HOST = "0.0.0.0"
WEB_PORT = 8080
WEB_STREAM_HZ = 10
