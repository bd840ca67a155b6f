"""
Reactive wall follower for a LIDAR-equipped differential drive robot.
"""

__version__ = "0.1.0"
