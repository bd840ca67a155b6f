"""
Pose samples from odometry.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PoseSample:
    """Planar pose: position in metres, heading in radians."""

    x: float
    y: float
    yaw: float = 0.0
    timestamp: float = 0.0

    @property
    def position(self) -> tuple[float, float]:
        return self.x, self.y

    @classmethod
    def from_quaternion(cls, x: float, y: float, qx: float, qy: float, qz: float, qw: float, timestamp: float = 0.0) -> PoseSample:
        """Build a sample from position and orientation quaternion."""
        return cls(x=x, y=y, yaw=yaw_from_quaternion(qx, qy, qz, qw), timestamp=timestamp)


def yaw_from_quaternion(qx: float, qy: float, qz: float, qw: float) -> float:
    """Rotation about Z (yaw) of a quaternion, in [-pi, pi]."""
    siny_cosp = 2.0 * (qw * qz + qx * qy)
    cosy_cosp = 1.0 - 2.0 * (qy * qy + qz * qz)
    return math.atan2(siny_cosp, cosy_cosp)
