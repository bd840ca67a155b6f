"""
Perception Layer - Derived state from raw telemetry.

Contains:
- Scan reduction: LaserScan → SectorReading (12 sector minimums)
- StalenessTracker: command scale decay while scans are stale
- LoopClosureDetector: return-to-start detection from odometry
- ScanVisualizer: bird's eye debug rendering
"""

from .scan import LaserScan, ScanFormatError, Sector, SectorReading, reduce_scan, window_indices
from .pose import PoseSample, yaw_from_quaternion
from .staleness import StalenessTracker
from .loop_closure import LoopClosureDetector, LoopPhase, LoopState
from .visualizer import ScanVisualizer

__all__ = [
    "LaserScan",
    "ScanFormatError",
    "Sector",
    "SectorReading",
    "reduce_scan",
    "window_indices",
    "PoseSample",
    "yaw_from_quaternion",
    "StalenessTracker",
    "LoopClosureDetector",
    "LoopPhase",
    "LoopState",
    "ScanVisualizer",
]
