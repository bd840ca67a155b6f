"""
Scan reduction - 360° range scan to 12 sector distances.

Angles are counter-clockwise from the robot's forward axis:
index 0 = FRONT, 90 = LEFT, 180 = BACK, 270 = RIGHT.
Each sector is the minimum range inside a window around its centre.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum

import numpy as np

from wall_follower.config import FULL_CIRCLE, SECTOR_COUNT, SECTOR_SPACING


class ScanFormatError(ValueError):
    """Scan cannot be reduced (bad length or range limits)."""


class Sector(IntEnum):
    """Fixed sector directions, 30° apart counter-clockwise from FRONT."""

    FRONT = 0
    FRONT_LEFT = 1
    LEFT_FRONT = 2
    LEFT = 3
    LEFT_BACK = 4
    BACK_LEFT = 5
    BACK = 6
    BACK_RIGHT = 7
    RIGHT_BACK = 8
    RIGHT = 9
    RIGHT_FRONT = 10
    FRONT_RIGHT = 11

    @property
    def angle(self) -> int:
        """Centre angle in degrees."""
        return self.value * SECTOR_SPACING


@dataclass(frozen=True, eq=False)
class LaserScan:
    """One full-circle scan."""

    ranges: np.ndarray  # metres, CCW from forward
    range_max: float  # metres
    timestamp: float = 0.0

    @property
    def samples_per_degree(self) -> int:
        """Samples per degree, or 0 if the length is not a multiple of 360."""
        n = len(self.ranges)
        if n == 0 or n % FULL_CIRCLE:
            return 0
        return n // FULL_CIRCLE


@dataclass(frozen=True)
class SectorReading:
    """Minimum distance per Sector, replaced as a whole on each scan."""

    distances: tuple[float, ...]

    def __post_init__(self):
        if len(self.distances) != SECTOR_COUNT:
            raise ValueError(f"Expected {SECTOR_COUNT} sector distances, got {len(self.distances)}")

    def __getitem__(self, sector: Sector) -> float:
        return self.distances[sector]

    @classmethod
    def filled(cls, distance: float) -> SectorReading:
        """Reading with every sector at the same distance."""
        return cls(tuple([float(distance)] * SECTOR_COUNT))

    @classmethod
    def from_mapping(cls, values: dict[Sector, float], default: float) -> SectorReading:
        """Reading from a partial {Sector: distance} dict, other sectors at default."""
        return cls(tuple(float(values.get(s, default)) for s in Sector))

    def to_dict(self) -> dict[str, float]:
        """Convert to {sector name: distance} for JSON."""
        return {s.name: round(self.distances[s], 3) for s in Sector}


def window_indices(center_deg: int, half_width_deg: int, samples_per_degree: int = 1) -> np.ndarray:
    """
    Scan indices covering [center - half_width, center + half_width) degrees.

    Wraps modulo the scan length, so the FRONT window at 1 sample/degree
    with half-width 10 is indices 350..359 followed by 0..9.

    Args:
        center_deg: Window centre in degrees
        half_width_deg: Half-width in degrees
        samples_per_degree: Scan resolution

    Returns:
        Integer index array, always within [0, 360 * samples_per_degree)
    """
    size = FULL_CIRCLE * samples_per_degree
    start = (center_deg - half_width_deg) * samples_per_degree
    count = 2 * half_width_deg * samples_per_degree
    return np.arange(start, start + count) % size


def reduce_scan(scan: LaserScan, half_width: int = 10) -> SectorReading:
    """
    Reduce a full-circle scan to sector minimum distances.

    Non-finite and negative samples count as "no return". A sector with
    no sample below range_max reads range_max.

    Raises:
        ScanFormatError: scan length is not a positive multiple of 360,
            range_max is not positive and finite, or half_width is out of range.
    """
    spd = scan.samples_per_degree
    if spd == 0:
        raise ScanFormatError(
            f"Scan length {len(scan.ranges)} is not a positive multiple of {FULL_CIRCLE}"
        )
    range_max = float(scan.range_max)
    if not (math.isfinite(range_max) and range_max > 0):
        raise ScanFormatError(f"Invalid range_max: {scan.range_max}")
    if not 1 <= half_width <= FULL_CIRCLE // 2:
        raise ScanFormatError(f"Invalid beam half-width: {half_width}")

    ranges = np.asarray(scan.ranges, dtype=float)
    with np.errstate(invalid="ignore"):
        valid = np.isfinite(ranges) & (ranges >= 0)
    ranges = np.where(valid, ranges, range_max)

    distances = []
    for sector in Sector:
        closest = ranges[window_indices(sector.angle, half_width, spd)].min()
        distances.append(float(min(closest, range_max)))
    return SectorReading(tuple(distances))
