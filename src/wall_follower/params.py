"""
Tunable parameters with JSON persistence.

All layers share one Parameters instance. Values are read once at
startup: rule thresholds are not reconfigured while the robot runs.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path

logger = logging.getLogger(__name__)

PARAMS_FILE = Path(__file__).parent / "params.json"


@dataclass
class Parameters:
    """Controller parameters."""

    # Commanded speeds
    linear_speed: float = 0.3  # m/s
    angular_speed: float = 1.5  # rad/s
    open_space_linear_speed: float = 0.2  # m/s while swinging toward a lost wall

    # Rule thresholds (m)
    left_front_open: float = 0.9  # LEFT_FRONT beyond this = wall lost
    front_blocked: float = 0.7  # FRONT below this = rotate in place
    front_left_near: float = 0.6
    front_right_near: float = 0.6
    left_front_receding: float = 0.6  # LEFT_FRONT beyond this = curve back in

    # Staleness decay per tick without a fresh scan
    staleness_base_factor: float = 0.8

    # Sector aggregation half-width (degrees)
    beam_half_width: int = 10

    # Loop closure: per-axis distance from start (m)
    start_range: float = 0.2

    # Control tick
    tick_period_ms: int = 100

    # LIDAR
    lidar_range_max: float = 12.0  # m
    lidar_min_distance: int = 60  # mm, ignore readings closer (robot body)
    lidar_min_quality: int = 10  # 0-47, minimum quality to accept

    @property
    def tick_period(self) -> float:
        """Tick period in seconds."""
        return self.tick_period_ms / 1000.0

    def update(self, **kwargs):
        """Update parameters from dict (e.g., from a JSON file)."""
        for key, value in kwargs.items():
            if hasattr(self, key):
                expected_type = type(getattr(self, key))
                try:
                    setattr(self, key, expected_type(value))
                except (TypeError, ValueError):
                    logger.warning(f"Invalid value for {key}: {value}")
            else:
                logger.warning(f"Unknown parameter: {key}")

    def validate(self):
        """Raise ValueError if any value is outside its usable range."""
        if not 0.0 < self.staleness_base_factor <= 1.0:
            raise ValueError(
                f"staleness_base_factor must be in (0, 1], got {self.staleness_base_factor}"
            )
        if not 1 <= self.beam_half_width <= 180:
            raise ValueError(f"beam_half_width must be in 1..180, got {self.beam_half_width}")
        if self.tick_period_ms <= 0:
            raise ValueError(f"tick_period_ms must be positive, got {self.tick_period_ms}")
        if not (math.isfinite(self.lidar_range_max) and self.lidar_range_max > 0):
            raise ValueError(f"lidar_range_max must be positive, got {self.lidar_range_max}")
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (int, float)) and value < 0:
                raise ValueError(f"{f.name} must not be negative, got {value}")

    def save(self, path: Path = PARAMS_FILE):
        """Persist to JSON file."""
        with open(path, "w") as f:
            json.dump(asdict(self), f, indent=2)
        logger.info(f"Parameters saved to {path}")

    @classmethod
    def load(cls, path: Path = PARAMS_FILE) -> Parameters:
        """Load from JSON file, or return defaults."""
        path = Path(path)
        if path.exists():
            try:
                with open(path) as f:
                    data = json.load(f)
                params = cls()
                params.update(**data)
                params.validate()
                logger.info(f"Parameters loaded from {path}")
                return params
            except Exception as e:
                logger.warning(f"Failed to load {path}: {e}, using defaults")
        return cls()

    def to_dict(self) -> dict:
        """Convert to dict for JSON API."""
        return asdict(self)
