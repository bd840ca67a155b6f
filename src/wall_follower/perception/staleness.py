"""
Staleness tracking - decays command scale while scans are not refreshing.
"""

from __future__ import annotations


class StalenessTracker:
    """
    Counts ticks since the last fresh scan.

    scale = base_factor ** cycles_since_fresh_scan, so commands run at
    full strength right after a scan and fade toward zero while the
    LIDAR is silent.

    Usage:
        tracker = StalenessTracker(base_factor=0.8)

        # Scan callback:
        tracker.mark_fresh()

        # Every tick:
        scale = tracker.tick()
    """

    def __init__(self, base_factor: float = 0.8):
        if not 0.0 < base_factor <= 1.0:
            raise ValueError(f"base_factor must be in (0, 1], got {base_factor}")
        self.base_factor = base_factor
        self.cycles_since_fresh_scan = 0
        self.has_received_first_scan = False
        self._fresh = False

    @property
    def scale(self) -> float:
        return self.base_factor ** self.cycles_since_fresh_scan

    def mark_fresh(self):
        """Record that a new scan arrived."""
        self.has_received_first_scan = True
        self._fresh = True

    def tick(self) -> float:
        """Resolve fresh vs. stale for this tick and return the scale."""
        if self._fresh:
            self._fresh = False
            self.cycles_since_fresh_scan = 0
        else:
            self.cycles_since_fresh_scan += 1
        return self.scale
