"""
Scan visualizer - Renders perception state as an annotated OpenCV image.

Bird's eye view, forward = up:
- Range rings every metre
- Raw scan points
- One ray per sector, coloured by distance
- Active rule and command scale overlay
"""

from __future__ import annotations

import math

import cv2
import numpy as np

from .scan import LaserScan, Sector, SectorReading


# Colors (BGR)
_WHITE = (255, 255, 255)
_GRAY = (120, 120, 120)
_RING = (30, 30, 30)
_CYAN = (255, 255, 0)
_RED = (0, 0, 255)
_GREEN = (0, 220, 0)
_YELLOW = (0, 220, 220)


class ScanVisualizer:
    """Renders scan + sector state as JPEG."""

    def __init__(self, size: int = 500, max_range: float = 3.0, near: float = 0.6, far: float = 0.9):
        self.size = size
        self.max_range = max_range
        self.near = near
        self.far = far

    def render(self, scan: LaserScan | None, sectors: SectorReading | None, rule_name: str = "", scale: float | None = None, quality: int = 80) -> bytes | None:
        """Render bird's eye view.

        Args:
            scan: Latest LaserScan (None handled gracefully).
            sectors: Latest SectorReading.
            rule_name: Name of the rule chosen on the last tick.
            scale: Staleness scale of the last command.

        Returns:
            JPEG bytes, or None if encoding failed.
        """
        image = self.render_image(scan, sectors, rule_name, scale)
        ret, jpeg = cv2.imencode(".jpg", image, [cv2.IMWRITE_JPEG_QUALITY, quality])
        if not ret:
            return None
        return jpeg.tobytes()

    def render_image(self, scan: LaserScan | None, sectors: SectorReading | None, rule_name: str = "", scale: float | None = None) -> np.ndarray:
        """Render bird's eye view as a BGR image."""
        size = self.size
        center = size // 2
        px_per_m = (size // 2) / self.max_range
        image = np.zeros((size, size, 3), dtype=np.uint8)

        for r_m in range(1, int(self.max_range) + 1):
            cv2.circle(image, (center, center), int(r_m * px_per_m), _RING, 1)

        if scan is not None and scan.samples_per_degree:
            step = 1.0 / scan.samples_per_degree
            for i, distance in enumerate(scan.ranges):
                if not math.isfinite(distance) or distance >= min(scan.range_max, self.max_range):
                    continue
                x, y = self._polar_to_px(i * step, distance, center, px_per_m)
                if 0 <= x < size and 0 <= y < size:
                    cv2.circle(image, (x, y), 2, _CYAN, -1)

        if sectors is not None:
            for sector in Sector:
                distance = min(sectors[sector], self.max_range)
                x, y = self._polar_to_px(sector.angle, distance, center, px_per_m)
                cv2.line(image, (center, center), (x, y), self._sector_color(sectors[sector]), 1)

        cv2.drawMarker(
            image, (center, center), (0, 200, 0),
            cv2.MARKER_TRIANGLE_UP, 14, 2,
        )

        if scan is None:
            self._put_centered(image, "No scan", size // 2, 30, _GRAY)
        if rule_name:
            cv2.putText(image, rule_name, (10, 20), cv2.FONT_HERSHEY_SIMPLEX, 0.5, _WHITE, 1)
        if scale is not None:
            cv2.putText(image, f"scale {scale:.2f}", (10, 40), cv2.FONT_HERSHEY_SIMPLEX, 0.5, _WHITE, 1)

        return image

    def _sector_color(self, distance: float) -> tuple[int, int, int]:
        if distance < self.near:
            return _RED
        if distance > self.far:
            return _GREEN
        return _YELLOW

    @staticmethod
    def _polar_to_px(angle_deg: float, distance: float, center: int, px_per_m: float) -> tuple[int, int]:
        # CCW angles: +90 (left) maps to -x in the image
        rad = math.radians(angle_deg)
        x = int(center - distance * math.sin(rad) * px_per_m)
        y = int(center - distance * math.cos(rad) * px_per_m)
        return x, y

    @staticmethod
    def _put_centered(image: np.ndarray, text: str, cx: int, y: int, color):
        (w, _), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, 0.6, 1)
        cv2.putText(image, text, (cx - w // 2, y), cv2.FONT_HERSHEY_SIMPLEX, 0.6, color, 1)
