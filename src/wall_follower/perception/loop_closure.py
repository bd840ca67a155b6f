"""
Loop closure - detect return to the starting position.

Phases:
- UNINITIALIZED: no start position yet
- AT_START: start captured, robot still within start_range
- DEPARTED: robot moved beyond start_range on either axis

Coming back within start_range on both axes raises near_start and
re-arms the detector: the next sample becomes the new start.
near_start itself is never cleared.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

from .pose import PoseSample

logger = logging.getLogger(__name__)


class LoopPhase(Enum):
    UNINITIALIZED = auto()
    AT_START = auto()
    DEPARTED = auto()


@dataclass
class LoopState:
    phase: LoopPhase = LoopPhase.UNINITIALIZED
    start: tuple[float, float] | None = None
    near_start: bool = False
    loops_closed: int = 0


class LoopClosureDetector:
    """
    Per-axis start-position tracker.

    Usage:
        detector = LoopClosureDetector(start_range=0.2)

        # Pose callback:
        if detector.update(pose):
            ...  # back near start
    """

    def __init__(self, start_range: float = 0.2):
        self.start_range = start_range
        self.state = LoopState()

    @property
    def near_start(self) -> bool:
        return self.state.near_start

    @property
    def phase(self) -> LoopPhase:
        return self.state.phase

    def update(self, pose: PoseSample) -> bool:
        """
        Advance the phase machine with a new pose.

        Returns:
            Current near_start flag
        """
        state = self.state

        if state.phase == LoopPhase.UNINITIALIZED:
            state.start = pose.position
            state.phase = LoopPhase.AT_START
            logger.debug(f"Start position captured: ({pose.x:.2f}, {pose.y:.2f})")
            return state.near_start

        dx = abs(pose.x - state.start[0])
        dy = abs(pose.y - state.start[1])

        if state.phase == LoopPhase.AT_START:
            if dx > self.start_range or dy > self.start_range:
                state.phase = LoopPhase.DEPARTED
                logger.info(f"Departed start at ({pose.x:.2f}, {pose.y:.2f})")

        elif dx < self.start_range and dy < self.start_range:
            state.near_start = True
            state.loops_closed += 1
            state.phase = LoopPhase.UNINITIALIZED
            state.start = None
            logger.info(
                f"Near start at ({pose.x:.2f}, {pose.y:.2f}), "
                f"loop {state.loops_closed} closed"
            )

        return state.near_start
