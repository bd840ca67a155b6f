"""
Command emitter - Scales and sends velocity commands.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from wall_follower.decision.rules import VelocityCommand

logger = logging.getLogger(__name__)


class CommandSink(ABC):
    """Anything that accepts velocity commands (drive base, simulator, test fake)."""

    @abstractmethod
    def send_velocity(self, linear: float, angular: float) -> None:
        """
        Send one velocity command. Best effort, no acknowledgement.

        Args:
            linear: m/s
            angular: rad/s (positive = left)
        """
        ...


class CommandEmitter:
    """Applies the staleness scale and forwards the result to a sink."""

    def __init__(self, sink: CommandSink):
        self.sink = sink
        self.last_sent: VelocityCommand | None = None

    def emit(self, command: VelocityCommand, scale: float = 1.0) -> VelocityCommand:
        """Send command * scale once. The next emit supersedes it."""
        final = command.scaled(scale)
        self.sink.send_velocity(final.linear, final.angular)
        self.last_sent = final
        logger.debug(f"Emit: linear={final.linear:.3f} angular={final.angular:.3f} (scale {scale:.3f})")
        return final
