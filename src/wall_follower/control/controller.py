"""
Main controller - Owns all derived state and runs the tick loop.

Inputs arrive from three places:
1. Scan callback (LIDAR thread) → SectorReading, staleness mark
2. Pose callback (base reader thread) → loop closure
3. Periodic tick (asyncio task) → staleness scale, rule, command

One lock guards the shared state so a tick always sees a complete
SectorReading and a settled loop/staleness state.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import threading

from wall_follower.config import STATS_INTERVAL_S
from wall_follower.params import Parameters
from wall_follower.perception import (
    LaserScan,
    LoopClosureDetector,
    PoseSample,
    ScanVisualizer,
    SectorReading,
    StalenessTracker,
    reduce_scan,
)
from wall_follower.decision import Rule, RuleEngine, VelocityCommand, default_rules
from .emitter import CommandEmitter

logger = logging.getLogger(__name__)


class Controller:
    """
    Wall follower controller.

    Coordinates:
    - Sensor layer (Lidar, Base)
    - Perception layer (scan reduction, StalenessTracker, LoopClosureDetector)
    - Decision layer (RuleEngine)
    - Output (CommandEmitter → Base)

    Usage:
        controller = Controller()
        asyncio.run(controller.run())

        # With injected hardware (tests, simulation):
        controller = Controller(params, lidar=fake_lidar, base=fake_base)
        controller.on_scan(scan)
        command = controller.tick()
    """

    def __init__(self, params: Parameters | None = None, lidar=None, base=None):
        self.params = params or Parameters.load()

        # Sensors
        if lidar is None:
            from wall_follower.sensors import Lidar
            lidar = Lidar(params=self.params)
        if base is None:
            from wall_follower.sensors import Base
            base = Base(params=self.params)
        self.lidar = lidar
        self.base = base

        # Perception
        self.staleness = StalenessTracker(self.params.staleness_base_factor)
        self.loop_closure = LoopClosureDetector(self.params.start_range)

        # Decision
        self.rules = RuleEngine(default_rules(self.params))

        # Output
        self.emitter = CommandEmitter(self.base)

        # Visualizer (for web debug)
        self.visualizer = ScanVisualizer(
            near=self.params.front_left_near,
            far=self.params.left_front_open,
        )

        # Shared state, guarded by _lock
        self._lock = threading.Lock()
        self._scan: LaserScan | None = None
        self._sectors: SectorReading | None = None
        self._pose: PoseSample | None = None
        self._rule: Rule | None = None
        self._scale: float | None = None
        self._scan_count = 0
        self._tick_count = 0

        # Control state
        self._running = False

        self.lidar.subscribe(self.on_scan)
        self.base.subscribe(self.on_pose)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def sectors(self) -> SectorReading | None:
        with self._lock:
            return self._sectors

    @property
    def latest_scan(self) -> LaserScan | None:
        with self._lock:
            return self._scan

    @property
    def last_command(self) -> VelocityCommand | None:
        return self.emitter.last_sent

    # ── Inputs ──────────────────────────────────────────────────

    def on_scan(self, scan: LaserScan):
        """
        Handle a new scan. Does not emit a command.

        Raises:
            ScanFormatError: scan cannot be reduced; state is left unchanged
        """
        sectors = reduce_scan(scan, self.params.beam_half_width)
        with self._lock:
            first = not self.staleness.has_received_first_scan
            self._scan = scan
            self._sectors = sectors
            self._scan_count += 1
            self.staleness.mark_fresh()

        if first:
            logger.info("First scan received")
        logger.debug(f"Closest distance in front: {sectors[0]:.3f}")

    def on_pose(self, pose: PoseSample):
        """Handle a new odometry pose. Does not emit a command."""
        with self._lock:
            self._pose = pose
            self.loop_closure.update(pose)

        logger.debug(f"Position (x: {pose.x:.3f}, y: {pose.y:.3f}), yaw: {pose.yaw:.3f}")

    def tick(self) -> VelocityCommand | None:
        """
        Run one control cycle.

        Returns:
            The command sent, or None before the first scan
        """
        with self._lock:
            if not self.staleness.has_received_first_scan:
                return None

            scale = self.staleness.tick()
            stale_cycles = self.staleness.cycles_since_fresh_scan
            rule = self.rules.select(self._sectors, self.loop_closure.near_start)

            previous = self._rule
            self._rule = rule
            self._scale = scale
            self._tick_count += 1

        if previous is None or previous.name != rule.name:
            logger.info(
                f"Rule: {rule.name} ({rule.description}). "
                f"Linear: {rule.command.linear}, Angular: {rule.command.angular}"
            )
        if stale_cycles and stale_cycles % 10 == 0:
            logger.warning(f"No fresh scan for {stale_cycles} ticks, scale={scale:.3f}")

        return self.emitter.emit(rule.command, scale)

    def status(self) -> dict:
        """JSON-ready snapshot of controller state."""
        with self._lock:
            sectors = self._sectors
            pose = self._pose
            loop = self.loop_closure.state
            status = {
                "running": self._running,
                "ticks": self._tick_count,
                "scans": self._scan_count,
                "has_scan": self.staleness.has_received_first_scan,
                "stale_cycles": self.staleness.cycles_since_fresh_scan,
                "scale": self._scale,
                "rule": self._rule.name if self._rule else None,
                "sectors": sectors.to_dict() if sectors else None,
                "pose": (
                    {"x": pose.x, "y": pose.y, "yaw": pose.yaw} if pose else None
                ),
                "loop": {
                    "phase": loop.phase.name,
                    "start": list(loop.start) if loop.start else None,
                    "near_start": loop.near_start,
                    "loops_closed": loop.loops_closed,
                },
            }

        command = self.emitter.last_sent
        status["command"] = command.to_dict() if command else None
        return status

    def render_jpeg(self) -> bytes | None:
        """Bird's eye view of the latest scan and sectors."""
        with self._lock:
            scan = self._scan
            sectors = self._sectors
            rule_name = self._rule.name if self._rule else ""
            scale = self._scale
        return self.visualizer.render(scan, sectors, rule_name, scale)

    # ── Lifecycle ───────────────────────────────────────────────

    async def run(self):
        """Run the main control loop."""
        logger.info("Controller starting...")

        # Setup signal handlers for graceful shutdown
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self.stop)

        try:
            if not self._init_hardware():
                logger.error("Failed to initialize hardware")
                return

            self._running = True
            logger.info("Wall follower node has been initialised")
            await self._control_loop()

        except Exception as e:
            logger.error(f"Controller error: {e}")
            raise
        finally:
            self._cleanup()

    def stop(self):
        """Ask the control loop to exit."""
        logger.info("Shutdown requested")
        self._running = False

    def _init_hardware(self) -> bool:
        """Initialize all hardware."""
        logger.info("Initializing hardware...")

        if not self.base.connect():
            logger.error("Failed to connect to drive base")
            return False

        if not self.lidar.start():
            logger.error("Failed to start LIDAR")
            return False

        logger.info("Hardware initialized")
        return True

    def _cleanup(self):
        """Cleanup on shutdown."""
        logger.info("Cleaning up...")

        self._running = False

        # Stop motors first
        if self.base.is_connected:
            self.base.stop()
            self.base.disconnect()

        if self.lidar.is_running:
            self.lidar.stop()

        logger.info("Wall follower node has been terminated")

    async def _control_loop(self):
        """Fixed-period tick loop."""
        period = self.params.tick_period
        stats_every = max(1, int(STATS_INTERVAL_S / period))
        loop = asyncio.get_running_loop()
        cycles = 0

        while self._running:
            loop_start = loop.time()

            self.tick()

            cycles += 1
            if cycles % stats_every == 0:
                self._log_stats()

            # Maintain loop rate
            elapsed = loop.time() - loop_start
            await asyncio.sleep(max(0, period - elapsed))

    def _log_stats(self):
        """Log periodic statistics."""
        status = self.status()
        sectors = status["sectors"]
        front = f"{sectors['FRONT']:.2f}m" if sectors else "None"
        scale = f"{status['scale']:.3f}" if status["scale"] is not None else "None"
        logger.info(
            f"Tick {status['ticks']}: "
            f"Rule={status['rule']}, "
            f"Scans={status['scans']}, "
            f"Scale={scale}, "
            f"Front={front}, "
            f"Loop={status['loop']['phase']}"
        )
