#!/usr/bin/env python3
"""
Teaching Sandbox Session

Wires discovery, trigger subscription and the runner into one start/close
lifecycle:

1. Connect the requested number of cubes
2. Keep only the connected ones (stop hard if there are none)
3. Subscribe the double-tap reaction on every cube
4. Wait a short start delay so the cubes are ready
5. Run the pattern on the first cube or on all of them

Design Pattern:
--------------
Facade - a student only writes a pattern function and hands it to
TeachingSandbox. Everything else (connection, pacing, busy flag, cleanup)
happens here.
"""

import logging

from .calibration import CalibrationConfig
from .clock import AsyncioClock
from .errors import NoUsableCubesError
from .motion import CubeMotion
from .reactions import bind_reaction
from .run_context import RunContext
from .runner import PatternRunner, is_usable

logger = logging.getLogger(__name__)


class TeachingSandbox:
    """
    One sandbox session over a group of cubes.

    Example Usage:
    -------------
        async def pattern(motion, cube):
            await motion.regular_polygon(cube, sides=3, side_ms=600, speed=80)

        sandbox = TeachingSandbox(CubeManager(ConnectType.SIMULATOR), pattern,
                                  double_tap_reaction=double_tap_reaction)
        try:
            await sandbox.start()
        finally:
            sandbox.close()
    """

    def __init__(self, manager, pattern, number_of_cubes=1, run_on_all_cubes=False,
                 double_tap_reaction=None, config=None, clock=None, name="Sandbox"):
        """
        Args:
            manager: Discovery collaborator with async connect(count)
            pattern: async (motion, cube) callable to run
            number_of_cubes: How many cubes to connect
            run_on_all_cubes: True = every cube in turn, False = first cube only
            double_tap_reaction: Optional async (motion, cube) reaction
            config: CalibrationConfig (defaults if None)
            clock: Clock for all waits (AsyncioClock if None)
            name: Tag used in log lines and as the listener key
        """
        self.manager = manager
        self.pattern = pattern
        self.number_of_cubes = number_of_cubes
        self.run_on_all_cubes = run_on_all_cubes
        self.double_tap_reaction = double_tap_reaction
        self.name = name

        self.config = config or CalibrationConfig()
        self.clock = clock or AsyncioClock()
        self.motion = CubeMotion(self.config, self.clock)
        self.context = RunContext(name)
        self.runner = PatternRunner(self.motion, self.context)
        self.cubes = []

    @property
    def busy(self):
        return self.context.busy

    async def start(self):
        logger.info(f"[{self.name}] Scanning... press cube buttons to wake them.")
        found = await self.manager.connect(self.number_of_cubes)
        self.cubes = [c for c in found if is_usable(c)]

        if not self.cubes:
            logger.error(f"[{self.name}] No cubes connected.")
            raise NoUsableCubesError("No usable cubes connected")

        if self.double_tap_reaction is not None:
            reaction = bind_reaction(self.motion, self.double_tap_reaction)
            for cube in self.cubes:
                if getattr(cube, 'double_tap_callback', None) is None:
                    logger.warning(f"[{self.name}] {cube.name} has no double-tap source")
                    continue
                self.context.subscribe(cube, self.name, reaction)

        logger.info(f"[{self.name}] Connected {len(self.cubes)} cube(s).")
        await self.clock.sleep_ms(self.config.start_delay_ms)

        await self.runner.run(self.cubes, self.pattern, run_on_all=self.run_on_all_cubes)
        logger.info(f"[{self.name}] Ready. Double-tap a cube any time to trigger its reaction.")

    def close(self):
        """Unsubscribe every listener and disconnect every cube, best-effort."""
        self.context.unsubscribe_all()
        for cube in self.cubes:
            try:
                self.manager.disconnect(cube)
            except Exception as e:
                logger.warning(f"[{self.name}] Disconnect of {cube.name} failed: {e}")
        self.cubes = []
