#!/usr/bin/env python3
"""
Pattern Runner

Applies a pattern to one cube or to every cube in a group, one cube at a
time. Runs are intentionally sequential, never parallel: at most one cube
is moving because of the pattern at any instant, which keeps behavior easy
to predict on a shared mat.

A pattern is any async callable taking (motion, cube):

    async def square(motion, cube):
        for _ in range(4):
            await motion.move_forward(cube, 80, 700)
            await motion.turn_right(cube, 90)
"""

import logging

from .errors import NoUsableCubesError
from .run_context import RunContext

logger = logging.getLogger(__name__)


def is_usable(cube):
    return cube is not None and cube.is_connected


class PatternRunner:
    """
    Runs patterns with the busy flag held for the whole run.

    The flag is raised before the first command and cleared in a finally
    block, so an early return or an exception inside the pattern still
    releases it. Every cube gets a best-effort stop after its pattern,
    however the pattern ended.
    """

    def __init__(self, motion, context=None):
        self.motion = motion
        self.context = context or RunContext()

    async def run(self, cubes, pattern, run_on_all=False):
        if run_on_all:
            await self.run_on_all(cubes, pattern)
        else:
            await self.run_on_first(cubes, pattern)

    async def run_on_first(self, cubes, pattern):
        """Run the pattern on the first connected cube, then stop it."""
        cube = next((c for c in cubes if is_usable(c)), None)
        if cube is None:
            raise NoUsableCubesError("No usable cubes: nothing to run the pattern on")

        self.context.begin_run()
        try:
            await self._run_one(cube, pattern)
        finally:
            self.context.end_run()

    async def run_on_all(self, cubes, pattern):
        """
        Run the pattern on every connected cube, in order.

        Cubes that are missing or disconnected when their turn comes are
        skipped. After each cube: stop, then a fixed group_pause_ms pause
        before the next one starts.
        """
        cubes = list(cubes)
        if not any(is_usable(c) for c in cubes):
            raise NoUsableCubesError("No usable cubes: nothing to run the pattern on")

        pause_ms = self.motion.config.group_pause_ms
        self.context.begin_run()
        try:
            for index, cube in enumerate(cubes):
                if not is_usable(cube):
                    logger.info(f"[Runner] Skipping cube {index + 1}: not connected")
                    continue
                await self._run_one(cube, pattern)
                await self.motion.clock.sleep_ms(pause_ms)
        finally:
            self.context.end_run()

    async def _run_one(self, cube, pattern):
        logger.info(f"[Runner] Running pattern on {cube.name}...")
        try:
            await pattern(self.motion, cube)
        finally:
            self.motion.safe_stop(cube)
        logger.info(f"[Runner] Pattern finished on {cube.name}")
