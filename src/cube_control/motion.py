#!/usr/bin/env python3
"""
Motion Primitives and Composite Shapes

This module provides the CubeMotion class: every helper a pattern author
calls ("move forward", "turn right 90", "spiral", "beep", ...). Each helper
turns its intent into clamped, timed dual-wheel commands and waits until the
motion (plus a settle margin) is over before returning.

Robotics Context:
----------------
The cube is open-loop: there is no encoder or gyro feedback. Distance and
angle are both approximated by "how long the wheels spin". That is why every
command is followed by a wait - the next command must not start while the
wheels are still moving, or the two motions blend into one.

Data flow:
    pattern -> composite (spiral, polygon, ...) -> move/turn
            -> _command (clamp + issue + wait) -> CubeDriver.drive
"""

import logging

from cube_drivers import CommandResult

from .calibration import CalibrationConfig, clamp
from .clock import AsyncioClock

logger = logging.getLogger(__name__)


class CubeMotion:
    """
    Motion helpers for one group of cubes sharing a calibration.

    Every helper is forgiving: out-of-range arguments are clamped to the
    nearest valid value and never raise. Actuator failures (cube went away)
    are discarded - the motion simply does not happen, but the wait still
    runs so a pattern's timing stays the same.

    Design Pattern:
    --------------
    Composition - CubeMotion doesn't own any cube. The cube is passed into
    each call, so the same helpers drive any number of cubes, one at a time.

    Example Usage:
    -------------
        motion = CubeMotion(CalibrationConfig())

        async def square(motion, cube):
            for _ in range(4):
                await motion.move_forward(cube, 80, 700)
                await motion.turn_right(cube, 90)

        await square(motion, cube)
    """

    def __init__(self, config=None, clock=None):
        """
        Args:
            config: CalibrationConfig (defaults if None)
            clock: Clock used for all waits (AsyncioClock if None)
        """
        self.config = config or CalibrationConfig()
        self.clock = clock or AsyncioClock()

    # ========================================================================
    # Clamp & Command
    # ========================================================================

    async def _command(self, cube, left, right, ms, settle_ms=None):
        """
        Single choke point for every motion.

        Clamps both duties to the speed bounds, issues one drive command,
        then waits ms + settle. A failed or raising drive is logged and
        discarded.
        """
        cfg = self.config
        if settle_ms is None:
            settle_ms = cfg.motor_settle_ms
        left = clamp(int(left), cfg.speed_min, cfg.speed_max)
        right = clamp(int(right), cfg.speed_min, cfg.speed_max)
        ms = clamp(int(ms), 0, cfg.move_ms_max)

        try:
            result = cube.drive(left, right, ms)
        except Exception as e:
            logger.warning(f"[{cube.name}] Move({left}, {right}, {ms}) raised: {e}")
            result = CommandResult.failure(str(e))
        if not result.ok:
            logger.debug(f"[{cube.name}] Move({left}, {right}, {ms}) dropped: {result.reason}")

        await self.clock.sleep_ms(ms + settle_ms)
        return result

    async def move_forward(self, cube, speed=None, ms=None):
        """
        Drive straight for a fixed time.

        Negative speed drives backwards.

        Args:
            cube: CubeDriver
            speed: Wheel duty, clamped to [-115, 115] (config default if None)
            ms: Duration, clamped to [10, 8000] ms (config default if None)
        """
        cfg = self.config
        if speed is None:
            speed = cfg.default_speed
        if ms is None:
            ms = cfg.default_move_ms
        speed = clamp(speed, cfg.speed_min, cfg.speed_max)
        ms = clamp(ms, cfg.move_ms_min, cfg.move_ms_max)
        await self._command(cube, speed, speed, ms)

    # ========================================================================
    # Turns
    # ========================================================================

    def turn_duration_ms(self, deg):
        """
        Calibration model: degrees -> spin time.

            duration = clamp(round(|clamp(deg, -360, 360)| * ms_per_deg), 30, 2000)

        Note: with a slow ms_per_deg the 2000 ms cap can cut a large turn
        short. That under-rotation is kept as-is and only logged.
        """
        cfg = self.config
        deg = clamp(deg, cfg.angle_min, cfg.angle_max)
        calibrated = int(round(abs(deg) * cfg.ms_per_deg))
        ms = clamp(calibrated, cfg.turn_ms_min, cfg.turn_ms_max)
        if calibrated > cfg.turn_ms_max:
            logger.warning(f"Turn of {deg}° needs {calibrated}ms, capped at {ms}ms "
                           f"(ms_per_deg={cfg.ms_per_deg}); the cube will under-rotate")
        return ms

    async def turn_right(self, cube, deg=None):
        """
        Spin in place; positive deg is clockwise (right), negative is left.

        Args:
            cube: CubeDriver
            deg: Angle in degrees, clamped to [-360, 360] (config default if None)
        """
        cfg = self.config
        if deg is None:
            deg = cfg.default_turn_deg
        deg = clamp(deg, cfg.angle_min, cfg.angle_max)
        ms = self.turn_duration_ms(deg)
        s = cfg.turn_duty
        if deg >= 0:
            await self._command(cube, s, -s, ms)
        else:
            await self._command(cube, -s, s, ms)

    async def turn_left(self, cube, deg=None):
        """Exactly turn_right(cube, -deg)."""
        if deg is None:
            deg = self.config.default_turn_deg
        await self.turn_right(cube, -deg)

    # ========================================================================
    # Composite Moves
    # ========================================================================

    async def wiggle(self, cube, repeats=2, turn_ms=180):
        """
        Wobble right-left `repeats` times around the starting heading.

        Both halves use the same duty and duration, so the net heading
        change is ~0.
        """
        s = self.config.turn_duty
        for _ in range(repeats):
            await self._command(cube, s, -s, turn_ms)
            await self._command(cube, -s, s, turn_ms)

    async def nudge(self, cube, speed=60, ms=250):
        """Small hop: forward for ms, back at the same speed for ms // 2."""
        await self._command(cube, speed, speed, ms)
        await self._command(cube, -speed, -speed, ms // 2)

    async def blink_motion(self, cube, speed=80, forward_ms=180, back_ms=140):
        """Quick forward-back jolt, used as an acknowledge gesture."""
        cfg = self.config
        speed = clamp(speed, cfg.speed_min, cfg.speed_max)
        forward_ms = clamp(forward_ms, 10, 2000)
        back_ms = clamp(back_ms, 10, 2000)

        await self._command(cube, speed, speed, forward_ms)
        await self._command(cube, -speed, -speed, back_ms)

    @staticmethod
    def polygon_exterior_angle(sides):
        """
        Right turn per corner of a regular polygon.

        Interior angle is 180 - 360/n, and the cube turns by what's left of
        a straight line: 180 - interior, i.e. round(360 / sides). The n
        corners sum to ~360° so the shape closes.
        """
        interior_turn = 180 - round(360 / sides)
        return 180 - interior_turn

    async def regular_polygon(self, cube, sides, side_ms, speed):
        """
        Drive a regular polygon clockwise.

        Args:
            sides: Number of sides, clamped to [3, 12]
            side_ms: Time per side, clamped to [80, 4000] ms
            speed: Drive duty, clamped to [10, 115]
        """
        sides = clamp(sides, 3, 12)
        side_ms = clamp(side_ms, 80, 4000)
        speed = clamp(speed, 10, 115)

        right_turn_deg = self.polygon_exterior_angle(sides)
        for _ in range(sides):
            await self.move_forward(cube, speed, side_ms)
            await self.turn_right(cube, right_turn_deg)

    async def spiral(self, cube, turns, start_ms, step_ms, speed, turn_per_step_deg=20):
        """
        Expanding spiral: constant turns between ever-longer straights.

        Runs turns * 8 steps. Step i drives for start_ms + i * step_ms and
        then turns right by turn_per_step_deg.

        Args:
            turns: Clamped to [1, 20]
            start_ms: First straight, clamped to [100, 1500] ms
            step_ms: Growth per step, clamped to [10, 500] ms
            speed: Drive duty, clamped to [10, 115]
            turn_per_step_deg: Clamped to [5, 60]
        """
        turns = clamp(turns, 1, 20)
        start_ms = clamp(start_ms, 100, 1500)
        step_ms = clamp(step_ms, 10, 500)
        speed = clamp(speed, 10, 115)
        turn_per_step_deg = clamp(turn_per_step_deg, 5, 60)

        ms = start_ms
        for _ in range(turns * 8):
            await self.move_forward(cube, speed, ms)
            await self.turn_right(cube, turn_per_step_deg)
            ms += step_ms

    # ========================================================================
    # Feedback, Waiting, Stopping
    # ========================================================================

    async def beep(self, cube):
        """
        Play the preset sound, or spin briefly if the cube can't.

        Exactly one of the two runs per call. A handle that raises counts as
        a failed sound attempt.
        """
        cfg = self.config
        try:
            result = cube.play_sound(cfg.sound_preset)
        except Exception as e:
            result = CommandResult.failure(str(e))
        if result.ok:
            await self.clock.sleep_ms(cfg.sound_wait_ms)
            return

        logger.debug(f"[{cube.name}] Sound unavailable ({result.reason}), spinning instead")
        await self._command(cube, cfg.fallback_duty, -cfg.fallback_duty,
                            cfg.fallback_pulse_ms, settle_ms=cfg.fallback_settle_ms)

    async def wait_ms(self, ms):
        """Pause the pattern; clamped to [0, 10000] ms."""
        await self.clock.sleep_ms(clamp(ms, 0, self.config.wait_ms_max))

    def safe_stop(self, cube):
        """
        Best-effort zero-duty stop. Never raises.

        Works on connected, disconnected and missing (None) cubes alike.
        """
        if cube is None:
            return
        name = getattr(cube, 'name', cube)
        try:
            result = cube.drive(0, 0, 0)
            if not result.ok:
                logger.debug(f"[{name}] Stop dropped: {result.reason}")
        except Exception as e:
            logger.debug(f"[{name}] Stop raised: {e}")
