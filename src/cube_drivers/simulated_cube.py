#!/usr/bin/env python3
"""
Simulated Cube

A cube handle with no hardware behind it. It records every command it
receives and dead-reckons where a real cube would have ended up, using the
same open-loop calibration model the motion layer uses for turns.

Useful for:
- Running patterns without a robot (simulator mode)
- Tests: assert on the exact commands a pattern issued
- Checking that a shape closes (heading back to start after a square)
"""

import logging
import math
from dataclasses import dataclass

from .cube_driver import CubeDriver, CommandResult, DriveCommand

logger = logging.getLogger(__name__)

# Used when no calibration is passed in; same values as CalibrationConfig
DEFAULT_MS_PER_DEG = 6.0
DEFAULT_TURN_DUTY = 70


@dataclass(frozen=True)
class DriveRecord:
    """A drive command plus the clock time (ms) at which it was issued."""
    command: DriveCommand
    at_ms: float


class SimulatedCube(CubeDriver):
    """
    In-memory cube that records commands and tracks an estimated pose.

    Pose Model:
    -----------
    Duration is the only proxy for distance and angle (there is no encoder
    feedback on a cube), so the model mirrors the calibration constants:

        heading rate (deg/ms) = (left - right) / (2 * turn_duty) / ms_per_deg
        travel (mm)           = (left + right) / 2 * duration * mm_per_duty_ms

    A right turn at +/-turn_duty for round(deg * ms_per_deg) ms therefore
    rotates by deg. Heading is in degrees, clockwise positive; heading 0
    points along +y.

    Example:
        cube = SimulatedCube("sim-1", config=CalibrationConfig(), clock=VirtualClock())
        cube.drive(70, -70, 540)
        cube.heading_deg      # 90.0
        cube.drive_commands   # [DriveCommand(70, -70, 540)]
    """

    def __init__(self, name="sim-1", config=None, clock=None, sound_supported=True,
                 mm_per_duty_ms=0.002):
        """
        Args:
            name: Human-readable name used in log lines
            config: Calibration to mirror (anything with ms_per_deg and
                    turn_duty, e.g. CalibrationConfig); built-in defaults if None
            clock: Optional clock (anything with now_ms) to timestamp commands
            sound_supported: False models a cube without a speaker
            mm_per_duty_ms: Straight-line travel per unit duty per ms
        """
        super().__init__(name)
        self.clock = clock
        if config is None:
            self.ms_per_deg = DEFAULT_MS_PER_DEG
            self.turn_duty = DEFAULT_TURN_DUTY
        else:
            self.ms_per_deg = config.ms_per_deg
            self.turn_duty = config.turn_duty
        self.mm_per_duty_ms = mm_per_duty_ms
        self.sound_supported = sound_supported

        self._connected = True
        self.records = []
        self.sounds = []

        # Dead-reckoned pose
        self.heading_deg = 0.0
        self.x_mm = 0.0
        self.y_mm = 0.0

    @property
    def is_connected(self):
        return self._connected

    @property
    def drive_commands(self):
        return [record.command for record in self.records]

    def drive(self, left, right, duration_ms):
        if not self._connected:
            return CommandResult.failure("not connected")

        command = DriveCommand(int(left), int(right), int(duration_ms))
        at_ms = self.clock.now_ms() if self.clock is not None else 0.0
        self.records.append(DriveRecord(command, at_ms))
        self._integrate(command)
        logger.debug(f"[{self.name}] Move({command.left}, {command.right}, "
                     f"{command.duration_ms}ms) heading={self.heading_deg:.1f}°")
        return CommandResult.success()

    def play_sound(self, preset_id):
        if not self._connected:
            return CommandResult.failure("not connected")
        if not self.sound_supported:
            return CommandResult.failure("unsupported")
        self.sounds.append(preset_id)
        return CommandResult.success()

    def disconnect(self):
        if self._connected:
            logger.info(f"[{self.name}] Disconnected")
        self._connected = False

    def double_tap(self):
        """Simulate the user double-tapping the cube."""
        self.double_tap_callback.fire(self)

    def heading_error_deg(self, target_deg=0.0):
        """Smallest signed angle between the current heading and target_deg."""
        return (self.heading_deg - target_deg + 180.0) % 360.0 - 180.0

    def _integrate(self, command):
        ms = command.duration_ms
        if ms <= 0:
            return

        # Translate along the current heading, then rotate
        travel = (command.left + command.right) / 2.0 * ms * self.mm_per_duty_ms
        rad = math.radians(self.heading_deg)
        self.x_mm += travel * math.sin(rad)
        self.y_mm += travel * math.cos(rad)

        spin = (command.left - command.right) / (2.0 * self.turn_duty)
        self.heading_deg += spin * ms / self.ms_per_deg
