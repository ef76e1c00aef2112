#!/usr/bin/env python3
"""
Calibration and timing constants for the motion layer.

Robotics Context:
----------------
A cube has no angular feedback sensor, so "turn 90 degrees" is really "spin
for N milliseconds". ms_per_deg is that open-loop conversion factor. It is
measured once per cube/surface (spin for a known time, see how far it got)
and then treated as a constant.

motor_settle_ms is the extra wait appended after every timed command so the
wheels have fully stopped before the next command starts.
"""

import dataclasses
from dataclasses import dataclass

from cube_drivers.config_file import load_config_file


def clamp(value, low, high):
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


@dataclass(frozen=True)
class CalibrationConfig:
    """
    Process-wide tunables, set once at start and read-only afterwards.

    Example:
        config = CalibrationConfig(ms_per_deg=5.5)
        config = CalibrationConfig.from_config("configs/cube_config.json")
    """
    # Timing / tuning
    ms_per_deg: float = 6.0
    motor_settle_ms: int = 50

    # Straight moves
    speed_min: int = -115
    speed_max: int = 115
    move_ms_min: int = 10
    move_ms_max: int = 8000

    # Turns
    angle_min: int = -360
    angle_max: int = 360
    turn_ms_min: int = 30
    turn_ms_max: int = 2000
    turn_duty: int = 70

    wait_ms_max: int = 10000

    # Beep and its motion fallback
    sound_preset: int = 3
    sound_wait_ms: int = 700
    fallback_pulse_ms: int = 120
    fallback_duty: int = 100
    fallback_settle_ms: int = 50

    # Runner pacing
    group_pause_ms: int = 300
    start_delay_ms: int = 500

    # Defaults offered to pattern authors
    default_speed: int = 80
    default_move_ms: int = 1000
    default_turn_deg: int = 90

    def __post_init__(self):
        # Slider ranges offered to pattern authors
        object.__setattr__(self, 'default_speed', clamp(self.default_speed, 10, 115))
        object.__setattr__(self, 'default_move_ms', clamp(self.default_move_ms, 50, 3000))
        object.__setattr__(self, 'default_turn_deg', clamp(self.default_turn_deg, 5, 180))

    @classmethod
    def from_dict(cls, values):
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown calibration keys: {', '.join(unknown)}")
        return cls(**values)

    @classmethod
    def from_config(cls, config_path=None):
        """
        Load calibration from the "calibration" section of cube_config.json.

        Args:
            config_path: Path to the JSON file (optional, uses default if None)

        Returns:
            CalibrationConfig: defaults overridden by the file's values
        """
        config = load_config_file(config_path)
        return cls.from_dict(config.get('calibration', {}))
