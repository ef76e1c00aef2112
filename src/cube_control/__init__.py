"""
Cube Control Package

Motion primitives, composite shapes and pattern sequencing for two-wheeled
cubes. This layer is hardware-agnostic - it works with any CubeDriver.
"""

__version__ = '0.3.0'

from .calibration import CalibrationConfig, clamp
from .clock import AsyncioClock, VirtualClock
from .errors import CubeSandboxError, NoUsableCubesError, RunInProgressError
from .motion import CubeMotion
from .reactions import double_tap_reaction, bind_reaction
from .run_context import RunContext
from .runner import PatternRunner
from .sandbox import TeachingSandbox

__all__ = [
    'CalibrationConfig', 'clamp', 'AsyncioClock', 'VirtualClock',
    'CubeSandboxError', 'NoUsableCubesError', 'RunInProgressError',
    'CubeMotion', 'double_tap_reaction', 'bind_reaction', 'RunContext',
    'PatternRunner', 'TeachingSandbox'
]
