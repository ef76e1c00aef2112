"""
Cube Drivers Package

Low-level handles for two-wheeled cubes.
Each handle implements the CubeDriver interface for its transport.
"""

__version__ = '0.3.0'

from .config_file import load_config_file, DEFAULT_CONFIG_PATH
from .cube_driver import CubeDriver, CommandResult, DriveCommand, CallbackContainer
from .simulated_cube import SimulatedCube, DriveRecord
from .can_wheel_cube import CanWheelCube
from .cube_manager import CubeManager, ConnectType

__all__ = [
    'load_config_file', 'DEFAULT_CONFIG_PATH',
    'CubeDriver', 'CommandResult', 'DriveCommand', 'CallbackContainer',
    'SimulatedCube', 'DriveRecord', 'CanWheelCube', 'CubeManager', 'ConnectType'
]
