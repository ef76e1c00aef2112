#!/usr/bin/env python3
"""
Cube discovery and connection management.

The motion layer never creates cubes itself; it is handed whatever the
manager found. A slot the manager could not fill is returned as None, and
the runner skips it.
"""

import asyncio
import enum
import logging

import can

from .can_wheel_cube import CanWheelCube
from .simulated_cube import SimulatedCube

logger = logging.getLogger(__name__)


class ConnectType(enum.Enum):
    SIMULATOR = "simulator"
    CAN = "can"


class CubeManager:
    """
    Connects to a number of cubes of one kind.

    Example:
        manager = CubeManager(ConnectType.SIMULATOR)
        cubes = await manager.connect(3)
        ...
        manager.disconnect_all()
    """

    def __init__(self, connect_type=ConnectType.SIMULATOR, config=None, config_path=None,
                 clock=None, bus_interface='socketcan'):
        """
        Args:
            connect_type: ConnectType.SIMULATOR or ConnectType.CAN
            config: Calibration the simulated cubes mirror (CalibrationConfig)
            config_path: cube_config.json with the CAN cube layout
            clock: Clock used to timestamp simulated commands
            bus_interface: python-can interface type for CAN cubes
        """
        self.connect_type = connect_type
        self.config = config
        self.config_path = config_path
        self.clock = clock
        self.bus_interface = bus_interface
        self.cubes = []

    async def connect(self, count):
        """
        Connect up to `count` cubes.

        Returns:
            list: one entry per requested slot, a CubeDriver or None
        """
        found = []
        for index in range(max(0, count)):
            found.append(self._connect_one(index))
            # Give the event loop a turn between connections
            await asyncio.sleep(0)

        self.cubes.extend(cube for cube in found if cube is not None)
        logger.info(f"[CubeManager] Connected {sum(c is not None for c in found)}"
                    f"/{count} {self.connect_type.value} cube(s)")
        return found

    def disconnect(self, cube):
        if cube is None:
            return
        cube.disconnect()
        if cube in self.cubes:
            self.cubes.remove(cube)

    def disconnect_all(self):
        for cube in list(self.cubes):
            self.disconnect(cube)

    def _connect_one(self, index):
        if self.connect_type is ConnectType.SIMULATOR:
            return SimulatedCube(
                name=f"sim-{index + 1}",
                config=self.config,
                clock=self.clock
            )

        try:
            return CanWheelCube.from_config(
                cube_index=index,
                config_path=self.config_path,
                bus_interface=self.bus_interface
            )
        except (ValueError, KeyError, OSError, can.CanError) as e:
            logger.warning(f"[CubeManager] Cube {index + 1} unavailable: {e}")
            return None
