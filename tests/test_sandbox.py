import asyncio

import pytest

from cube_control import (
    CalibrationConfig, CubeMotion, NoUsableCubesError, TeachingSandbox, double_tap_reaction
)
from cube_drivers import ConnectType, CubeManager, SimulatedCube

from conftest import commands


async def triangle(motion, cube):
    await motion.regular_polygon(cube, sides=3, side_ms=400, speed=80)


class FixedManager:
    """Discovery stand-in that hands back a prepared list."""

    def __init__(self, cubes):
        self.found = cubes
        self.disconnected = []

    async def connect(self, count):
        return self.found[:count]

    def disconnect(self, cube):
        self.disconnected.append(cube)
        cube.disconnect()


def test_start_runs_pattern_on_first_cube(clock, config):
    manager = CubeManager(ConnectType.SIMULATOR, clock=clock)
    sandbox = TeachingSandbox(manager, triangle, number_of_cubes=2, config=config, clock=clock)

    asyncio.run(sandbox.start())

    first, second = sandbox.cubes
    assert clock.sleeps[0] == 500
    assert len(commands(first)) == 7
    assert commands(first)[-1] == (0, 0, 0)
    assert commands(second) == []
    assert abs(first.heading_error_deg(0.0)) <= 1.0
    assert not sandbox.busy


def test_start_runs_pattern_on_all_cubes(clock, config):
    manager = CubeManager(ConnectType.SIMULATOR, clock=clock)
    sandbox = TeachingSandbox(manager, triangle, number_of_cubes=3, run_on_all_cubes=True,
                              config=config, clock=clock)

    asyncio.run(sandbox.start())

    assert [len(commands(c)) for c in sandbox.cubes] == [7, 7, 7]


def test_start_without_cubes_raises(clock):
    gone = SimulatedCube("gone", clock=clock)
    gone.disconnect()
    sandbox = TeachingSandbox(FixedManager([None, gone]), triangle, number_of_cubes=2, clock=clock)

    with pytest.raises(NoUsableCubesError):
        asyncio.run(sandbox.start())

    assert clock.sleeps == []
    assert sandbox.cubes == []


def test_double_tap_after_start_and_close(clock):
    cube = SimulatedCube("sim-1", clock=clock)
    manager = FixedManager([cube])
    sandbox = TeachingSandbox(manager, triangle, double_tap_reaction=double_tap_reaction,
                              clock=clock, name="StudentPatterns")

    async def scenario():
        await sandbox.start()
        before = len(cube.drive_commands)
        cube.double_tap()
        await sandbox.context.wait_reactions()
        return before

    before = asyncio.run(scenario())

    assert commands(cube)[before:] == [(80, 80, 180), (-80, -80, 140), (70, -70, 1080)]

    sandbox.close()

    assert not cube.double_tap_callback.has_listener("StudentPatterns")
    assert manager.disconnected == [cube]
    assert not cube.is_connected


def test_manager_connect_simulator(clock):
    config = CalibrationConfig(ms_per_deg=5.0, turn_duty=60)
    manager = CubeManager(ConnectType.SIMULATOR, config=config, clock=clock)

    cubes = asyncio.run(manager.connect(2))

    assert [c.name for c in cubes] == ["sim-1", "sim-2"]
    assert all(c.ms_per_deg == 5.0 and c.turn_duty == 60 for c in cubes)

    manager.disconnect_all()
    assert not any(c.is_connected for c in cubes)
    assert manager.cubes == []


def test_simulated_cubes_share_the_motion_calibration(clock):
    config = CalibrationConfig(ms_per_deg=4.5)
    manager = CubeManager(ConnectType.SIMULATOR, config=config, clock=clock)
    motion = CubeMotion(config, clock)
    cube, = asyncio.run(manager.connect(1))

    asyncio.run(motion.turn_right(cube, 90))

    assert commands(cube) == [(70, -70, 405)]
    assert cube.heading_error_deg(90) == pytest.approx(0.0, abs=1.0)


def test_simulated_cube_without_config_uses_default_calibration():
    cube = SimulatedCube("sim-1")

    assert (cube.ms_per_deg, cube.turn_duty) == (6.0, 70)


def test_manager_connect_can_without_config_gives_empty_slots(tmp_path):
    manager = CubeManager(ConnectType.CAN, config_path=tmp_path / "missing.json",
                          bus_interface="virtual")

    cubes = asyncio.run(manager.connect(2))

    assert cubes == [None, None]
