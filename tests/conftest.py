import pytest

from cube_control import CalibrationConfig, CubeMotion, VirtualClock
from cube_drivers import SimulatedCube


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def config():
    return CalibrationConfig()


@pytest.fixture
def motion(config, clock):
    return CubeMotion(config, clock)


@pytest.fixture
def make_cube(config, clock):
    def factory(name="sim-1", **kwargs):
        return SimulatedCube(name=name, config=config, clock=clock, **kwargs)
    return factory


@pytest.fixture
def cube(make_cube):
    return make_cube()


def commands(cube):
    return [(c.left, c.right, c.duration_ms) for c in cube.drive_commands]
