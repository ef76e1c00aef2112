#!/usr/bin/env python3
"""
Shared launcher for the sample patterns.

Each lesson script only defines its pattern; this module connects the
cubes, runs the pattern and shuts everything down cleanly, the same way for
every lesson.

Edit the settings below to match your setup:
- CONNECT_TYPE: ConnectType.SIMULATOR for a dry run, ConnectType.CAN for
  real wheel bases listed in configs/cube_config.json
- NUMBER_OF_CUBES / RUN_ON_ALL_CUBES: how many cubes, and whether every
  cube runs the pattern in turn
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cube_drivers import CubeManager, ConnectType, DEFAULT_CONFIG_PATH
from cube_control import CalibrationConfig, TeachingSandbox, NoUsableCubesError

CONFIG_PATH = DEFAULT_CONFIG_PATH

CONNECT_TYPE = ConnectType.SIMULATOR
NUMBER_OF_CUBES = 1
RUN_ON_ALL_CUBES = False


async def _run(name, pattern, double_tap_reaction, keep_alive):
    config = CalibrationConfig.from_config(CONFIG_PATH)
    manager = CubeManager(
        CONNECT_TYPE,
        config=config,
        config_path=CONFIG_PATH
    )
    sandbox = TeachingSandbox(
        manager,
        pattern,
        number_of_cubes=NUMBER_OF_CUBES,
        run_on_all_cubes=RUN_ON_ALL_CUBES,
        double_tap_reaction=double_tap_reaction,
        config=config,
        name=name
    )

    try:
        await sandbox.start()
        if keep_alive:
            print("Waiting for double-taps. Press Ctrl+C to stop\n")
            while True:
                await asyncio.sleep(1.0)
    finally:
        sandbox.close()


def launch(name, pattern, double_tap_reaction=None, keep_alive=False):
    """
    Run `pattern` once with the settings above.

    Args:
        name: Lesson name, used as the log tag
        pattern: async (motion, cube) callable
        double_tap_reaction: Optional async (motion, cube) reaction
        keep_alive: Keep listening for double-taps after the pattern ends
    """
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    print("\n" + "=" * 60)
    print(name.upper())
    print("=" * 60 + "\n")

    try:
        asyncio.run(_run(name, pattern, double_tap_reaction, keep_alive))
    except KeyboardInterrupt:
        print("\n\nProgram interrupted by user.")
    except NoUsableCubesError:
        print("\nNo usable cubes. Check power and the cube list in cube_config.json.")
        sys.exit(1)

    print("\nCubes stopped and disconnected.")
