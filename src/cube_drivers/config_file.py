#!/usr/bin/env python3
"""
Reader for configs/cube_config.json.

One file holds both the CAN cube layout ("can_interface", "cubes") and the
motion calibration ("calibration"). Every from_config() goes through
load_config_file() so they all agree on the default location.
"""

import json
from pathlib import Path

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / 'configs' / 'cube_config.json'


def load_config_file(config_path=None):
    """Read a cube config JSON file (default: configs/cube_config.json)."""
    config_path = DEFAULT_CONFIG_PATH if config_path is None else Path(config_path)
    with open(config_path, 'r') as f:
        return json.load(f)
