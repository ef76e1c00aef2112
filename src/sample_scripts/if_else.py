#!/usr/bin/env python3
"""
If / Else

React differently based on a condition. Here the condition is a coin
flip: either spin a full circle, or wiggle and drive forward.
"""

import random

from launch import launch


async def pattern(motion, cube):
    # --- START: edit below this line ---
    spin = random.random() > 0.5

    if spin:
        await motion.turn_right(cube, 360)
        await motion.beep(cube)
    else:
        await motion.wiggle(cube, 2, 180)
        await motion.move_forward(cube, 80, 600)

    await motion.beep(cube)  # signal done
    # --- END: edit above this line ---


if __name__ == "__main__":
    launch("IfElseSandbox", pattern)
