#!/usr/bin/env python3
"""
For Loops

Repeat an action a fixed number of times:

    for i in range(4):
        await motion.move_forward(cube, 80, 600)
        await motion.turn_right(cube, 90)
"""

from launch import launch


async def pattern(motion, cube):
    # --- START: edit below this line ---
    for _ in range(4):
        await motion.move_forward(cube, 80, 600)
        await motion.turn_right(cube, 90)

    await motion.beep(cube)  # signal finished
    # --- END: edit above this line ---


if __name__ == "__main__":
    launch("ForLoopSandbox", pattern)
