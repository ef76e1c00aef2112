#!/usr/bin/env python3
"""
While Loops

Repeat actions as long as a condition is true. The condition is checked
first: if true, the block runs and the condition is checked again; if
false, the loop exits.
"""

from launch import launch


async def pattern(motion, cube):
    # --- START: edit below this line ---
    spins = 0
    while spins < 3:
        await motion.turn_right(cube, 120)
        await motion.beep(cube)
        spins += 1

    await motion.wiggle(cube)  # celebrate when done
    await motion.beep(cube)
    # --- END: edit above this line ---


if __name__ == "__main__":
    launch("WhileLoopSandbox", pattern)
