#!/usr/bin/env python3
"""
Challenge: Shape Builders

Use what you learned (loops, conditions, timing) to make your cube draw
shapes, spin or DANCE!

Ideas:
- Draw a square using a for loop
- Draw a triangle using turns of 120°
- Spin in place using while
- Combine moves into a creative routine

Helpers:
    await motion.move_forward(cube, speed, ms)
    await motion.turn_right(cube, degrees)
    await motion.turn_left(cube, degrees)
    await motion.wiggle(cube)
    await motion.nudge(cube)
    await motion.beep(cube)
    await motion.wait_ms(ms)
"""

from launch import launch


async def pattern(motion, cube):
    # --- START: edit below this line ---
    for _ in range(4):
        await motion.move_forward(cube, 80, 700)
        await motion.turn_right(cube, 90)

    await motion.beep(cube)
    await motion.wiggle(cube)
    # --- END: edit above this line ---


if __name__ == "__main__":
    launch("ChallengeSandbox", pattern)
