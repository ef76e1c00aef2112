#!/usr/bin/env python3
"""
Student Patterns with a Double-Tap Reaction

Runs the pattern once, then keeps listening: double-tap a cube any time
(while no pattern is running) to trigger the custom reaction.
"""

import random

from launch import launch


async def pattern(motion, cube):
    # --- START: edit below this line ---

    # Example 1: Draw a square
    for _ in range(4):
        await motion.move_forward(cube, 80, 600)
        await motion.turn_right(cube, 90)

    # Example 2: Conditional move
    if random.random() > 0.5:
        await motion.turn_right(cube, 360)
    else:
        await motion.nudge(cube, 70, 250)
        await motion.beep(cube)

    # Example 3: Simple spiral
    await motion.spiral(cube, turns=6, start_ms=300, step_ms=80, speed=85, turn_per_step_deg=25)

    # --- END: edit above this line ---


async def on_double_tap(motion, cube):
    # --- START: edit below this line ---
    await motion.blink_motion(cube)
    await motion.turn_right(cube, 180)
    await motion.beep(cube)
    # --- END: edit above this line ---


if __name__ == "__main__":
    launch("StudentPatterns", pattern, double_tap_reaction=on_double_tap, keep_alive=True)
