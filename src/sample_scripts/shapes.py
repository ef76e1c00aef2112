#!/usr/bin/env python3
"""
Shapes Demo

Regular polygons from triangle to hexagon, then an expanding spiral.
Each polygon turns by round(360 / sides) at every corner, so it closes
back on its starting heading.
"""

from launch import launch


async def pattern(motion, cube):
    for sides in (3, 4, 5, 6):
        await motion.regular_polygon(cube, sides=sides, side_ms=500, speed=80)
        await motion.beep(cube)
        await motion.wait_ms(500)

    await motion.spiral(cube, turns=2, start_ms=200, step_ms=40, speed=80, turn_per_step_deg=30)
    await motion.wiggle(cube)


if __name__ == "__main__":
    launch("ShapesDemo", pattern)
