"""
Built-in event-triggered reactions.

A reaction is a short, fixed sequence run once per trigger. It is only ever
started when no pattern is running (see RunContext).
"""


async def double_tap_reaction(motion, cube):
    """Acknowledge a double-tap: jolt, turn around, beep."""
    await motion.blink_motion(cube)
    await motion.turn_right(cube, 180)
    await motion.beep(cube)


def bind_reaction(motion, reaction=double_tap_reaction):
    """Adapt a (motion, cube) reaction to the (cube) form RunContext expects."""
    async def react(cube):
        await reaction(motion, cube)
    return react
