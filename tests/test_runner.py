import asyncio
import logging
import threading

import pytest

from cube_control import (
    NoUsableCubesError, PatternRunner, RunContext, RunInProgressError,
    bind_reaction, double_tap_reaction
)

from conftest import commands


async def short_move(motion, cube):
    await motion.move_forward(cube, 80, 700)


@pytest.fixture
def runner(motion):
    return PatternRunner(motion, RunContext("test"))


def test_group_run_skips_disconnected_cube(runner, make_cube):
    first, second, third = make_cube("a"), make_cube("b"), make_cube("c")
    second.disconnect()
    ran = []

    async def pattern(motion, cube):
        ran.append(cube.name)
        await short_move(motion, cube)

    asyncio.run(runner.run_on_all([first, second, third], pattern))

    assert ran == ["a", "c"]
    assert commands(first) == [(80, 80, 700), (0, 0, 0)]
    assert commands(second) == []
    assert commands(third) == [(80, 80, 700), (0, 0, 0)]

    # Stop of the first cube -> 300 ms pause -> first command on the next
    first_stop = first.records[-1].at_ms
    next_start = third.records[0].at_ms
    assert next_start - first_stop == 300


def test_group_run_skips_missing_slot(runner, make_cube):
    cube = make_cube()
    asyncio.run(runner.run_on_all([None, cube], short_move))
    assert commands(cube) == [(80, 80, 700), (0, 0, 0)]


def test_group_run_pauses_after_every_cube(runner, make_cube, clock):
    cubes = [make_cube("a"), make_cube("b")]

    asyncio.run(runner.run_on_all(cubes, short_move))

    assert clock.sleeps == [750, 300, 750, 300]


def test_run_on_first_uses_first_connected(runner, make_cube):
    gone, first, second = make_cube("gone"), make_cube("first"), make_cube("second")
    gone.disconnect()

    asyncio.run(runner.run_on_first([None, gone, first, second], short_move))

    assert commands(first) == [(80, 80, 700), (0, 0, 0)]
    assert commands(second) == []


@pytest.mark.parametrize("run_on_all", [False, True])
def test_no_usable_cubes_is_a_hard_stop(runner, make_cube, run_on_all):
    gone = make_cube()
    gone.disconnect()
    called = []

    async def pattern(motion, cube):
        called.append(cube)

    with pytest.raises(NoUsableCubesError):
        asyncio.run(runner.run([None, gone], pattern, run_on_all=run_on_all))

    with pytest.raises(NoUsableCubesError):
        asyncio.run(runner.run([], pattern, run_on_all=run_on_all))

    assert called == []
    assert not runner.context.busy


def test_busy_while_pattern_runs(runner, cube):
    seen = []

    async def pattern(motion, c):
        seen.append(runner.context.busy)
        await short_move(motion, c)

    assert not runner.context.busy
    asyncio.run(runner.run_on_first([cube], pattern))

    assert seen == [True]
    assert not runner.context.busy


def test_early_return_clears_busy_and_stops(runner, cube):
    async def pattern(motion, c):
        await motion.move_forward(c, 80, 200)
        if c.is_connected:
            return
        await motion.turn_right(c, 90)

    asyncio.run(runner.run_on_first([cube], pattern))

    assert commands(cube) == [(80, 80, 200), (0, 0, 0)]
    assert not runner.context.busy


def test_pattern_error_propagates_after_cleanup(runner, cube):
    async def pattern(motion, c):
        await motion.move_forward(c, 80, 200)
        raise ValueError("student bug")

    with pytest.raises(ValueError):
        asyncio.run(runner.run_on_first([cube], pattern))

    assert commands(cube)[-1] == (0, 0, 0)
    assert not runner.context.busy


def test_second_pattern_cannot_start_while_busy(runner, make_cube):
    outer, inner = make_cube("outer"), make_cube("inner")

    async def pattern(motion, c):
        with pytest.raises(RunInProgressError):
            await runner.run_on_first([inner], short_move)
        await short_move(motion, c)

    asyncio.run(runner.run_on_first([outer], pattern))

    assert commands(inner) == []
    assert not runner.context.busy


def test_double_tap_runs_reaction_when_idle(runner, motion, cube):
    context = runner.context

    async def scenario():
        context.subscribe(cube, "StudentPatterns", bind_reaction(motion, double_tap_reaction))
        cube.double_tap()
        await context.wait_reactions()

    asyncio.run(scenario())

    assert commands(cube) == [(80, 80, 180), (-80, -80, 140), (70, -70, 1080)]
    assert cube.sounds == [3]


def test_double_tap_runs_once_per_trigger(runner, motion, cube):
    context = runner.context
    calls = []

    async def reaction(c):
        calls.append(c.name)

    async def scenario():
        context.subscribe(cube, "count", reaction)
        cube.double_tap()
        cube.double_tap()
        await context.wait_reactions()

    asyncio.run(scenario())

    assert calls == ["sim-1", "sim-1"]


def test_double_tap_ignored_during_group_run(runner, motion, make_cube):
    cubes = [make_cube("a"), make_cube("b"), make_cube("c")]
    context = runner.context
    reaction_calls = []

    async def reaction(c):
        reaction_calls.append(c.name)
        await motion.blink_motion(c)

    async def pattern(m, c):
        await m.move_forward(c, 80, 300)
        for tapped in cubes:
            tapped.double_tap()
        await m.turn_right(c, 90)

    async def scenario():
        for c in cubes:
            context.subscribe(c, "reaction", reaction)
        await runner.run_on_all(cubes, pattern)
        await context.wait_reactions()

    asyncio.run(scenario())

    assert reaction_calls == []
    for c in cubes:
        assert commands(c) == [(80, 80, 300), (70, -70, 540), (0, 0, 0)]


def test_double_tap_ignored_from_concurrent_task(runner, motion, make_cube, clock):
    cubes = [make_cube("a"), make_cube("b")]
    context = runner.context
    reaction_calls = []

    async def reaction(c):
        reaction_calls.append(c.name)

    async def tapper():
        # Fire on every loop turn until the group run is over
        while not context.busy:
            await asyncio.sleep(0)
        while context.busy:
            cubes[1].double_tap()
            await asyncio.sleep(0)

    async def scenario():
        context.subscribe(cubes[1], "reaction", reaction)
        tap_task = asyncio.ensure_future(tapper())
        await runner.run_on_all(cubes, short_move)
        await tap_task
        await context.wait_reactions()

    asyncio.run(scenario())

    assert reaction_calls == []


def test_double_tap_queued_from_another_thread_yields_to_pattern(runner, motion, cube):
    context = runner.context
    busy_when_reacting = []

    async def reaction(c):
        busy_when_reacting.append(context.busy)
        await motion.blink_motion(c)

    async def scenario():
        context.subscribe(cube, "reaction", reaction)
        # Trigger lands while idle, but the reaction is only scheduled on the loop
        reader = threading.Thread(target=cube.double_tap)
        reader.start()
        reader.join()
        await runner.run_on_first([cube], short_move)
        await context.wait_reactions()

    asyncio.run(scenario())

    assert busy_when_reacting == []
    assert commands(cube) == [(80, 80, 700), (0, 0, 0)]


def test_double_tap_from_another_thread_runs_when_idle(runner, cube):
    context = runner.context
    calls = []

    async def reaction(c):
        calls.append(c.name)

    async def scenario():
        context.subscribe(cube, "reaction", reaction)
        reader = threading.Thread(target=cube.double_tap)
        reader.start()
        reader.join()
        await asyncio.sleep(0)
        await context.wait_reactions()

    asyncio.run(scenario())

    assert calls == ["sim-1"]


def test_failing_reaction_is_logged(runner, cube, caplog):
    context = runner.context

    async def reaction(c):
        raise RuntimeError("reaction bug")

    async def scenario():
        context.subscribe(cube, "reaction", reaction)
        cube.double_tap()
        await context.wait_reactions()
        await asyncio.sleep(0)

    with caplog.at_level(logging.ERROR, logger="cube_control.run_context"):
        asyncio.run(scenario())

    assert "reaction bug" in caplog.text
    assert not context._reactions


def test_unsubscribe_removes_listener(runner, cube):
    context = runner.context
    calls = []

    async def reaction(c):
        calls.append(c)

    async def scenario():
        context.subscribe(cube, "key", reaction)
        context.unsubscribe(cube, "key")
        cube.double_tap()
        await context.wait_reactions()

    asyncio.run(scenario())

    assert calls == []
    assert not cube.double_tap_callback.has_listener("key")
