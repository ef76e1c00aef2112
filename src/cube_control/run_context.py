#!/usr/bin/env python3
"""
Run context: the busy flag and trigger subscriptions for one cube group.

Ownership:
- The runner is the only writer of `busy` (begin_run / end_run).
- Trigger handlers only read it. While a pattern runs, every trigger is
  dropped on the floor - no queueing, no deferred execution - so a
  reaction can never interleave its drive commands with the pattern's.
"""

import asyncio
import logging

from .errors import RunInProgressError

logger = logging.getLogger(__name__)


class RunContext:
    """
    Shared state between the pattern runner and event-triggered reactions.

    Example:
        context = RunContext()
        context.subscribe(cube, "StudentPatterns", reaction)
        ...
        context.unsubscribe(cube, "StudentPatterns")
    """

    def __init__(self, name="group"):
        self.name = name
        self._busy = False
        self._subscriptions = {}
        self._reactions = set()
        self._loop = None

    @property
    def busy(self):
        return self._busy

    def begin_run(self):
        if self._busy:
            raise RunInProgressError(f"A pattern is already running on group '{self.name}'")
        self._busy = True

    def end_run(self):
        self._busy = False

    # ========================================================================
    # Trigger subscriptions
    # ========================================================================

    def subscribe(self, cube, key, reaction):
        """
        Run `reaction(cube)` once per double-tap on `cube`, unless busy.

        Args:
            cube: CubeDriver exposing double_tap_callback
            key: Listener key, unique per subscriber
            reaction: async callable taking the cube that was tapped
        """
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            pass

        def on_double_tap(tapped_cube):
            self._on_trigger(tapped_cube, reaction)

        cube.double_tap_callback.add_listener(key, on_double_tap)
        self._subscriptions[(id(cube), key)] = cube
        logger.debug(f"[{self.name}] Subscribed '{key}' to {cube.name}")

    def unsubscribe(self, cube, key):
        cube.double_tap_callback.remove_listener(key)
        self._subscriptions.pop((id(cube), key), None)

    def unsubscribe_all(self):
        for (_, key), cube in list(self._subscriptions.items()):
            self.unsubscribe(cube, key)

    async def wait_reactions(self):
        """
        Wait for every reaction that has been started so far.

        A reaction that raised has already been logged and does not stop
        the others.
        """
        while self._reactions:
            await asyncio.gather(*list(self._reactions), return_exceptions=True)

    def _on_trigger(self, cube, reaction):
        if self._busy:
            logger.debug(f"[{self.name}] Double-tap on {cube.name} ignored: pattern running")
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            self._spawn(cube, reaction)
        elif self._loop is not None and not self._loop.is_closed():
            # Trigger arrived on a foreign thread (e.g. a CAN/BLE reader)
            self._loop.call_soon_threadsafe(self._spawn, cube, reaction)
        else:
            logger.warning(f"[{self.name}] Double-tap on {cube.name} dropped: no event loop")

    def _spawn(self, cube, reaction):
        # A run may have begun while a cross-thread trigger was queued
        if self._busy:
            logger.debug(f"[{self.name}] Double-tap on {cube.name} ignored: pattern running")
            return
        logger.info(f"[{self.name}] Double-tap on {cube.name}")
        task = asyncio.ensure_future(reaction(cube))
        self._reactions.add(task)
        task.add_done_callback(self._reaction_done)

    def _reaction_done(self, task):
        self._reactions.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"[{self.name}] Double-tap reaction failed: {error!r}")
