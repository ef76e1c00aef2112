#!/usr/bin/env python3
"""
Abstract Cube Driver Interface

This module defines the abstract base class for every cube handle the
motion layer can drive. Real cubes (CAN wheel bases) and simulated cubes
both implement this interface.

Robotics Context:
-----------------
A cube is a small differential-drive robot: two wheels, each driven by its
own motor. Turning comes from a duty difference between the wheels.

This is the "driver" layer - it knows how to make the wheels spin for a
given time, but doesn't understand high-level concepts like "turn 90
degrees" or "draw a square". That lives in cube_control.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """
    Outcome of a single actuator operation.

    Actuator calls never raise for ordinary failures (disconnected cube,
    missing speaker). They return a failed result instead, and the caller
    decides whether to react (beep fallback) or discard it (drive, stop).
    """
    ok: bool
    reason: Optional[str] = None

    @classmethod
    def success(cls):
        return cls(ok=True)

    @classmethod
    def failure(cls, reason):
        return cls(ok=False, reason=reason)


@dataclass(frozen=True)
class DriveCommand:
    """One timed dual-wheel command: signed duties and a duration (ms)."""
    left: int
    right: int
    duration_ms: int


class CallbackContainer:
    """
    Keyed listener registry for one kind of cube event (e.g. double-tap).

    Listeners are registered under a key so the owner can remove exactly
    its own listener later, without touching anyone else's.
    """

    def __init__(self, name):
        self.name = name
        self._listeners = {}

    def add_listener(self, key, listener):
        self._listeners[key] = listener

    def remove_listener(self, key):
        self._listeners.pop(key, None)

    def has_listener(self, key):
        return key in self._listeners

    def fire(self, cube):
        """
        Invoke every registered listener with the cube that raised the event.

        A listener that raises is logged and skipped so one broken listener
        does not starve the others.
        """
        for key, listener in list(self._listeners.items()):
            try:
                listener(cube)
            except Exception:
                logger.exception(f"[{self.name}] Listener '{key}' failed")


class CubeDriver(ABC):
    """
    Abstract base class for cube handles.

    This defines the hardware communication contract. Each cube type
    (simulated, CAN wheel base, ...) implements these methods according to
    its own transport.

    Contract:
    ---------
    - drive() is fire-and-forget: it returns as soon as the command is
      issued; the wheels stop on their own after duration_ms. A duration of
      0 means "no time limit" (used by safe stop with zero duty).
    - drive() and play_sound() return a CommandResult and must not raise
      just because the cube went away.

    Example:
        class MyCube(CubeDriver):
            @property
            def is_connected(self):
                return self._link.alive

            def drive(self, left, right, duration_ms):
                self._link.send(left, right, duration_ms)
                return CommandResult.success()

            def play_sound(self, preset_id):
                return CommandResult.failure("unsupported")
    """

    def __init__(self, name):
        self.name = name
        self.double_tap_callback = CallbackContainer(f"{name}:double-tap")

    @property
    @abstractmethod
    def is_connected(self):
        """True while the cube accepts commands."""
        pass

    @abstractmethod
    def drive(self, left, right, duration_ms):
        """
        Spin both wheels for a fixed time.

        Args:
            left: Left wheel duty (signed, -115..115)
            right: Right wheel duty (signed, -115..115)
            duration_ms: How long to drive (ms); 0 = until the next command

        Returns:
            CommandResult
        """
        pass

    @abstractmethod
    def play_sound(self, preset_id):
        """
        Play a preset sound effect.

        Returns:
            CommandResult - failure("unsupported") when the cube has no
            speaker, failure("not connected") when the link is gone
        """
        pass

    def disconnect(self):
        """Release the link. Later commands fail with 'not connected'."""
        pass

    def __repr__(self):
        state = "connected" if self.is_connected else "disconnected"
        return f"<{type(self).__name__} {self.name} ({state})>"
