"""Exceptions raised by the motion layer."""


class CubeSandboxError(Exception):
    """Base class for errors surfaced to the operator."""


class NoUsableCubesError(CubeSandboxError):
    """No connected cube is available, so nothing may run."""


class RunInProgressError(CubeSandboxError):
    """A second pattern was started while one is still running."""
