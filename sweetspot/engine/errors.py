"""Errors raised around the tax engine.

Arithmetic inside the engine is total; only configuration loading and the
optimum selection can fail.
"""


class InvalidScheduleError(ValueError):
    """A bracket schedule is unordered, has gaps, or lacks an unbounded top bracket."""


class EmptyInputError(ValueError):
    """No scenarios were produced, so there is no optimum to report."""
