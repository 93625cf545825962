"""Execution-side exceptions."""

from __future__ import annotations


class ExecutionError(Exception):
    """Base class for execution errors."""


class PlanningError(ExecutionError):
    """Quote and path cannot be turned into a valid call sequence."""


class WrongNetwork(ExecutionError):
    """Connected chain does not match the configured network."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Connected to chain {actual}, expected {expected}")


class StepBuildError(ExecutionError):
    """A step could not be built or signed locally."""
