"""Errors raised by the step functions.

Every error is a caller or setup problem. Checks that can run before the
step touches any particle are made first, so a rejected step leaves the
caller's arrays exactly as they were.
"""

from typing import Any


class SimulationError(Exception):
    """Base class for every error the simulation core raises."""


class InvalidParameterError(SimulationError, ValueError):
    def __init__(self, name: str, value: Any, reason: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"{name}={value!r}: {reason}")


class IndexOutOfRangeError(SimulationError, IndexError):
    def __init__(self, kind: str, index: int, count: int) -> None:
        self.kind = kind
        self.index = index
        self.count = count
        super().__init__(f"{kind} index {index} is outside [0, {count})")


class InvalidGeometryError(SimulationError, ValueError):
    """A spring has no direction, or the particle state is already corrupt."""

    def __init__(self, message: str, spring: int | None = None, p0: int | None = None, p1: int | None = None) -> None:
        self.spring = spring
        self.p0 = p0
        self.p1 = p1
        super().__init__(message)


class NonFiniteStateError(SimulationError, FloatingPointError):
    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"step produced {count} non-finite particle components")
