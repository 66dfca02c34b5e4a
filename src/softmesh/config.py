from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import math
from typing import TYPE_CHECKING

import numpy as np

from softmesh.errors import InvalidParameterError
from softmesh.models import Vector3

if TYPE_CHECKING:
    from softmesh.solver import Corners

# Cloth tunables
DEFAULT_FRICTION = 0.99  # velocity multiplier applied after integration
DEFAULT_ITERATIONS = 5  # constraint relaxation passes per step
DEFAULT_PIN_INDICES = (20, 24)  # top corners of the default 5x5 cloth


def _finite(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(name, value, "must be a real number") from None
    if not math.isfinite(value):
        raise InvalidParameterError(name, value, "must be finite")
    return value


def as_gravity(gravity: Vector3 | np.ndarray | tuple[float, float, float]) -> np.ndarray:
    """Gravity as a contiguous float64 3-vector, validated."""
    if isinstance(gravity, Vector3):
        g = gravity.to_array()
    else:
        try:
            g = np.array(gravity, dtype=np.float64).reshape(-1)
        except (TypeError, ValueError):
            raise InvalidParameterError("gravity", gravity, "must be a 3-vector") from None
    if g.shape != (3,):
        raise InvalidParameterError("gravity", gravity, "must be a 3-vector")
    if not np.isfinite(g).all():
        raise InvalidParameterError("gravity", gravity, "must be finite")
    return g


@dataclass(frozen=True)
class StepParameters:
    dt: float
    stiffness: float
    damping: float
    particle_mass: float
    gravity: Vector3 = field(default_factory=lambda: Vector3(0.0, -9.8, 0.0))
    restitution: float = 0.8

    @classmethod
    def defaults(cls) -> StepParameters:
        return cls(dt=1.0 / 60.0, stiffness=30.0, damping=0.5, particle_mass=0.1)

    def validate(self) -> None:
        if _finite("dt", self.dt) <= 0:
            raise InvalidParameterError("dt", self.dt, "must be > 0")
        if _finite("particle_mass", self.particle_mass) <= 0:
            raise InvalidParameterError("particle_mass", self.particle_mass, "must be > 0")
        if _finite("stiffness", self.stiffness) < 0:
            raise InvalidParameterError("stiffness", self.stiffness, "must be >= 0")
        if _finite("damping", self.damping) < 0:
            raise InvalidParameterError("damping", self.damping, "must be >= 0")
        if not 0.0 <= _finite("restitution", self.restitution) <= 1.0:
            raise InvalidParameterError("restitution", self.restitution, "must be in [0, 1]")
        as_gravity(self.gravity)


class PinMode(str, Enum):
    FIXED = "fixed"  # pin ClothSettings.pin_indices
    CORNERS = "corners"  # pin whatever the corner locator finds in the positions passed to this step
    NONE = "none"


def _corner_pins(corners: Corners | None) -> tuple[int, ...]:
    if corners is None:
        return ()
    if corners.min_index == corners.max_index:
        return (corners.min_index,)
    return (corners.min_index, corners.max_index)


@dataclass(frozen=True)
class ClothSettings:
    friction: float = DEFAULT_FRICTION
    iterations: int = DEFAULT_ITERATIONS
    pin_mode: PinMode = PinMode.FIXED
    pin_indices: tuple[int, ...] = DEFAULT_PIN_INDICES

    @classmethod
    def from_corners(
        cls,
        corners: Corners | None,
        friction: float = DEFAULT_FRICTION,
        iterations: int = DEFAULT_ITERATIONS,
    ) -> ClothSettings:
        """
        Fixed pins at the given corner locator result.

        ``PinMode.CORNERS`` re-locates on every call, so the pinned set drifts
        once the cloth moves. Locate once on the rest positions and keep the
        result with this instead.
        """
        return cls(friction=friction, iterations=iterations, pin_mode=PinMode.FIXED, pin_indices=_corner_pins(corners))

    def validate(self) -> None:
        if _finite("friction", self.friction) < 0:
            raise InvalidParameterError("friction", self.friction, "must be >= 0")
        if isinstance(self.iterations, bool) or not isinstance(self.iterations, int):
            raise InvalidParameterError("iterations", self.iterations, "must be an integer")
        if self.iterations < 0:
            raise InvalidParameterError("iterations", self.iterations, "must be >= 0")
        try:
            PinMode(self.pin_mode)
        except ValueError:
            raise InvalidParameterError("pin_mode", self.pin_mode, "unknown pin mode") from None
        try:
            pins = tuple(self.pin_indices)
        except TypeError:
            raise InvalidParameterError("pin_indices", self.pin_indices, "must be a sequence of integers") from None
        for index in pins:
            if isinstance(index, (bool, np.bool_)) or not isinstance(index, (int, np.integer)):
                raise InvalidParameterError("pin_indices", self.pin_indices, "must be a sequence of integers")

    def select_pins(self, corners: Corners | None) -> tuple[int, ...]:
        """Indices to freeze this step, given the corner locator's result."""
        mode = PinMode(self.pin_mode)
        if mode is PinMode.FIXED:
            return tuple(int(i) for i in self.pin_indices)
        if mode is PinMode.CORNERS:
            return _corner_pins(corners)
        return ()
