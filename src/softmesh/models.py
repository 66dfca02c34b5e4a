# models.py
from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
import math

import numpy as np

from softmesh.types import INDEX, POSITIONS, SCALARS


class Vector3:
    __slots__ = ["x", "y", "z"]

    def __init__(self, x: float, y: float, z: float) -> None:
        self.x, self.y, self.z = float(x), float(y), float(z)

    @classmethod
    def from_array(cls, values: Iterable[float]) -> Vector3:
        x, y, z = values
        return cls(x, y, z)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __repr__(self) -> str:
        return f"Vector3({self.x!r}, {self.y!r}, {self.z!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector3):
            return NotImplemented
        return (self.x, self.y, self.z) == (other.x, other.y, other.z)

    __hash__ = None  # type: ignore[assignment]

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __iadd__(self, other: Vector3) -> Vector3:
        self.x += other.x
        self.y += other.y
        self.z += other.z
        return self

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __isub__(self, other: Vector3) -> Vector3:
        self.x -= other.x
        self.y -= other.y
        self.z -= other.z
        return self

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def __mul__(self, scalar: float) -> Vector3:
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar: float) -> Vector3:  # Handles: scalar * vector
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> Vector3:
        return Vector3(self.x / scalar, self.y / scalar, self.z / scalar)

    def copy(self) -> Vector3:
        return Vector3(self.x, self.y, self.z)

    def length(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def normalize(self) -> Vector3:
        length = self.length()
        return self / length if length != 0 else Vector3(0, 0, 0)


class Spring:
    """Undirected connection between particles ``p0`` and ``p1``."""

    __slots__ = ["p0", "p1", "rest"]

    def __init__(self, p0: int, p1: int, rest: float) -> None:
        self.p0 = int(p0)
        self.p1 = int(p1)
        self.rest = float(rest)

    @classmethod
    def between(cls, positions: POSITIONS, p0: int, p1: int) -> Spring:
        """Spring whose rest length is the current distance from ``p0`` to ``p1``."""
        rest = (Vector3.from_array(positions[p1]) - Vector3.from_array(positions[p0])).length()
        return cls(p0, p1, rest)

    def __repr__(self) -> str:
        return f"Spring(p0={self.p0}, p1={self.p1}, rest={self.rest!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Spring):
            return NotImplemented
        return (self.p0, self.p1, self.rest) == (other.p0, other.p1, other.rest)

    __hash__ = None  # type: ignore[assignment]


class SpringNetwork:
    """
    Springs packed into parallel arrays, the layout the kernels consume.

    Order is preserved from the source sequence; force accumulation and
    relaxation both walk springs in this order.
    """

    __slots__ = ["p0", "p1", "rest"]

    def __init__(self, p0: INDEX, p1: INDEX, rest: SCALARS) -> None:
        self.p0 = np.ascontiguousarray(p0, dtype=np.int64)
        self.p1 = np.ascontiguousarray(p1, dtype=np.int64)
        self.rest = np.ascontiguousarray(rest, dtype=np.float64)

    @classmethod
    def from_springs(cls, springs: Sequence[Spring]) -> SpringNetwork:
        return cls(
            np.array([s.p0 for s in springs], dtype=np.int64),
            np.array([s.p1 for s in springs], dtype=np.int64),
            np.array([s.rest for s in springs], dtype=np.float64),
        )

    def __len__(self) -> int:
        return len(self.p0)

    def __iter__(self) -> Iterator[Spring]:
        for a, b, rest in zip(self.p0, self.p1, self.rest):
            yield Spring(a, b, rest)


def pack_positions(points: Sequence[Vector3]) -> POSITIONS:
    """Copy a list of vectors into a fresh ``(n, 3)`` particle buffer."""
    buffer = np.zeros((len(points), 3), dtype=np.float64)
    for i, p in enumerate(points):
        buffer[i] = (p.x, p.y, p.z)
    return buffer
