"""
Per-frame step functions for mass-spring bodies.

Both steps mutate caller-owned ``positions`` and ``velocities`` buffers in
place and keep nothing between calls. The driver calls exactly one step per
animation frame and must not overlap calls on the same buffers.

    sim_time_step        forces -> integrate -> walls
    sim_cloth_time_step  forces -> integrate (+friction) -> walls
                         -> relax springs -> pin
"""

from __future__ import annotations

from collections.abc import Sequence
import logging
from typing import NamedTuple

import numpy as np

from softmesh.config import ClothSettings, StepParameters, as_gravity
from softmesh.errors import (
    IndexOutOfRangeError,
    InvalidGeometryError,
    InvalidParameterError,
    NonFiniteStateError,
)
from softmesh.kernels import (
    BOX_HALF_EXTENT,
    accumulate_forces,
    integrate,
    locate_corners,
    relax_springs,
    resolve_box_collisions,
)
from softmesh.models import Spring, SpringNetwork, Vector3
from softmesh.types import POSITIONS

logger = logging.getLogger(__name__)

SpringsLike = SpringNetwork | Sequence[Spring]


class Corners(NamedTuple):
    min_corner: Vector3
    max_corner: Vector3
    min_index: int
    max_index: int


def find_closest_corners(positions: POSITIONS) -> Corners | None:
    """
    Find the left-most and right-most particles.

    Left is minimum x, right is maximum x; both prefer the smaller z on a
    tie and the earlier index after that. Returns ``None`` for no particles.
    """
    pos = np.ascontiguousarray(positions, dtype=np.float64).reshape(-1, 3)
    if not np.isfinite(pos).all():
        raise InvalidGeometryError("cannot locate corners of positions containing NaN or infinity")
    min_idx, max_idx = locate_corners(pos)
    if min_idx < 0 or max_idx < 0:
        return None
    return Corners(
        Vector3.from_array(pos[min_idx]),
        Vector3.from_array(pos[max_idx]),
        int(min_idx),
        int(max_idx),
    )


# ===============================
# VALIDATION
# ===============================


def _check_buffer(name: str, buffer: POSITIONS) -> None:
    if not isinstance(buffer, np.ndarray):
        raise InvalidParameterError(name, type(buffer).__name__, "must be a numpy array")
    if buffer.ndim != 2 or buffer.shape[1] != 3:
        raise InvalidParameterError(name, buffer.shape, "must have shape (n, 3)")
    if buffer.dtype != np.float64:
        raise InvalidParameterError(name, buffer.dtype, "must be float64")
    if not buffer.flags.c_contiguous or not buffer.flags.writeable:
        raise InvalidParameterError(name, buffer.flags, "must be a writeable C-contiguous buffer")


def _check_state(positions: POSITIONS, velocities: POSITIONS) -> None:
    _check_buffer("positions", positions)
    _check_buffer("velocities", velocities)
    if positions.shape != velocities.shape:
        raise InvalidParameterError(
            "velocities", velocities.shape, f"must match positions {positions.shape}"
        )
    if np.shares_memory(positions, velocities):
        raise InvalidParameterError("velocities", velocities.shape, "must not share memory with positions")
    if not np.isfinite(positions).all() or not np.isfinite(velocities).all():
        raise InvalidGeometryError("particle state already contains NaN or infinity")


def _pack_springs(springs: SpringsLike) -> SpringNetwork:
    if isinstance(springs, SpringNetwork):
        return springs
    return SpringNetwork.from_springs(springs)


def _check_springs(network: SpringNetwork, positions: POSITIONS) -> None:
    count = len(positions)
    if not len(network.p0) == len(network.p1) == len(network.rest):
        raise InvalidParameterError("springs", len(network), "p0, p1 and rest must be the same length")
    if len(network) == 0:
        return

    for kind, ends in (("spring p0", network.p0), ("spring p1", network.p1)):
        bad = np.flatnonzero((ends < 0) | (ends >= count))
        if bad.size:
            raise IndexOutOfRangeError(kind, int(ends[bad[0]]), count)

    bad = np.flatnonzero(~np.isfinite(network.rest) | (network.rest < 0))
    if bad.size:
        s = int(bad[0])
        raise InvalidParameterError(f"springs[{s}].rest", float(network.rest[s]), "must be finite and >= 0")

    delta = positions[network.p1] - positions[network.p0]
    degenerate = np.flatnonzero(~np.any(delta != 0.0, axis=1))
    if degenerate.size:
        s = int(degenerate[0])
        a, b = int(network.p0[s]), int(network.p1[s])
        raise InvalidGeometryError(
            f"spring {s} ({a}, {b}) has zero length and no direction", spring=s, p0=a, p1=b
        )


def _check_result(positions: POSITIONS, velocities: POSITIONS) -> None:
    bad = int(np.count_nonzero(~np.isfinite(positions)) + np.count_nonzero(~np.isfinite(velocities)))
    if bad:
        raise NonFiniteStateError(bad)


def _prepare(
    dt: float,
    positions: POSITIONS,
    velocities: POSITIONS,
    springs: SpringsLike,
    stiffness: float,
    damping: float,
    particle_mass: float,
    gravity: Vector3 | np.ndarray | tuple[float, float, float],
    restitution: float,
) -> tuple[SpringNetwork, np.ndarray]:
    StepParameters(dt, stiffness, damping, particle_mass, gravity, restitution).validate()
    _check_state(positions, velocities)
    network = _pack_springs(springs)
    _check_springs(network, positions)
    return network, as_gravity(gravity)


# ===============================
# STEPS
# ===============================


def sim_time_step(
    dt: float,
    positions: POSITIONS,
    velocities: POSITIONS,
    springs: SpringsLike,
    stiffness: float,
    damping: float,
    particle_mass: float,
    gravity: Vector3 | np.ndarray | tuple[float, float, float],
    restitution: float,
) -> None:
    """Advance a generic mass-spring body by ``dt``."""
    network, g = _prepare(
        dt, positions, velocities, springs, stiffness, damping, particle_mass, gravity, restitution
    )

    forces = np.zeros_like(positions)
    accumulate_forces(
        positions,
        velocities,
        network.p0,
        network.p1,
        network.rest,
        float(stiffness),
        float(damping),
        float(particle_mass),
        g,
        forces,
    )
    integrate(positions, velocities, forces, float(particle_mass), float(dt), 1.0)
    resolve_box_collisions(positions, velocities, float(restitution), BOX_HALF_EXTENT)

    _check_result(positions, velocities)


def sim_cloth_time_step(
    dt: float,
    positions: POSITIONS,
    velocities: POSITIONS,
    springs: SpringsLike,
    stiffness: float,
    damping: float,
    particle_mass: float,
    gravity: Vector3 | np.ndarray | tuple[float, float, float],
    restitution: float,
    *,
    settings: ClothSettings | None = None,
) -> Corners | None:
    """
    Advance a cloth by ``dt``.

    On top of the generic step, velocities are scaled by ``settings.friction``
    after integration, spring lengths are relaxed ``settings.iterations``
    times, and the pinned particles are put back where they started. Pinned
    velocities are left as computed.

    Returns the corner locator result for the pre-step positions.
    """
    settings = settings or ClothSettings()
    settings.validate()
    network, g = _prepare(
        dt, positions, velocities, springs, stiffness, damping, particle_mass, gravity, restitution
    )

    corners = find_closest_corners(positions)
    logger.debug("closest corners: %s", corners)

    pins = settings.select_pins(corners)
    count = len(positions)
    for index in pins:
        if not 0 <= index < count:
            raise IndexOutOfRangeError("pin", index, count)
    pin_idx = np.array(pins, dtype=np.int64)
    pinned_pos = positions[pin_idx].copy()

    forces = np.zeros_like(positions)
    accumulate_forces(
        positions,
        velocities,
        network.p0,
        network.p1,
        network.rest,
        float(stiffness),
        float(damping),
        float(particle_mass),
        g,
        forces,
    )
    integrate(positions, velocities, forces, float(particle_mass), float(dt), float(settings.friction))
    resolve_box_collisions(positions, velocities, float(restitution), BOX_HALF_EXTENT)
    relax_springs(positions, network.p0, network.p1, network.rest, settings.iterations)

    positions[pin_idx] = pinned_pos

    _check_result(positions, velocities)
    return corners
