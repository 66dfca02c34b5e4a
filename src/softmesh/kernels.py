# kernels.py
"""
Numeric kernels for the mass-spring step.

Spring loops run sequentially in spring order so results are reproducible.
Per-particle loops are independent per index and run under prange.
Nothing here is compiled with fastmath: evaluation order stays IEEE.
"""

from numba import njit, prange  # type: ignore
import numpy as np

from softmesh.types import INDEX, POSITIONS, SCALARS

BOX_HALF_EXTENT = 1.0

# ===============================
# FORCES
# ===============================


@njit(cache=True)  # type: ignore
def accumulate_forces(
    pos: POSITIONS,
    vel: POSITIONS,
    spring_i: INDEX,
    spring_j: INDEX,
    rest_lengths: SCALARS,
    stiffness: float,
    damping: float,
    particle_mass: float,
    gravity: SCALARS,
    forces: POSITIONS,
) -> None:
    """Hooke springs, linear drag and gravity, written into ``forces``."""
    forces[:, :] = 0.0

    for s in range(len(spring_i)):
        a = spring_i[s]
        b = spring_j[s]

        dx = pos[b, 0] - pos[a, 0]
        dy = pos[b, 1] - pos[a, 1]
        dz = pos[b, 2] - pos[a, 2]

        dist = np.sqrt(dx * dx + dy * dy + dz * dz)
        if dist == 0.0:
            continue

        magnitude = stiffness * (dist - rest_lengths[s])
        fx = (dx / dist) * magnitude
        fy = (dy / dist) * magnitude
        fz = (dz / dist) * magnitude

        forces[a, 0] += fx
        forces[a, 1] += fy
        forces[a, 2] += fz

        forces[b, 0] -= fx
        forces[b, 1] -= fy
        forces[b, 2] -= fz

    for i in range(len(pos)):
        for k in range(3):
            forces[i, k] += vel[i, k] * -damping
            forces[i, k] += gravity[k] * particle_mass


# ===============================
# INTEGRATION
# ===============================


@njit(cache=True, parallel=True)  # type: ignore
def integrate(
    pos: POSITIONS,
    vel: POSITIONS,
    forces: POSITIONS,
    particle_mass: float,
    dt: float,
    friction: float,
) -> None:
    """Semi-implicit Euler, then scale velocity by ``friction``."""
    for i in prange(len(pos)):
        for k in range(3):
            acceleration = forces[i, k] / particle_mass
            vel[i, k] += acceleration * dt
            pos[i, k] += vel[i, k] * dt
            vel[i, k] *= friction


# ===============================
# COLLISIONS
# ===============================


@njit(cache=True, parallel=True)  # type: ignore
def resolve_box_collisions(
    pos: POSITIONS,
    vel: POSITIONS,
    restitution: float,
    half_extent: float,
) -> None:
    """Clamp into the cube and bounce the outward velocity, one axis at a time."""
    for i in prange(len(pos)):
        for k in range(3):
            if pos[i, k] < -half_extent:
                pos[i, k] = -half_extent
                if vel[i, k] < 0.0:
                    vel[i, k] *= -restitution
            elif pos[i, k] > half_extent:
                pos[i, k] = half_extent
                if vel[i, k] > 0.0:
                    vel[i, k] *= -restitution


# ===============================
# CONSTRAINTS
# ===============================


@njit(cache=True)  # type: ignore
def relax_springs(
    pos: POSITIONS,
    spring_i: INDEX,
    spring_j: INDEX,
    rest_lengths: SCALARS,
    iterations: int,
) -> None:
    """
    Project spring lengths toward rest, in place.

    Each spring moves both ends half the error. Later springs see the
    corrections of earlier ones within the same pass.
    """
    for _ in range(iterations):
        for s in range(len(spring_i)):
            a = spring_i[s]
            b = spring_j[s]

            dx = pos[b, 0] - pos[a, 0]
            dy = pos[b, 1] - pos[a, 1]
            dz = pos[b, 2] - pos[a, 2]

            dist = np.sqrt(dx * dx + dy * dy + dz * dz)
            if dist == 0.0:
                continue

            factor = ((dist - rest_lengths[s]) / dist) * 0.5

            off_x = dx * factor
            off_y = dy * factor
            off_z = dz * factor

            pos[a, 0] += off_x
            pos[a, 1] += off_y
            pos[a, 2] += off_z

            pos[b, 0] -= off_x
            pos[b, 1] -= off_y
            pos[b, 2] -= off_z


# ===============================
# DIAGNOSTICS
# ===============================


@njit(cache=True)  # type: ignore
def locate_corners(pos: POSITIONS) -> tuple[int, int]:
    """Indices of min-x and max-x particles, both tie-broken by min z. -1 when empty."""
    min_idx = -1
    max_idx = -1
    min_x = np.inf
    min_z = np.inf
    max_x = -np.inf
    max_z = np.inf

    for i in range(len(pos)):
        x = pos[i, 0]
        z = pos[i, 2]

        if x < min_x or (x == min_x and z < min_z):
            min_x = x
            min_z = z
            min_idx = i

        if x > max_x or (x == max_x and z < max_z):
            max_x = x
            max_z = z
            max_idx = i

    return min_idx, max_idx
