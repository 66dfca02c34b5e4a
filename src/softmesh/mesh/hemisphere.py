# hemisphere.py
"""
Soft-blob body: a closed hemisphere with
1. Both diagonals per quad (prevents shearing)
2. Optional bending springs for smoother deformation
"""

import math

from softmesh.models import Spring, Vector3, pack_positions
from softmesh.types import POSITIONS


def generate_hemisphere(
    radius: float = 0.5,
    rings: int = 6,
    segments: int = 12,
    add_bending_springs: bool = True,
    center: Vector3 | None = None,
) -> tuple[POSITIONS, list[Spring]]:
    """
    Generate a UV-sphere style hemisphere, dome pointing up (+y).

    Args:
        radius: Hemisphere radius (box units; the walls sit at +-1)
        rings: Number of latitude rings (excluding the apex)
        segments: Number of longitude segments
        add_bending_springs: Add springs that skip one edge (for bending resistance)
        center: Centre of the flat base disc, origin when omitted

    Returns:
        (positions, springs) tuple; rest lengths are the built distances
    """
    if rings < 1 or segments < 3:
        raise ValueError("need at least 1 ring and 3 segments")
    center = center or Vector3(0.0, 0.0, 0.0)

    points: list[Vector3] = []
    faces: list[tuple[int, int, int]] = []

    # 1. Apex
    points.append(center + Vector3(0.0, radius, 0.0))

    # 2. Rings, from near the apex down to the base
    for r in range(1, rings + 1):
        phi = (math.pi / 2) * (r / rings)
        height = radius * math.cos(phi)
        ring_radius = radius * math.sin(phi)

        for s in range(segments):
            theta = (2 * math.pi * s) / segments
            offset = Vector3(ring_radius * math.cos(theta), height, ring_radius * math.sin(theta))
            points.append(center + offset)

    # 3. Centre of the base disc
    center_idx = len(points)
    points.append(center.copy())

    # 4. Faces, only used to derive edges
    for s in range(segments):
        faces.append((0, 1 + s, 1 + (s + 1) % segments))

    for r in range(1, rings):
        curr_ring_start = 1 + (r - 1) * segments
        next_ring_start = 1 + r * segments

        for s in range(segments):
            i1 = curr_ring_start + s
            i2 = curr_ring_start + (s + 1) % segments
            i3 = next_ring_start + s
            i4 = next_ring_start + (s + 1) % segments
            faces.append((i1, i3, i2))
            faces.append((i2, i3, i4))

    bottom_ring_start = 1 + (rings - 1) * segments
    for s in range(segments):
        faces.append((bottom_ring_start + s, bottom_ring_start + (s + 1) % segments, center_idx))

    positions = pack_positions(points)

    # 5. Springs
    springs: list[Spring] = []
    added_springs: set[tuple[int, int]] = set()

    def add_unique_spring(i: int, j: int) -> None:
        pair = (min(i, j), max(i, j))
        if pair not in added_springs:
            springs.append(Spring.between(positions, i, j))
            added_springs.add(pair)

    # 5a. Structural, from triangle edges
    for f in faces:
        add_unique_spring(f[0], f[1])
        add_unique_spring(f[1], f[2])
        add_unique_spring(f[2], f[0])

    # 5b. Second diagonal per quad
    for r in range(1, rings):
        curr_ring_start = 1 + (r - 1) * segments
        next_ring_start = 1 + r * segments

        for s in range(segments):
            add_unique_spring(curr_ring_start + s, next_ring_start + (s + 1) % segments)
            add_unique_spring(curr_ring_start + (s + 1) % segments, next_ring_start + s)

    # 5c. Bending, skipping one ring and one segment
    if add_bending_springs:
        for r in range(rings - 2):
            curr_ring_start = 1 + r * segments
            skip_ring_start = 1 + (r + 2) * segments
            for s in range(segments):
                add_unique_spring(curr_ring_start + s, skip_ring_start + s)

        for r in range(1, rings + 1):
            ring_start = 1 + (r - 1) * segments
            for s in range(segments):
                add_unique_spring(ring_start + s, ring_start + (s + 2) % segments)

    return positions, springs
