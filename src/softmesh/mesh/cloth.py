# cloth.py
import numpy as np

from softmesh.models import Spring, Vector3, pack_positions
from softmesh.types import POSITIONS


def generate_cloth(
    rows: int = 5,
    cols: int = 5,
    width: float = 1.0,
    depth: float = 1.0,
    center: Vector3 | None = None,
    add_shear_springs: bool = True,
    add_bending_springs: bool = False,
) -> tuple[POSITIONS, list[Spring]]:
    """
    Generate a flat rectangular cloth in the x-z plane.

    Particles are row-major, ``index = row * cols + col``. Row 0 sits at the
    largest z and the last row at the smallest z, so the last row is the
    edge the corner locator picks (min/max x, ties broken by min z). For the
    default 5x5 cloth those corners are particles 20 and 24.

    Args:
        rows, cols: Particle counts along z and x (both >= 2)
        width, depth: Extent along x and z
        center: Centre of the sheet, origin when omitted
        add_shear_springs: Both diagonals per cell
        add_bending_springs: Springs skipping one particle along rows and columns

    Returns:
        (positions, springs) tuple; rest lengths are the built distances
    """
    if rows < 2 or cols < 2:
        raise ValueError("cloth needs at least 2 rows and 2 columns")
    center = center or Vector3(0.0, 0.0, 0.0)

    origin = center - Vector3(width / 2, 0.0, depth / 2)
    points = [
        origin + Vector3(x, 0.0, z)
        for z in np.linspace(depth, 0.0, rows)
        for x in np.linspace(0.0, width, cols)
    ]
    positions = pack_positions(points)

    def idx(r: int, c: int) -> int:
        return r * cols + c

    springs: list[Spring] = []

    # Structural
    for r in range(rows):
        for c in range(cols):
            if c + 1 < cols:
                springs.append(Spring.between(positions, idx(r, c), idx(r, c + 1)))
            if r + 1 < rows:
                springs.append(Spring.between(positions, idx(r, c), idx(r + 1, c)))

    # Shear
    if add_shear_springs:
        for r in range(rows - 1):
            for c in range(cols - 1):
                springs.append(Spring.between(positions, idx(r, c), idx(r + 1, c + 1)))
                springs.append(Spring.between(positions, idx(r, c + 1), idx(r + 1, c)))

    # Bending
    if add_bending_springs:
        for r in range(rows):
            for c in range(cols):
                if c + 2 < cols:
                    springs.append(Spring.between(positions, idx(r, c), idx(r, c + 2)))
                if r + 2 < rows:
                    springs.append(Spring.between(positions, idx(r, c), idx(r + 2, c)))

    return positions, springs
