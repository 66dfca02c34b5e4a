import numpy as np
import pytest

from softmesh.config import DEFAULT_PIN_INDICES
from softmesh.mesh.cloth import generate_cloth
from softmesh.mesh.hemisphere import generate_hemisphere
from softmesh.models import Vector3
from softmesh.solver import find_closest_corners


def _check_springs(positions, springs):
    pairs = set()
    for s in springs:
        assert 0 <= s.p0 < len(positions)
        assert 0 <= s.p1 < len(positions)
        assert s.rest > 0
        assert s.rest == pytest.approx(np.linalg.norm(positions[s.p1] - positions[s.p0]))
        pairs.add((min(s.p0, s.p1), max(s.p0, s.p1)))
    assert len(pairs) == len(springs)


def test_default_cloth_layout():
    positions, springs = generate_cloth()

    assert positions.shape == (25, 3)
    assert positions.dtype == np.float64
    # 40 structural + 32 shear
    assert len(springs) == 72
    _check_springs(positions, springs)

    np.testing.assert_array_equal(positions[:, 1], 0.0)
    np.testing.assert_allclose(positions[0], [-0.5, 0.0, 0.5])
    np.testing.assert_allclose(positions[20], [-0.5, 0.0, -0.5])
    np.testing.assert_allclose(positions[24], [0.5, 0.0, -0.5])


def test_default_cloth_corners_are_the_pinned_edge():
    positions, _ = generate_cloth()
    corners = find_closest_corners(positions)
    assert (corners.min_index, corners.max_index) == DEFAULT_PIN_INDICES == (20, 24)


def test_cloth_options():
    positions, springs = generate_cloth(rows=4, cols=3, width=2.0, depth=1.5, center=Vector3(0, 0.5, 0),
                                        add_shear_springs=False, add_bending_springs=True)

    assert positions.shape == (12, 3)
    # structural 4*2 + 3*3, bending 4*1 + 3*2
    assert len(springs) == 17 + 10
    _check_springs(positions, springs)
    np.testing.assert_allclose(positions.min(axis=0), [-1.0, 0.5, -0.75])
    np.testing.assert_allclose(positions.max(axis=0), [1.0, 0.5, 0.75])


def test_cloth_rejects_degenerate_grid():
    with pytest.raises(ValueError):
        generate_cloth(rows=1, cols=5)


def test_hemisphere_layout():
    positions, springs = generate_hemisphere(radius=0.5, rings=4, segments=8)

    assert positions.shape == (1 + 4 * 8 + 1, 3)
    _check_springs(positions, springs)
    np.testing.assert_allclose(positions[0], [0.0, 0.5, 0.0])
    np.testing.assert_allclose(positions[-1], [0.0, 0.0, 0.0])
    assert (np.abs(positions) <= 0.5 + 1e-12).all()


def test_hemisphere_bending_springs_are_optional():
    _, with_bending = generate_hemisphere(rings=4, segments=8)
    _, without_bending = generate_hemisphere(rings=4, segments=8, add_bending_springs=False)
    assert len(with_bending) > len(without_bending)


def test_hemisphere_center_offset():
    positions, _ = generate_hemisphere(radius=0.25, rings=3, segments=6, center=Vector3(0.1, -0.2, 0.3))
    np.testing.assert_allclose(positions[-1], [0.1, -0.2, 0.3])
    np.testing.assert_allclose(positions[0], [0.1, 0.05, 0.3])
