import numpy as np
import pytest

from grid_morph.core.exceptions import IncompatibleMeshError, ValidationError
from grid_morph.core.interpolation import (
    check_compatible,
    compatible,
    interpolate,
    interpolate_many,
)
from grid_morph.core.mesh import MeshGrid
from grid_morph.core.point import Point


def random_mesh(seed, nx=5, ny=4):
    rng = np.random.default_rng(seed)
    return MeshGrid.from_arrays(rng.uniform(0, 100, (ny, nx)), rng.uniform(0, 100, (ny, nx)))


def test_compatible():
    assert compatible(MeshGrid(4, 5), MeshGrid(4, 5))
    assert not compatible(MeshGrid(4, 5), MeshGrid(5, 4))
    with pytest.raises(IncompatibleMeshError) as excinfo:
        check_compatible(MeshGrid(4, 5), MeshGrid(5, 4))
    assert excinfo.value.shape1 == (4, 5)
    assert excinfo.value.shape2 == (5, 4)


def test_endpoints_are_exact():
    m1, m2 = random_mesh(1), random_mesh(2)
    assert interpolate(m1, m2, 0.0) == m1
    assert interpolate(m1, m2, 1.0) == m2


def test_midpoint():
    m1 = MeshGrid.regular(4, 4, 100, 100)
    m2 = m1.copy()
    m2.set(1, 1, Point(16.5, 16.5))
    mid = interpolate(m1, m2, 0.5)
    assert mid.get(1, 1) == Point(24.75, 24.75)
    assert str(mid.get(1, 1)) == "[24.75, 24.75]"
    assert mid.get(2, 2) == m1.get(2, 2)


def test_inputs_are_not_modified():
    m1, m2 = random_mesh(3), random_mesh(4)
    before1, before2 = m1.copy(), m2.copy()
    result = interpolate(m1, m2, 0.3)
    result.set(0, 0, (-1.0, -1.0))
    assert m1 == before1
    assert m2 == before2


def test_labels_follow_first_mesh():
    m1, m2 = random_mesh(5), random_mesh(6)
    m1.set_label(1, 2, 3)
    m2.set_label(1, 2, 8)
    assert interpolate(m1, m2, 0.7).get_label(1, 2) == 3


@pytest.mark.parametrize("t", [-0.01, 1.01, float('nan')])
def test_rejects_out_of_range_fraction(t):
    with pytest.raises(ValidationError):
        interpolate(random_mesh(1), random_mesh(2), t)


def test_rejects_incompatible_meshes():
    with pytest.raises(IncompatibleMeshError):
        interpolate(MeshGrid(4, 4), MeshGrid(4, 5), 0.5)


def test_interpolate_many():
    m1, m2 = random_mesh(8), random_mesh(9)
    meshes = interpolate_many(m1, m2, [0.0, 0.25, 1.0])
    assert len(meshes) == 3
    assert meshes[0] == m1
    assert meshes[2] == m2
    assert meshes[1] == interpolate(m1, m2, 0.25)
    with pytest.raises(ValidationError):
        interpolate_many(m1, m2, [0.5, 2.0])
