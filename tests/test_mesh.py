import numpy as np
import pytest

from grid_morph.core.exceptions import ValidationError
from grid_morph.core.mesh import Direction, MeshGrid
from grid_morph.core.point import Point


def test_rejects_meshes_below_minimum():
    with pytest.raises(ValueError):
        MeshGrid(3, 4)
    with pytest.raises(ValueError):
        MeshGrid.regular(4, 2, 10, 10)
    grid = [[(0, 0)] * 4 for _ in range(3)]
    with pytest.raises(ValueError):
        MeshGrid.from_points(grid)


def test_rejects_ragged_point_grid():
    grid = [[(c, r) for c in range(4)] for r in range(4)]
    grid[2] = grid[2][:3]
    with pytest.raises(ValueError):
        MeshGrid.from_points(grid)


def test_empty_mesh_is_zero():
    mesh = MeshGrid(4, 5)
    assert mesh.shape == (4, 5)
    assert mesh.get(3, 4) == Point(0.0, 0.0)


def test_regular_spacing():
    mesh = MeshGrid.regular(4, 4, 100, 100)
    assert mesh.get(0, 0) == Point(0.0, 0.0)
    assert mesh.get(3, 3) == Point(99.0, 99.0)
    assert mesh.get(1, 2) == Point(33.0, 66.0)
    assert mesh.get_image_point(1, 2) == (33, 66)


def test_points_round_trip(bent_mesh):
    assert MeshGrid.from_points(bent_mesh.points()) == bent_mesh
    image_mesh = MeshGrid.from_image_points(bent_mesh.image_points())
    assert image_mesh.get_image_point(1, 1) == bent_mesh.get_image_point(1, 1)


def test_get_out_of_range_is_index_error(regular_mesh):
    with pytest.raises(IndexError):
        regular_mesh.get(4, 0)
    with pytest.raises(IndexError):
        regular_mesh.set(0, -1, (1.0, 1.0))


def test_copy_is_independent(regular_mesh):
    clone = regular_mesh.copy()
    assert clone == regular_mesh
    clone.set(1, 1, (5.0, 5.0))
    clone.set_label(1, 1, 7)
    assert clone != regular_mesh
    assert regular_mesh.get_label(1, 1) == 0
    regular_mesh.set(2, 2, (1.0, 1.0))
    assert clone.get(2, 2) != regular_mesh.get(2, 2)


def test_bounding_box(bent_mesh):
    upper_left, lower_right = bent_mesh.bounding_box()
    assert upper_left == Point(0.0, 0.0)
    assert lower_right == Point(31.0, 23.0)


def test_scale_clamps_to_last_pixel():
    mesh = MeshGrid.regular(4, 4, 11, 11)
    mesh.scale(20, 20)
    xs, ys = mesh.as_arrays()
    assert xs.max() == 19.0
    assert ys.max() == 19.0
    assert mesh.get(1, 0).x == pytest.approx(20.0 / 3.0)


def test_scale_leaves_zero_axis_alone():
    mesh = MeshGrid(4, 4)
    mesh.scale(50, 50)
    assert mesh == MeshGrid(4, 4)


def test_add_horizontal_line():
    mesh = MeshGrid.regular(4, 4, 31, 31)
    mesh.set_label(0, 2, 9)
    mesh.add_line(0, 0.5, Direction.HORIZONTAL)
    assert mesh.shape == (4, 5)
    assert mesh.get(2, 1) == Point(20.0, 5.0)
    assert mesh.get_label(2, 1) == 0
    # rows after the insertion shift down by one
    assert mesh.get(0, 2) == Point(0.0, 10.0)
    assert mesh.get_label(0, 3) == 9


def test_add_vertical_line():
    mesh = MeshGrid.regular(4, 4, 31, 31)
    mesh.add_line(2, 0.25, Direction.VERTICAL)
    assert mesh.shape == (5, 4)
    assert mesh.get(3, 0) == Point(22.5, 0.0)
    assert mesh.get(4, 3) == Point(30.0, 30.0)


def test_add_line_range_errors(regular_mesh):
    with pytest.raises(ValidationError):
        regular_mesh.add_line(3, 0.5, Direction.HORIZONTAL)
    with pytest.raises(ValidationError):
        regular_mesh.add_line(-1, 0.5, Direction.VERTICAL)
    with pytest.raises(ValidationError):
        regular_mesh.add_line(0, 1.5, Direction.VERTICAL)
    assert regular_mesh.shape == (4, 4)


def test_add_then_delete_restores_mesh(bent_mesh):
    original = bent_mesh.copy()
    bent_mesh.add_line(1, 0.3, Direction.VERTICAL)
    bent_mesh.delete_line(2, Direction.VERTICAL)
    assert bent_mesh == original
    bent_mesh.add_line(2, 0.6, Direction.HORIZONTAL)
    bent_mesh.delete_line(3, Direction.HORIZONTAL)
    assert bent_mesh == original


def test_delete_line_errors(regular_mesh):
    with pytest.raises(ValidationError):
        regular_mesh.delete_line(0, Direction.HORIZONTAL)
    regular_mesh.add_line(0, 0.5, Direction.HORIZONTAL)
    with pytest.raises(ValidationError):
        regular_mesh.delete_line(5, Direction.HORIZONTAL)
    regular_mesh.delete_line(4, Direction.HORIZONTAL)
    assert regular_mesh.shape == (4, 4)


def test_functionalize_regular_mesh_is_noop(regular_mesh):
    assert regular_mesh.is_functional(32, 24)
    assert regular_mesh.functionalize(32, 24) == 0


def test_functionalize_clamps_and_unfolds():
    mesh = MeshGrid.regular(4, 4, 31, 31)
    mesh.set(0, 0, (-5.0, -2.0))
    mesh.set(1, 1, (25.0, 10.0))   # passes column 2 in x
    mesh.set(3, 3, (40.0, 30.0))
    assert not mesh.is_functional(31, 31)

    changed = mesh.functionalize(31, 31)

    assert changed == 3
    assert mesh.get(0, 0) == Point(0.0, 0.0)
    assert mesh.get(1, 1) == Point(25.0, 10.0)
    assert mesh.get(2, 1) == Point(25.0, 10.0)
    assert mesh.get(3, 3) == Point(30.0, 30.0)
    assert mesh.is_functional(31, 31)
    assert mesh.functionalize(31, 31) == 0


def test_functionalize_keeps_fractional_points_below_edge():
    mesh = MeshGrid.regular(4, 4, 100, 100)
    mesh.set(3, 0, (99.5, 0.0))
    assert mesh.is_functional(100, 100)

    assert mesh.functionalize(100, 100) == 0
    assert mesh.get(3, 0) == Point(99.5, 0.0)

    mesh.set(3, 1, (100.0, 33.0))
    assert not mesh.is_functional(100, 100)
    assert mesh.functionalize(100, 100) == 1
    assert mesh.get(3, 1) == Point(99.0, 33.0)


def test_functionalize_monotonic_columns():
    xs, ys = MeshGrid.regular(4, 4, 31, 31).as_arrays()
    ys[2, 1] = 5.0
    mesh = MeshGrid.from_arrays(xs, ys)
    mesh.functionalize(31, 31)
    _, fixed_y = mesh.as_arrays()
    assert fixed_y[2, 1] == 10.0
    assert np.all(np.diff(fixed_y, axis=0) >= 0)


def test_equality_and_str():
    a = MeshGrid.regular(4, 4, 4, 4)
    assert a == a.copy()
    assert a != MeshGrid.regular(5, 4, 4, 4)
    assert str(a).startswith("[[[0, 0], [1, 0], [2, 0], [3, 0]], [[0, 1]")
    assert repr(a) == "MeshGrid(nx=4, ny=4)"
