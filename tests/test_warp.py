import numpy as np
import pytest

from grid_morph.core.exceptions import IncompatibleMeshError, ValidationError
from grid_morph.core.kernels import AntialiasKernel
from grid_morph.core.mesh import MeshGrid
from grid_morph.core.pixel_buffer import ChannelLayout, PixelBuffer
from grid_morph.core.warp import WarpEngine, invert_bilinear, warp

from conftest import HEIGHT, WIDTH, make_uniform


def test_invert_unit_square():
    corners = np.array([[0.0, 0.0], [10.0, 0.0], [0.0, 10.0], [10.0, 10.0]])
    u, v, inside = invert_bilinear(corners, np.array([2.5, 10.0]), np.array([7.5, 0.0]))
    assert inside.tolist() == [True, True]
    assert np.allclose(u, [0.25, 1.0])
    assert np.allclose(v, [0.75, 0.0])


def test_invert_general_quad():
    # p00 + e*u + f*v + g*u*v with g != 0, so the quadratic is not degenerate
    corners = np.array([[0.0, 0.0], [10.0, 0.0], [0.0, 10.0], [20.0, 20.0]])
    u, v, inside = invert_bilinear(corners, np.array([7.5, 30.0]), np.array([7.5, -5.0]))
    assert inside.tolist() == [True, False]
    assert u[0] == pytest.approx(0.5)
    assert v[0] == pytest.approx(0.5)


def test_sample_map_identity(regular_mesh):
    engine = WarpEngine(AntialiasKernel.NEAREST)
    map_x, map_y = engine.sample_map(regular_mesh, regular_mesh.copy(), WIDTH, HEIGHT)
    assert map_x.shape == (HEIGHT, WIDTH)
    assert map_x[5, 7] == 7.0
    assert map_y[5, 7] == 5.0


def test_sample_map_follows_translation():
    src = MeshGrid.regular(4, 4, WIDTH, HEIGHT)
    sx, sy = src.as_arrays()
    target = MeshGrid.from_arrays(sx + 3.0, sy)

    map_x, map_y = WarpEngine().sample_map(src, target, WIDTH, HEIGHT)

    assert map_x[10, 10] == pytest.approx(7.0)
    assert map_y[10, 10] == pytest.approx(10.0)
    # left of the shifted mesh nothing covers the pixel, so it samples in place
    assert map_x[10, 1] == 1.0


@pytest.mark.parametrize("kernel", list(AntialiasKernel))
@pytest.mark.parametrize("t", [0.0, 0.3, 1.0])
def test_warp_to_same_mesh_is_identity(kernel, t, rgba_image, bent_mesh):
    assert warp(rgba_image, bent_mesh, bent_mesh, t, kernel) == rgba_image


def test_warp_interpolated_identity_through_cells(gray_image, regular_mesh):
    # 0.7 * m + 0.3 * m may differ from m in the last bit, forcing the cell search
    other = regular_mesh.copy()
    assert warp(gray_image, regular_mesh, other, 0.3, AntialiasKernel.BILINEAR) == gray_image


def test_warp_shifts_content(gray_image):
    src = MeshGrid.regular(4, 4, WIDTH, HEIGHT)
    sx, sy = src.as_arrays()
    dst = MeshGrid.from_arrays(sx + 3.0, sy)

    out = warp(gray_image, src, dst, 1.0, AntialiasKernel.NEAREST)

    assert out.layout is ChannelLayout.GRAY
    assert out.bounds == gray_image.bounds
    assert out.get_pixel(12, 6) == gray_image.get_pixel(9, 6)
    assert out.get_pixel(1, 6) == gray_image.get_pixel(1, 6)


def test_warp_half_way_shifts_half(gray_image):
    src = MeshGrid.regular(4, 4, WIDTH, HEIGHT)
    sx, sy = src.as_arrays()
    dst = MeshGrid.from_arrays(sx + 4.0, sy)
    out = warp(gray_image, src, dst, 0.5, AntialiasKernel.NEAREST)
    assert out.get_pixel(12, 6) == gray_image.get_pixel(10, 6)


def test_warp_preserves_uniform_image(bent_mesh, regular_mesh):
    img = make_uniform(123)
    assert warp(img, regular_mesh, bent_mesh, 1.0) == img


def test_warp_converts_non_native_layouts(regular_mesh):
    rgb = PixelBuffer(np.full((HEIGHT, WIDTH, 3), 40, dtype=np.uint8), ChannelLayout.RGB)
    out = warp(rgb, regular_mesh, regular_mesh, 0.5)
    assert out.layout is ChannelLayout.NRGBA
    assert out.get_pixel(3, 3) == (40, 40, 40, 255)


def test_warp_keeps_depth(regular_mesh, bent_mesh):
    img = make_uniform(10).to_depth(2)
    out = warp(img, regular_mesh, bent_mesh, 0.5)
    assert out.depth == 2
    assert out.get_pixel(0, 0) == (2570,)


def test_warp_errors(gray_image, regular_mesh):
    with pytest.raises(ValidationError):
        warp(gray_image, regular_mesh, regular_mesh, 1.5)
    with pytest.raises(IncompatibleMeshError):
        warp(gray_image, regular_mesh, MeshGrid.regular(5, 4, WIDTH, HEIGHT), 0.5)
