import numpy as np
import pytest

from grid_morph.core.image_io import save_image
from grid_morph.core.mesh import MeshGrid
from grid_morph.core.mesh_io import save_mesh
from grid_morph.core.pixel_buffer import ChannelLayout, PixelBuffer

WIDTH, HEIGHT = 32, 24


def make_gradient(width=WIDTH, height=HEIGHT, layout=ChannelLayout.GRAY):
    ys, xs = np.mgrid[0:height, 0:width]
    gray = (xs * 5 + ys * 3).astype(np.uint8)
    if layout is ChannelLayout.GRAY:
        return PixelBuffer(gray, layout)
    pixels = np.stack([gray, 255 - gray, (xs * 8).astype(np.uint8), np.full_like(gray, 255)], axis=2)
    return PixelBuffer(pixels, ChannelLayout.NRGBA)


def make_uniform(value, width=WIDTH, height=HEIGHT):
    return PixelBuffer(np.full((height, width), value, dtype=np.uint8), ChannelLayout.GRAY)


@pytest.fixture
def gray_image():
    return make_gradient()


@pytest.fixture
def rgba_image():
    return make_gradient(layout=ChannelLayout.NRGBA)


@pytest.fixture
def regular_mesh():
    return MeshGrid.regular(4, 4, WIDTH, HEIGHT)


@pytest.fixture
def bent_mesh():
    # interior point nudged; still bounded and monotonic
    mesh = MeshGrid.regular(4, 4, WIDTH, HEIGHT)
    pt = mesh.get(1, 1)
    mesh.set(1, 1, (pt.x + 3.0, pt.y + 2.0))
    return mesh


@pytest.fixture
def morph_inputs(tmp_path, rgba_image, regular_mesh, bent_mesh):
    """Two images and two meshes written to disk."""
    paths = {
        'image1': tmp_path / 'inputs' / 'circle.png',
        'image2': tmp_path / 'inputs' / 'square.png',
        'mesh1': tmp_path / 'inputs' / 'circle.mesh',
        'mesh2': tmp_path / 'inputs' / 'square.mesh',
    }
    save_image(rgba_image, paths['image1'])
    save_image(PixelBuffer(rgba_image.pixels[::-1].copy(), ChannelLayout.NRGBA), paths['image2'])
    save_mesh(regular_mesh, paths['mesh1'])
    save_mesh(bent_mesh, paths['mesh2'])
    return paths
