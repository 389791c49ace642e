import numpy as np
import pytest

from grid_morph.core.exceptions import (
    ImageBoundsMismatchError,
    IncompatibleMeshError,
    ValidationError,
)
from grid_morph.core.kernels import AntialiasKernel
from grid_morph.core.mesh import MeshGrid
from grid_morph.core.morpher import (
    ImageMorpher,
    create_morpher,
    cross_dissolve,
    match_formats,
    morph,
)
from grid_morph.core.pixel_buffer import ChannelLayout, PixelBuffer

from conftest import HEIGHT, WIDTH, make_gradient, make_uniform


@pytest.mark.parametrize("t", [0.0, 0.3, 0.5, 1.0])
def test_morph_image_with_itself_is_identity(t, rgba_image, bent_mesh):
    assert morph(rgba_image, rgba_image, bent_mesh, bent_mesh, t) == rgba_image


def test_endpoints_reproduce_inputs(gray_image, regular_mesh, bent_mesh):
    other = make_uniform(90)
    morpher = create_morpher(AntialiasKernel.NEAREST)
    assert morpher.morph(gray_image, other, regular_mesh, bent_mesh, 0.0) == gray_image
    assert morpher.morph(gray_image, other, regular_mesh, bent_mesh, 1.0) == other


def test_uniform_images_blend(regular_mesh, bent_mesh):
    black = make_uniform(0)
    light = make_uniform(200)
    out = morph(black, light, regular_mesh, bent_mesh, 0.25)
    assert out.layout is ChannelLayout.GRAY
    assert np.all(out.pixels == 50)


def test_cross_dissolve_rounds_half_away():
    a = PixelBuffer(np.array([[0, 10]], dtype=np.uint8), ChannelLayout.GRAY)
    b = PixelBuffer(np.array([[1, 20]], dtype=np.uint8), ChannelLayout.GRAY)
    out = cross_dissolve(a, b, 0.5)
    assert out.pixels[0, :, 0].tolist() == [1, 15]


def test_match_formats():
    gray = make_gradient()
    rgba = make_gradient(layout=ChannelLayout.NRGBA)

    same_a, same_b = match_formats(gray, gray)
    assert same_a is gray and same_b is gray

    a, b = match_formats(gray, rgba.to_depth(2))
    assert a.layout is ChannelLayout.NRGBA and b.layout is ChannelLayout.NRGBA
    assert a.depth == 2 and b.depth == 2


def test_morph_mixed_formats(regular_mesh, rgba_image):
    gray = make_uniform(0)
    out = morph(gray, rgba_image, regular_mesh, regular_mesh, 1.0)
    assert out.layout is ChannelLayout.NRGBA
    assert out == rgba_image


def test_morph_validation(gray_image, regular_mesh):
    small = make_uniform(0, width=WIDTH - 1)
    with pytest.raises(ImageBoundsMismatchError) as excinfo:
        morph(gray_image, small, regular_mesh, regular_mesh, 0.5)
    assert excinfo.value.bounds1 == (0, 0, WIDTH, HEIGHT)

    with pytest.raises(IncompatibleMeshError):
        morph(gray_image, gray_image, regular_mesh, MeshGrid.regular(4, 5, WIDTH, HEIGHT), 0.5)

    with pytest.raises(ValidationError):
        morph(gray_image, gray_image, regular_mesh, regular_mesh, -0.1)


def test_batch_morph_matches_single_morphs(gray_image, regular_mesh, bent_mesh):
    other = make_uniform(60)
    morpher = ImageMorpher(AntialiasKernel.BILINEAR)
    ratios = [0.0, 0.5, 1.0]
    frames = morpher.batch_morph(gray_image, other, regular_mesh, bent_mesh, ratios)
    assert len(frames) == 3
    for t, frame in zip(ratios, frames):
        assert frame == morpher.morph(gray_image, other, regular_mesh, bent_mesh, t)


def test_batch_morph_rejects_bad_ratios(gray_image, regular_mesh):
    morpher = ImageMorpher()
    with pytest.raises(ValidationError):
        morpher.batch_morph(gray_image, gray_image, regular_mesh, regular_mesh, [])
    with pytest.raises(ValidationError):
        morpher.batch_morph(gray_image, gray_image, regular_mesh, regular_mesh, [0.5, 1.2])


def test_morpher_warp_delegates(gray_image, regular_mesh):
    morpher = create_morpher("nearest")
    assert morpher.kernel is AntialiasKernel.NEAREST
    assert morpher.warp(gray_image, regular_mesh, regular_mesh, 0.4) == gray_image
