import numpy as np
import pytest

from grid_morph.core.pixel_buffer import ChannelLayout, PixelBuffer, quantize


def test_quantize_rounds_half_away_and_clamps():
    values = np.array([0.5, 1.5, 2.49, -0.4, -3.0, 300.0])
    assert quantize(values, np.uint8).tolist() == [1, 2, 2, 0, 0, 255]
    assert quantize(np.array([70000.0]), np.uint16).tolist() == [65535]


def test_blank_and_geometry():
    buf = PixelBuffer.blank(3, 2, ChannelLayout.GRAY)
    assert buf.bounds == (0, 0, 3, 2)
    assert (buf.width, buf.height, buf.channels, buf.depth) == (3, 2, 1, 1)
    assert buf.max_value == 255

    deep = PixelBuffer.blank(2, 2, ChannelLayout.NRGBA, depth=2)
    assert deep.depth == 2
    assert deep.max_value == 65535
    assert repr(deep) == "PixelBuffer(2x2, NRGBA, 16-bit)"


def test_constructor_validation():
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros((2, 2, 3), dtype=np.uint8), ChannelLayout.NRGBA)
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros((2, 2), dtype=np.float32), ChannelLayout.GRAY)
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros((0, 2), dtype=np.uint8), ChannelLayout.GRAY)
    with pytest.raises(ValueError):
        PixelBuffer.blank(2, 2, depth=4)


def test_pixel_access():
    buf = PixelBuffer.blank(3, 2, ChannelLayout.NRGBA)
    buf.set_pixel(2, 1, (10, 20, 30, 40))
    assert buf.get_pixel(2, 1) == (10, 20, 30, 40)
    assert buf.pixels[1, 2].tolist() == [10, 20, 30, 40]
    with pytest.raises(IndexError):
        buf.get_pixel(3, 0)
    with pytest.raises(ValueError):
        buf.set_pixel(0, 0, (1, 2))


def test_copy_and_equality():
    buf = PixelBuffer.blank(2, 2, ChannelLayout.GRAY)
    clone = buf.copy()
    assert clone == buf
    clone.set_pixel(0, 0, (5,))
    assert clone != buf
    assert buf.blank_like() == buf
    assert PixelBuffer.blank(2, 2, ChannelLayout.ALPHA) != buf


def test_depth_conversion():
    buf = PixelBuffer(np.array([[0, 1, 128, 255]], dtype=np.uint8), ChannelLayout.GRAY)
    wide = buf.to_depth(2)
    assert wide.pixels[0, :, 0].tolist() == [0, 257, 32896, 65535]
    assert wide.to_depth(1) == buf


def test_gray_and_alpha_to_canonical():
    gray = PixelBuffer(np.array([[7]], dtype=np.uint8), ChannelLayout.GRAY)
    assert gray.to_canonical().get_pixel(0, 0) == (7, 7, 7, 255)

    alpha = PixelBuffer(np.array([[9]], dtype=np.uint8), ChannelLayout.ALPHA)
    assert alpha.to_canonical().get_pixel(0, 0) == (255, 255, 255, 9)

    gray_alpha = PixelBuffer(np.array([[[7, 9]]], dtype=np.uint8), ChannelLayout.GRAY_ALPHA)
    assert gray_alpha.to_canonical().get_pixel(0, 0) == (7, 7, 7, 9)

    rgb = PixelBuffer(np.array([[[1, 2, 3]]], dtype=np.uint8), ChannelLayout.RGB)
    converted = rgb.to_canonical()
    assert converted.layout is ChannelLayout.NRGBA
    assert converted.get_pixel(0, 0) == (1, 2, 3, 255)


def test_cmyk_to_canonical():
    pixels = np.array([[[0, 0, 0, 0], [0, 0, 0, 255], [255, 0, 0, 0], [0, 0, 0, 51]]], dtype=np.uint8)
    rgba = PixelBuffer(pixels, ChannelLayout.CMYK).to_canonical()
    assert rgba.get_pixel(0, 0) == (255, 255, 255, 255)
    assert rgba.get_pixel(1, 0) == (0, 0, 0, 255)
    assert rgba.get_pixel(2, 0) == (0, 255, 255, 255)
    assert rgba.get_pixel(3, 0) == (204, 204, 204, 255)


def test_premultiplied_to_canonical():
    pixels = np.array([[[128, 64, 0, 128], [10, 10, 10, 0]]], dtype=np.uint8)
    rgba = PixelBuffer(pixels, ChannelLayout.RGBA).to_canonical()
    assert rgba.get_pixel(0, 0) == (255, 128, 0, 128)
    assert rgba.get_pixel(1, 0) == (0, 0, 0, 0)


def test_native_layouts():
    assert PixelBuffer.blank(1, 1, ChannelLayout.GRAY).is_native
    assert PixelBuffer.blank(1, 1, ChannelLayout.CMYK).is_native
    assert not PixelBuffer.blank(1, 1, ChannelLayout.RGB).is_native
    assert not PixelBuffer.blank(1, 1, ChannelLayout.GRAY_ALPHA).is_native
