"""
Pixel Buffer
============

Single responsibility: Hold raster pixels with a declared channel layout.

A PixelBuffer wraps a ``(height, width, channels)`` numpy array of ``uint8``
or ``uint16`` samples. The warp and morph engines operate natively on 1- and
4-channel layouts; every other layout is converted to non-premultiplied RGBA
(NRGBA) first.
"""

from enum import Enum
from typing import Sequence, Tuple

import numpy as np

_DTYPES = {1: np.uint8, 2: np.uint16}


class ChannelLayout(Enum):
    """Meaning of the channels in a PixelBuffer."""

    GRAY = "gray"
    ALPHA = "alpha"
    NRGBA = "nrgba"          # non-premultiplied RGBA
    RGBA = "rgba"            # premultiplied RGBA
    CMYK = "cmyk"
    RGB = "rgb"
    GRAY_ALPHA = "gray_alpha"

    @property
    def channels(self) -> int:
        return _CHANNEL_COUNTS[self]


_CHANNEL_COUNTS = {
    ChannelLayout.GRAY: 1,
    ChannelLayout.ALPHA: 1,
    ChannelLayout.NRGBA: 4,
    ChannelLayout.RGBA: 4,
    ChannelLayout.CMYK: 4,
    ChannelLayout.RGB: 3,
    ChannelLayout.GRAY_ALPHA: 2,
}


def quantize(values: np.ndarray, dtype) -> np.ndarray:
    """
    Round float samples half away from zero and clamp them to ``dtype``'s range.

    Args:
        values: Float array of sample values
        dtype: Target integer dtype (uint8 or uint16)

    Returns:
        Array of the target dtype
    """
    max_value = np.iinfo(dtype).max
    rounded = np.sign(values) * np.floor(np.abs(values) + 0.5)
    return np.clip(rounded, 0, max_value).astype(dtype)


class PixelBuffer:
    """
    A raster image in memory.

    Example:
        >>> buf = PixelBuffer.blank(3, 2, ChannelLayout.GRAY)
        >>> buf.bounds
        (0, 0, 3, 2)
        >>> buf.set_pixel(2, 1, (200,))
        >>> buf.get_pixel(2, 1)
        (200,)
    """

    def __init__(self, pixels: np.ndarray, layout: ChannelLayout):
        """
        Wrap a pixel array.

        Args:
            pixels: ``(H, W, C)`` array, or ``(H, W)`` for single-channel layouts
            layout: Channel layout matching C

        Raises:
            ValueError: If the array's shape or dtype does not fit the layout
        """
        layout = ChannelLayout(layout)
        pixels = np.asarray(pixels)
        if pixels.ndim == 2:
            pixels = pixels[:, :, np.newaxis]

        if pixels.ndim != 3:
            raise ValueError(f"Pixel array must be 2-D or 3-D, got shape {pixels.shape}")
        if pixels.dtype not in (np.uint8, np.uint16):
            raise ValueError(f"Pixel array must be uint8 or uint16, got {pixels.dtype}")
        if pixels.shape[2] != layout.channels:
            raise ValueError(
                f"Layout {layout.name} needs {layout.channels} channel(s), "
                f"array has {pixels.shape[2]}"
            )
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise ValueError(f"Image must not be empty, got shape {pixels.shape}")

        self._pixels = pixels
        self.layout = layout

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        layout: ChannelLayout = ChannelLayout.NRGBA,
        depth: int = 1
    ) -> 'PixelBuffer':
        """Create a zero-filled buffer."""
        if depth not in _DTYPES:
            raise ValueError(f"Depth must be 1 or 2 bytes per channel, got {depth}")
        layout = ChannelLayout(layout)
        pixels = np.zeros((height, width, layout.channels), dtype=_DTYPES[depth])
        return cls(pixels, layout)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @property
    def pixels(self) -> np.ndarray:
        """The underlying ``(H, W, C)`` array (not a copy)."""
        return self._pixels

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def channels(self) -> int:
        return self._pixels.shape[2]

    @property
    def depth(self) -> int:
        """Bytes per channel (1 or 2)."""
        return self._pixels.dtype.itemsize

    @property
    def max_value(self) -> int:
        return int(np.iinfo(self._pixels.dtype).max)

    @property
    def bounds(self) -> Tuple[int, int, int, int]:
        """(min_x, min_y, max_x, max_y) with exclusive maxima."""
        return (0, 0, self.width, self.height)

    @property
    def is_native(self) -> bool:
        """Whether warping can operate on this layout without conversion."""
        return self.channels in (1, 4)

    # ------------------------------------------------------------------
    # Pixel access
    # ------------------------------------------------------------------

    def _check_coord(self, x: int, y: int) -> None:
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            raise IndexError(
                f"Pixel ({x}, {y}) lies outside the {self.width}x{self.height} image"
            )

    def get_pixel(self, x: int, y: int) -> Tuple[int, ...]:
        self._check_coord(x, y)
        return tuple(int(v) for v in self._pixels[y, x])

    def set_pixel(self, x: int, y: int, values: Sequence[int]) -> None:
        self._check_coord(x, y)
        if len(values) != self.channels:
            raise ValueError(
                f"Expected {self.channels} channel value(s), got {len(values)}"
            )
        self._pixels[y, x] = values

    def copy(self) -> 'PixelBuffer':
        return PixelBuffer(self._pixels.copy(), self.layout)

    def blank_like(self) -> 'PixelBuffer':
        """Zero-filled buffer with the same size, layout and depth."""
        return PixelBuffer(np.zeros_like(self._pixels), self.layout)

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def to_depth(self, depth: int) -> 'PixelBuffer':
        """
        Convert to another channel depth, keeping the layout.

        8-bit samples widen by replication (``v * 257``); 16-bit samples
        narrow by dropping the low byte.
        """
        if depth not in _DTYPES:
            raise ValueError(f"Depth must be 1 or 2 bytes per channel, got {depth}")
        if depth == self.depth:
            return self.copy()
        if depth == 2:
            pixels = self._pixels.astype(np.uint16) * 257
        else:
            pixels = (self._pixels >> 8).astype(np.uint8)
        return PixelBuffer(pixels, self.layout)

    def to_canonical(self) -> 'PixelBuffer':
        """
        Convert to non-premultiplied RGBA at the same depth.

        Returns:
            New NRGBA buffer (a copy even if already NRGBA)
        """
        src = self._pixels
        top = self.max_value
        dtype = src.dtype
        opaque = np.full(src.shape[:2] + (1,), top, dtype=dtype)

        if self.layout is ChannelLayout.NRGBA:
            out = src.copy()
        elif self.layout is ChannelLayout.GRAY:
            out = np.concatenate([src, src, src, opaque], axis=2)
        elif self.layout is ChannelLayout.ALPHA:
            out = np.concatenate([opaque, opaque, opaque, src], axis=2)
        elif self.layout is ChannelLayout.GRAY_ALPHA:
            gray = src[:, :, :1]
            out = np.concatenate([gray, gray, gray, src[:, :, 1:]], axis=2)
        elif self.layout is ChannelLayout.RGB:
            out = np.concatenate([src, opaque], axis=2)
        elif self.layout is ChannelLayout.RGBA:
            alpha = src[:, :, 3:].astype(np.float64)
            color = src[:, :, :3].astype(np.float64)
            unmultiplied = np.divide(
                color * top, alpha,
                out=np.zeros_like(color),
                where=alpha > 0
            )
            out = np.concatenate([quantize(unmultiplied, dtype), src[:, :, 3:]], axis=2)
        elif self.layout is ChannelLayout.CMYK:
            cmyk = src.astype(np.int64)
            white = top - cmyk[:, :, 3:]
            rgb = (top - cmyk[:, :, :3]) * white // top
            out = np.concatenate([rgb.astype(dtype), opaque], axis=2)
        else:
            raise ValueError(f"Unsupported layout {self.layout}")

        return PixelBuffer(out, ChannelLayout.NRGBA)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (
            self.layout is other.layout
            and self._pixels.dtype == other._pixels.dtype
            and bool(np.array_equal(self._pixels, other._pixels))
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"PixelBuffer({self.width}x{self.height}, {self.layout.name}, "
            f"{8 * self.depth}-bit)"
        )
