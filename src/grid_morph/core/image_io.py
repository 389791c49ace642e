"""
Image I/O Operations
====================

Single responsibility: Load and save image files as PixelBuffers.

Pillow decodes and encodes the container formats; this module only maps
Pillow modes onto channel layouts.
"""

from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from grid_morph.core.exceptions import ImageLoadError, ImageSaveError
from grid_morph.core.pixel_buffer import ChannelLayout, PixelBuffer
from grid_morph.utils.logging import get_logger

logger = get_logger(__name__)

# Pillow mode -> (layout, dtype)
_MODE_LAYOUTS = {
    'L': (ChannelLayout.GRAY, np.uint8),
    'I;16': (ChannelLayout.GRAY, np.uint16),
    'I;16L': (ChannelLayout.GRAY, np.uint16),
    'I;16B': (ChannelLayout.GRAY, np.uint16),
    'I;16N': (ChannelLayout.GRAY, np.uint16),
    'LA': (ChannelLayout.GRAY_ALPHA, np.uint8),
    'RGB': (ChannelLayout.RGB, np.uint8),
    'RGBA': (ChannelLayout.NRGBA, np.uint8),
    'RGBa': (ChannelLayout.RGBA, np.uint8),
    'CMYK': (ChannelLayout.CMYK, np.uint8),
}

# Formats that cannot store an alpha channel
_OPAQUE_SUFFIXES = {'.jpg', '.jpeg'}


def from_pil_image(img: Image.Image) -> PixelBuffer:
    """
    Convert a Pillow image to a PixelBuffer.

    Palette and bilevel images are expanded to RGBA and grayscale
    respectively; 32-bit integer grayscale is clamped to 16 bits.
    """
    if img.mode in ('P', 'PA'):
        img = img.convert('RGBA')
    elif img.mode == '1':
        img = img.convert('L')

    if img.mode == 'I':
        pixels = np.clip(np.asarray(img), 0, 65535).astype(np.uint16)
        return PixelBuffer(pixels, ChannelLayout.GRAY)

    if img.mode not in _MODE_LAYOUTS:
        logger.debug(f"Converting unsupported mode {img.mode} to RGBA")
        img = img.convert('RGBA')

    layout, dtype = _MODE_LAYOUTS[img.mode]
    pixels = np.asarray(img).astype(dtype)
    return PixelBuffer(pixels, layout)


def to_pil_image(buffer: PixelBuffer) -> Image.Image:
    """
    Convert a PixelBuffer to a Pillow image.

    Grayscale keeps its depth. Every other layout is converted to 8-bit
    non-premultiplied RGBA, the widest layout Pillow writes portably.
    """
    if buffer.layout is ChannelLayout.GRAY:
        return Image.fromarray(buffer.pixels[:, :, 0])

    canonical = buffer.to_canonical()
    if canonical.depth != 1:
        canonical = canonical.to_depth(1)
    return Image.fromarray(canonical.pixels)


def load_image(filepath: Union[str, Path]) -> PixelBuffer:
    """
    Load an image file.

    Args:
        filepath: Path to an image Pillow can decode

    Returns:
        PixelBuffer with the layout matching the file's pixel mode

    Raises:
        ImageLoadError: If the file cannot be opened or decoded
    """
    filepath = Path(filepath)
    try:
        with Image.open(filepath) as img:
            img.load()
            buffer = from_pil_image(img)
    except (OSError, ValueError) as e:
        raise ImageLoadError(f"Failed to load image {filepath}: {e}") from e

    logger.debug(f"Loaded {filepath.name}: {buffer!r}")
    return buffer


def save_image(buffer: PixelBuffer, filepath: Union[str, Path]) -> None:
    """
    Save a PixelBuffer, choosing the container format from the file suffix.

    Parent directories are created as needed. Alpha is dropped for formats
    that cannot store it (JPEG).

    Raises:
        ImageSaveError: If encoding or writing fails
    """
    filepath = Path(filepath)
    img = to_pil_image(buffer)
    if filepath.suffix.lower() in _OPAQUE_SUFFIXES and img.mode == 'RGBA':
        img = img.convert('RGB')

    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        img.save(filepath)
    except (OSError, ValueError, KeyError) as e:
        raise ImageSaveError(f"Failed to save image to {filepath}: {e}") from e

    logger.debug(f"Saved {buffer!r} to {filepath.name}")
