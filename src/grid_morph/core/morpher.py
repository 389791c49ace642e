"""
Core Morphing Logic
===================

Single responsibility: Implement the two-image morph.

A morph warps both images onto the mesh interpolated at ``t`` and
cross-dissolves their colors with the same ``t``.
"""

from typing import List, Sequence, Tuple

import numpy as np

from grid_morph.core.exceptions import ImageBoundsMismatchError
from grid_morph.core.interpolation import check_compatible, interpolate, interpolate_many
from grid_morph.core.kernels import DEFAULT_KERNEL, AntialiasKernel
from grid_morph.core.mesh import MeshGrid
from grid_morph.core.pixel_buffer import PixelBuffer, quantize
from grid_morph.core.validator import validate_fraction, validate_ratios
from grid_morph.core.warp import WarpEngine
from grid_morph.utils.logging import get_logger

logger = get_logger(__name__)


def match_formats(img1: PixelBuffer, img2: PixelBuffer) -> Tuple[PixelBuffer, PixelBuffer]:
    """
    Bring two images to a common layout and depth.

    Images that already agree are returned unchanged. Otherwise both are
    converted to NRGBA at the larger of the two depths.
    """
    if img1.layout is img2.layout and img1.depth == img2.depth:
        return img1, img2

    depth = max(img1.depth, img2.depth)
    logger.debug(
        f"Mixed formats ({img1!r}, {img2!r}); converting both to "
        f"{8 * depth}-bit NRGBA"
    )
    return (
        img1.to_canonical().to_depth(depth),
        img2.to_canonical().to_depth(depth),
    )


def cross_dissolve(img1: PixelBuffer, img2: PixelBuffer, t: float) -> PixelBuffer:
    """
    Blend two same-format images channel by channel.

    Each output sample is ``(1 - t) * a + t * b`` rounded half away from zero
    and clamped to the channel range.
    """
    a = img1.pixels.astype(np.float64)
    b = img2.pixels.astype(np.float64)
    blended = (1.0 - t) * a + t * b
    return PixelBuffer(quantize(blended, img1.pixels.dtype), img1.layout)


class ImageMorpher:
    """
    Image warping and morphing with a fixed antialiasing kernel.

    Single responsibility: Morph pairs of images.
    """

    def __init__(self, kernel: AntialiasKernel = DEFAULT_KERNEL):
        """
        Initialize morpher.

        Args:
            kernel: Antialiasing kernel used for every warp
        """
        self.kernel = AntialiasKernel(kernel)
        self.engine = WarpEngine(self.kernel)

    def warp(self, img: PixelBuffer, src: MeshGrid, dst: MeshGrid, t: float) -> PixelBuffer:
        """Warp one image; see :func:`grid_morph.core.warp.warp`."""
        return self.engine.warp(img, src, dst, t)

    def _check_inputs(
        self,
        src_img: PixelBuffer,
        dst_img: PixelBuffer,
        src_mesh: MeshGrid,
        dst_mesh: MeshGrid
    ) -> None:
        if src_img.bounds != dst_img.bounds:
            raise ImageBoundsMismatchError(src_img.bounds, dst_img.bounds)
        check_compatible(src_mesh, dst_mesh)

    def _morph_onto(
        self,
        src_img: PixelBuffer,
        dst_img: PixelBuffer,
        src_mesh: MeshGrid,
        dst_mesh: MeshGrid,
        target: MeshGrid,
        t: float
    ) -> PixelBuffer:
        warped_src = self.engine.warp(src_img, src_mesh, target, 1.0)
        warped_dst = self.engine.warp(dst_img, dst_mesh, target, 1.0)
        return cross_dissolve(warped_src, warped_dst, t)

    def morph(
        self,
        src_img: PixelBuffer,
        dst_img: PixelBuffer,
        src_mesh: MeshGrid,
        dst_mesh: MeshGrid,
        t: float
    ) -> PixelBuffer:
        """
        Morph two images a fraction ``t`` of the way from source to destination.

        Args:
            src_img: Source image (t = 0)
            dst_img: Destination image (t = 1), same bounds as src_img
            src_mesh: Mesh laid over src_img
            dst_mesh: Mesh laid over dst_img, compatible with src_mesh
            t: Morph fraction in [0, 1]

        Returns:
            Morphed image

        Raises:
            ImageBoundsMismatchError: If the images differ in size
            IncompatibleMeshError: If the meshes' dimensions differ
            ValidationError: If t lies outside [0, 1]
        """
        self._check_inputs(src_img, dst_img, src_mesh, dst_mesh)
        validate_fraction(t, "Morph fraction")

        src_img, dst_img = match_formats(src_img, dst_img)
        target = interpolate(src_mesh, dst_mesh, t)

        logger.debug(f"Morphing {src_img!r} at t={t:.3f} ({self.kernel.value})")
        return self._morph_onto(src_img, dst_img, src_mesh, dst_mesh, target, t)

    def batch_morph(
        self,
        src_img: PixelBuffer,
        dst_img: PixelBuffer,
        src_mesh: MeshGrid,
        dst_mesh: MeshGrid,
        ratios: Sequence[float]
    ) -> List[PixelBuffer]:
        """
        Generate one morph per ratio.

        All inputs are validated and formats matched once, before any
        frame is rendered.

        Args:
            src_img: Source image
            dst_img: Destination image
            src_mesh: Mesh laid over src_img
            dst_mesh: Mesh laid over dst_img
            ratios: Morph fractions, each in [0, 1]

        Returns:
            Morphed images in the order of ``ratios``
        """
        self._check_inputs(src_img, dst_img, src_mesh, dst_mesh)
        ratios = validate_ratios(ratios)

        src_img, dst_img = match_formats(src_img, dst_img)
        targets = interpolate_many(src_mesh, dst_mesh, ratios)

        results = [None] * len(ratios)
        for i, (t, target) in enumerate(zip(ratios, targets)):
            results[i] = self._morph_onto(src_img, dst_img, src_mesh, dst_mesh, target, t)
            logger.debug(f"Rendered morph {i + 1}/{len(ratios)} (t={t:.3f})")

        return results


def create_morpher(kernel: AntialiasKernel = DEFAULT_KERNEL) -> ImageMorpher:
    """
    Factory function to create morpher.

    Args:
        kernel: Antialiasing kernel

    Returns:
        ImageMorpher instance
    """
    return ImageMorpher(kernel)


def morph(
    src_img: PixelBuffer,
    dst_img: PixelBuffer,
    src_mesh: MeshGrid,
    dst_mesh: MeshGrid,
    t: float,
    kernel: AntialiasKernel = DEFAULT_KERNEL
) -> PixelBuffer:
    """
    Morph two images; see :meth:`ImageMorpher.morph`.

    Example:
        >>> mesh = MeshGrid.regular(4, 4, img.width, img.height)
        >>> morph(img, img, mesh, mesh, 0.3) == img
        True
    """
    return ImageMorpher(kernel).morph(src_img, dst_img, src_mesh, dst_mesh, t)

