"""
Mesh Warping
============

Single responsibility: Resample an image from a source mesh onto a target mesh.

Each cell of the target mesh is a quadrilateral. For every integer pixel
inside a target cell we invert the bilinear map of that cell to find the
cell-local ``(u, v)`` coordinates, then evaluate the matching source cell at
``(u, v)`` to find where to sample the input image. Pixels not covered by any
target cell are sampled at their own coordinates.
"""

from typing import Tuple

import numpy as np

from grid_morph.core.interpolation import check_compatible, interpolate
from grid_morph.core.kernels import DEFAULT_KERNEL, AntialiasKernel
from grid_morph.core.mesh import MeshGrid
from grid_morph.core.pixel_buffer import PixelBuffer, quantize
from grid_morph.core.validator import validate_fraction
from grid_morph.utils.logging import get_logger

logger = get_logger(__name__)

# Slack on the unit square so pixels on shared cell edges are found
_UV_TOLERANCE = 1e-9
_EPSILON = 1e-12


def _cross(ax, ay, bx, by):
    return ax * by - ay * bx


def _solve_u(hx, hy, ex, ey, fx, fy, gx, gy, v):
    """Recover u from v using whichever axis is better conditioned."""
    den_x = ex + gx * v
    den_y = ey + gy * v
    use_x = np.abs(den_x) >= np.abs(den_y)
    num = np.where(use_x, hx - fx * v, hy - fy * v)
    den = np.where(use_x, den_x, den_y)
    with np.errstate(divide='ignore', invalid='ignore'):
        return np.where(np.abs(den) > _EPSILON, num / den, np.nan)


def _inside(u, v):
    lo = -_UV_TOLERANCE
    hi = 1.0 + _UV_TOLERANCE
    return (u >= lo) & (u <= hi) & (v >= lo) & (v <= hi)


def invert_bilinear(
    corners: np.ndarray,
    qx: np.ndarray,
    qy: np.ndarray
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Invert the bilinear map of one quadrilateral cell.

    The cell maps ``(u, v)`` in the unit square to
    ``p00 + e*u + f*v + g*u*v``. Eliminating u leaves a quadratic in v,
    solved in closed form; both roots are tried.

    Args:
        corners: ``(4, 2)`` array of p00, p10, p01, p11 (upper-left,
            upper-right, lower-left, lower-right)
        qx: x coordinates of query points
        qy: y coordinates of query points

    Returns:
        Tuple of (u, v, inside); u and v are clipped to [0, 1] and only
        meaningful where ``inside`` is True
    """
    (x00, y00), (x10, y10), (x01, y01), (x11, y11) = corners

    ex, ey = x10 - x00, y10 - y00
    fx, fy = x01 - x00, y01 - y00
    gx, gy = x00 - x10 - x01 + x11, y00 - y10 - y01 + y11
    hx, hy = qx - x00, qy - y00

    k2 = _cross(gx, gy, fx, fy)
    k1 = _cross(ex, ey, fx, fy) + _cross(hx, hy, gx, gy)
    k0 = _cross(hx, hy, ex, ey)

    scale = max(abs(ex), abs(ey), abs(fx), abs(fy), 1.0) ** 2

    with np.errstate(divide='ignore', invalid='ignore'):
        if abs(k2) <= _EPSILON * scale:
            # Parallelogram (or trapezoid along v): the quadratic degenerates
            v = np.where(np.abs(k1) > _EPSILON, -k0 / k1, np.nan)
            u = _solve_u(hx, hy, ex, ey, fx, fy, gx, gy, v)
            inside = _inside(u, v)
        else:
            disc = k1 * k1 - 4.0 * k2 * k0
            root = np.sqrt(np.where(disc >= 0.0, disc, np.nan))
            q = -0.5 * (k1 + np.where(k1 >= 0.0, root, -root))

            v1 = q / k2
            u1 = _solve_u(hx, hy, ex, ey, fx, fy, gx, gy, v1)
            ok1 = _inside(u1, v1)

            v2 = k0 / q
            u2 = _solve_u(hx, hy, ex, ey, fx, fy, gx, gy, v2)
            ok2 = _inside(u2, v2)

            u = np.where(ok1, u1, u2)
            v = np.where(ok1, v1, v2)
            inside = ok1 | ok2

    return np.clip(u, 0.0, 1.0), np.clip(v, 0.0, 1.0), inside


class WarpEngine:
    """
    Mesh warper with a fixed antialiasing kernel.

    Single responsibility: Map target pixels to source coordinates and sample.
    """

    def __init__(self, kernel: AntialiasKernel = DEFAULT_KERNEL):
        """
        Initialize warp engine.

        Args:
            kernel: Sampling filter used for every warp
        """
        self.kernel = AntialiasKernel(kernel)

    def sample_map(
        self,
        src: MeshGrid,
        target: MeshGrid,
        width: int,
        height: int
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Compute where each output pixel samples the source image.

        Cells are visited in canonical (row-major) order and the first cell
        containing a pixel claims it.

        Args:
            src: Mesh laid over the input image
            target: Mesh the output image is laid over
            width: Output width
            height: Output height

        Returns:
            Tuple of ``(height, width)`` x and y source-coordinate arrays
        """
        check_compatible(src, target)

        map_x, map_y = np.meshgrid(
            np.arange(width, dtype=np.float64),
            np.arange(height, dtype=np.float64)
        )

        sx, sy = src.as_arrays()
        tx, ty = target.as_arrays()
        if np.array_equal(sx, tx) and np.array_equal(sy, ty):
            logger.debug("Source and target meshes coincide; sampling map is the identity")
            return map_x, map_y

        claimed = np.zeros((height, width), dtype=bool)

        for r in range(src.ny - 1):
            for c in range(src.nx - 1):
                cell = (slice(r, r + 2), slice(c, c + 2))
                cx = tx[cell].ravel()
                cy = ty[cell].ravel()

                x_lo = max(0, int(np.ceil(cx.min())))
                x_hi = min(width - 1, int(np.floor(cx.max())))
                y_lo = max(0, int(np.ceil(cy.min())))
                y_hi = min(height - 1, int(np.floor(cy.max())))
                if x_lo > x_hi or y_lo > y_hi:
                    continue

                free = ~claimed[y_lo:y_hi + 1, x_lo:x_hi + 1]
                if not free.any():
                    continue
                local_y, local_x = np.nonzero(free)
                px = local_x + x_lo
                py = local_y + y_lo

                u, v, inside = invert_bilinear(
                    np.column_stack([cx, cy]), px.astype(np.float64), py.astype(np.float64)
                )
                if not inside.any():
                    continue

                px, py, u, v = px[inside], py[inside], u[inside], v[inside]

                # Same (u, v) in the source cell
                s00, s10, s01, s11 = (
                    (sx[r, c], sy[r, c]), (sx[r, c + 1], sy[r, c + 1]),
                    (sx[r + 1, c], sy[r + 1, c]), (sx[r + 1, c + 1], sy[r + 1, c + 1]),
                )
                w00 = (1 - u) * (1 - v)
                w10 = u * (1 - v)
                w01 = (1 - u) * v
                w11 = u * v
                map_x[py, px] = w00 * s00[0] + w10 * s10[0] + w01 * s01[0] + w11 * s11[0]
                map_y[py, px] = w00 * s00[1] + w10 * s10[1] + w01 * s01[1] + w11 * s11[1]
                claimed[py, px] = True

        uncovered = int(np.count_nonzero(~claimed))
        if uncovered:
            logger.debug(f"{uncovered} pixel(s) outside the target mesh sample in place")

        return map_x, map_y

    def resample(self, img: PixelBuffer, src: MeshGrid, target: MeshGrid) -> PixelBuffer:
        """
        Resample ``img`` so that ``src`` lands on ``target``.

        Layouts with 1 or 4 channels are processed natively; others are
        converted to NRGBA first.
        """
        if not img.is_native:
            logger.debug(f"Converting {img.layout.name} to NRGBA before warping")
            img = img.to_canonical()

        map_x, map_y = self.sample_map(src, target, img.width, img.height)
        values = self.kernel.sample(img.pixels, map_x.ravel(), map_y.ravel())
        out = quantize(values, img.pixels.dtype).reshape(img.pixels.shape)

        return PixelBuffer(out, img.layout)

    def warp(self, img: PixelBuffer, src: MeshGrid, dst: MeshGrid, t: float) -> PixelBuffer:
        """
        Warp ``img`` a fraction ``t`` of the way from ``src`` to ``dst``.

        Raises:
            IncompatibleMeshError: If the meshes' dimensions differ
            ValidationError: If t lies outside [0, 1]
        """
        check_compatible(src, dst)
        validate_fraction(t, "Warp fraction")

        target = interpolate(src, dst, t)
        logger.debug(
            f"Warping {img!r} with {src.nx}x{src.ny} mesh at t={t:.3f} "
            f"({self.kernel.value})"
        )
        return self.resample(img, src, target)


def warp(
    img: PixelBuffer,
    src: MeshGrid,
    dst: MeshGrid,
    t: float,
    kernel: AntialiasKernel = DEFAULT_KERNEL
) -> PixelBuffer:
    """
    Warp an image from a source mesh toward a destination mesh.

    Args:
        img: Input image
        src: Mesh laid over ``img``
        dst: Destination mesh, compatible with ``src``
        t: Fraction of the way from ``src`` to ``dst`` (0 = unchanged)
        kernel: Antialiasing kernel

    Returns:
        New image with the same bounds as ``img``

    Raises:
        IncompatibleMeshError: If the meshes' dimensions differ
        ValidationError: If t lies outside [0, 1]

    Example:
        >>> mesh = MeshGrid.regular(4, 4, img.width, img.height)
        >>> warp(img, mesh, mesh, 0.5) == img
        True
    """
    return WarpEngine(kernel).warp(img, src, dst, t)
