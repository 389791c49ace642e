"""Displacement Heatmap Utilities - Single responsibility: Compute and visualize mesh displacement."""

from pathlib import Path
from typing import Tuple

import numpy as np

from grid_morph.core.interpolation import check_compatible
from grid_morph.core.mesh import MeshGrid
from grid_morph.utils.logging import get_logger

# Get logger for this module
logger = get_logger(__name__)


def compute_displacement(
    src_mesh: MeshGrid,
    dst_mesh: MeshGrid,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Compute per-control-point displacement from one mesh to another.

    Args:
        src_mesh: Starting mesh
        dst_mesh: Ending mesh, compatible with src_mesh

    Returns:
        Tuple of (dx, dy, magnitude), each of shape (ny, nx):
        - dx: Signed horizontal displacement (positive = rightward)
        - dy: Signed vertical displacement (positive = downward)
        - magnitude: Unsigned Euclidean displacement

    Raises:
        IncompatibleMeshError: If the meshes' dimensions differ
    """
    check_compatible(src_mesh, dst_mesh)

    x1, y1 = src_mesh.as_arrays()
    x2, y2 = dst_mesh.as_arrays()

    dx = x2 - x1
    dy = y2 - y1
    magnitude = np.hypot(dx, dy)

    logger.debug(
        f"Displacement: max = {magnitude.max():.3f}px, mean = {magnitude.mean():.3f}px"
    )
    return dx, dy, magnitude


def create_displacement_visualization(
    src_mesh: MeshGrid,
    dst_mesh: MeshGrid,
    width: int,
    height: int,
    output_path: Path,
) -> bool:
    """Create and save a 1x3 displacement figure (vector field, dx/dy, magnitude).

    The first panel draws both meshes in image coordinates with an arrow from
    every source control point to its destination. The second shows the
    signed displacement per control point on a diverging colormap, and the
    third the displacement magnitude.

    Args:
        src_mesh: Starting mesh
        dst_mesh: Ending mesh
        width: Image width, for the vector-field axes
        height: Image height, for the vector-field axes
        output_path: Path to save figure (PNG recommended)

    Returns:
        True if successful, False otherwise
    """
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt
    from matplotlib.colors import Normalize, TwoSlopeNorm

    dx, dy, magnitude = compute_displacement(src_mesh, dst_mesh)
    x1, y1 = src_mesh.as_arrays()
    x2, y2 = dst_mesh.as_arrays()

    fig, axes = plt.subplots(1, 3, figsize=(18, 6))
    fig.suptitle('Mesh Displacement', fontsize=16, fontweight='bold')

    try:
        # Vector field in image coordinates (y grows downward)
        ax = axes[0]
        for xs, ys, style in ((x1, y1, 'b-'), (x2, y2, 'r-')):
            ax.plot(xs.T, ys.T, style, linewidth=0.6, alpha=0.5)
            ax.plot(xs, ys, style, linewidth=0.6, alpha=0.5)
        ax.quiver(
            x1, y1, dx, dy, magnitude,
            angles='xy', scale_units='xy', scale=1, cmap='viridis', width=0.004
        )
        ax.set_xlim(0, max(width - 1, 1))
        ax.set_ylim(max(height - 1, 1), 0)
        ax.set_aspect('equal')
        ax.set_title('Control-point motion', fontsize=14, fontweight='bold')

        # Signed displacement: dx and dy side by side per control point
        ax = axes[1]
        signed = np.concatenate([dx, np.full((dx.shape[0], 1), np.nan), dy], axis=1)
        vmax_abs = max(float(np.nanmax(np.abs(signed))), 1e-9)
        norm = TwoSlopeNorm(vmin=-vmax_abs, vcenter=0.0, vmax=vmax_abs)
        im = ax.imshow(signed, cmap='RdBu_r', norm=norm, interpolation='nearest')
        ax.set_title('dx | dy', fontsize=14, fontweight='bold')
        ax.set_xticks([])
        ax.set_yticks([])
        cbar = plt.colorbar(im, ax=ax, fraction=0.046, pad=0.04)
        cbar.set_label('Displacement (px)', rotation=270, labelpad=15, fontsize=10)

        # Magnitude
        ax = axes[2]
        norm = Normalize(vmin=0.0, vmax=max(float(magnitude.max()), 1e-9))
        im = ax.imshow(magnitude, cmap='hot', norm=norm, interpolation='nearest')
        ax.set_title('Magnitude', fontsize=14, fontweight='bold')
        ax.set_xticks([])
        ax.set_yticks([])
        cbar = plt.colorbar(im, ax=ax, fraction=0.046, pad=0.04)
        cbar.set_label('Magnitude (px)', rotation=270, labelpad=15, fontsize=10)

        plt.tight_layout()

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=150, bbox_inches='tight')

    except (OSError, ValueError) as e:
        logger.error(f"Error creating displacement heatmap: {e}")
        return False

    finally:
        plt.close(fig)

    return output_path.exists()
