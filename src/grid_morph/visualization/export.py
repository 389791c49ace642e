"""
CSV Export Utilities
====================

Single responsibility: Export quantitative mesh displacement data to CSV format.

Per-control-point data allows custom visualizations and statistical
comparisons in external tools (Excel, R, Python, MATLAB).
"""

import csv
from pathlib import Path
from typing import Optional

import numpy as np

from grid_morph.core.mesh import MeshGrid
from grid_morph.visualization.heatmap import compute_displacement
from grid_morph.utils.logging import get_logger

logger = get_logger(__name__)

STATISTICS_FIELDS = ['metric', 'component', 'mean', 'std', 'min', 'max', 'p25', 'p50', 'p75', 'p95', 'p99']
POINT_FIELDS = ['point_id', 'col', 'row', 'x_a', 'y_a', 'x_b', 'y_b', 'dx', 'dy', 'magnitude']


def compute_stats(data: np.ndarray, name: str, category: str) -> Optional[dict]:
    """
    Compute descriptive statistics for a data array.

    Args:
        data: Numpy array to analyze
        name: Component name (e.g., 'dx')
        category: Category (e.g., 'displacement')

    Returns:
        Dictionary with statistics or None if no valid data
    """
    data_flat = data.flatten()
    data_clean = data_flat[np.isfinite(data_flat)]

    if len(data_clean) == 0:
        logger.warning(f"No valid data for {category}/{name}")
        return None

    return {
        'metric': category,
        'component': name,
        'mean': float(np.mean(data_clean)),
        'std': float(np.std(data_clean)),
        'min': float(np.min(data_clean)),
        'max': float(np.max(data_clean)),
        'p25': float(np.percentile(data_clean, 25)),
        'p50': float(np.percentile(data_clean, 50)),  # median
        'p75': float(np.percentile(data_clean, 75)),
        'p95': float(np.percentile(data_clean, 95)),
        'p99': float(np.percentile(data_clean, 99)),
    }


def export_statistics_csv(
    src_mesh: MeshGrid,
    dst_mesh: MeshGrid,
    output_path: Path
) -> None:
    """
    Export summary statistics of control-point displacement to CSV.

    Args:
        src_mesh: Starting mesh
        dst_mesh: Ending mesh
        output_path: Path to save CSV file

    Output CSV Format:
        metric,component,mean,std,min,max,p25,p50,p75,p95,p99
        displacement,dx,1.25,3.1,-6.0,9.5,0.0,0.0,2.0,7.5,9.2
        displacement,dy,...
        displacement,magnitude,...
    """
    output_path = Path(output_path)
    logger.info(f"Exporting statistics to {output_path}")

    dx, dy, magnitude = compute_displacement(src_mesh, dst_mesh)

    stats_rows = [
        compute_stats(dx, 'dx', 'displacement'),
        compute_stats(dy, 'dy', 'displacement'),
        compute_stats(magnitude, 'magnitude', 'displacement'),
    ]
    stats_rows = [row for row in stats_rows if row is not None]

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=STATISTICS_FIELDS)
        writer.writeheader()
        writer.writerows(stats_rows)

    logger.info(f"Exported {len(stats_rows)} statistics to {output_path}")


def export_point_data_csv(
    src_mesh: MeshGrid,
    dst_mesh: MeshGrid,
    output_path: Path
) -> None:
    """
    Export per-control-point positions and displacement to CSV.

    Rows follow the canonical (row-major) mesh order.

    Output CSV Format:
        point_id,col,row,x_a,y_a,x_b,y_b,dx,dy,magnitude
        0,0,0,0.0,0.0,0.0,0.0,0.0,0.0,0.0
        ...
    """
    output_path = Path(output_path)
    logger.info(f"Exporting control-point data to {output_path}")

    x1, y1 = src_mesh.as_arrays()
    x2, y2 = dst_mesh.as_arrays()
    dx, dy, magnitude = compute_displacement(src_mesh, dst_mesh)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=POINT_FIELDS)
        writer.writeheader()

        point_id = 0
        for row in range(src_mesh.ny):
            for col in range(src_mesh.nx):
                writer.writerow({
                    'point_id': point_id,
                    'col': col,
                    'row': row,
                    'x_a': float(x1[row, col]),
                    'y_a': float(y1[row, col]),
                    'x_b': float(x2[row, col]),
                    'y_b': float(y2[row, col]),
                    'dx': float(dx[row, col]),
                    'dy': float(dy[row, col]),
                    'magnitude': float(magnitude[row, col]),
                })
                point_id += 1

    logger.info(f"Exported {point_id} control points to {output_path}")
