"""
Mesh Interpolation
==================

Single responsibility: Check mesh compatibility and interpolate between meshes.
"""

from typing import List, Sequence

import numpy as np

from grid_morph.core.exceptions import IncompatibleMeshError
from grid_morph.core.mesh import MeshGrid
from grid_morph.core.validator import validate_fraction
from grid_morph.utils.logging import get_logger

logger = get_logger(__name__)


def compatible(m1: MeshGrid, m2: MeshGrid) -> bool:
    """Report whether two meshes have the same number of columns and rows."""
    return m1.nx == m2.nx and m1.ny == m2.ny


def check_compatible(m1: MeshGrid, m2: MeshGrid) -> None:
    """
    Raise if two meshes cannot be paired point for point.

    Raises:
        IncompatibleMeshError: If the meshes' dimensions differ
    """
    if not compatible(m1, m2):
        raise IncompatibleMeshError(m1.shape, m2.shape)


def _lerp(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    # Endpoints are returned as exact copies so t=0 and t=1 reproduce the inputs
    if t == 0.0:
        return a.copy()
    if t == 1.0:
        return b.copy()
    return (1.0 - t) * a + t * b


def interpolate(m1: MeshGrid, m2: MeshGrid, t: float) -> MeshGrid:
    """
    Interpolate two meshes a fraction ``t`` of the way from ``m1`` to ``m2``.

    Every point of the result is ``(1 - t) * m1[i] + t * m2[i]``. The result
    carries ``m1``'s labels.

    Args:
        m1: Starting mesh (t = 0)
        m2: Ending mesh (t = 1)
        t: Interpolation fraction in [0, 1]

    Returns:
        New mesh; neither input is modified

    Raises:
        ValidationError: If t lies outside [0, 1]
        IncompatibleMeshError: If the meshes' dimensions differ

    Example:
        >>> m1 = MeshGrid.regular(4, 4, 100, 100)
        >>> m2 = m1.copy()
        >>> m2.set(1, 1, Point(16.5, 16.5))
        >>> interpolate(m1, m2, 0.5).get(1, 1)
        Point(x=24.75, y=24.75)
    """
    validate_fraction(t, "Interpolation fraction")
    check_compatible(m1, m2)

    x1, y1 = m1.as_arrays()
    x2, y2 = m2.as_arrays()

    return MeshGrid.from_arrays(_lerp(x1, x2, t), _lerp(y1, y2, t), m1.labels)


def interpolate_many(m1: MeshGrid, m2: MeshGrid, ts: Sequence[float]) -> List[MeshGrid]:
    """
    Interpolate a sequence of fractions at once.

    Args:
        m1: Starting mesh
        m2: Ending mesh
        ts: Interpolation fractions, each in [0, 1]

    Returns:
        One mesh per fraction, in order
    """
    for t in ts:
        validate_fraction(t, "Interpolation fraction")
    check_compatible(m1, m2)

    logger.debug(f"Interpolating {len(ts)} meshes of {m1.nx}x{m1.ny}")
    return [interpolate(m1, m2, t) for t in ts]
