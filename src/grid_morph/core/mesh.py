"""
Mesh Grid
=========

Single responsibility: Represent and edit a rectangular grid of control points.

A mesh is a dense ``nx`` x ``ny`` grid of Points stored row-major as two
float64 numpy arrays of shape ``(ny, nx)``. Row-major order (row 0 left to
right, then row 1, ...) is the canonical iteration order shared by the codec,
:meth:`MeshGrid.points` and the resampler. ``get(x, y)`` addresses column
``x`` of row ``y``.

Contract violations (meshes below 4x4, ragged point grids, out-of-range
coordinates) raise ``ValueError``/``IndexError``. Range errors on editing
arguments raise :class:`~grid_morph.core.exceptions.ValidationError`.
"""

from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from grid_morph.core.exceptions import ValidationError
from grid_morph.core.point import Point
from grid_morph.utils.logging import get_logger

logger = get_logger(__name__)

# Smaller meshes cannot describe a useful grid of warp cells
MIN_MESH_SIZE = 4

PointLike = Union[Point, Tuple[float, float], Sequence[float]]


class Direction(Enum):
    """Orientation of a mesh line for insertion and deletion.

    A horizontal line is a mesh row (changes ``ny``); a vertical line is a
    mesh column (changes ``nx``).
    """

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


def _check_dimensions(nx: int, ny: int) -> None:
    if nx < MIN_MESH_SIZE or ny < MIN_MESH_SIZE:
        raise ValueError(
            f"Mesh must be at least {MIN_MESH_SIZE}x{MIN_MESH_SIZE} (got {nx}x{ny})"
        )


def _grid_to_arrays(grid, convert) -> Tuple[np.ndarray, np.ndarray]:
    """Convert a 2-D sequence of (x, y) pairs to x and y arrays."""
    rows = list(grid)
    if len(rows) < MIN_MESH_SIZE or len(rows[0]) < MIN_MESH_SIZE:
        raise ValueError(
            f"Point grid must be at least {MIN_MESH_SIZE}x{MIN_MESH_SIZE}"
        )

    nx = len(rows[0])
    for r, row in enumerate(rows):
        if len(row) != nx:
            raise ValueError(
                f"All rows in the point grid must be the same length "
                f"(row 0 has {nx} points, row {r} has {len(row)})"
            )

    xs = np.array([[convert(pt[0]) for pt in row] for row in rows], dtype=np.float64)
    ys = np.array([[convert(pt[1]) for pt in row] for row in rows], dtype=np.float64)
    return xs, ys


def _bound(values: np.ndarray, limit: int) -> np.ndarray:
    """Bound coordinates to the half-open pixel range [0, limit)."""
    bounded = np.maximum(values, 0.0)
    return np.where(bounded >= limit, float(limit - 1), bounded)


class MeshGrid:
    """
    A rectangular grid of control points laid over an image.

    Single responsibility: Own mesh coordinates and their edit operations.

    Example:
        >>> mesh = MeshGrid.regular(4, 4, 100, 100)
        >>> str(mesh.get(1, 0))
        '[33, 0]'
        >>> mesh.set(1, 1, Point(20.0, 20.0))
        >>> mesh.functionalize(100, 100)
        0
    """

    def __init__(self, nx: int, ny: int):
        """
        Allocate an nx x ny mesh of zero points.

        Args:
            nx: Number of columns (points per row), at least 4
            ny: Number of rows, at least 4

        Raises:
            ValueError: If either dimension is below 4
        """
        _check_dimensions(nx, ny)
        self._x = np.zeros((ny, nx), dtype=np.float64)
        self._y = np.zeros((ny, nx), dtype=np.float64)
        self._labels = np.zeros((ny, nx), dtype=np.int64)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_arrays(
        cls,
        xs: np.ndarray,
        ys: np.ndarray,
        labels: Optional[np.ndarray] = None
    ) -> 'MeshGrid':
        """
        Build a mesh from (ny, nx) coordinate arrays.

        The arrays are copied, so later changes to them do not affect the mesh.

        Raises:
            ValueError: If shapes differ or are below 4x4
        """
        xs = np.array(xs, dtype=np.float64)
        ys = np.array(ys, dtype=np.float64)
        if xs.ndim != 2 or xs.shape != ys.shape:
            raise ValueError(
                f"x and y arrays must be 2-D with equal shapes "
                f"(got {xs.shape} and {ys.shape})"
            )
        ny, nx = xs.shape
        mesh = cls(nx, ny)
        mesh._x = xs
        mesh._y = ys
        if labels is not None:
            labels = np.array(labels, dtype=np.int64)
            if labels.shape != xs.shape:
                raise ValueError(
                    f"Label array shape {labels.shape} does not match {xs.shape}"
                )
            mesh._labels = labels
        return mesh

    @classmethod
    def from_points(cls, grid: Sequence[Sequence[PointLike]]) -> 'MeshGrid':
        """
        Build a mesh from a 2-D sequence of Points (one inner sequence per row).

        Raises:
            ValueError: If the grid is smaller than 4x4 or rows differ in length
        """
        xs, ys = _grid_to_arrays(grid, float)
        return cls.from_arrays(xs, ys)

    @classmethod
    def from_image_points(cls, grid: Sequence[Sequence[Tuple[int, int]]]) -> 'MeshGrid':
        """
        Build a mesh from a 2-D sequence of integer (x, y) image coordinates.

        Raises:
            ValueError: If the grid is smaller than 4x4 or rows differ in length
        """
        xs, ys = _grid_to_arrays(grid, int)
        return cls.from_arrays(xs, ys)

    @classmethod
    def regular(cls, nx: int, ny: int, width: int, height: int) -> 'MeshGrid':
        """
        Create an evenly spaced mesh spanning [0, width-1] x [0, height-1].

        The point at column c, row r is
        ``(c * (width-1) / (nx-1), r * (height-1) / (ny-1))``.

        Example:
            >>> MeshGrid.regular(4, 4, 100, 100).get(3, 3)
            Point(x=99.0, y=99.0)
        """
        _check_dimensions(nx, ny)
        cols = np.arange(nx, dtype=np.float64) * (width - 1) / (nx - 1)
        rows = np.arange(ny, dtype=np.float64) * (height - 1) / (ny - 1)
        xs, ys = np.meshgrid(cols, rows)
        return cls.from_arrays(xs, ys)

    # ------------------------------------------------------------------
    # Shape and access
    # ------------------------------------------------------------------

    @property
    def nx(self) -> int:
        return self._x.shape[1]

    @property
    def ny(self) -> int:
        return self._x.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        """(nx, ny) of the mesh."""
        return (self.nx, self.ny)

    @property
    def labels(self) -> np.ndarray:
        """Copy of the (ny, nx) integer label array."""
        return self._labels.copy()

    def as_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return copies of the (ny, nx) x and y coordinate arrays."""
        return self._x.copy(), self._y.copy()

    def _check_coord(self, x: int, y: int) -> None:
        if x < 0 or y < 0 or x >= self.nx or y >= self.ny:
            raise IndexError(
                f"Point ({x}, {y}) lies out of bounds of the {self.nx}x{self.ny} mesh"
            )

    def get(self, x: int, y: int) -> Point:
        """Return the point at column x, row y."""
        self._check_coord(x, y)
        return Point(float(self._x[y, x]), float(self._y[y, x]))

    def set(self, x: int, y: int, pt: PointLike) -> None:
        """Assign the point at column x, row y."""
        self._check_coord(x, y)
        self._x[y, x] = float(pt[0])
        self._y[y, x] = float(pt[1])

    def get_image_point(self, x: int, y: int) -> Tuple[int, int]:
        """Return the point at column x, row y truncated to integers."""
        return self.get(x, y).to_image_point()

    def set_image_point(self, x: int, y: int, pt: Tuple[int, int]) -> None:
        """Assign integer image coordinates to the point at column x, row y."""
        self._check_coord(x, y)
        self._x[y, x] = int(pt[0])
        self._y[y, x] = int(pt[1])

    def get_label(self, x: int, y: int) -> int:
        self._check_coord(x, y)
        return int(self._labels[y, x])

    def set_label(self, x: int, y: int, label: int) -> None:
        self._check_coord(x, y)
        self._labels[y, x] = int(label)

    def points(self) -> List[List[Point]]:
        """Return the mesh as rows of Points in canonical order."""
        return [
            [Point(float(x), float(y)) for x, y in zip(row_x, row_y)]
            for row_x, row_y in zip(self._x, self._y)
        ]

    def image_points(self) -> List[List[Tuple[int, int]]]:
        """Return the mesh as rows of integer (x, y) pairs, truncated toward zero."""
        return [[pt.to_image_point() for pt in row] for row in self.points()]

    def bounding_box(self) -> Tuple[Point, Point]:
        """Return the (upper-left, lower-right) corners of the mesh's extent."""
        upper_left = Point(float(self._x.min()), float(self._y.min()))
        lower_right = Point(float(self._x.max()), float(self._y.max()))
        return upper_left, lower_right

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def scale(self, width: int, height: int) -> None:
        """
        Rescale all coordinates proportionally to a new image size.

        x is multiplied by ``width / xmax`` and y by ``height / ymax``, where
        xmax and ymax are the mesh's current largest coordinates. Mesh
        coordinates are pixel indices, so anything landing on or past
        ``width`` (``height``) becomes ``width - 1`` (``height - 1``).
        An axis whose largest coordinate is 0 is left unchanged.

        Args:
            width: New image width in pixels
            height: New image height in pixels
        """
        if width < 1 or height < 1:
            raise ValueError(f"Image size must be positive, got {width}x{height}")

        xmax = float(self._x.max())
        ymax = float(self._y.max())

        if xmax > 0:
            self._x = self._x * (width / xmax)
            self._x[self._x >= width] = width - 1
        if ymax > 0:
            self._y = self._y * (height / ymax)
            self._y[self._y >= height] = height - 1

        logger.debug(f"Scaled {self.nx}x{self.ny} mesh to {width}x{height}")

    def add_line(self, index: int, fraction: float, direction: Direction) -> None:
        """
        Insert a row or column between line ``index`` and ``index + 1``.

        The new line's coordinates are the linear interpolation of the two
        straddled lines at ``fraction``. The new line lands at ``index + 1``
        and its labels are 0.

        Args:
            index: Lower of the two straddled lines, in [0, n-2]
            fraction: Position between the two lines, in [0, 1]
            direction: HORIZONTAL inserts a row, VERTICAL a column

        Raises:
            ValidationError: If index or fraction is out of range
        """
        direction = Direction(direction)
        axis = 0 if direction is Direction.HORIZONTAL else 1
        count = self._x.shape[axis]

        if not 0 <= index <= count - 2:
            raise ValidationError(
                f"Line index {index} is out of range [0, {count - 2}] "
                f"for {direction.value} insertion"
            )
        if not 0.0 <= fraction <= 1.0:
            raise ValidationError(
                f"Line fraction {fraction} does not lie in the range [0.0, 1.0]"
            )

        def insert(arr: np.ndarray) -> np.ndarray:
            lo = np.take(arr, index, axis=axis)
            hi = np.take(arr, index + 1, axis=axis)
            line = (1.0 - fraction) * lo + fraction * hi
            return np.insert(arr, index + 1, line, axis=axis)

        self._x = insert(self._x)
        self._y = insert(self._y)
        self._labels = np.insert(self._labels, index + 1, 0, axis=axis)

        logger.debug(
            f"Inserted {direction.value} line at {index + 1} (fraction {fraction}); "
            f"mesh is now {self.nx}x{self.ny}"
        )

    def delete_line(self, index: int, direction: Direction) -> None:
        """
        Remove row or column ``index``.

        Args:
            index: Line to remove, in [0, n-1]
            direction: HORIZONTAL removes a row, VERTICAL a column

        Raises:
            ValidationError: If index is out of range or the mesh would drop
                below 4 lines in that direction
        """
        direction = Direction(direction)
        axis = 0 if direction is Direction.HORIZONTAL else 1
        count = self._x.shape[axis]

        if not 0 <= index <= count - 1:
            raise ValidationError(
                f"Line index {index} is out of range [0, {count - 1}] "
                f"for {direction.value} deletion"
            )
        if count - 1 < MIN_MESH_SIZE:
            raise ValidationError(
                f"Cannot delete a {direction.value} line: mesh must keep at least "
                f"{MIN_MESH_SIZE} lines in each direction"
            )

        self._x = np.delete(self._x, index, axis=axis)
        self._y = np.delete(self._y, index, axis=axis)
        self._labels = np.delete(self._labels, index, axis=axis)

        logger.debug(
            f"Deleted {direction.value} line {index}; mesh is now {self.nx}x{self.ny}"
        )

    def functionalize(self, width: int, height: int) -> int:
        """
        Make the mesh bounded and monotonic for an image of the given size.

        Two passes:

        1. Bound every point to [0, width) x [0, height). Negative values become
           0 and values at or beyond the upper edge become width-1 (height-1).
        2. Sweep each row left to right raising x to the running maximum, and
           each column top to bottom raising y to the running maximum.

        Points already inside the bounds and not below their predecessor are
        left untouched, and a second call changes nothing.

        Args:
            width: Image width in pixels
            height: Image height in pixels

        Returns:
            Number of points whose coordinates changed
        """
        if width < 1 or height < 1:
            raise ValueError(f"Image size must be positive, got {width}x{height}")

        new_x = _bound(self._x, width)
        new_y = _bound(self._y, height)
        new_x = np.maximum.accumulate(new_x, axis=1)
        new_y = np.maximum.accumulate(new_y, axis=0)

        changed = int(np.count_nonzero((new_x != self._x) | (new_y != self._y)))
        self._x = new_x
        self._y = new_y

        if changed:
            logger.debug(f"Functionalize altered {changed} point(s) for {width}x{height}")
        return changed

    def is_functional(self, width: int, height: int) -> bool:
        """Report whether the mesh is bounded and monotonic for the image size."""
        bounded = (
            self._x.min() >= 0 and self._x.max() < width
            and self._y.min() >= 0 and self._y.max() < height
        )
        monotonic = (
            bool(np.all(np.diff(self._x, axis=1) >= 0))
            and bool(np.all(np.diff(self._y, axis=0) >= 0))
        )
        return bool(bounded) and monotonic

    def copy(self) -> 'MeshGrid':
        """Deep-copy the mesh; the copy shares no storage with the original."""
        return MeshGrid.from_arrays(self._x, self._y, self._labels)

    # ------------------------------------------------------------------
    # Comparison and display
    # ------------------------------------------------------------------

    def __eq__(self, other) -> bool:
        if not isinstance(other, MeshGrid):
            return NotImplemented
        return (
            self.shape == other.shape
            and bool(np.array_equal(self._x, other._x))
            and bool(np.array_equal(self._y, other._y))
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"MeshGrid(nx={self.nx}, ny={self.ny})"

    def __str__(self) -> str:
        rows = (
            "[" + ", ".join(str(pt) for pt in row) + "]"
            for row in self.points()
        )
        return "[" + ", ".join(rows) + "]"
