"""
Point
=====

Single responsibility: Floating-point (x, y) coordinates for mesh vertices.

The axes increase rightward (x) and downward (y), matching pixel indexing.
"""

import math
from typing import NamedTuple, Tuple


def format_coordinate(value: float) -> str:
    """Render a coordinate compactly: integral values lose their ``.0``."""
    text = repr(float(value))
    if text.endswith('.0'):
        return text[:-2]
    return text


class Point(NamedTuple):
    """A float-valued (x, y) coordinate.

    Points are immutable. Arithmetic is componentwise for ``+`` and ``-`` and
    scalar for ``*`` and ``/``.

    Example:
        >>> p = Point(1.5, 2.0)
        >>> p + Point(1, 1)
        Point(x=2.5, y=3.0)
        >>> str(p * 2)
        '[3, 4]'
        >>> format(p, '.2f')
        '[1.50, 2.00]'
    """

    x: float
    y: float

    def add(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y)

    def sub(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def mul(self, k: float) -> 'Point':
        return Point(self.x * k, self.y * k)

    def div(self, k: float) -> 'Point':
        return Point(self.x / k, self.y / k)

    # NamedTuple would otherwise concatenate/repeat like a tuple
    def __add__(self, other):
        return self.add(other)

    def __sub__(self, other):
        return self.sub(other)

    def __mul__(self, k):
        return self.mul(k)

    __rmul__ = __mul__

    def __truediv__(self, k):
        return self.div(k)

    def approx_equal(self, other: 'Point', tol: float) -> bool:
        """
        Report whether two points are equal within a per-axis tolerance.

        The tolerance is applied separately to x and y; both must be within
        tolerance.

        Args:
            other: Point to compare against
            tol: Non-negative tolerance

        Returns:
            True if |dx| <= tol and |dy| <= tol

        Raises:
            ValueError: If tol is negative
        """
        if tol < 0.0:
            raise ValueError(f"Tolerance must be non-negative, got {tol}")
        return abs(self.x - other.x) <= tol and abs(self.y - other.y) <= tol

    def to_image_point(self) -> Tuple[int, int]:
        """Truncate both coordinates toward zero."""
        return (int(math.trunc(self.x)), int(math.trunc(self.y)))

    def __str__(self) -> str:
        return f"[{format_coordinate(self.x)}, {format_coordinate(self.y)}]"

    def __format__(self, format_spec: str) -> str:
        if not format_spec:
            return str(self)
        return f"[{format(self.x, format_spec)}, {format(self.y, format_spec)}]"
