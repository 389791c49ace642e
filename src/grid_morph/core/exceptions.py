"""Custom exceptions for mesh warping and morphing.

This module defines the recoverable, domain-specific errors raised by
grid_morph. Programmer errors (out-of-range mesh coordinates, meshes smaller
than 4x4, ragged point grids) are not listed here: they raise the built-in
``IndexError`` or ``ValueError`` and should be fixed at the call site.
"""


class GridMorphError(Exception):
    """Base exception for all recoverable grid_morph errors.

    All custom exceptions in the grid_morph package inherit from this base class.
    This allows catching all grid_morph-related errors with a single except clause.

    Example:
        >>> try:
        ...     morph(img1, img2, mesh1, mesh2, t=0.5)
        ... except GridMorphError as e:
        ...     print(f"Morphing failed: {e}")
    """
    pass


class ValidationError(GridMorphError):
    """Raised when an argument lies outside its documented range.

    Used for interpolation fractions outside [0, 1], line indices or
    line-insertion fractions outside their ranges, and invalid pipeline
    configuration. Values are never clamped silently.

    Example:
        >>> if not 0.0 <= t <= 1.0:
        ...     raise ValidationError(f"Interpolation fraction must be in [0, 1], got {t}")
    """
    pass


class IncompatibleMeshError(GridMorphError):
    """Raised when two meshes do not share the same grid dimensions.

    Interpolation, warping and morphing pair up control points one to one,
    which requires both meshes to have identical ``nx`` and ``ny``.

    Attributes:
        shape1: (nx, ny) of the first mesh
        shape2: (nx, ny) of the second mesh

    Example:
        >>> raise IncompatibleMeshError((5, 5), (4, 6))
        IncompatibleMeshError: Incompatible meshes: mesh1 is 5x5, mesh2 is 4x6.
        Both meshes must have the same number of rows and columns.
    """

    def __init__(self, shape1: tuple, shape2: tuple):
        """Initialize mesh incompatibility error.

        Args:
            shape1: (nx, ny) of the first mesh
            shape2: (nx, ny) of the second mesh
        """
        self.shape1 = tuple(shape1)
        self.shape2 = tuple(shape2)

        msg = (
            f"Incompatible meshes: mesh1 is {self.shape1[0]}x{self.shape1[1]}, "
            f"mesh2 is {self.shape2[0]}x{self.shape2[1]}. "
            f"Both meshes must have the same number of rows and columns."
        )

        super().__init__(msg)


class ImageBoundsMismatchError(GridMorphError):
    """Raised when the two images passed to a morph differ in size.

    Attributes:
        bounds1: (width, height) of the source image
        bounds2: (width, height) of the destination image
    """

    def __init__(self, bounds1: tuple, bounds2: tuple):
        """Initialize image bounds mismatch error.

        Args:
            bounds1: (width, height) of the source image
            bounds2: (width, height) of the destination image
        """
        self.bounds1 = tuple(bounds1)
        self.bounds2 = tuple(bounds2)

        msg = (
            f"Image bounds mismatch: source is {self.bounds1[0]}x{self.bounds1[1]}, "
            f"destination is {self.bounds2[0]}x{self.bounds2[1]}. "
            f"Morphing requires images of identical size."
        )

        super().__init__(msg)


class MeshFormatError(GridMorphError):
    """Raised when mesh-file text cannot be parsed.

    Common causes:
    - Header line is not ``M2``
    - Dimension line is not two integers, or a dimension is below 4
    - A coordinate line does not hold exactly three integers

    Example:
        >>> raise MeshFormatError('failed to parse "12 x 0" as x, y, label')
    """
    pass


class MeshTruncatedError(MeshFormatError):
    """Raised when mesh-file input ends before all required lines were read.

    Distinguishes "ran out of input" from a malformed line. Only the header,
    the dimensions and the ``nx * ny`` coordinate lines are required; the
    trailing subimage block is optional.

    Attributes:
        expected: Number of coordinate lines required
        found: Number of coordinate lines actually read
    """

    def __init__(self, message: str, expected: int = None, found: int = None):
        """Initialize truncated mesh error.

        Args:
            message: Description of what was being read
            expected: Number of coordinate lines required (optional)
            found: Number of coordinate lines read before EOF (optional)
        """
        self.expected = expected
        self.found = found
        super().__init__(message)


class MeshLoadError(GridMorphError):
    """Raised when a mesh file cannot be opened or read.

    Example:
        >>> try:
        ...     mesh = load_mesh(path)
        ... except OSError as e:
        ...     raise MeshLoadError(f"Failed to load {path}: {e}") from e
    """
    pass


class MeshSaveError(GridMorphError):
    """Raised when a mesh file cannot be written.

    Common causes:
    - Invalid output path
    - Permission denied
    - Disk full
    """
    pass


class ImageLoadError(GridMorphError):
    """Raised when an image file cannot be decoded into a pixel buffer."""
    pass


class ImageSaveError(GridMorphError):
    """Raised when a pixel buffer cannot be encoded to an image file."""
    pass
