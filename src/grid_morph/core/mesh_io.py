"""
Mesh I/O Operations
===================

Single responsibility: Read and write meshes in the M2 mesh-file format.

The format is line oriented::

    M2
    <nx> <ny>
    <round(x*10)> <round(y*10)> <label>     (nx*ny lines, row-major)
    <SIS> ... </features>                     (optional trailing block)

The trailing subimage block only exists for interoperability with legacy
morphing tools. It is always written and ignored on read.
"""

import io
import math
from pathlib import Path
from typing import Iterable, TextIO, Union

import numpy as np

from grid_morph.core.exceptions import (
    MeshFormatError,
    MeshLoadError,
    MeshSaveError,
    MeshTruncatedError,
)
from grid_morph.core.mesh import MIN_MESH_SIZE, MeshGrid
from grid_morph.core.point import Point
from grid_morph.utils.logging import get_logger

logger = get_logger(__name__)

MESH_HEADER = "M2"

# Coordinates are stored in tenths of a pixel
COORDINATE_SCALE = 10.0

_TRAILER_TEMPLATE = """<SIS>
<orig>
{size_x:.0f} {size_y:.0f}
</orig>
<rect>
{left:.0f} {top:.0f} {right:.0f} {bottom:.0f}
</rect>
<eye>
{eye1.x:.6f} {eye1.y:.6f}
</eye>
<eye>
{eye2.x:.6f} {eye2.y:.6f}
</eye>
<eye>
{eye3.x:.6f} {eye3.y:.6f}
</eye>
</SIS>
<resulting image size>
{size_x:.0f} {size_y:.0f}
</resulting image size>
<features>
<name>
feature 0
</name>
<name>
feature 1
</name>
<name>
feature 2
</name>
</features>
"""


def round_half_away(value: float) -> int:
    """Round to the nearest integer, resolving ties away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _format_trailer(mesh: MeshGrid) -> str:
    """Build the subimage block from the mesh's bounding box."""
    upper_left, lower_right = mesh.bounding_box()
    dx = lower_right.x - upper_left.x
    dy = lower_right.y - upper_left.y

    return _TRAILER_TEMPLATE.format(
        size_x=math.ceil(dx + 1),
        size_y=math.ceil(dy + 1),
        left=math.floor(upper_left.x),
        top=math.floor(upper_left.y),
        right=math.ceil(lower_right.x),
        bottom=math.ceil(lower_right.y),
        eye1=Point(upper_left.x + dx / 3, upper_left.y + dy / 3),
        eye2=Point(upper_left.x + 2 * dx / 3, upper_left.y + dy / 3),
        eye3=Point(upper_left.x + dx / 2, upper_left.y + 2 * dy / 3),
    )


def write_mesh(mesh: MeshGrid, stream: TextIO) -> None:
    """
    Write a mesh in M2 format.

    Each coordinate is multiplied by 10 and rounded half away from zero.

    Args:
        mesh: Mesh to serialize
        stream: Writable text stream
    """
    xs, ys = mesh.as_arrays()
    labels = mesh.labels

    stream.write(f"{MESH_HEADER}\n")
    stream.write(f"{mesh.nx} {mesh.ny}\n")

    for x, y, label in zip(xs.ravel(), ys.ravel(), labels.ravel()):
        stream.write(
            f"{round_half_away(x * COORDINATE_SCALE)} "
            f"{round_half_away(y * COORDINATE_SCALE)} "
            f"{int(label)}\n"
        )

    stream.write(_format_trailer(mesh))


def _parse_ints(line: str, count: int, what: str) -> list:
    tokens = line.split()
    if len(tokens) != count:
        raise MeshFormatError(f"Failed to parse {line!r} as {what}")
    try:
        return [int(tok) for tok in tokens]
    except ValueError as e:
        raise MeshFormatError(f"Failed to parse {line!r} as {what} ({e})") from e


def read_mesh(stream: Union[TextIO, Iterable[str]]) -> MeshGrid:
    """
    Parse an M2 mesh.

    Only the header, the dimension line and the ``nx * ny`` coordinate lines
    are required; anything after them is ignored.

    Args:
        stream: Readable text stream or iterable of lines

    Returns:
        Parsed mesh with coordinates divided by 10 and labels preserved

    Raises:
        MeshTruncatedError: If input ends before all required lines were read
        MeshFormatError: If a required line is malformed
    """
    lines = iter(stream)

    header = next(lines, None)
    if header is None:
        raise MeshTruncatedError("Failed to read the mesh header (end of input)")
    if header.strip() != MESH_HEADER:
        raise MeshFormatError(f'Invalid mesh header {header.strip()!r} (should be "{MESH_HEADER}")')

    dims = next(lines, None)
    if dims is None:
        raise MeshTruncatedError("Failed to read the mesh dimensions (end of input)")
    nx, ny = _parse_ints(dims.strip(), 2, "mesh dimensions")
    if nx < MIN_MESH_SIZE or ny < MIN_MESH_SIZE:
        raise MeshFormatError(
            f"Mesh must be at least {MIN_MESH_SIZE}x{MIN_MESH_SIZE} (read {nx}x{ny})"
        )

    expected = nx * ny
    values = np.empty((expected, 3), dtype=np.int64)
    for i in range(expected):
        line = next(lines, None)
        if line is None:
            raise MeshTruncatedError(
                f"Failed to read {expected} mesh coordinates (end of input after {i})",
                expected=expected,
                found=i,
            )
        values[i] = _parse_ints(line.strip(), 3, "x, y, label")

    xs = values[:, 0].reshape(ny, nx) / COORDINATE_SCALE
    ys = values[:, 1].reshape(ny, nx) / COORDINATE_SCALE
    labels = values[:, 2].reshape(ny, nx)

    logger.debug(f"Read {nx}x{ny} mesh")
    return MeshGrid.from_arrays(xs, ys, labels)


def mesh_to_string(mesh: MeshGrid) -> str:
    """Serialize a mesh to an M2-format string."""
    buf = io.StringIO()
    write_mesh(mesh, buf)
    return buf.getvalue()


def mesh_from_string(text: str) -> MeshGrid:
    """Parse a mesh from an M2-format string."""
    return read_mesh(io.StringIO(text))


def load_mesh(filepath: Union[str, Path]) -> MeshGrid:
    """
    Load a mesh from an M2 file.

    Args:
        filepath: Path to mesh file

    Returns:
        Parsed mesh

    Raises:
        MeshLoadError: If the file cannot be opened or read
        MeshFormatError: If the file content is malformed
    """
    filepath = Path(filepath)
    try:
        with open(filepath, 'r', encoding='ascii') as f:
            mesh = read_mesh(f)
    except UnicodeDecodeError as e:
        raise MeshFormatError(f"Mesh file {filepath} is not ASCII text: {e}") from e
    except OSError as e:
        raise MeshLoadError(f"Failed to load mesh {filepath}: {e}") from e

    logger.debug(f"Loaded {mesh.nx}x{mesh.ny} mesh from {filepath.name}")
    return mesh


def save_mesh(mesh: MeshGrid, filepath: Union[str, Path]) -> None:
    """
    Save a mesh to an M2 file, creating parent directories as needed.

    Raises:
        MeshSaveError: If the file cannot be written
    """
    filepath = Path(filepath)
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w', encoding='ascii', newline='\n') as f:
            write_mesh(mesh, f)
    except OSError as e:
        raise MeshSaveError(f"Failed to save mesh to {filepath}: {e}") from e

    logger.debug(f"Saved {mesh.nx}x{mesh.ny} mesh to {filepath.name}")
