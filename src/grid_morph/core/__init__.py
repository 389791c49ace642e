"""Core mesh, warping and morphing operations.

This module contains the fundamental operations for mesh-based image morphing:
- Points and control-point meshes (construction, editing, functionalization)
- Mesh file reading and writing (M2 format)
- Mesh interpolation and compatibility checks
- Pixel buffers and image file I/O
- Antialiasing kernels, warping and morphing
- Input validation
"""

from .point import Point
from .mesh import MeshGrid, Direction, MIN_MESH_SIZE
from .mesh_io import load_mesh, save_mesh, read_mesh, write_mesh, mesh_from_string, mesh_to_string
from .interpolation import compatible, check_compatible, interpolate, interpolate_many
from .pixel_buffer import PixelBuffer, ChannelLayout
from .image_io import load_image, save_image
from .kernels import AntialiasKernel, DEFAULT_KERNEL
from .warp import WarpEngine, warp
from .morpher import ImageMorpher, create_morpher, morph
from .validator import validate_input_file, validate_fraction, validate_ratios
from .exceptions import *

__all__ = [
    # Geometry
    "Point",
    "MeshGrid",
    "Direction",
    "MIN_MESH_SIZE",
    # Mesh I/O
    "load_mesh",
    "save_mesh",
    "read_mesh",
    "write_mesh",
    "mesh_from_string",
    "mesh_to_string",
    # Interpolation
    "compatible",
    "check_compatible",
    "interpolate",
    "interpolate_many",
    # Images
    "PixelBuffer",
    "ChannelLayout",
    "load_image",
    "save_image",
    # Warping and morphing
    "AntialiasKernel",
    "DEFAULT_KERNEL",
    "WarpEngine",
    "warp",
    "ImageMorpher",
    "create_morpher",
    "morph",
    # Validation
    "validate_input_file",
    "validate_fraction",
    "validate_ratios",
]
