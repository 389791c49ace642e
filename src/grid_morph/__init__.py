"""Grid Morph - Mesh-based image warping and morphing.

This package warps and morphs raster images by deforming a regular grid of
control points laid over a source image and resampling its pixels.

Quick Start:
    >>> from grid_morph.core import MeshGrid, load_image, load_mesh, create_morpher
    >>> from grid_morph.utils.logging import setup_logger
    >>>
    >>> # Setup
    >>> logger = setup_logger(verbose=True)
    >>>
    >>> # Load images and meshes
    >>> img1, img2 = load_image('circle.png'), load_image('square.png')
    >>> mesh1, mesh2 = load_mesh('circle.mesh'), load_mesh('square.mesh')
    >>>
    >>> # Morph
    >>> morpher = create_morpher()
    >>> halfway = morpher.morph(img1, img2, mesh1, mesh2, 0.5)

Modules:
    core: Meshes, mesh files, interpolation, kernels, warping and morphing
    visualization: Mesh overlays, displacement heatmaps, CSV export, GIFs
    pipeline: High-level frame-sequence orchestration and configuration
    cli: Command-line interface
    utils: Logging, parallelization, timing context
"""

__version__ = "1.0.0"
__author__ = "Grid Morph Contributors"
__license__ = "MIT"

# Expose key classes and functions at package level
from .core.exceptions import (
    GridMorphError,
    ValidationError,
    IncompatibleMeshError,
    ImageBoundsMismatchError,
    MeshFormatError,
    MeshTruncatedError,
    MeshLoadError,
    MeshSaveError,
    ImageLoadError,
    ImageSaveError,
)

from .utils.logging import setup_logger, get_logger

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Exceptions
    "GridMorphError",
    "ValidationError",
    "IncompatibleMeshError",
    "ImageBoundsMismatchError",
    "MeshFormatError",
    "MeshTruncatedError",
    "MeshLoadError",
    "MeshSaveError",
    "ImageLoadError",
    "ImageSaveError",
    # Logging
    "setup_logger",
    "get_logger",
]
