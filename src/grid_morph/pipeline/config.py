"""
Pipeline Configuration
======================

Single responsibility: Configure the morph-sequence pipeline with validation.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from grid_morph.core.exceptions import ValidationError
from grid_morph.core.kernels import DEFAULT_KERNEL, AntialiasKernel
from grid_morph.core.validator import (
    SUPPORTED_IMAGE_FORMATS,
    SUPPORTED_MESH_FORMATS,
    validate_input_file,
    validate_ratios,
)
from grid_morph.utils.parallel import default_worker_count


def generate_ratios(n_frames: int = 29) -> List[float]:
    """
    Generate evenly spaced morph fractions for an animation.

    Args:
        n_frames: Number of frames, at least 2 (an odd count puts a frame
                  exactly halfway)

    Returns:
        Fractions from 0.0 to 1.0 inclusive

    Example:
        >>> generate_ratios(5)
        [0.0, 0.25, 0.5, 0.75, 1.0]
        >>> len(generate_ratios())
        29
    """
    if n_frames < 2:
        raise ValidationError(f"n_frames must be >= 2, got {n_frames}")
    return [i / (n_frames - 1) for i in range(n_frames)]


@dataclass
class MorphConfig:
    """
    Configuration for the morph-sequence pipeline.

    This dataclass encapsulates all settings needed for morphing,
    with validation in __post_init__ to catch errors early.

    Attributes:
        source_image: Path to the source image (t = 0)
        dest_image: Path to the destination image (t = 1)
        source_mesh: Path to the mesh laid over the source image
        dest_mesh: Path to the mesh laid over the destination image
        output_dir: Base output directory (default: 'results')
        output_mode: 'minimal' (PNG frames only) or 'full' (+ meshes, GIF,
                     displacement heatmap, CSV)
        ratios: Morph fractions, one frame per fraction
        kernel: Antialiasing kernel (name or AntialiasKernel)
        functionalize: Repair both meshes against the image size before morphing
        gif_frame_ms: Display time of an ordinary animation frame
        gif_hold_ms: Display time of the held first/middle/last frames
        bounce: Play the animation forward then backward
        verbose: Enable console output
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        parallel: Render frames in a process pool
        num_workers: Maximum number of worker processes
        timestamp: Optional shared timestamp for batch mode

    Example:
        >>> config = MorphConfig(
        ...     source_image=Path("circle.png"),
        ...     dest_image=Path("square.png"),
        ...     source_mesh=Path("circle.mesh"),
        ...     dest_mesh=Path("square.mesh"),
        ... )
        >>> config.output_mode  # Full mode by default
        'full'
        >>> config.should_create_animation
        True
    """

    # Input/Output
    source_image: Path
    dest_image: Path
    source_mesh: Path
    dest_mesh: Path
    output_dir: Path = Path("results")

    # Output control
    output_mode: str = "full"  # "minimal" or "full"

    # Morphing parameters
    ratios: List[float] = field(default_factory=lambda: generate_ratios(29))
    kernel: AntialiasKernel = DEFAULT_KERNEL
    functionalize: bool = False

    # Animation settings
    gif_frame_ms: int = 100
    gif_hold_ms: int = 1000
    bounce: bool = True

    # Logging
    verbose: bool = True
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    # Performance
    parallel: bool = True
    num_workers: int = field(default_factory=default_worker_count)

    # Batch mode support
    timestamp: Optional[str] = None

    def __post_init__(self):
        """
        Validate and normalize configuration after initialization.

        Raises:
            ValidationError: If any configuration is invalid
        """
        self.source_image = validate_input_file(self.source_image, SUPPORTED_IMAGE_FORMATS)
        self.dest_image = validate_input_file(self.dest_image, SUPPORTED_IMAGE_FORMATS)
        self.source_mesh = validate_input_file(self.source_mesh, SUPPORTED_MESH_FORMATS)
        self.dest_mesh = validate_input_file(self.dest_mesh, SUPPORTED_MESH_FORMATS)
        self.output_dir = Path(self.output_dir)

        if self.output_mode not in ('minimal', 'full'):
            raise ValidationError(
                f"output_mode must be 'minimal' or 'full', got '{self.output_mode}'"
            )

        self.ratios = validate_ratios(self.ratios)

        if isinstance(self.kernel, str):
            self.kernel = AntialiasKernel.from_name(self.kernel)
        else:
            self.kernel = AntialiasKernel(self.kernel)

        if self.gif_frame_ms < 1 or self.gif_hold_ms < 1:
            raise ValidationError(
                f"GIF frame times must be >= 1 ms, got "
                f"frame={self.gif_frame_ms}, hold={self.gif_hold_ms}"
            )

        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR'}
        if self.log_level.upper() not in valid_levels:
            raise ValidationError(
                f"Invalid log_level: {self.log_level}\n"
                f"Must be one of: {valid_levels}"
            )
        self.log_level = self.log_level.upper()

        if self.num_workers < 1:
            raise ValidationError(f"num_workers must be >= 1, got {self.num_workers}")

    @property
    def should_export_meshes(self) -> bool:
        """Whether to write the interpolated mesh of every frame (full mode)."""
        return self.output_mode == "full"

    @property
    def should_create_animation(self) -> bool:
        """Whether to assemble frames into animation.gif (full mode)."""
        return self.output_mode == "full"

    @property
    def should_export_csv(self) -> bool:
        """
        Whether to export CSV statistics and control-point data.

        In full mode (default), generates:
        - statistics.csv: Summary metrics for all displacement components
        - point_displacements.csv: Per-control-point displacement data
        """
        return self.output_mode == "full"

    def __repr__(self) -> str:
        return (
            f"MorphConfig(\n"
            f"  source={self.source_image.name},\n"
            f"  dest={self.dest_image.name},\n"
            f"  output_mode={self.output_mode},\n"
            f"  frames={len(self.ratios)},\n"
            f"  kernel={self.kernel.value},\n"
            f"  parallel={self.parallel}\n"
            f")"
        )
