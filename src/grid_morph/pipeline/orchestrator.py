"""
Morphing Pipeline Orchestrator
===============================

Single responsibility: Coordinate the complete morph-sequence pipeline.

This module orchestrates all steps of the morphing process, from loading
images and meshes to generating final output (PNG frames, meshes, animation,
displacement heatmap and CSV files).
"""

from pathlib import Path

from grid_morph.pipeline.config import MorphConfig
from grid_morph.pipeline.stages import PipelineStages
from grid_morph.pipeline.workers import create_pair_output_structure
from grid_morph.utils.logging import close_logger, get_logger, setup_logger

logger = get_logger(__name__)


def run_morphing_pipeline(config: MorphConfig) -> Path:
    """
    Execute the complete morph-sequence pipeline.

    Pipeline stages:
    1. Load and validate inputs (PipelineStages.prepare_inputs)
    2. Render and save PNG frames (PipelineStages.render_frames)
    3. Save interpolated meshes (PipelineStages.save_interpolated_meshes)
    4. Generate heatmap, animation, CSV (PipelineStages.generate_visualizations)

    Args:
        config: MorphConfig instance with all pipeline settings

    Returns:
        Path to output directory containing all results

    Raises:
        ImageLoadError: If an image cannot be read
        MeshLoadError: If a mesh cannot be read
        MeshFormatError: If a mesh file is malformed
        ImageBoundsMismatchError: If the images differ in size
        IncompatibleMeshError: If the meshes' dimensions differ

    Output structure (minimal mode):
        results/<timestamp>/<src>_<dst>/
        ├── session.log
        └── png/
            ├── src-1000_dst-000.png
            └── ...

    Output structure (full mode):
        results/<timestamp>/<src>_<dst>/
        ├── session.log
        ├── png/
        │   └── ... (one PNG per ratio)
        ├── mesh/
        │   └── ... (one mesh per ratio)
        ├── mesh_displacement.png
        ├── animation.gif
        ├── statistics.csv
        └── point_displacements.csv

    Example:
        >>> config = MorphConfig(
        ...     source_image=Path("circle.png"),
        ...     dest_image=Path("square.png"),
        ...     source_mesh=Path("circle.mesh"),
        ...     dest_mesh=Path("square.mesh"),
        ...     output_mode="full",
        ... )
        >>> output_dir = run_morphing_pipeline(config)
        >>> (output_dir / "animation.gif").exists()
        True
    """
    # -------------------------------------------------------------------------
    # SETUP: Get image names and create output structure
    # -------------------------------------------------------------------------

    src_name = config.source_image.stem
    dst_name = config.dest_image.stem

    pair_dir, png_dir, mesh_dir, log_file, gif_file = create_pair_output_structure(
        config.output_dir,
        src_name,
        dst_name,
        config.timestamp
    )

    # Setup session logging (file + console)
    session_logger = setup_logger(
        name='morphing_session',
        verbose=config.verbose,
        log_file=log_file,
        log_level=config.log_level
    )

    def log(message: str):
        """Log to both module logger and session logger."""
        logger.info(message)
        session_logger.info(message)

    try:
        log("=" * 70)
        log("MESH IMAGE MORPHING PIPELINE")
        log("=" * 70)
        log(f"Output mode: {config.output_mode.upper()}")
        log("")

        # ---------------------------------------------------------------------
        # STEP 1: Summarize inputs
        # ---------------------------------------------------------------------

        log("STEP 1: Inputs...")
        log(f"  Source: {config.source_image.name} + {config.source_mesh.name}")
        log(f"  Destination: {config.dest_image.name} + {config.dest_mesh.name}")
        log(f"  Frame count: {len(config.ratios)}")
        log("")

        # ---------------------------------------------------------------------
        # STAGE 1: Load and validate inputs (Steps 2-3)
        # ---------------------------------------------------------------------

        src_img, dst_img, src_mesh, dst_mesh = PipelineStages.prepare_inputs(config, log)

        # ---------------------------------------------------------------------
        # STAGE 2: Render frames
        # ---------------------------------------------------------------------

        frames = PipelineStages.render_frames(
            config, src_img, dst_img, src_mesh, dst_mesh,
            src_name, dst_name, png_dir, log
        )

        # ---------------------------------------------------------------------
        # STAGE 3: Save meshes
        # ---------------------------------------------------------------------

        mesh_count = PipelineStages.save_interpolated_meshes(
            config, src_mesh, dst_mesh, src_name, dst_name, mesh_dir, log
        )

        # ---------------------------------------------------------------------
        # STAGE 4: Generate visualizations
        # ---------------------------------------------------------------------

        PipelineStages.generate_visualizations(
            config, src_mesh, dst_mesh, src_img.width, src_img.height,
            frames, pair_dir, gif_file, log
        )

        # ---------------------------------------------------------------------
        # SUMMARY
        # ---------------------------------------------------------------------

        log("=" * 70)
        log("RESULTS")
        log("=" * 70)
        log(f"Pair: {src_name} + {dst_name}")
        log(f"Frames generated: {sum(1 for f in frames if f is not None)}/{len(frames)}")
        log("")
        log(f"Output directory: {pair_dir}/")
        log(f"  PNG frames: {png_dir}/")

        if mesh_count:
            log(f"  Meshes: {mesh_dir}/")

        heatmap_path = pair_dir / "mesh_displacement.png"
        if heatmap_path.exists():
            log(f"  Displacement heatmap: {heatmap_path.name}")

        if config.should_create_animation and gif_file.exists():
            log(f"  Animation: {gif_file}")

        if config.should_export_csv:
            for csv_name in ("statistics.csv", "point_displacements.csv"):
                if (pair_dir / csv_name).exists():
                    log(f"  CSV: {csv_name}")

        log(f"  Session log: {log_file}")

        log("=" * 70)
        log("SUCCESS!")
        log("=" * 70)

        return pair_dir
    finally:
        close_logger(session_logger)
