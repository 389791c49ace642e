"""
Pipeline Stages
===============

Single responsibility: Break down the morphing pipeline into discrete, testable stages.

Each stage handles one phase of the pipeline with clear inputs and outputs.
"""

from pathlib import Path
from typing import Callable, List, Optional, Tuple

from grid_morph.core.exceptions import ImageBoundsMismatchError, IncompatibleMeshError
from grid_morph.core.image_io import load_image
from grid_morph.core.interpolation import compatible, interpolate_many
from grid_morph.core.mesh import MeshGrid
from grid_morph.core.mesh_io import load_mesh, save_mesh
from grid_morph.core.pixel_buffer import PixelBuffer
from grid_morph.pipeline.config import MorphConfig
from grid_morph.pipeline.workers import _render_frame_worker, generate_morph_filename
from grid_morph.utils.context import log_duration
from grid_morph.utils.logging import get_logger
from grid_morph.utils.parallel import create_frame_pool, frame_chunksize, frame_pool_size
from grid_morph.visualization.animation import save_animated_gif
from grid_morph.visualization.export import export_point_data_csv, export_statistics_csv
from grid_morph.visualization.heatmap import create_displacement_visualization

logger = get_logger(__name__)


class PipelineStages:
    """Encapsulates individual stages of the morphing pipeline."""

    @staticmethod
    def prepare_inputs(
        config: MorphConfig,
        log: Callable[[str], None]
    ) -> Tuple[PixelBuffer, PixelBuffer, MeshGrid, MeshGrid]:
        """
        Load images and meshes and check that they can be morphed together.

        Args:
            config: Pipeline configuration
            log: Logging function

        Returns:
            Tuple of (src_img, dst_img, src_mesh, dst_mesh)

        Raises:
            ImageBoundsMismatchError: If the images differ in size
            IncompatibleMeshError: If the meshes' dimensions differ
        """
        log("STEP 2: Loading images and meshes...")

        src_img = load_image(config.source_image)
        dst_img = load_image(config.dest_image)
        src_mesh = load_mesh(config.source_mesh)
        dst_mesh = load_mesh(config.dest_mesh)

        log(f"  Source image: {src_img.width}x{src_img.height} {src_img.layout.name}")
        log(f"  Destination image: {dst_img.width}x{dst_img.height} {dst_img.layout.name}")
        log(f"  Source mesh: {src_mesh.nx}x{src_mesh.ny} control points")
        log(f"  Destination mesh: {dst_mesh.nx}x{dst_mesh.ny} control points")
        log("")

        log("STEP 3: Validating inputs...")

        if src_img.bounds != dst_img.bounds:
            log(f"  ERROR: Image sizes differ ({src_img.bounds} vs {dst_img.bounds})")
            raise ImageBoundsMismatchError(src_img.bounds, dst_img.bounds)

        if not compatible(src_mesh, dst_mesh):
            log(f"  ERROR: Mesh dimensions differ ({src_mesh.shape} vs {dst_mesh.shape})")
            raise IncompatibleMeshError(src_mesh.shape, dst_mesh.shape)

        width, height = src_img.width, src_img.height
        for label, mesh in (("Source", src_mesh), ("Destination", dst_mesh)):
            if config.functionalize:
                changed = mesh.functionalize(width, height)
                log(f"  {label} mesh: functionalized ({changed} point(s) adjusted)")
            elif not mesh.is_functional(width, height):
                log(f"  Warning: {label} mesh folds over or leaves the image")

        log(f"  Inputs: COMPATIBLE ({width}x{height}, {src_mesh.nx}x{src_mesh.ny} mesh)")
        log("")

        return src_img, dst_img, src_mesh, dst_mesh

    @staticmethod
    def render_frames(
        config: MorphConfig,
        src_img: PixelBuffer,
        dst_img: PixelBuffer,
        src_mesh: MeshGrid,
        dst_mesh: MeshGrid,
        src_name: str,
        dst_name: str,
        png_dir: Path,
        log: Callable[[str], None]
    ) -> List[Optional[PixelBuffer]]:
        """
        Render one morph per ratio and save each as PNG.

        Args:
            config: Pipeline configuration
            src_img, dst_img: Input images
            src_mesh, dst_mesh: Input meshes
            src_name: Name of source image
            dst_name: Name of destination image
            png_dir: Directory for PNG output
            log: Logging function

        Returns:
            Rendered frames in ratio order (None for frames that failed)
        """
        log("STEP 4: Rendering and saving frames...")
        log(f"  Kernel: {config.kernel.value}")

        tasks = []
        for t in config.ratios:
            name = generate_morph_filename(src_name, dst_name, t)
            tasks.append((
                src_img, dst_img, src_mesh, dst_mesh, t, config.kernel,
                png_dir / f"{name}.png", name
            ))

        with log_duration(f"Rendering {len(tasks)} frames", logger):
            if config.parallel and len(tasks) > 1:
                workers = frame_pool_size(len(tasks), config.num_workers)
                log(f"  Using process pool ({workers} workers)")
                with create_frame_pool(len(tasks), config.num_workers) as pool:
                    results = pool.map(
                        _render_frame_worker, tasks,
                        chunksize=frame_chunksize(len(tasks), workers)
                    )
            else:
                log("  Using sequential rendering")
                results = [_render_frame_worker(task) for task in tasks]

        frames = [frame for _, frame in results]
        saved = sum(1 for frame in frames if frame is not None)
        log(f"  Saved {saved}/{len(tasks)} PNG files")
        log("")

        return frames

    @staticmethod
    def save_interpolated_meshes(
        config: MorphConfig,
        src_mesh: MeshGrid,
        dst_mesh: MeshGrid,
        src_name: str,
        dst_name: str,
        mesh_dir: Path,
        log: Callable[[str], None]
    ) -> int:
        """
        Write the intermediate mesh of every frame (full mode only).

        Returns:
            Number of mesh files written
        """
        if not config.should_export_meshes:
            return 0

        log("STEP 5: Saving interpolated meshes...")

        meshes = interpolate_many(src_mesh, dst_mesh, config.ratios)
        for t, mesh in zip(config.ratios, meshes):
            name = generate_morph_filename(src_name, dst_name, t)
            save_mesh(mesh, mesh_dir / f"{name}.mesh")

        log(f"  Saved {len(meshes)} mesh files")
        log("")

        return len(meshes)

    @staticmethod
    def generate_visualizations(
        config: MorphConfig,
        src_mesh: MeshGrid,
        dst_mesh: MeshGrid,
        width: int,
        height: int,
        frames: List[Optional[PixelBuffer]],
        pair_dir: Path,
        gif_file: Path,
        log: Callable[[str], None]
    ) -> None:
        """
        Generate the displacement heatmap, animation and CSV exports.

        Args:
            config: Pipeline configuration
            src_mesh, dst_mesh: Input meshes
            width, height: Image size
            frames: Rendered frames (failed frames are skipped)
            pair_dir: Output directory for visualizations
            gif_file: Path for animation output
            log: Logging function
        """
        if config.output_mode != "full":
            return

        log("STEP 6: Generating displacement heatmap...")

        heatmap_path = pair_dir / "mesh_displacement.png"
        if create_displacement_visualization(src_mesh, dst_mesh, width, height, heatmap_path):
            log("  ✓ Displacement heatmap created")
        else:
            log("  Warning: Displacement heatmap generation failed")
        log("")

        if config.should_create_animation:
            log("STEP 7: Creating animation...")

            good_frames = [frame for frame in frames if frame is not None]
            if good_frames:
                save_animated_gif(
                    good_frames, gif_file,
                    frame_ms=config.gif_frame_ms,
                    hold_ms=config.gif_hold_ms,
                    bounce=config.bounce
                )
                log(f"  ✓ Animation created: {gif_file.name} ({len(good_frames)} frames)")
            else:
                log("  Warning: No frames rendered - skipping animation")
            log("")

        if config.should_export_csv:
            log("STEP 8: Exporting CSV data for quantitative analysis...")

            export_statistics_csv(src_mesh, dst_mesh, pair_dir / "statistics.csv")
            log("  ✓ Statistics exported to statistics.csv")

            export_point_data_csv(src_mesh, dst_mesh, pair_dir / "point_displacements.csv")
            log("  ✓ Control-point data exported to point_displacements.csv")
            log("")
