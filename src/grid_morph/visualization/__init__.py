"""Visual diagnostics: mesh overlays, displacement heatmaps, CSV export and animations."""

from .overlay import render_mesh_overlay, save_mesh_overlay
from .heatmap import compute_displacement, create_displacement_visualization
from .export import export_statistics_csv, export_point_data_csv
from .animation import save_animated_gif, frame_durations

__all__ = [
    "render_mesh_overlay",
    "save_mesh_overlay",
    "compute_displacement",
    "create_displacement_visualization",
    "export_statistics_csv",
    "export_point_data_csv",
    "save_animated_gif",
    "frame_durations",
]
