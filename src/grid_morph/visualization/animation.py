"""
Animation Utilities
===================

Single responsibility: Assemble morph frames into an animated GIF.
"""

from pathlib import Path
from typing import List, Sequence, Union

from grid_morph.core.exceptions import ImageSaveError, ValidationError
from grid_morph.core.image_io import to_pil_image
from grid_morph.core.pixel_buffer import PixelBuffer
from grid_morph.utils.logging import get_logger

# Get logger for this module
logger = get_logger(__name__)


def frame_durations(
    n_frames: int,
    frame_ms: int,
    hold_ms: int,
    bounce: bool
) -> List[int]:
    """
    Compute per-frame display times in milliseconds.

    Without bounce the first and last frames are held for ``hold_ms``.
    With bounce the sequence plays forward then backward: the turnaround
    frame in the middle is held for ``2 * hold_ms`` and the first and last
    frames (both the starting image) for ``hold_ms``.

    Args:
        n_frames: Number of forward frames
        frame_ms: Display time of an ordinary frame
        hold_ms: Display time of a held frame
        bounce: Whether the animation plays back in reverse

    Returns:
        List of durations, one per frame of the final animation

    Example:
        >>> frame_durations(3, 100, 1000, bounce=True)
        [1000, 100, 2000, 100, 1000]
    """
    if n_frames < 1:
        raise ValidationError("An animation needs at least one frame")

    if not bounce or n_frames == 1:
        durations = [frame_ms] * n_frames
        durations[0] = hold_ms
        durations[-1] = hold_ms
        return durations

    total = 2 * n_frames - 1
    durations = [frame_ms] * total
    durations[0] = hold_ms
    durations[n_frames - 1] = 2 * hold_ms
    durations[-1] = hold_ms
    return durations


def save_animated_gif(
    frames: Sequence[PixelBuffer],
    output_path: Union[str, Path],
    frame_ms: int = 100,
    hold_ms: int = 1000,
    bounce: bool = True
) -> Path:
    """
    Write frames as a looping animated GIF.

    Alpha is flattened; GIF palettes are computed by Pillow.

    Args:
        frames: Morph frames in forward order, all the same size
        output_path: Destination ``.gif`` path
        frame_ms: Display time of an ordinary frame
        hold_ms: Display time of the held frames
        bounce: Play the sequence forward then backward

    Returns:
        Path of the written file

    Raises:
        ValidationError: If no frames are given
        ImageSaveError: If the file cannot be written
    """
    output_path = Path(output_path)
    if not frames:
        raise ValidationError("An animation needs at least one frame")

    images = [to_pil_image(f).convert('RGB') for f in frames]
    if bounce and len(images) > 1:
        images = images + images[-2::-1]
    durations = frame_durations(len(frames), frame_ms, hold_ms, bounce)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        images[0].save(
            output_path,
            format='GIF',
            save_all=True,
            append_images=images[1:],
            duration=durations,
            loop=0,
            disposal=1,
        )
    except (OSError, ValueError) as e:
        raise ImageSaveError(f"Failed to save animation to {output_path}: {e}") from e

    logger.debug(f"Wrote {len(images)}-frame animation to {output_path.name}")
    return output_path
