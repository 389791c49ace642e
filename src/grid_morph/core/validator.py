"""
Input Validation
================

Single responsibility: Validate inputs before processing.
"""

import math
from pathlib import Path
from typing import Sequence, Union

from grid_morph.core.exceptions import ValidationError

SUPPORTED_IMAGE_FORMATS = {'.png', '.jpg', '.jpeg', '.gif', '.bmp', '.tif', '.tiff', '.webp'}
SUPPORTED_MESH_FORMATS = {'.mesh', '.msh', '.m2', '.txt'}


def validate_fraction(value: float, name: str = "Fraction") -> float:
    """
    Validate that a fraction lies in [0, 1].

    Args:
        value: Value to check
        name: Human-readable name used in the error message

    Returns:
        The value as a float

    Raises:
        ValidationError: If value is NaN or outside [0, 1]
    """
    value = float(value)
    if math.isnan(value) or not 0.0 <= value <= 1.0:
        raise ValidationError(
            f"{name} {value:.5g} does not lie in the range [0.0, 1.0]"
        )
    return value


def validate_input_file(
    filepath: Union[str, Path],
    supported_formats: set = None
) -> Path:
    """
    Validate that an input file exists and, optionally, has a supported suffix.

    Args:
        filepath: Path to an image or mesh file
        supported_formats: Allowed lowercase suffixes, or None to accept any

    Returns:
        Path object

    Raises:
        ValidationError: If the file doesn't exist or the format is not supported
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise ValidationError(
            f"File not found: {filepath}\n"
            f"Please check the path."
        )

    if supported_formats is not None and filepath.suffix.lower() not in supported_formats:
        raise ValidationError(
            f"Unsupported format: {filepath.suffix}\n"
            f"Supported: {', '.join(sorted(supported_formats))}"
        )

    return filepath


def validate_ratios(ratios: Sequence[float]) -> list:
    """
    Validate a list of morph fractions.

    Args:
        ratios: Morph fractions, each in [0, 1]

    Returns:
        Validated ratios as a list of floats

    Raises:
        ValidationError: If the list is empty or a ratio is out of range
    """
    if not ratios:
        raise ValidationError("Ratios list is empty")

    return [validate_fraction(r, f"Ratio at index {idx}") for idx, r in enumerate(ratios)]
