"""High-level pipeline orchestration.

Contains configuration, workflow orchestration, parallel worker functions
and the self-contained circle-to-square demo.
"""

from .config import MorphConfig, generate_ratios
from .orchestrator import run_morphing_pipeline
from .demo import run_circle_square_demo

__all__ = [
    'MorphConfig',
    'generate_ratios',
    'run_morphing_pipeline',
    'run_circle_square_demo',
]
