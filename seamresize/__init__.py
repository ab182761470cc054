"""
Content-aware image resizing by seam carving.

Based on "Seam Carving for Content-Aware Image Resizing"
by Avidan & Shamir, 2007.
"""

__version__ = "0.1.0"

from .buffer import PixelBuffer
from .config import Config, ResizeOptions
from .energy import gradient_energy
from .seam import cumulative_cost, find_seam, make_generator, seam_energy
from .carving import remove_seam, carve_seam, change_width, change_height
from .resizing import compute_target_size, resize, uniform_resize
from .exceptions import (
    SeamResizeError,
    InvalidDimensionsError,
    ConfigurationError,
    UnsupportedOperationError,
    AllocationError,
    ResizeError,
)

__all__ = [
    'PixelBuffer',
    'Config',
    'ResizeOptions',
    'gradient_energy',
    'cumulative_cost',
    'find_seam',
    'make_generator',
    'seam_energy',
    'remove_seam',
    'carve_seam',
    'change_width',
    'change_height',
    'compute_target_size',
    'resize',
    'uniform_resize',
    'SeamResizeError',
    'InvalidDimensionsError',
    'ConfigurationError',
    'UnsupportedOperationError',
    'AllocationError',
    'ResizeError',
]
