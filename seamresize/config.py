"""
Configuration for seamresize.

`Config` holds fixed constants. `ResizeOptions` is the per-run configuration
object handed to the resize orchestrator.
"""

from dataclasses import dataclass
from typing import Optional

from PIL import Image

from .exceptions import ConfigurationError, InvalidDimensionsError


class Config:
    """Global constants."""

    # Uniform (non seam-aware) resampling filter
    RESAMPLE = Image.Resampling.LANCZOS

    # Encoding
    DEFAULT_QUALITY = 100
    DEFAULT_OUTPUT_TYPE = "png"
    OUTPUT_TYPES = ("bmp", "jpg", "png", "tga")

    # Pixel buffers: L, LA, RGB, RGBA
    MAX_CHANNELS = 4

    # Logging
    LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-24s | %(message)s"
    LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class ResizeOptions:
    """
    Requested output of a resize.

    Either `scale` or any of `width`/`height` may be given, never both.
    Axes left unset keep their current size.

    Args:
        use_seam_carving: Shrink by removing seams instead of resampling
        width: Explicit target width
        height: Explicit target height
        scale: Uniform scale factor applied to both axes
        seed: Seed for the tie-breaking generator (time-based if None)
    """
    use_seam_carving: bool = False
    width: Optional[int] = None
    height: Optional[int] = None
    scale: Optional[float] = None
    seed: Optional[int] = None

    def __post_init__(self):
        if self.scale is not None and (self.width is not None or self.height is not None):
            raise ConfigurationError(
                "scale cannot be combined with width or height; "
                "use either scale or width and/or height"
            )
        if self.scale is not None and not self.scale > 0:
            raise InvalidDimensionsError('scale', self.scale)
        if self.width is not None and self.width <= 0:
            raise InvalidDimensionsError('width', self.width)
        if self.height is not None and self.height <= 0:
            raise InvalidDimensionsError('height', self.height)
