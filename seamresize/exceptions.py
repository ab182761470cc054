"""
Exception hierarchy for seam-carving resizes.

Every failure aborts only the image being resized. Validation errors are
raised before any pixel work starts, so the caller's buffer is never touched.
"""

from typing import Optional, Tuple


class SeamResizeError(Exception):
    """Base exception for all seamresize errors."""


class InvalidDimensionsError(SeamResizeError, ValueError):
    """Raised for zero or negative sizes, a non-positive scale, or a malformed pixel buffer."""

    def __init__(self, axis: str, value, message: Optional[str] = None):
        self.axis = axis
        self.value = value
        super().__init__(message or f"Invalid {axis}: {value!r} (must be positive)")


class ConfigurationError(SeamResizeError, ValueError):
    """Raised when resize options contradict each other."""


class UnsupportedOperationError(SeamResizeError):
    """Raised when seam carving is asked to grow an axis."""

    def __init__(self, axis: str, current: int, requested: int):
        self.axis = axis
        self.current = current
        self.requested = requested
        super().__init__(
            f"Seam insertion is not supported: cannot grow {axis} "
            f"from {current} to {requested}"
        )


class AllocationError(SeamResizeError, MemoryError):
    """Raised when a pixel or scratch buffer cannot be allocated."""

    def __init__(self, shape: Tuple[int, ...]):
        self.shape = tuple(shape)
        super().__init__(f"Could not allocate buffer of shape {self.shape}")


class ResizeError(SeamResizeError):
    """Raised when uniform resampling fails."""


class ImageReadError(SeamResizeError):
    """Raised when an input image cannot be decoded."""


class ImageWriteError(SeamResizeError):
    """Raised when an output image cannot be encoded or written."""


class UnsupportedFormatError(ImageWriteError):
    """Raised when the output file extension has no known encoder."""
