"""
Pixel buffers and scratch storage.

Pixels are kept as contiguous uint8 tensors of shape (H, W, C), i.e. the
interleaved row-major layout where pixel (x, y) starts at C * (y * W + x).
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
import torch

from .config import Config
from .exceptions import AllocationError, InvalidDimensionsError


def allocate(shape: Tuple[int, ...], dtype: torch.dtype = torch.uint8) -> torch.Tensor:
    """Allocate an uninitialized tensor, raising AllocationError on failure."""
    try:
        return torch.empty(shape, dtype=dtype)
    except (MemoryError, RuntimeError) as exc:
        raise AllocationError(shape) from exc


def copy_tensor(tensor: torch.Tensor) -> torch.Tensor:
    """Owned contiguous copy of a tensor, allocated through `allocate`."""
    out = allocate(tuple(tensor.shape), tensor.dtype)
    out.copy_(tensor)
    return out


def transpose(pixels: torch.Tensor) -> torch.Tensor:
    """Swap the x and y axes of an (H, W, C) buffer, returning a new (W, H, C) buffer."""
    H, W, C = pixels.shape
    out = allocate((W, H, C), pixels.dtype)
    out.copy_(pixels.transpose(0, 1))
    return out


@dataclass(eq=False)
class PixelBuffer:
    """
    A decoded 8-bit image.

    Args:
        pixels: uint8 tensor (H, W, C) with 1 <= C <= 4
    """
    pixels: torch.Tensor

    def __post_init__(self):
        if self.pixels.dim() != 3:
            raise InvalidDimensionsError(
                'shape', tuple(self.pixels.shape),
                f"Pixel buffer must be (H, W, C), got shape {tuple(self.pixels.shape)}")
        if self.pixels.dtype != torch.uint8:
            raise InvalidDimensionsError(
                'dtype', self.pixels.dtype, f"Pixel buffer must be uint8, got {self.pixels.dtype}")
        H, W, C = self.pixels.shape
        if H < 1:
            raise InvalidDimensionsError('height', H)
        if W < 1:
            raise InvalidDimensionsError('width', W)
        if not 1 <= C <= Config.MAX_CHANNELS:
            raise InvalidDimensionsError(
                'channels', C, f"Channel count must be 1-{Config.MAX_CHANNELS}, got {C}")
        self.pixels = self.pixels.contiguous()

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def channels(self) -> int:
        return self.pixels.shape[2]

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height), matching PIL's convention."""
        return self.width, self.height

    def index(self, x: int, y: int) -> int:
        """Offset of the first channel of pixel (x, y) in the flat buffer."""
        return self.channels * (y * self.width + x)

    def clone(self) -> 'PixelBuffer':
        return PixelBuffer(copy_tensor(self.pixels))

    @classmethod
    def from_numpy(cls, array: np.ndarray) -> 'PixelBuffer':
        """Build a buffer from an (H, W) or (H, W, C) uint8 array. The data is copied."""
        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        return cls(torch.from_numpy(np.array(array, dtype=np.uint8, copy=True)))

    def to_numpy(self) -> np.ndarray:
        """Return an (H, W, C) uint8 array copy."""
        return self.pixels.cpu().numpy().copy()


class ScratchBuffers:
    """
    Two swappable scratch buffers for iterative carving.

    Both are sized for the widest image they will hold. `front(width)` and
    `back(width)` return contiguous (height, width, channels) views, so a
    narrowing image is carved back and forth without reallocating.
    """

    def __init__(self, height: int, max_width: int, channels: int,
                 dtype: torch.dtype = torch.uint8):
        self.height = height
        self.max_width = max_width
        self.channels = channels
        self._front = allocate((height * max_width * channels,), dtype)
        self._back = allocate((height * max_width * channels,), dtype)

    def _view(self, storage: torch.Tensor, width: int) -> torch.Tensor:
        if not 1 <= width <= self.max_width:
            raise ValueError(f"Width {width} outside scratch range 1..{self.max_width}")
        n = self.height * width * self.channels
        return storage[:n].view(self.height, width, self.channels)

    def front(self, width: int) -> torch.Tensor:
        return self._view(self._front, width)

    def back(self, width: int) -> torch.Tensor:
        return self._view(self._back, width)

    def swap(self):
        self._front, self._back = self._back, self._front
