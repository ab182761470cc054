"""
Carving functions: remove seams one at a time until a target size is reached.

Only shrinking is supported. Height is carved by transposing the image and
carving its width.
"""

import logging
from typing import Callable, Optional

import torch

from .buffer import ScratchBuffers, copy_tensor, transpose
from .energy import gradient_energy
from .exceptions import InvalidDimensionsError, UnsupportedOperationError
from .seam import find_seam

logger = logging.getLogger("seamresize.carving")

SeamCallback = Callable[[int, torch.Tensor], None]


def remove_seam(pixels: torch.Tensor, seam: torch.Tensor,
                out: Optional[torch.Tensor] = None) -> torch.Tensor:
    """
    Remove a vertical seam from an image.

    Each row loses the pixel at its seam column; pixels to its right move one
    column left. The input is not modified.

    Args:
        pixels: Image tensor (H, W, C)
        seam: Column index per row (H,)
        out: Optional (H, W-1, C) tensor to write the result into

    Returns:
        Carved image (H, W-1, C)
    """
    H, W, C = pixels.shape
    seam = seam.to(torch.long)
    if seam.shape != (H,):
        raise ValueError(f"Seam must have {H} entries, got shape {tuple(seam.shape)}")
    if H and (seam.min() < 0 or seam.max() >= W):
        raise ValueError(f"Seam columns must lie in [0, {W}), got {seam.tolist()}")

    # Source column for each output column: skip over the seam pixel
    cols = torch.arange(W - 1).expand(H, W - 1)
    cols = cols + (cols >= seam.unsqueeze(1)).to(torch.long)
    index = cols.unsqueeze(2).expand(H, W - 1, C)

    return torch.gather(pixels, 1, index, out=out)


def carve_seam(pixels: torch.Tensor, seam: torch.Tensor, out_width: int,
               out: Optional[torch.Tensor] = None) -> torch.Tensor:
    """
    Change the width of an image by one along a seam.

    Args:
        pixels: Image tensor (H, W, C)
        seam: Column index per row (H,)
        out_width: W - 1 to remove the seam. W + 1 (seam insertion) is
                   not supported.
        out: Optional destination tensor

    Returns:
        Carved image (H, out_width, C)
    """
    H, W, C = pixels.shape
    if out_width == W - 1:
        return remove_seam(pixels, seam, out=out)
    if out_width == W + 1:
        raise UnsupportedOperationError('width', W, out_width)
    raise ValueError(f"A single carve changes width by one: {W} -> {out_width}")


def change_width(pixels: torch.Tensor, out_width: int,
                 generator: Optional[torch.Generator] = None,
                 on_seam: Optional[SeamCallback] = None) -> torch.Tensor:
    """
    Seam carve an image down to `out_width` columns.

    Energy is recomputed after every removal. Two scratch buffers sized for
    the input width are swapped between iterations.

    Args:
        pixels: Image tensor (H, W, C)
        out_width: Target width, 1 <= out_width <= W
        generator: Random generator for tie-breaking
        on_seam: Called as on_seam(new_width, seam) after each removal

    Returns:
        New image tensor (H, out_width, C)
    """
    H, W, C = pixels.shape
    if out_width < 1:
        raise InvalidDimensionsError('width', out_width)
    if out_width > W:
        raise UnsupportedOperationError('width', W, out_width)
    if out_width == W:
        return copy_tensor(pixels)

    scratch = ScratchBuffers(H, W, C, dtype=pixels.dtype)
    current = scratch.front(W)
    current.copy_(pixels)

    width = W
    while width != out_width:
        energy = gradient_energy(current)
        seam = find_seam(energy, generator)
        width -= 1
        carve_seam(current, seam, width, out=scratch.back(width))
        scratch.swap()
        current = scratch.front(width)

        logger.debug("Removed seam %d/%d, width now %d", W - width, W - out_width, width)
        if on_seam is not None:
            on_seam(width, seam)

    return copy_tensor(current)


def change_height(pixels: torch.Tensor, out_height: int,
                  generator: Optional[torch.Generator] = None,
                  on_seam: Optional[SeamCallback] = None) -> torch.Tensor:
    """
    Seam carve an image down to `out_height` rows.

    The image is transposed, carved with `change_width`, and transposed back,
    so seams passed to `on_seam` are horizontal seams given as one row index
    per column.

    Args:
        pixels: Image tensor (H, W, C)
        out_height: Target height, 1 <= out_height <= H
        generator: Random generator for tie-breaking
        on_seam: Called as on_seam(new_height, seam) after each removal

    Returns:
        New image tensor (out_height, W, C)
    """
    H = pixels.shape[0]
    if out_height < 1:
        raise InvalidDimensionsError('height', out_height)
    if out_height > H:
        raise UnsupportedOperationError('height', H, out_height)
    if out_height == H:
        return copy_tensor(pixels)

    carved = change_width(transpose(pixels), out_height, generator, on_seam)
    return transpose(carved)
