"""
High-level resize: compute the target size and pick seam carving or uniform
resampling.
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np
import torch
from PIL import Image

from .buffer import PixelBuffer
from .carving import change_height, change_width
from .config import Config, ResizeOptions
from .exceptions import InvalidDimensionsError, ResizeError, UnsupportedOperationError
from .seam import make_generator

logger = logging.getLogger("seamresize.resizing")


def compute_target_size(width: int, height: int, options: ResizeOptions) -> Tuple[int, int]:
    """
    Compute the output size for an image.

    Scale mode floors `size * scale` on both axes. Explicit mode replaces only
    the axes that were given.

    Args:
        width: Current width
        height: Current height
        options: Requested output

    Returns:
        (target_width, target_height)
    """
    if options.scale is not None:
        target = (math.floor(width * options.scale), math.floor(height * options.scale))
    else:
        target = (options.width if options.width is not None else width,
                  options.height if options.height is not None else height)

    if target[0] < 1:
        raise InvalidDimensionsError(
            'width', target[0], f"Scaled width {width} x {options.scale} rounds to {target[0]}")
    if target[1] < 1:
        raise InvalidDimensionsError(
            'height', target[1], f"Scaled height {height} x {options.scale} rounds to {target[1]}")
    return target


def uniform_resize(buffer: PixelBuffer, width: int, height: int,
                   resample=Config.RESAMPLE) -> PixelBuffer:
    """
    Resample every pixel to the new size with Pillow.

    Args:
        buffer: Source image, left untouched
        width: Target width
        height: Target height
        resample: Pillow resampling filter

    Returns:
        New buffer of size (width, height) with the same channel count
    """
    try:
        array = buffer.to_numpy()
        if buffer.channels == 1:
            array = array[:, :, 0]
        resized = Image.fromarray(array).resize((width, height), resample)
    except (ValueError, OSError, MemoryError) as exc:
        raise ResizeError(
            f"Failed to resample {buffer.width}x{buffer.height} image to {width}x{height}: {exc}"
        ) from exc
    return PixelBuffer.from_numpy(np.asarray(resized))


def resize(buffer: PixelBuffer, options: ResizeOptions,
           generator: Optional[torch.Generator] = None) -> PixelBuffer:
    """
    Resize an image as requested by `options`.

    With seam carving, height is reduced first and then width. Growing
    either axis by seam carving is rejected before any work is done.

    Args:
        buffer: Source image, left untouched
        options: Requested output
        generator: Random generator for tie-breaking. Built from
                   `options.seed` if None.

    Returns:
        New resized buffer
    """
    target_w, target_h = compute_target_size(buffer.width, buffer.height, options)

    if (target_w, target_h) == buffer.size:
        logger.debug("Image already %dx%d, nothing to do", target_w, target_h)
        return buffer.clone()

    if not options.use_seam_carving:
        logger.debug("Resampling %dx%d -> %dx%d", buffer.width, buffer.height, target_w, target_h)
        return uniform_resize(buffer, target_w, target_h)

    if target_h > buffer.height:
        raise UnsupportedOperationError('height', buffer.height, target_h)
    if target_w > buffer.width:
        raise UnsupportedOperationError('width', buffer.width, target_w)

    if generator is None:
        generator = make_generator(options.seed)

    logger.debug("Seam carving %dx%d -> %dx%d", buffer.width, buffer.height, target_w, target_h)
    pixels = buffer.pixels
    if target_h != buffer.height:
        pixels = change_height(pixels, target_h, generator)
    if target_w != buffer.width:
        pixels = change_width(pixels, target_w, generator)
    return PixelBuffer(pixels)
