"""
Image file decoding and encoding with Pillow.
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from .buffer import PixelBuffer
from .config import Config
from .exceptions import ImageReadError, ImageWriteError, UnsupportedFormatError

logger = logging.getLogger("seamresize.io")

# Pillow format name per output extension
OUTPUT_FORMATS = {
    ".bmp": "BMP",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".tga": "TGA",
}

_KEPT_MODES = ("L", "LA", "RGB", "RGBA")


def output_format(path: Union[str, Path]) -> str:
    """Pillow format name for an output path, from its extension."""
    suffix = Path(path).suffix.lower()
    try:
        return OUTPUT_FORMATS[suffix]
    except KeyError:
        raise UnsupportedFormatError(
            f"Unsupported output extension '{suffix}'. "
            f"Allowed: {', '.join(sorted(OUTPUT_FORMATS))}"
        ) from None


def _normalize_mode(image: Image.Image) -> Image.Image:
    if image.mode in _KEPT_MODES:
        return image
    if image.mode in ("1", "I", "I;16", "F"):
        return image.convert("L")
    if "A" in image.mode or "transparency" in image.info:
        return image.convert("RGBA")
    return image.convert("RGB")


def load_image(path: Union[str, Path]) -> PixelBuffer:
    """
    Decode an image file into an 8-bit pixel buffer.

    Grayscale and RGB images keep their channel count (1-4 channels).

    Args:
        path: Image file path

    Returns:
        Decoded pixel buffer
    """
    try:
        with Image.open(path) as image:
            image.load()
            array = np.asarray(_normalize_mode(image))
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise ImageReadError(f"Failed to read image {path}: {exc}") from exc
    return PixelBuffer.from_numpy(array)


def save_image(buffer: PixelBuffer, path: Union[str, Path],
               quality: int = Config.DEFAULT_QUALITY, exclusive: bool = False):
    """
    Encode a pixel buffer to a file. The format follows the file extension.

    JPEG drops any alpha channel and honours `quality`. BMP stores
    grayscale+alpha as RGBA.

    Args:
        buffer: Image to write
        path: Output path (.bmp, .jpg, .jpeg, .png or .tga)
        quality: JPEG quality, 0-100
        exclusive: Fail instead of replacing an existing file. The file is
                   created atomically, so concurrent writers cannot both win.
    """
    fmt = output_format(path)

    array = buffer.to_numpy()
    if buffer.channels == 1:
        array = array[:, :, 0]
    image = Image.fromarray(array)

    params = {}
    if fmt == "JPEG":
        image = image.convert("L" if image.mode in ("L", "LA") else "RGB")
        params["quality"] = quality
    elif fmt == "BMP" and image.mode == "LA":
        image = image.convert("RGBA")

    try:
        fp = open(path, "xb" if exclusive else "wb")
    except FileExistsError as exc:
        raise ImageWriteError(f"Refusing to overwrite existing file {path}") from exc
    except OSError as exc:
        raise ImageWriteError(f"Failed to write image {path}: {exc}") from exc

    try:
        with fp:
            image.save(fp, format=fmt, **params)
    except (OSError, ValueError) as exc:
        # Drop the partial file
        Path(path).unlink(missing_ok=True)
        raise ImageWriteError(f"Failed to write image {path}: {exc}") from exc
    logger.debug("Wrote %dx%d %s image to %s", buffer.width, buffer.height, fmt, path)
