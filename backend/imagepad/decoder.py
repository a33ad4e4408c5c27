"""Decode selected image bytes into RGBA rasters."""

from __future__ import annotations

import io
import logging

from PIL import Image, ImageOps

from .exceptions import ContextUnavailableError, DecodeError
from .models import SourceImage

logger = logging.getLogger("imagepad.decoder")


def decode_image(source: SourceImage) -> Image.Image:
    """Decode a source image into an RGBA raster.

    EXIF orientation is applied so the pixels match what a viewer shows.

    Args:
        source: The selected image.

    Returns:
        A fully loaded RGBA image.

    Raises:
        DecodeError: If the bytes are not a readable image.
    """
    if not source.data:
        raise DecodeError(f"Cannot load image: {source.name} is empty")

    try:
        with Image.open(io.BytesIO(source.data)) as img:
            img.load()
            img = ImageOps.exif_transpose(img)
            rgba = img.convert("RGBA")
    except (Image.DecompressionBombError, OSError, ValueError, SyntaxError) as e:
        raise DecodeError(f"Cannot load image: {source.name}: {e}") from e

    logger.debug("Decoded %s: %dx%d", source.name, rgba.width, rgba.height)
    return rgba


def new_canvas(size: tuple[int, int], color: tuple[int, ...]) -> Image.Image:
    """Allocate a fresh RGBA drawing surface.

    Raises:
        ContextUnavailableError: If the surface cannot be allocated.
    """
    width, height = size
    if width <= 0 or height <= 0:
        raise ContextUnavailableError(f"Cannot allocate a {width}x{height} surface")
    try:
        return Image.new("RGBA", size, color)
    except (MemoryError, ValueError) as e:
        raise ContextUnavailableError(f"Cannot allocate a {width}x{height} surface: {e}") from e
