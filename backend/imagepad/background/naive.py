"""Gray-backdrop recoloring heuristic."""

from __future__ import annotations

import logging

import numpy as np
from PIL import Image

from ..config import Config
from .base import BackgroundRemover

logger = logging.getLogger("imagepad.background.naive")


def gray_background_mask(
    image: Image.Image,
    tolerance: float = Config.GRAY_TOLERANCE,
    min_average: float = Config.GRAY_MIN_AVERAGE,
    max_average: float = Config.GRAY_MAX_AVERAGE,
) -> np.ndarray:
    """Boolean mask of mid-gray pixels.

    A pixel is gray when each of R, G, B lies within ``tolerance`` of the
    pixel's channel average, and that average is strictly between
    ``min_average`` and ``max_average``.
    """
    rgb = np.asarray(image.convert("RGBA"))[:, :, :3].astype(np.float32)
    average = rgb.mean(axis=2)
    spread_ok = (np.abs(rgb - average[:, :, None]) <= tolerance * average[:, :, None]).all(axis=2)
    return spread_ok & (average > min_average) & (average < max_average)


class NaiveBackgroundRemover(BackgroundRemover):
    """Recolor gray backdrop pixels to white. Alpha is left untouched."""

    def compute_mask(self, image: Image.Image) -> np.ndarray:
        return gray_background_mask(image)

    def apply_mask(self, image: Image.Image, mask: np.ndarray) -> Image.Image:
        arr = np.array(image.convert("RGBA"))
        arr[mask, :3] = 255
        logger.debug("Recolored %d gray pixels to white", int(mask.sum()))
        return Image.fromarray(arr)
