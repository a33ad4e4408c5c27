"""Content bounding-box detection over near-white backgrounds."""

from __future__ import annotations

import logging

import numpy as np
from PIL import Image

from ..config import Config
from ..models import BoundingBox

logger = logging.getLogger("imagepad.composition.boundary")


class BoundaryDetector:
    """Find the box around everything that is not white, opaque padding.

    A pixel counts as content when any color channel is below
    ``rgb_threshold`` or its alpha is below ``alpha_threshold``. The grid is
    sampled every ``stride`` pixels on both axes; the box is then padded and
    clamped to the image. When nothing is found the full image is returned,
    so callers never receive a zero-area crop.
    """

    def __init__(
        self,
        stride: int = Config.SCAN_STRIDE,
        rgb_threshold: int = Config.CONTENT_RGB_THRESHOLD,
        alpha_threshold: int = Config.CONTENT_ALPHA_THRESHOLD,
        padding: int = Config.CROP_PADDING,
    ) -> None:
        self.stride = max(1, stride)
        self.rgb_threshold = rgb_threshold
        self.alpha_threshold = alpha_threshold
        self.padding = padding

    def content_mask(self, image: Image.Image) -> np.ndarray:
        """Boolean mask of content pixels on the sampled grid."""
        arr = np.asarray(image.convert("RGBA"))
        sampled = arr[:: self.stride, :: self.stride]
        return (sampled[:, :, :3] < self.rgb_threshold).any(axis=2) | (
            sampled[:, :, 3] < self.alpha_threshold
        )

    def detect(self, image: Image.Image) -> BoundingBox:
        """Return the padded content box, or the full image if there is none."""
        width, height = image.size
        full = BoundingBox.full(width, height)

        ys, xs = np.nonzero(self.content_mask(image))
        if xs.size == 0:
            logger.debug("No content found in %dx%d image, keeping full frame", width, height)
            return full

        box = BoundingBox(
            min_x=max(0, int(xs.min()) * self.stride - self.padding),
            min_y=max(0, int(ys.min()) * self.stride - self.padding),
            max_x=min(width, int(xs.max()) * self.stride + self.padding),
            max_y=min(height, int(ys.max()) * self.stride + self.padding),
        )

        if box.is_empty:
            logger.debug("Degenerate box %s, keeping full frame", box.to_tuple())
            return full

        logger.debug("Content box %s in %dx%d image", box.to_tuple(), width, height)
        return box
