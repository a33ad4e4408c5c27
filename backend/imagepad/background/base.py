"""Abstract base for background removal strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from PIL import Image

from ..config import Config


class BackgroundRemover(ABC):
    """Two-step background removal: classify pixels, then apply the result."""

    output_format: str = Config.MASKED_FORMAT
    media_type: str = Config.MASKED_MEDIA_TYPE

    @abstractmethod
    def compute_mask(self, image: Image.Image) -> np.ndarray:
        """Classify pixels of ``image``.

        Args:
            image: RGBA source image.

        Returns:
            A (height, width) array describing the background per pixel.
        """
        ...

    @abstractmethod
    def apply_mask(self, image: Image.Image, mask: np.ndarray) -> Image.Image:
        """Produce the output image from ``image`` and its mask.

        Args:
            image: RGBA source image.
            mask: Array returned by ``compute_mask`` for the same image.

        Returns:
            RGBA result image.
        """
        ...

    def remove(self, image: Image.Image) -> Image.Image:
        return self.apply_mask(image, self.compute_mask(image))
