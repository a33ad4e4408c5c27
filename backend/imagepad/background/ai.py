"""Segmentation-model background removal."""

from __future__ import annotations

import logging
from typing import Protocol

import cv2
import numpy as np
from PIL import Image

from ..composition.resize import high_quality_resize
from ..config import Config
from ..exceptions import MaskRequestError
from ..numeric import round_half_up
from .base import BackgroundRemover

logger = logging.getLogger("imagepad.background.ai")

# Optional AI imports
try:
    from transformers import pipeline as hf_pipeline

    HAS_TRANSFORMERS = True
except ImportError:
    HAS_TRANSFORMERS = False
    logger.info("transformers not installed. AI background removal is unavailable.")


class Segmenter(Protocol):
    """Anything that returns a per-pixel foreground confidence mask."""

    def segment(self, image: Image.Image) -> np.ndarray:
        """Return a float array in [0, 1] with the same height and width as ``image``."""
        ...


class TransformersSegmenter:
    """Foreground segmentation through a Hugging Face image-segmentation pipeline."""

    def __init__(self, model: str = Config.SEGMENTATION_MODEL) -> None:
        self.model = model
        self._pipe = None

    def _ensure_loaded(self) -> None:
        """Lazy-load the segmentation pipeline."""
        if self._pipe is not None:
            return
        if not HAS_TRANSFORMERS:
            raise MaskRequestError(
                "transformers is required for AI background removal. "
                "Run: pip install 'imagepad[ai]'"
            )
        logger.info("Loading segmentation model %s...", self.model)
        try:
            self._pipe = hf_pipeline("image-segmentation", model=self.model, trust_remote_code=True)
        except Exception as e:
            raise MaskRequestError(f"Could not load segmentation model {self.model}: {e}") from e
        logger.info("Segmentation model loaded")

    def segment(self, image: Image.Image) -> np.ndarray:
        self._ensure_loaded()
        result = self._pipe(image.convert("RGB"), return_mask=True)

        # Generic pipelines return [{"mask": ...}, ...]; some models return the mask itself
        if isinstance(result, Image.Image):
            mask = result
        elif isinstance(result, list) and result and isinstance(result[0], dict) and "mask" in result[0]:
            mask = result[0]["mask"]
        else:
            raise MaskRequestError("Invalid segmentation result")

        # A cut-out carries the foreground confidence in its alpha channel
        if "A" in mask.getbands():
            mask = mask.getchannel("A")
        elif mask.mode != "L":
            mask = mask.convert("L")

        if mask.size != image.size:
            mask = mask.resize(image.size, Image.Resampling.BILINEAR)
        return np.asarray(mask, dtype=np.float32) / 255.0


def apply_inverted_mask(image: Image.Image, mask: np.ndarray) -> Image.Image:
    """Set alpha to ``round((1 - mask) * 255)`` per pixel.

    Args:
        image: Source image.
        mask: Foreground confidence in [0, 1], shaped (height, width).

    Raises:
        MaskRequestError: If the mask does not match the image.
    """
    arr = np.array(image.convert("RGBA"))
    if mask.shape != arr.shape[:2]:
        raise MaskRequestError(
            f"Mask shape {mask.shape} does not match image {arr.shape[1]}x{arr.shape[0]}"
        )
    inverted = 1.0 - np.clip(mask.astype(np.float32), 0.0, 1.0)
    arr[:, :, 3] = np.floor(inverted * 255.0 + 0.5).astype(np.uint8)
    return Image.fromarray(arr)


class AIBackgroundRemover(BackgroundRemover):
    """Make the segmented region transparent using a model mask.

    The model sees a copy no larger than ``max_dimension`` on its longest
    side; the returned mask is scaled back up to the source resolution.
    """

    def __init__(
        self,
        segmenter: Segmenter | None = None,
        max_dimension: int = Config.SEGMENTATION_MAX_DIMENSION,
    ) -> None:
        self.segmenter = segmenter or TransformersSegmenter()
        self.max_dimension = max_dimension

    def _working_copy(self, image: Image.Image) -> Image.Image:
        width, height = image.size
        if width <= self.max_dimension and height <= self.max_dimension:
            return image
        if width > height:
            size = (self.max_dimension, max(1, round_half_up(height * self.max_dimension / width)))
        else:
            size = (max(1, round_half_up(width * self.max_dimension / height)), self.max_dimension)
        logger.debug("Scaling %dx%d to %dx%d for segmentation", width, height, *size)
        return high_quality_resize(image, size)

    def compute_mask(self, image: Image.Image) -> np.ndarray:
        """Foreground confidence at the resolution of ``image``.

        Raises:
            MaskRequestError: If the segmenter fails or returns a bad mask.
        """
        working = self._working_copy(image.convert("RGBA"))
        try:
            mask = np.asarray(self.segmenter.segment(working), dtype=np.float32)
        except MaskRequestError:
            raise
        except Exception as e:
            raise MaskRequestError(f"Segmentation failed: {e}") from e

        expected = (working.height, working.width)
        if mask.shape != expected:
            raise MaskRequestError(f"Segmenter returned mask {mask.shape}, expected {expected}")

        if working.size != image.size:
            mask = cv2.resize(mask, image.size, interpolation=cv2.INTER_LINEAR)
        return np.clip(mask, 0.0, 1.0)

    def apply_mask(self, image: Image.Image, mask: np.ndarray) -> Image.Image:
        return apply_inverted_mask(image, mask)
