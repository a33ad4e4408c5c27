"""Composition engine: crop, scale and center content on a white canvas."""

from __future__ import annotations

import logging

from PIL import Image

from ..config import Config
from ..decoder import new_canvas
from ..models import BoundingBox, Dimensions, LayoutPlan
from ..numeric import round_half_up
from .resize import high_quality_resize

logger = logging.getLogger("imagepad.composition")


class CompositionEngine:
    """Compose the normalized output canvas for one image.

    Layout rules:
    - Content wider than ``max_width`` is scaled down to it, then content
      still taller than ``max_height`` is scaled down again. Aspect ratio is
      kept through both steps.
    - The canvas is at least ``min_dimension`` on each axis; smaller content
      is centered on the white fill.
    - Very large uploads are pre-scaled before detection so the pixel scan
      and the final draw stay bounded.
    """

    def __init__(
        self,
        max_width: int = Config.MAX_WIDTH,
        max_height: int = Config.MAX_HEIGHT,
        min_dimension: int = Config.MIN_DIMENSION,
        background: tuple[int, int, int] = Config.BACKGROUND_COLOR,
    ) -> None:
        self.max_width = max_width
        self.max_height = max_height
        self.min_dimension = min_dimension
        self.background = background

    # ------------------------------------------------------------------
    # Large-file pre-scaling
    # ------------------------------------------------------------------

    @staticmethod
    def needs_prescale(image_size: tuple[int, int], source_bytes: int) -> bool:
        width, height = image_size
        return source_bytes > Config.LARGE_FILE_BYTES and (
            width > Config.PRESCALE_TRIGGER or height > Config.PRESCALE_TRIGGER
        )

    @staticmethod
    def prescaled_size(image_size: tuple[int, int]) -> tuple[int, int]:
        """Size with the longest side at ``PRESCALE_LONGEST_SIDE``."""
        width, height = image_size
        longest = Config.PRESCALE_LONGEST_SIDE
        aspect = width / height
        if width >= height:
            return longest, max(1, round_half_up(longest / aspect))
        return max(1, round_half_up(longest * aspect)), longest

    def prescale(self, image: Image.Image) -> Image.Image:
        target = self.prescaled_size(image.size)
        logger.info(
            "Large source %dx%d, scaling to %dx%d before detection",
            image.width, image.height, *target,
        )
        return high_quality_resize(image, target)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def plan(self, crop: BoundingBox) -> LayoutPlan:
        """Compute content and canvas sizes for a crop box.

        Raises:
            ValueError: If the crop box has no area.
        """
        if crop.is_empty:
            raise ValueError(f"Cannot lay out an empty crop box {crop.to_tuple()}")

        aspect = crop.width / crop.height
        width = float(crop.width)
        height = float(crop.height)

        # Sequential clamps: width first, then whatever height remains
        if width > self.max_width:
            width = float(self.max_width)
            height = width / aspect
        if height > self.max_height:
            height = float(self.max_height)
            width = height * aspect

        content = Dimensions(max(1, round_half_up(width)), max(1, round_half_up(height)))
        canvas = Dimensions(
            max(content.width, self.min_dimension),
            max(content.height, self.min_dimension),
        )
        return LayoutPlan(
            crop=crop,
            scaled_width=width,
            scaled_height=height,
            content=content,
            canvas=canvas,
        )

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def compose(
        self, image: Image.Image, crop: BoundingBox
    ) -> tuple[Image.Image, LayoutPlan]:
        """Draw the cropped region centered on a fresh white canvas.

        Args:
            image: Decoded source raster (pre-scaled if applicable).
            crop: Region of ``image`` to keep.

        Returns:
            Tuple of (opaque RGB canvas, layout plan used).

        Raises:
            ContextUnavailableError: If the canvas cannot be allocated.
        """
        plan = self.plan(crop)
        canvas = new_canvas(plan.canvas.to_tuple(), (*self.background, 255))

        content = image.convert("RGBA").crop(crop.to_tuple())
        content = high_quality_resize(content, plan.content.to_tuple())

        canvas.alpha_composite(self._place(content, plan))

        logger.debug(
            "Composed crop %s -> content %dx%d on canvas %dx%d",
            crop.to_tuple(),
            plan.content.width, plan.content.height,
            plan.canvas.width, plan.canvas.height,
        )
        return canvas.convert("RGB"), plan

    @staticmethod
    def _place(content: Image.Image, plan: LayoutPlan) -> Image.Image:
        """Position content on a transparent layer the size of the canvas.

        Offsets are half a pixel off whenever canvas and content sizes differ
        by an odd amount; those are drawn with a bilinear sub-pixel shift.
        """
        size = plan.canvas.to_tuple()
        x_off, y_off = plan.offset

        if x_off.is_integer() and y_off.is_integer():
            layer = Image.new("RGBA", size, (255, 255, 255, 0))
            layer.paste(content, (int(x_off), int(y_off)))
            return layer

        return content.transform(
            size,
            Image.Transform.AFFINE,
            (1, 0, -x_off, 0, 1, -y_off),
            resample=Image.Resampling.BILINEAR,
            fillcolor=(255, 255, 255, 0),
        )
