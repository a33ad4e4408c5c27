"""Per-image processing pipeline."""

from __future__ import annotations

import asyncio
import logging

from .background import BackgroundRemover, get_background_remover
from .composition import BoundaryDetector, CompositionEngine
from .config import Config
from .decoder import decode_image
from .encoder import SizeConstrainedEncoder, encode_image
from .enums import PipelineStage, ProcessingMode
from .exceptions import DecodeError, MaskRequestError, ProcessingError
from .models import Dimensions, ProcessedResult, SourceImage

logger = logging.getLogger("imagepad.pipeline")

_MB = 1024 * 1024


class StageTrace:
    """Ordered record of the stages one image passed through."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.stages: list[PipelineStage] = []

    @property
    def current(self) -> PipelineStage | None:
        return self.stages[-1] if self.stages else None

    def advance(self, stage: PipelineStage) -> None:
        """Move to ``stage``.

        Raises:
            RuntimeError: If ``stage`` does not come after the current one.
        """
        if self.current is not None and stage.order <= self.current.order:
            raise RuntimeError(
                f"{self.name}: cannot move from {self.current.value} back to {stage.value}"
            )
        self.stages.append(stage)
        logger.debug("%s -> %s", self.name, stage.value)

    def as_tuple(self) -> tuple[PipelineStage, ...]:
        return tuple(self.stages)


class ImagePipeline:
    """Run one image through normalization or background removal.

    Normalization: decode, pre-scale large uploads, detect the content box,
    compose onto a white canvas, encode under the byte budget.
    Background removal: decode, request a mask, apply it, encode as PNG.

    Per-image failures never raise; they come back as a result with
    ``processed=None`` and the original kept verbatim. All image work
    runs in a worker thread so the event loop stays responsive.
    """

    def __init__(
        self,
        detector: BoundaryDetector | None = None,
        compositor: CompositionEngine | None = None,
        encoder: SizeConstrainedEncoder | None = None,
        background_remover: BackgroundRemover | None = None,
    ) -> None:
        self.detector = detector or BoundaryDetector()
        self.compositor = compositor or CompositionEngine()
        self.encoder = encoder or SizeConstrainedEncoder()
        self.background_remover = background_remover or get_background_remover(
            Config.BACKGROUND_STRATEGY
        )

    async def run(self, source: SourceImage, mode: ProcessingMode) -> ProcessedResult:
        if mode == ProcessingMode.REMOVE_BACKGROUND:
            return await self.remove_background(source)
        return await self.normalize(source)

    async def normalize(self, source: SourceImage) -> ProcessedResult:
        """Crop white borders, pad to the minimum canvas and re-encode.

        Args:
            source: The selected image.

        Returns:
            ProcessedResult with JPEG bytes, or the original on failure.
        """
        trace = StageTrace(source.name)
        try:
            image = await asyncio.to_thread(decode_image, source)
            trace.advance(PipelineStage.LOADED)

            prescaled = self.compositor.needs_prescale(image.size, source.size)
            if prescaled:
                image = await asyncio.to_thread(self.compositor.prescale, image)
                trace.advance(PipelineStage.RESIZED)

            box = await asyncio.to_thread(self.detector.detect, image)
            trace.advance(PipelineStage.BOUNDARY_DETECTED)

            canvas, plan = await asyncio.to_thread(self.compositor.compose, image, box)
            trace.advance(PipelineStage.COMPOSED)

            quality = self.encoder.initial_quality(source.size, prescaled)
            encoded = await asyncio.to_thread(self.encoder.encode, canvas, source.size, quality)
            trace.advance(PipelineStage.ENCODED)
        except ProcessingError as e:
            return self._failed(source, trace, e)

        trace.advance(PipelineStage.DONE)
        logger.info(
            "Processed %s: %dx%dpx, %.2fMB, quality: %.0f%%",
            source.name,
            plan.canvas.width, plan.canvas.height,
            encoded.size / _MB,
            encoded.quality * 100,
        )
        return ProcessedResult(
            original=source,
            processed=encoded.data,
            dimensions=plan.canvas,
            byte_size=encoded.size,
            media_type=Config.OUTPUT_MEDIA_TYPE,
            quality=encoded.quality,
            attempts=encoded.attempts,
            stage=PipelineStage.DONE,
            stages=trace.as_tuple(),
        )

    async def remove_background(self, source: SourceImage) -> ProcessedResult:
        """Remove the background of one image with the configured remover.

        Args:
            source: The selected image.

        Returns:
            ProcessedResult with PNG bytes, or the original on failure.
        """
        remover = self.background_remover
        trace = StageTrace(source.name)
        try:
            image = await asyncio.to_thread(decode_image, source)
            trace.advance(PipelineStage.LOADED)

            trace.advance(PipelineStage.MASK_REQUESTED)
            mask = await asyncio.to_thread(remover.compute_mask, image)

            result_image = await asyncio.to_thread(remover.apply_mask, image, mask)
            trace.advance(PipelineStage.MASK_APPLIED)

            data = await asyncio.to_thread(encode_image, result_image, remover.output_format)
            trace.advance(PipelineStage.ENCODED)
        except ProcessingError as e:
            return self._failed(source, trace, e)

        trace.advance(PipelineStage.DONE)
        logger.info(
            "Removed background from %s: %dx%dpx, %.2fMB",
            source.name, result_image.width, result_image.height, len(data) / _MB,
        )
        return ProcessedResult(
            original=source,
            processed=data,
            dimensions=Dimensions(result_image.width, result_image.height),
            byte_size=len(data),
            media_type=remover.media_type,
            stage=PipelineStage.DONE,
            stages=trace.as_tuple(),
        )

    @staticmethod
    def _failed(
        source: SourceImage, trace: StageTrace, error: ProcessingError
    ) -> ProcessedResult:
        if isinstance(error, DecodeError):
            message = f"Cannot load image: {source.name}"
        elif isinstance(error, MaskRequestError):
            message = f"Could not remove background for {source.name}: {error}"
        else:
            message = f"Could not process {source.name}: {error}"

        logger.warning(
            "%s failed after %s: %s",
            source.name, trace.current.value if trace.current else "start", error,
        )
        trace.advance(PipelineStage.FAILED)
        return ProcessedResult.unchanged(source, stages=trace.as_tuple(), error=message)
