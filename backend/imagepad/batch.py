"""Sequential batch driver over the image pipeline."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from .enums import ProcessingMode
from .models import BatchOutcome, BatchSummary, ProcessedResult, SourceImage
from .numeric import percent
from .pipeline import ImagePipeline
from .validators import validate_selection

logger = logging.getLogger("imagepad.batch")

ProgressCallback = Callable[[int], None]


class BatchRunner:
    """Process images one after another, reporting progress after each.

    Images are never processed in parallel: progress advances by exactly
    one image per step, and the event loop gets a turn between images.
    """

    def __init__(self, pipeline: ImagePipeline | None = None) -> None:
        self.pipeline = pipeline or ImagePipeline()

    async def run(
        self,
        images: Sequence[SourceImage],
        mode: ProcessingMode = ProcessingMode.NORMALIZE,
        on_progress: ProgressCallback | None = None,
    ) -> BatchOutcome:
        """Run the pipeline over ``images`` in order.

        Args:
            images: Current selection.
            mode: Normalization or background removal.
            on_progress: Called with a 0-100 percentage after each image.

        Returns:
            BatchOutcome with one result per image, in input order.

        Raises:
            EmptyBatchError: If ``images`` is empty. Nothing is processed.
        """
        validate_selection(images)

        total = len(images)
        results: list[ProcessedResult] = []
        logger.info("Starting %s batch of %d images", mode.value, total)

        for index, source in enumerate(images):
            try:
                result = await self.pipeline.run(source, mode)
            except Exception as e:
                logger.error("Error processing %s: %s", source.name, e, exc_info=True)
                result = ProcessedResult.unchanged(
                    source, error=f"Could not process {source.name}: {e}"
                )

            results.append(result)
            if on_progress is not None:
                on_progress(percent(index + 1, total))
            await asyncio.sleep(0)

        frozen = tuple(results)
        summary = BatchSummary.from_results(frozen)
        logger.info(
            "Batch finished: %d changed, %d unchanged", summary.changed, summary.unchanged
        )
        return BatchOutcome(results=frozen, summary=summary)
