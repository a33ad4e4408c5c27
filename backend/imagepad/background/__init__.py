"""Background removal strategies for imagepad."""

from __future__ import annotations

from ..enums import BackgroundStrategy
from .ai import AIBackgroundRemover, Segmenter, TransformersSegmenter, apply_inverted_mask
from .base import BackgroundRemover
from .naive import NaiveBackgroundRemover, gray_background_mask


def get_background_remover(
    strategy: BackgroundStrategy, segmenter: Segmenter | None = None
) -> BackgroundRemover:
    """Get the remover for a strategy.

    Args:
        strategy: Which pixel classification to use.
        segmenter: Model wrapper for the AI strategy. Defaults to the
            transformers pipeline, loaded on first use.
    """
    if strategy == BackgroundStrategy.AI:
        return AIBackgroundRemover(segmenter=segmenter)
    return NaiveBackgroundRemover()


__all__ = [
    "AIBackgroundRemover",
    "BackgroundRemover",
    "NaiveBackgroundRemover",
    "Segmenter",
    "TransformersSegmenter",
    "apply_inverted_mask",
    "get_background_remover",
    "gray_background_mask",
]
