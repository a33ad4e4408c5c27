"""Enumerations for imagepad."""

from __future__ import annotations

from enum import Enum


class ProcessingMode(Enum):
    """What a batch run does to each image."""
    NORMALIZE = "normalize"
    REMOVE_BACKGROUND = "remove_background"


class BackgroundStrategy(Enum):
    """How background removal classifies pixels."""
    NAIVE = "naive"  # Gray pixels recolored to white
    AI = "ai"  # Segmentation mask applied to alpha


class PipelineStage(Enum):
    """Per-image processing states, in transition order."""
    LOADED = "loaded"
    RESIZED = "resized"
    BOUNDARY_DETECTED = "boundary_detected"
    MASK_REQUESTED = "mask_requested"
    COMPOSED = "composed"
    MASK_APPLIED = "mask_applied"
    ENCODED = "encoded"
    DONE = "done"
    FAILED = "failed"

    @property
    def order(self) -> int:
        return _STAGE_ORDER[self]


_STAGE_ORDER = {stage: index for index, stage in enumerate(PipelineStage)}


class NotificationLevel(Enum):
    """Severity of a user-facing notification."""
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"
