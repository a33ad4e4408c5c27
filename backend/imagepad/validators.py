"""Input validation for imagepad."""

from __future__ import annotations

from collections.abc import Sequence

from .exceptions import BatchBusyError, EmptyBatchError, ValidationError
from .models import BatchState, SourceImage


def validate_selection(images: Sequence[SourceImage]) -> None:
    """Validate that a batch has something to process.

    Raises:
        EmptyBatchError: If no images are selected.
    """
    if not images:
        raise EmptyBatchError("Please select some images first")


def validate_idle(state: BatchState) -> None:
    """Validate that no run or zip is in flight.

    Raises:
        BatchBusyError: If processing or zipping is in progress.
    """
    if state.is_processing:
        raise BatchBusyError("Images are still being processed")
    if state.is_zipping:
        raise BatchBusyError("A zip file is still being created")


def validate_quality(quality: float) -> None:
    """Validate a lossy quality factor.

    Raises:
        ValidationError: If quality is not a number in (0, 1].
    """
    if isinstance(quality, bool) or not isinstance(quality, int | float):
        raise ValidationError(f"Quality must be a number, got {type(quality).__name__}")
    if not 0 < quality <= 1:
        raise ValidationError(f"Quality must be in (0, 1], got {quality}")


def validate_compression_level(level: int) -> None:
    """Validate a DEFLATE compression level.

    Raises:
        ValidationError: If level is outside 0-9.
    """
    if isinstance(level, bool) or not isinstance(level, int):
        raise ValidationError(f"Compression level must be an integer, got {type(level).__name__}")
    if not 0 <= level <= 9:
        raise ValidationError(f"Compression level must be between 0 and 9, got {level}")
