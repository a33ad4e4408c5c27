"""Custom exception hierarchy for imagepad."""

from __future__ import annotations


class ImagePadError(Exception):
    """Base exception for all imagepad errors."""


class ValidationError(ImagePadError):
    """Raised when input validation fails."""


class EmptyBatchError(ValidationError):
    """Raised when a run or download is requested with nothing to work on."""


class BatchBusyError(ValidationError):
    """Raised when a run or zip starts while another one is in progress."""


class ProcessingError(ImagePadError):
    """Base for per-image failures. The batch continues past these."""


class DecodeError(ProcessingError):
    """Raised when image bytes cannot be decoded."""


class ContextUnavailableError(ProcessingError):
    """Raised when a drawing surface cannot be allocated."""


class EncodeError(ProcessingError):
    """Raised when encoding produces no output."""


class MaskRequestError(ProcessingError):
    """Raised when background segmentation fails."""


class ArchiveError(ImagePadError):
    """Raised when building the download archive fails."""
