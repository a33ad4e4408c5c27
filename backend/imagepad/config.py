"""Global configuration for imagepad."""

from __future__ import annotations

from PIL import Image

from .enums import BackgroundStrategy

_MB = 1024 * 1024


class Config:
    """Global configuration."""

    # Boundary detection
    SCAN_STRIDE = 2  # Sample every other row/column
    CONTENT_RGB_THRESHOLD = 245  # Any channel below this is content
    CONTENT_ALPHA_THRESHOLD = 250  # Alpha below this is content
    CROP_PADDING = 5

    # Layout
    MAX_WIDTH = 3000
    MAX_HEIGHT = 3600
    MIN_DIMENSION = 500
    BACKGROUND_COLOR = (255, 255, 255)

    # Large-file path
    LARGE_FILE_BYTES = 3 * _MB
    PRESCALE_TRIGGER = 3000  # Either side above this triggers pre-scaling
    PRESCALE_LONGEST_SIDE = 3000

    # Encoding
    TARGET_BYTES = int(2.9 * _MB)
    MAX_ENCODE_ATTEMPTS = 10
    QUALITY_DEFAULT = 0.95
    QUALITY_LARGE_FILE = 0.9
    QUALITY_STEP_HEAVY = 0.7  # Blob more than double the budget
    QUALITY_STEP_LIGHT = 0.85
    OUTPUT_FORMAT = "JPEG"
    OUTPUT_MEDIA_TYPE = "image/jpeg"

    # Quality
    RESIZE_QUALITY = Image.Resampling.LANCZOS
    GAMMA = 2.2

    # Background removal
    BACKGROUND_STRATEGY = BackgroundStrategy.AI
    GRAY_TOLERANCE = 0.10  # Channels within 10% of their average
    GRAY_MIN_AVERAGE = 100
    GRAY_MAX_AVERAGE = 235
    SEGMENTATION_MODEL = "briaai/RMBG-1.4"
    SEGMENTATION_MAX_DIMENSION = 1024
    MASKED_FORMAT = "PNG"
    MASKED_MEDIA_TYPE = "image/png"

    # Archive
    ARCHIVE_NAME = "processed-images.zip"
    ARCHIVE_COMPRESSION_LEVEL = 6

    # Presentation
    PROGRESS_RESET_DELAY = 1.0
    PREVIEW_RELEASE_DELAY = 30.0
