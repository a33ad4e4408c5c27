"""Size-constrained lossy encoding."""

from __future__ import annotations

import io
import logging

from PIL import Image

from .config import Config
from .exceptions import EncodeError
from .models import EncodedImage
from .numeric import clamp, round_half_up
from .validators import validate_quality

logger = logging.getLogger("imagepad.encoder")

_MB = 1024 * 1024


def encode_image(image: Image.Image, fmt: str, quality: float | None = None) -> bytes:
    """Encode an image to bytes.

    Args:
        image: Image to encode. Converted to RGB for formats without alpha.
        fmt: Pillow format name (``"JPEG"``, ``"PNG"``).
        quality: Lossy quality factor in (0, 1]. Ignored by lossless formats.

    Raises:
        EncodeError: If the encoder fails or produces no bytes.
    """
    params: dict = {}
    if fmt == "JPEG":
        if image.mode != "RGB":
            image = image.convert("RGB")
        if quality is not None:
            params["quality"] = int(clamp(round_half_up(quality * 100), 1, 100))

    buffer = io.BytesIO()
    try:
        image.save(buffer, format=fmt, **params)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(f"Failed to encode {fmt}: {e}") from e

    data = buffer.getvalue()
    if not data:
        raise EncodeError(f"{fmt} encoder produced no output")
    return data


class SizeConstrainedEncoder:
    """Re-encode a canvas under a byte budget by lowering quality.

    Only sources above ``large_file_bytes`` are retried. Each retry scales
    quality by ``heavy_step`` when the blob is more than twice the budget,
    else by ``light_step``. At most ``max_attempts`` reductions are made; the
    last blob is accepted even if it is still over budget.
    """

    def __init__(
        self,
        target_bytes: int = Config.TARGET_BYTES,
        max_attempts: int = Config.MAX_ENCODE_ATTEMPTS,
        large_file_bytes: int = Config.LARGE_FILE_BYTES,
        heavy_step: float = Config.QUALITY_STEP_HEAVY,
        light_step: float = Config.QUALITY_STEP_LIGHT,
        fmt: str = Config.OUTPUT_FORMAT,
    ) -> None:
        self.target_bytes = target_bytes
        self.max_attempts = max_attempts
        self.large_file_bytes = large_file_bytes
        self.heavy_step = heavy_step
        self.light_step = light_step
        self.fmt = fmt

    def initial_quality(self, source_bytes: int, prescaled: bool) -> float:
        """Starting quality: lower for large sources that were not pre-scaled."""
        if source_bytes > self.large_file_bytes and not prescaled:
            return Config.QUALITY_LARGE_FILE
        return Config.QUALITY_DEFAULT

    def next_quality(self, quality: float, blob_size: int) -> float:
        step = self.heavy_step if blob_size > 2 * self.target_bytes else self.light_step
        return quality * step

    def encode(
        self, canvas: Image.Image, source_bytes: int, quality: float
    ) -> EncodedImage:
        """Encode ``canvas``, retrying at lower quality while over budget.

        Args:
            canvas: Composed image.
            source_bytes: Size of the original upload; decides whether
                size-driven retries happen at all.
            quality: Initial quality factor in (0, 1].

        Returns:
            The final encoding with its quality and reduction count.

        Raises:
            EncodeError: If any encode attempt yields no output.
        """
        validate_quality(quality)
        retry_allowed = source_bytes > self.large_file_bytes
        attempts = 0

        while True:
            data = encode_image(canvas, self.fmt, quality)
            over_budget = len(data) > self.target_bytes

            if not (retry_allowed and over_budget and attempts < self.max_attempts):
                break

            attempts += 1
            new_quality = self.next_quality(quality, len(data))
            logger.info(
                "Encoded %.2fMB over %.2fMB budget, reducing quality to %d%%",
                len(data) / _MB, self.target_bytes / _MB, round_half_up(new_quality * 100),
            )
            quality = new_quality

        if over_budget and retry_allowed:
            logger.warning(
                "Still %.2fMB after %d reductions, keeping best effort",
                len(data) / _MB, attempts,
            )
        return EncodedImage(data=data, quality=quality, attempts=attempts)
