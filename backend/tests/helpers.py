"""Test doubles and image builders shared across test modules."""

from __future__ import annotations

import io

import numpy as np
from PIL import Image

from backend.imagepad.archive import ArchiveBuilder
from backend.imagepad.exceptions import ArchiveError
from backend.imagepad.models import SourceImage


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def make_source(
    name: str = "photo.png",
    size: tuple[int, int] = (100, 80),
    color: tuple[int, ...] = (255, 255, 255, 255),
    box: tuple[int, int, int, int] | None = None,
    box_color: tuple[int, ...] = (200, 30, 30, 255),
) -> SourceImage:
    """PNG source, optionally with a colored rectangle drawn on it."""
    img = Image.new("RGBA", size, color)
    if box is not None:
        img.paste(Image.new("RGBA", (box[2] - box[0], box[3] - box[1]), box_color), box[:2])
    return SourceImage(name=name, data=encode_png(img), media_type="image/png")


class FakeSegmenter:
    """Returns a constant foreground mask and records what it was given."""

    def __init__(self, value: float = 1.0) -> None:
        self.value = value
        self.calls: list[tuple[int, int]] = []

    def segment(self, image: Image.Image) -> np.ndarray:
        self.calls.append(image.size)
        return np.full((image.height, image.width), self.value, dtype=np.float32)


class BrokenSegmenter:
    def segment(self, image: Image.Image) -> np.ndarray:
        raise RuntimeError("model offline")


class FailingArchiveBuilder(ArchiveBuilder):
    def add_entry(self, name: str, data: bytes) -> None:
        pass

    def finalize(self, compression_level, on_progress=None) -> bytes:
        raise ArchiveError("disk full")
