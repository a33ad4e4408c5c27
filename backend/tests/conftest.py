"""Shared pytest fixtures for imagepad tests."""

from __future__ import annotations

import pytest
from PIL import Image

from backend.imagepad.models import SourceImage
from backend.tests.helpers import FakeSegmenter, make_source


@pytest.fixture
def white_source() -> SourceImage:
    """200x200 all-white PNG."""
    return make_source("white.png", size=(200, 200))


@pytest.fixture
def product_source() -> SourceImage:
    """White 400x300 PNG with a red block at (100, 50)-(300, 250)."""
    return make_source("product12.png", size=(400, 300), box=(100, 50, 300, 250))


@pytest.fixture
def broken_source() -> SourceImage:
    return SourceImage(name="broken.jpg", data=b"not an image", media_type="image/jpeg")


@pytest.fixture
def rgba_image() -> Image.Image:
    """Create an RGBA PIL image."""
    return Image.new("RGBA", (200, 150), (100, 150, 200, 255))


@pytest.fixture
def grayscale_image() -> Image.Image:
    """Create a grayscale PIL image."""
    return Image.new("L", (100, 100), 128)


@pytest.fixture
def fake_segmenter() -> FakeSegmenter:
    return FakeSegmenter()
