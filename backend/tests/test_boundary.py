"""Tests for content boundary detection."""

from PIL import Image

from backend.imagepad.composition.boundary import BoundaryDetector
from backend.imagepad.models import BoundingBox


def _white(size=(400, 300)):
    return Image.new("RGBA", size, (255, 255, 255, 255))


class TestBoundaryDetector:
    def test_all_white_falls_back_to_full_frame(self):
        box = BoundaryDetector().detect(_white((200, 200)))
        assert box == BoundingBox.full(200, 200)

    def test_fully_transparent_gives_full_frame(self):
        img = Image.new("RGBA", (101, 64), (0, 0, 0, 0))
        assert BoundaryDetector().detect(img) == BoundingBox.full(101, 64)

    def test_colored_block_padded(self):
        img = _white()
        img.paste(Image.new("RGBA", (200, 200), (200, 30, 30, 255)), (100, 50))
        box = BoundaryDetector().detect(img)
        # Last sampled content pixels are x=298, y=248
        assert box.to_tuple() == (95, 45, 303, 253)

    def test_near_white_is_not_content(self):
        img = _white()
        img.paste(Image.new("RGBA", (50, 50), (246, 250, 255, 255)), (100, 100))
        assert BoundaryDetector().detect(img) == BoundingBox.full(400, 300)

    def test_single_dark_channel_is_content(self):
        img = _white()
        img.paste(Image.new("RGBA", (10, 10), (255, 255, 244, 255)), (100, 100))
        box = BoundaryDetector().detect(img)
        assert box.min_x == 95
        assert box.min_y == 95

    def test_transparent_pixel_is_content(self):
        img = _white((100, 100))
        img.putpixel((10, 10), (255, 255, 255, 0))
        box = BoundaryDetector().detect(img)
        assert box.to_tuple() == (5, 5, 15, 15)

    def test_box_clamped_to_image(self):
        img = _white((100, 100))
        img.putpixel((0, 0), (0, 0, 0, 255))
        img.putpixel((98, 98), (0, 0, 0, 255))
        box = BoundaryDetector().detect(img)
        assert box.to_tuple() == (0, 0, 100, 100)

    def test_odd_pixels_skipped_by_stride(self):
        img = _white((100, 100))
        img.putpixel((11, 11), (0, 0, 0, 255))
        assert BoundaryDetector().detect(img) == BoundingBox.full(100, 100)
        assert BoundaryDetector(stride=1).detect(img).to_tuple() == (6, 6, 16, 16)

    def test_tiny_image_never_empty(self):
        img = Image.new("RGBA", (1, 1), (0, 0, 0, 255))
        box = BoundaryDetector(padding=0).detect(img)
        assert not box.is_empty
        assert box == BoundingBox.full(1, 1)

    def test_content_mask_shape(self):
        mask = BoundaryDetector().content_mask(_white((101, 50)))
        assert mask.shape == (25, 51)
        assert not mask.any()
