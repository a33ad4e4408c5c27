"""Shared constants for imagepad."""

from __future__ import annotations

# Media types by file extension, used when reading files from disk
MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
}

# Extensions accepted by the file picker; decoding decides the rest
SUPPORTED_EXTENSIONS = tuple(MEDIA_TYPES)

DEFAULT_MEDIA_TYPE = "application/octet-stream"

# Extension written for each output media type
OUTPUT_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
}

# Letters folded explicitly before Unicode decomposition. Stroked letters
# such as "ł" have no decomposed form, so NFD alone would drop them.
DIACRITIC_REPLACEMENTS = {
    "ą": "a", "Ą": "A",
    "ć": "c", "Ć": "C",
    "ę": "e", "Ę": "E",
    "ł": "l", "Ł": "L",
    "ń": "n", "Ń": "N",
    "ó": "o", "Ó": "O",
    "ś": "s", "Ś": "S",
    "ż": "z", "Ż": "Z",
    "ź": "z", "Ź": "Z",
    "đ": "d", "Đ": "D",
    "ø": "o", "Ø": "O",
    "ß": "ss",
}
