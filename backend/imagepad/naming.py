"""Output file naming and base-name sanitizing."""

from __future__ import annotations

import re
import unicodedata

from .constants import DIACRITIC_REPLACEMENTS

OUTPUT_EXTENSION = ".jpg"

_TRAILING_DIGITS = re.compile(r"(\d+)$")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")
_DISALLOWED = re.compile(r"[^a-z0-9.\-]")


def _stem(name: str) -> str:
    head, dot, _ext = name.rpartition(".")
    return head if dot else name


def generate_file_name(
    original_name: str,
    index: int,
    rename_files: bool,
    base_name: str,
    extension: str = OUTPUT_EXTENSION,
) -> str:
    """Build the download name for the image at ``index`` in a batch.

    A trailing number in the original stem is carried over so that
    ``photo42.png`` keeps its 42. Without one, the 1-based position is used.

    Args:
        original_name: File name as selected by the user.
        index: Zero-based position in the batch.
        rename_files: Whether to replace the stem with ``base_name``.
        base_name: Sanitized base name. Ignored when empty.
        extension: Output extension including the dot.

    Returns:
        The output file name.
    """
    stem = _stem(original_name)
    match = _TRAILING_DIGITS.search(stem)

    if rename_files and base_name:
        number = match.group(1) if match else str(index + 1)
        return f"{base_name}-{number}{extension}"

    if match:
        prefix = stem[: match.start()].rstrip("-")
        if not prefix:
            return f"{match.group(1)}{extension}"
        return f"{prefix}-{match.group(1)}{extension}"

    return f"{stem}-{index + 1}{extension}"


def normalize_file_name(name: str) -> str:
    """Sanitize free text into a file-name-safe base name.

    Folds diacritics to plain Latin letters, turns whitespace runs into
    hyphens, lowercases, and keeps only ``[a-z0-9.-]`` with single hyphens.
    Applying it twice gives the same result as applying it once.
    """
    for accented, plain in DIACRITIC_REPLACEMENTS.items():
        name = name.replace(accented, plain)

    name = unicodedata.normalize("NFD", name)
    name = "".join(ch for ch in name if not unicodedata.combining(ch))
    name = _WHITESPACE.sub("-", name).lower()
    # Strip before collapsing: removing a character can join two hyphens
    name = _DISALLOWED.sub("", name)
    return _HYPHENS.sub("-", name)


def suggest_base_name(file_name: str) -> str:
    """Base name derived from the text before the first dot of a file name."""
    return normalize_file_name(file_name.split(".", 1)[0])
