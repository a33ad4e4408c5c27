"""Download collection and zip archive construction."""

from __future__ import annotations

import io
import logging
import zipfile
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from .config import Config
from .constants import OUTPUT_EXTENSIONS
from .exceptions import ArchiveError, EmptyBatchError
from .models import DownloadItem, ProcessedResult
from .naming import OUTPUT_EXTENSION, generate_file_name
from .numeric import clamp, round_half_up
from .validators import validate_compression_level

logger = logging.getLogger("imagepad.archive")

PercentCallback = Callable[[float], None]


class ArchiveBuilder(ABC):
    """Collects named blobs and produces one compressed archive."""

    @abstractmethod
    def add_entry(self, name: str, data: bytes) -> None:
        ...

    @abstractmethod
    def finalize(
        self, compression_level: int, on_progress: PercentCallback | None = None
    ) -> bytes:
        """Build the archive.

        Args:
            compression_level: DEFLATE level, 0-9.
            on_progress: Called with a completion percentage (0-100).

        Returns:
            Archive bytes.
        """
        ...


class ZipArchiveBuilder(ArchiveBuilder):
    """In-memory zip archive. Repeated names get a numeric suffix."""

    def __init__(self) -> None:
        self._entries: list[tuple[str, bytes]] = []
        self._names: set[str] = set()

    def _unique_name(self, name: str) -> str:
        if name not in self._names:
            return name
        stem, dot, ext = name.rpartition(".")
        if not dot:
            stem, ext = name, ""
        counter = 2
        while True:
            candidate = f"{stem}_{counter}{dot}{ext}"
            if candidate not in self._names:
                return candidate
            counter += 1

    def add_entry(self, name: str, data: bytes) -> None:
        unique = self._unique_name(name)
        if unique != name:
            logger.debug("Duplicate archive name %s stored as %s", name, unique)
        self._names.add(unique)
        self._entries.append((unique, data))

    def finalize(
        self, compression_level: int, on_progress: PercentCallback | None = None
    ) -> bytes:
        validate_compression_level(compression_level)
        total = len(self._entries)
        buffer = io.BytesIO()

        try:
            with zipfile.ZipFile(
                buffer, "w", zipfile.ZIP_DEFLATED, compresslevel=compression_level
            ) as zf:
                for done, (name, data) in enumerate(self._entries, start=1):
                    zf.writestr(name, data)
                    if on_progress is not None:
                        on_progress(done / total * 100)
        except (OSError, ValueError, zipfile.LargeZipFile) as e:
            raise ArchiveError(f"Failed to create zip file: {e}") from e

        return buffer.getvalue()


def _output_extension(result: ProcessedResult) -> str:
    return OUTPUT_EXTENSIONS.get(result.media_type or "", OUTPUT_EXTENSION)


def collect_downloads(
    results: Sequence[ProcessedResult], rename_files: bool, base_name: str
) -> list[DownloadItem]:
    """Named blobs for every changed result. Unchanged ones are skipped."""
    items = []
    for index, result in enumerate(results):
        if result.processed is None:
            continue
        name = generate_file_name(
            result.original.name, index, rename_files, base_name, _output_extension(result)
        )
        items.append(DownloadItem(name=name, data=result.processed, media_type=result.media_type))
    return items


def archive_entries(
    results: Sequence[ProcessedResult], rename_files: bool, base_name: str
) -> list[DownloadItem]:
    """All results as archive entries.

    Changed results are named like individual downloads. Unchanged ones
    carry the original bytes, named without renaming and with their own
    extension.
    """
    items = []
    for index, result in enumerate(results):
        if result.processed is not None:
            name = generate_file_name(
                result.original.name, index, rename_files, base_name, _output_extension(result)
            )
            items.append(DownloadItem(name=name, data=result.processed, media_type=result.media_type))
        else:
            original = result.original
            name = generate_file_name(
                original.name, index, False, "", original.extension or OUTPUT_EXTENSION
            )
            items.append(DownloadItem(name=name, data=original.data, media_type=original.media_type))
    return items


def build_archive(
    results: Sequence[ProcessedResult],
    rename_files: bool,
    base_name: str,
    builder: ArchiveBuilder | None = None,
    compression_level: int = Config.ARCHIVE_COMPRESSION_LEVEL,
    on_progress: Callable[[int], None] | None = None,
) -> bytes:
    """Bundle a batch into one archive.

    Progress is reported as 0-50% while entries are added and 50-100%
    while the archive is finalized.

    Raises:
        EmptyBatchError: If there are no results.
        ArchiveError: If the builder fails.
    """
    if not results:
        raise EmptyBatchError("No processed images to download")

    builder = builder or ZipArchiveBuilder()
    entries = archive_entries(results, rename_files, base_name)
    total = len(entries)

    def report(value: float) -> None:
        if on_progress is not None:
            on_progress(int(clamp(round_half_up(value), 0, 100)))

    try:
        for done, item in enumerate(entries, start=1):
            builder.add_entry(item.name, item.data)
            report(done / total * 50)

        data = builder.finalize(compression_level, lambda pct: report(50 + pct / 2))
    except ArchiveError:
        raise
    except Exception as e:
        raise ArchiveError(f"Failed to create zip file: {e}") from e

    logger.info("Built archive with %d entries, %.2fMB", total, len(data) / (1024 * 1024))
    return data
