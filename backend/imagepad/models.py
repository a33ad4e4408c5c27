"""Data structures for imagepad."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path

from .constants import DEFAULT_MEDIA_TYPE, MEDIA_TYPES
from .enums import PipelineStage, ProcessingMode


@dataclass(frozen=True)
class SourceImage:
    """A user-selected image file, held verbatim."""
    name: str
    data: bytes = field(repr=False)
    media_type: str = DEFAULT_MEDIA_TYPE

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def stem(self) -> str:
        """Name without its last extension."""
        head, dot, _ext = self.name.rpartition(".")
        return head if dot else self.name

    @property
    def extension(self) -> str:
        _head, dot, ext = self.name.rpartition(".")
        return f".{ext.lower()}" if dot else ""

    @classmethod
    def from_path(cls, path: str | Path) -> SourceImage:
        p = Path(path)
        media_type = MEDIA_TYPES.get(p.suffix.lower(), DEFAULT_MEDIA_TYPE)
        return cls(name=p.name, data=p.read_bytes(), media_type=media_type)


@dataclass(frozen=True)
class BoundingBox:
    """Crop region in pixel coordinates. ``max_x``/``max_y`` are exclusive."""
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @classmethod
    def full(cls, width: int, height: int) -> BoundingBox:
        return cls(0, 0, width, height)

    def to_tuple(self) -> tuple[int, int, int, int]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


@dataclass(frozen=True)
class Dimensions:
    width: int
    height: int

    def to_tuple(self) -> tuple[int, int]:
        return (self.width, self.height)


@dataclass(frozen=True)
class LayoutPlan:
    """Where the cropped content lands on the output canvas."""
    crop: BoundingBox
    scaled_width: float  # Before rounding
    scaled_height: float
    content: Dimensions
    canvas: Dimensions

    @property
    def offset(self) -> tuple[float, float]:
        return (
            (self.canvas.width - self.content.width) / 2,
            (self.canvas.height - self.content.height) / 2,
        )


@dataclass(frozen=True)
class EncodedImage:
    """Output of the size-constrained encoder."""
    data: bytes = field(repr=False)
    quality: float
    attempts: int  # Quality reductions performed

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ProcessedResult:
    """Outcome for one image. ``processed`` is None when the original is kept."""
    original: SourceImage
    processed: bytes | None = field(default=None, repr=False)
    dimensions: Dimensions | None = None
    byte_size: int | None = None
    media_type: str | None = None
    quality: float | None = None
    attempts: int = 0
    stage: PipelineStage = PipelineStage.DONE
    stages: tuple[PipelineStage, ...] = ()
    error: str | None = None

    @property
    def changed(self) -> bool:
        return self.processed is not None

    @classmethod
    def unchanged(
        cls,
        original: SourceImage,
        stages: tuple[PipelineStage, ...] = (),
        error: str | None = None,
    ) -> ProcessedResult:
        return cls(
            original=original,
            stage=PipelineStage.FAILED if error else PipelineStage.DONE,
            stages=stages,
            error=error,
        )


@dataclass(frozen=True)
class BatchSummary:
    changed: int
    unchanged: int

    @classmethod
    def from_results(cls, results: tuple[ProcessedResult, ...]) -> BatchSummary:
        changed = sum(1 for r in results if r.changed)
        return cls(changed=changed, unchanged=len(results) - changed)


@dataclass(frozen=True)
class BatchOutcome:
    results: tuple[ProcessedResult, ...]
    summary: BatchSummary


@dataclass(frozen=True)
class DownloadItem:
    """A named blob ready to be saved or archived."""
    name: str
    data: bytes = field(repr=False)
    media_type: str


@dataclass(frozen=True)
class BatchState:
    """Snapshot of the current selection, results and flags.

    Never mutated in place; ``BatchSession`` swaps in updated copies.
    """
    selection: tuple[SourceImage, ...] = ()
    results: tuple[ProcessedResult, ...] = ()
    is_processing: bool = False
    is_zipping: bool = False
    progress: int = 0
    mode: ProcessingMode = ProcessingMode.NORMALIZE
    rename_files: bool = True
    base_name: str = ""

    @property
    def is_busy(self) -> bool:
        return self.is_processing or self.is_zipping

    def update(self, **changes: object) -> BatchState:
        return dataclasses.replace(self, **changes)
