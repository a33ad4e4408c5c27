"""Batch state owner shared with the presentation layer."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable

from .archive import ArchiveBuilder, ZipArchiveBuilder, build_archive, collect_downloads
from .batch import BatchRunner
from .config import Config
from .enums import NotificationLevel, ProcessingMode
from .exceptions import ArchiveError, ValidationError
from .models import BatchState, DownloadItem, SourceImage
from .naming import normalize_file_name, suggest_base_name
from .validators import validate_idle, validate_selection

logger = logging.getLogger("imagepad.session")

Listener = Callable[[BatchState], None]
Notifier = Callable[[NotificationLevel, str], None]

_LOG_LEVELS = {
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.ERROR: logging.WARNING,
}


def log_notifier(level: NotificationLevel, message: str) -> None:
    """Default notifier: user-facing messages go to the log."""
    logger.log(_LOG_LEVELS[level], "[%s] %s", level.value, message)


class BatchSession:
    """Holds the current ``BatchState`` and runs batches against it.

    State is immutable; every change swaps in a new snapshot and calls the
    subscribed listeners with it. User-facing messages go to ``notifier``.
    """

    def __init__(
        self,
        runner: BatchRunner | None = None,
        notifier: Notifier | None = None,
        archive_builder_factory: Callable[[], ArchiveBuilder] = ZipArchiveBuilder,
    ) -> None:
        self.runner = runner or BatchRunner()
        self.notifier = notifier or log_notifier
        self.archive_builder_factory = archive_builder_factory
        self._state = BatchState()
        self._listeners: list[Listener] = []
        # Bumped by select/clear so a run that outlives its selection is dropped
        self._generation = 0

    # ------------------------------------------------------------------
    # Snapshot / subscription
    # ------------------------------------------------------------------

    @property
    def state(self) -> BatchState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for state changes. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes: object) -> BatchState:
        self._state = self._state.update(**changes)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def _notify(self, level: NotificationLevel, message: str) -> None:
        self.notifier(level, message)

    # ------------------------------------------------------------------
    # Selection and options
    # ------------------------------------------------------------------

    def select(
        self, images: Iterable[SourceImage], mode: ProcessingMode = ProcessingMode.NORMALIZE
    ) -> BatchState:
        """Replace the selection. Results and progress are cleared.

        An empty selection is ignored. With renaming on, the base name is
        suggested from the first file.
        """
        images = tuple(images)
        if not images:
            return self._state

        self._generation += 1
        changes: dict[str, object] = {
            "selection": images,
            "results": (),
            "progress": 0,
            "mode": mode,
        }
        if self._state.rename_files:
            changes["base_name"] = suggest_base_name(images[0].name)

        logger.info("Selected %d files for %s", len(images), mode.value)
        return self._set(**changes)

    def set_mode(self, mode: ProcessingMode) -> BatchState:
        """Switch between normalization and background removal.

        Results from the other mode no longer match, so they are dropped.
        Refused while a run or zip is in progress.
        """
        if mode == self._state.mode:
            return self._state
        try:
            validate_idle(self._state)
        except ValidationError as e:
            self._notify(NotificationLevel.ERROR, str(e))
            return self._state

        logger.info("Mode changed to %s", mode.value)
        return self._set(mode=mode, results=(), progress=0)

    def set_rename_files(self, enabled: bool) -> BatchState:
        return self._set(rename_files=bool(enabled))

    def set_base_name(self, name: str) -> BatchState:
        return self._set(base_name=normalize_file_name(name or ""))

    def clear(self) -> BatchState:
        """Drop selection and results.

        A run already in flight is not interrupted, but its results are
        discarded when it finishes.
        """
        self._generation += 1
        return self._set(
            selection=(), results=(), progress=0, mode=ProcessingMode.NORMALIZE
        )

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    async def process(self) -> BatchState:
        """Run the current selection through the pipeline.

        Empty or busy sessions are reported and left untouched.
        """
        state = self._state
        try:
            validate_idle(state)
            validate_selection(state.selection)
        except ValidationError as e:
            self._notify(NotificationLevel.ERROR, str(e))
            return self._state

        generation = self._generation
        total = len(state.selection)
        self._set(is_processing=True, progress=0)
        self._notify(NotificationLevel.INFO, f"Processing {total} images...")

        def on_progress(value: int) -> None:
            if generation == self._generation:
                self._set(progress=value)

        try:
            outcome = await self.runner.run(state.selection, state.mode, on_progress=on_progress)
        except Exception as e:
            logger.error("Processing error: %s", e, exc_info=True)
            self._notify(NotificationLevel.ERROR, "An error occurred while processing images")
            return self._set(is_processing=False)

        if generation != self._generation:
            logger.info("Selection changed during processing, discarding results")
            return self._set(is_processing=False)

        for result in outcome.results:
            if result.error:
                self._notify(NotificationLevel.ERROR, result.error)

        summary = outcome.summary
        if state.mode == ProcessingMode.REMOVE_BACKGROUND:
            message = f"Done! Background removed from {summary.changed} images."
        else:
            message = (
                f"Done! {summary.changed} images processed, {summary.unchanged} were unchanged."
            )
        self._notify(NotificationLevel.SUCCESS, message)
        # Background removal is a one-off; the next batch normalizes again
        return self._set(
            results=outcome.results, is_processing=False, mode=ProcessingMode.NORMALIZE
        )

    # ------------------------------------------------------------------
    # Downloads
    # ------------------------------------------------------------------

    def downloads(self) -> list[DownloadItem]:
        """Individually named blobs for every changed result."""
        state = self._state
        items = collect_downloads(state.results, state.rename_files, state.base_name)
        if not items:
            self._notify(NotificationLevel.ERROR, "No processed images to download")
            return []
        self._notify(NotificationLevel.SUCCESS, "Download started!")
        return items

    async def download_zip(self) -> DownloadItem | None:
        """Bundle all results into ``processed-images.zip``.

        Returns:
            The archive, or None if there was nothing to zip or zipping failed.
        """
        state = self._state
        try:
            validate_idle(state)
        except ValidationError as e:
            self._notify(NotificationLevel.ERROR, str(e))
            return None
        if not state.results:
            self._notify(NotificationLevel.ERROR, "No processed images to download")
            return None

        loop = asyncio.get_running_loop()
        self._set(is_zipping=True, progress=0)
        self._notify(NotificationLevel.INFO, "Creating zip file...")

        def on_progress(value: int) -> None:
            loop.call_soon_threadsafe(lambda: self._set(progress=value))

        try:
            data = await asyncio.to_thread(
                build_archive,
                state.results,
                state.rename_files,
                state.base_name,
                self.archive_builder_factory(),
                Config.ARCHIVE_COMPRESSION_LEVEL,
                on_progress,
            )
        except ArchiveError as e:
            logger.error("Zip creation failed: %s", e)
            self._notify(NotificationLevel.ERROR, "Failed to create zip file")
            return None
        finally:
            self._set(is_zipping=False, progress=100)
            loop.call_later(Config.PROGRESS_RESET_DELAY, self._reset_progress)

        self._notify(NotificationLevel.SUCCESS, "Zip download started!")
        return DownloadItem(name=Config.ARCHIVE_NAME, data=data, media_type="application/zip")

    def _reset_progress(self) -> None:
        if not self._state.is_busy:
            self._set(progress=0)
