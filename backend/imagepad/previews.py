"""Temporary files backing result previews and downloads."""

from __future__ import annotations

import atexit
import contextlib
import logging
import shutil
import tempfile
import threading
from pathlib import Path

from .config import Config

logger = logging.getLogger("imagepad.previews")


class PreviewStore:
    """Hands out temporary files for display and releases them later.

    Each published blob lives in its own directory so it can keep its
    download name. A released file is deleted after a grace period so a
    page still rendering it is not cut off. Everything left is removed at
    interpreter exit.
    """

    def __init__(
        self,
        release_delay: float = Config.PREVIEW_RELEASE_DELAY,
        root: str | Path | None = None,
    ) -> None:
        self.release_delay = release_delay
        self.root = Path(root) if root else Path(tempfile.mkdtemp(prefix="imagepad-"))
        self.root.mkdir(parents=True, exist_ok=True)
        self._paths: set[Path] = set()
        self._timers: dict[Path, threading.Timer] = {}
        self._lock = threading.Lock()
        atexit.register(self.release_all)

    @property
    def active(self) -> frozenset[Path]:
        with self._lock:
            return frozenset(self._paths)

    def publish(self, name: str, data: bytes) -> Path:
        """Write ``data`` to a fresh temporary file called ``name``."""
        self.root.mkdir(parents=True, exist_ok=True)
        folder = Path(tempfile.mkdtemp(dir=self.root))
        path = folder / Path(name).name
        path.write_bytes(data)
        with self._lock:
            self._paths.add(path)
        return path

    def release(self, path: Path, delay: float | None = None) -> None:
        """Delete ``path`` after ``delay`` seconds (default ``release_delay``)."""
        delay = self.release_delay if delay is None else delay
        if delay <= 0:
            self._delete(path)
            return

        timer = threading.Timer(delay, self._delete, args=(path,))
        timer.daemon = True
        with self._lock:
            previous = self._timers.pop(path, None)
            self._timers[path] = timer
        if previous is not None:
            previous.cancel()
        timer.start()

    def _delete(self, path: Path) -> None:
        with self._lock:
            self._paths.discard(path)
            self._timers.pop(path, None)
        with contextlib.suppress(OSError):
            shutil.rmtree(path.parent)
        logger.debug("Released preview %s", path.name)

    def release_all(self) -> None:
        """Cancel pending releases and delete every file now."""
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
            self._paths.clear()
        for timer in timers:
            timer.cancel()
        with contextlib.suppress(OSError):
            shutil.rmtree(self.root)
