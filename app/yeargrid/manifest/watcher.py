"""Keep manifest.json in sync with the images directory.

Polls the directory on a background thread. A change is only acted on once
the directory has stayed the same for the debounce window, so a burst of
copies produces one regeneration.
"""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from app.yeargrid.errors import ManifestError
from app.yeargrid.manifest.scanner import Manifest, generate_manifest, scan_images_dir
from app.yeargrid.manifest.store import load_manifest, manifest_fingerprint


class ManifestWatcher:
    def __init__(
        self,
        images_dir: str | Path,
        manifest_path: str | Path,
        *,
        poll_interval: float = 3.0,
        debounce: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.images_dir = Path(images_dir)
        self.manifest_path = Path(manifest_path)
        self.poll_interval = poll_interval
        self.debounce = debounce
        self._clock = clock

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self._seen: Optional[str] = None
        self._written: Optional[str] = None
        self._pending: Optional[str] = None
        self._pending_since = 0.0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def snapshot(self) -> Manifest:
        try:
            return scan_images_dir(self.images_dir)
        except ManifestError:
            return {}

    def regenerate(self) -> bool:
        """Rewrite the manifest now. Failures are logged, not raised."""
        self._seen = manifest_fingerprint(self.snapshot())
        self._pending = None
        try:
            manifest = generate_manifest(self.images_dir, self.manifest_path)
        except ManifestError as e:
            logger.error("Error generating manifest: {}", e)
            self._written = None
            return False
        self._written = manifest_fingerprint(manifest)
        self._seen = self._written
        return True

    def _manifest_on_disk(self) -> Optional[str]:
        try:
            return manifest_fingerprint(load_manifest(self.manifest_path))
        except ManifestError:
            return None

    def poll_once(self) -> bool:
        """Run one check; returns True when the manifest was regenerated."""
        current = manifest_fingerprint(self.snapshot())
        now = self._clock()

        if current == self._seen:
            self._pending = None
            if self._written is not None and self._manifest_on_disk() != self._written:
                logger.info("Manifest changed outside the watcher, regenerating")
                return self.regenerate()
            return False

        if current != self._pending:
            self._pending = current
            self._pending_since = now
            if self.debounce > 0:
                return False

        if now - self._pending_since < self.debounce:
            return False

        logger.info("Change detected in {}", self.images_dir)
        return self.regenerate()

    def start(self) -> None:
        if self.running:
            return
        logger.info("Watching {} for changes...", self.images_dir)
        self.regenerate()
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="manifest-watcher", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def next_wait(self) -> float:
        """Seconds until the next scan.

        A full poll interval when idle; while a change is settling, only what
        is left of its debounce window.
        """
        if self._pending is None:
            return self.poll_interval
        remaining = self.debounce - (self._clock() - self._pending_since)
        return max(0.0, min(self.poll_interval, remaining))

    def _run(self) -> None:
        while not self._stop.wait(self.next_wait()):
            try:
                self.poll_once()
            except OSError as e:
                logger.warning("Watcher poll failed: {}", e)
