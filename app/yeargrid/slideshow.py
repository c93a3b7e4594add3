"""Slideshow cursor over one group of a manifest.

The session owns all mutable slideshow state (group, images, index) so UI
layers only drive it: a timer calls advance(), clicks call jump_to().
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from app.yeargrid.errors import SlideshowError

FIRST_CALENDAR_YEAR = 2015


def alt_text(filename: str) -> str:
    """Readable caption from a filename: no extension, separators as spaces."""
    stem = re.sub(r"\.[^/.]+$", "", filename)
    return re.sub(r"[-_]", " ", stem)


def year_label(group: str) -> str:
    try:
        offset = int(group)
    except ValueError:
        return f"YEAR {group}"
    return f"YEAR {group} - {FIRST_CALENDAR_YEAR + offset}"


class SlideshowSession:
    def __init__(self) -> None:
        self.group: Optional[str] = None
        self.images: List[str] = []
        self.index = 0
        self._running = False
        self._restart_requested = False

    @property
    def running(self) -> bool:
        return self._running

    def load(self, manifest: Mapping[str, Sequence[str]], group: Optional[str]) -> str:
        """Switch to `group`, or the first group when it is missing.

        Returns the group actually shown and rewinds to the first image.
        """
        if not manifest:
            raise SlideshowError("No year folders found in manifest")

        if group is None or group not in manifest:
            group = sorted(manifest)[0]

        images = list(manifest[group])
        if not images:
            raise SlideshowError(f"No images found for year {group}")

        self.group = group
        self.images = images
        self.index = 0
        return group

    def _require_images(self) -> None:
        if not self.images:
            raise SlideshowError("No group loaded")

    @property
    def current_filename(self) -> str:
        self._require_images()
        return self.images[self.index]

    def current_path(self, images_dir: str | Path) -> Path:
        self._require_images()
        return Path(images_dir) / str(self.group) / self.images[self.index]

    def advance(self) -> int:
        self._require_images()
        self.index = (self.index + 1) % len(self.images)
        return self.index

    def jump_to(self, index: int) -> int:
        """Show `index` now; the timer should start a fresh interval."""
        self._require_images()
        if not 0 <= index < len(self.images):
            raise IndexError(f"image index {index} out of range for {len(self.images)} images")
        self.index = index
        self._restart_requested = True
        return self.index

    def take_restart_request(self) -> bool:
        requested = self._restart_requested
        self._restart_requested = False
        return requested

    def start(self) -> None:
        self._require_images()
        self._running = True

    def stop(self) -> None:
        self._running = False
        self._restart_requested = False
