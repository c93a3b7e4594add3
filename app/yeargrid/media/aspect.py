"""Aspect ratios for grid items, read from image headers.

Pillow's ``Image.open`` only parses the header, so this stays cheap even for
large photos; pixels are never decoded.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List

from loguru import logger
from PIL import Image

from app.yeargrid.layout.masonry import DEFAULT_ASPECT_RATIO


class AspectRatioSource:
    def __init__(self, base_dir: str | Path, default: float = DEFAULT_ASPECT_RATIO) -> None:
        if default <= 0:
            raise ValueError("default aspect ratio must be > 0")
        self.base_dir = Path(base_dir)
        self.default = default
        self._known: Dict[Path, float] = {}

    def _path(self, group: str, filename: str) -> Path:
        return self.base_dir / group / filename

    def is_known(self, group: str, filename: str) -> bool:
        return self._path(group, filename) in self._known

    def ratio(self, group: str, filename: str) -> float:
        path = self._path(group, filename)
        cached = self._known.get(path)
        if cached is not None:
            return cached

        try:
            with Image.open(path) as img:
                width, height = img.size
        except OSError as e:
            # Not cached: the file may still be arriving.
            logger.debug("Using default aspect ratio for {}: {}", path, e)
            return self.default

        if width <= 0 or height <= 0:
            return self.default

        ratio = width / height
        self._known[path] = ratio
        return ratio

    def ratios(self, group: str, filenames: Iterable[str]) -> List[float]:
        return [self.ratio(group, name) for name in filenames]

    def forget(self) -> None:
        self._known.clear()
