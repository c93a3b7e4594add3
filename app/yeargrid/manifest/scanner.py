"""Build the per-group image manifest from a directory of year folders.

Expected layout::

    images/
      1/ a.jpg b.png
      2/ c.webp

produces ``{"1": ["a.jpg", "b.png"], "2": ["c.webp"]}``.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, List

from loguru import logger

from app.yeargrid.errors import ManifestError

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".bmp", ".tiff"})

Manifest = Dict[str, List[str]]


def is_image_name(name: str) -> bool:
    return Path(name).suffix.lower() in IMAGE_EXTENSIONS


def scan_images_dir(images_dir: str | Path) -> Manifest:
    """Map each subdirectory name to its sorted image filenames.

    Groups without images are left out. Only one level below each group is
    looked at.
    """
    root = Path(images_dir)
    if not root.is_dir():
        raise ManifestError(f"Images directory not found at {root}")

    manifest: Manifest = {}
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if not entry.is_dir():
            continue
        files = sorted(p.name for p in entry.iterdir() if p.is_file() and is_image_name(p.name))
        if files:
            manifest[entry.name] = files
    return manifest


def write_manifest(manifest: Manifest, manifest_path: str | Path) -> None:
    """Write JSON atomically so pollers never read a half-written file."""
    path = Path(manifest_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=".manifest-", suffix=".json", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(manifest, f, indent=2)
            f.write("\n")
        os.replace(tmp_name, path)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def generate_manifest(images_dir: str | Path, manifest_path: str | Path) -> Manifest:
    logger.info("Scanning directory: {}", images_dir)
    manifest = scan_images_dir(images_dir)

    if not manifest:
        raise ManifestError(
            f"No year folders with images found in {images_dir} "
            "(expected structure: images/1/, images/2/, ...)"
        )

    for group, files in manifest.items():
        logger.info("Found {} images in year {}/", len(files), group)

    try:
        write_manifest(manifest, manifest_path)
    except OSError as e:
        raise ManifestError(f"Could not write {manifest_path}: {e}") from e

    total = sum(len(files) for files in manifest.values())
    logger.info("Generated {} with {} year(s) and {} total images", manifest_path, len(manifest), total)
    return manifest
