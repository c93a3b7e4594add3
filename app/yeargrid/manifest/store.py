from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import List, Optional

from loguru import logger

from app.yeargrid.errors import ManifestError
from app.yeargrid.manifest.scanner import Manifest


def load_manifest(manifest_path: str | Path) -> Manifest:
    """Read and validate a manifest file.

    The file must hold a JSON object mapping group ids to lists of filenames.
    """
    path = Path(manifest_path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ManifestError(f"{path} not found. Run: yeargrid generate") from e
    except OSError as e:
        raise ManifestError(f"Could not read {path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestError(f"{path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"{path} must contain a JSON object")
    for group, files in data.items():
        if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
            raise ManifestError(f"Group {group!r} in {path} must be a list of filenames")
    return data


def manifest_fingerprint(manifest: Manifest) -> str:
    """Stable SHA-256 of the manifest content."""
    canonical = json.dumps(manifest, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class ManifestStore:
    """Holds the last loaded manifest and tells callers when it changed."""

    def __init__(self, manifest_path: str | Path) -> None:
        self.path = Path(manifest_path)
        self._manifest: Manifest = {}
        self._fingerprint: Optional[str] = None

    @property
    def manifest(self) -> Manifest:
        return self._manifest

    @property
    def fingerprint(self) -> Optional[str]:
        return self._fingerprint

    def load(self) -> Manifest:
        """Load unconditionally; errors propagate."""
        self._manifest = load_manifest(self.path)
        self._fingerprint = manifest_fingerprint(self._manifest)
        return self._manifest

    def refresh(self) -> bool:
        """Reload and report whether the content changed.

        A manifest that is temporarily unreadable (e.g. being rewritten) counts
        as unchanged; the next poll tries again.
        """
        try:
            manifest = load_manifest(self.path)
        except ManifestError as e:
            logger.debug("Manifest refresh skipped: {}", e)
            return False

        fingerprint = manifest_fingerprint(manifest)
        if fingerprint == self._fingerprint:
            return False

        logger.info("Manifest updated ({} groups)", len(manifest))
        self._manifest = manifest
        self._fingerprint = fingerprint
        return True

    def groups(self) -> List[str]:
        return sorted(self._manifest)

    def group(self, group_id: str) -> List[str]:
        return list(self._manifest.get(group_id, []))
