"""Application configuration: defaults plus optional JSON overrides."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from app.yeargrid.errors import ConfigError
from app.yeargrid.layout.columns import LayoutParameters


@dataclass(frozen=True)
class SlideshowConfig:
    interval_ms: int = 2500


@dataclass(frozen=True)
class ManifestConfig:
    images_dir: str = "images"
    manifest_path: str = "manifest.json"
    poll_interval_s: float = 3.0
    debounce_s: float = 0.5


@dataclass(frozen=True)
class ViewerConfig:
    resize_debounce_ms: int = 100
    manifest_poll_ms: int = 2000
    relayout_batch: int = 50


@dataclass(frozen=True)
class AppConfig:
    layout: LayoutParameters = field(default_factory=LayoutParameters)
    slideshow: SlideshowConfig = field(default_factory=SlideshowConfig)
    manifest: ManifestConfig = field(default_factory=ManifestConfig)
    viewer: ViewerConfig = field(default_factory=ViewerConfig)


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access."""

    def __init__(self, data: dict[str, Any]) -> None:
        self._data = data

    @classmethod
    def from_file(cls, settings_path: str | Path) -> "JsonSettings":
        path = Path(settings_path)
        if not path.exists():
            raise ConfigError(f"config file not found: {path}")
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"config root must be an object: {path}")
        return cls(data)

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present."""
        node: Any = self._data
        for part in key.split("."):
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node


def _number(settings: JsonSettings, key: str, default: float, cast: type) -> Any:
    raw = settings.get(key, default)
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ConfigError(f"{key} must be a number, got {raw!r}")
    if cast is int and isinstance(raw, float) and not raw.is_integer():
        raise ConfigError(f"{key} must be a whole number, got {raw!r}")
    value = cast(raw)
    if value < 0:
        raise ConfigError(f"{key} must be >= 0, got {raw!r}")
    return value


def _text(settings: JsonSettings, key: str, default: str) -> str:
    raw = settings.get(key, default)
    if not isinstance(raw, str) or not raw.strip():
        raise ConfigError(f"{key} must be a non-empty string, got {raw!r}")
    return raw


def load_config(path: str | Path | None = None) -> AppConfig:
    """Build an AppConfig, applying overrides from the JSON file at `path`."""
    if path is None:
        return AppConfig()

    settings = JsonSettings.from_file(path)
    base = AppConfig()

    try:
        layout = LayoutParameters(
            gutter_px=_number(settings, "layout.gutter_px", base.layout.gutter_px, float),
            min_columns=_number(settings, "layout.min_columns", base.layout.min_columns, int),
            max_columns=_number(settings, "layout.max_columns", base.layout.max_columns, int),
        )
    except ValueError as e:
        raise ConfigError(f"invalid layout settings: {e}") from e

    slideshow = SlideshowConfig(
        interval_ms=_number(settings, "slideshow.interval_ms", base.slideshow.interval_ms, int),
    )
    manifest = ManifestConfig(
        images_dir=_text(settings, "manifest.images_dir", base.manifest.images_dir),
        manifest_path=_text(settings, "manifest.manifest_path", base.manifest.manifest_path),
        poll_interval_s=_number(settings, "manifest.poll_interval_s", base.manifest.poll_interval_s, float),
        debounce_s=_number(settings, "manifest.debounce_s", base.manifest.debounce_s, float),
    )
    viewer = ViewerConfig(
        resize_debounce_ms=_number(settings, "viewer.resize_debounce_ms", base.viewer.resize_debounce_ms, int),
        manifest_poll_ms=_number(settings, "viewer.manifest_poll_ms", base.viewer.manifest_poll_ms, int),
        relayout_batch=_number(settings, "viewer.relayout_batch", base.viewer.relayout_batch, int),
    )
    return AppConfig(layout=layout, slideshow=slideshow, manifest=manifest, viewer=viewer)
