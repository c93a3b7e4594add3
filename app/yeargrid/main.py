from __future__ import annotations

import argparse
import time
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

from app.yeargrid.config import AppConfig, load_config
from app.yeargrid.errors import YearGridError
from app.yeargrid.layout.columns import LayoutParameters
from app.yeargrid.layout.masonry import GridLayout, pack_grid
from app.yeargrid.manifest.scanner import generate_manifest
from app.yeargrid.manifest.store import ManifestStore
from app.yeargrid.manifest.watcher import ManifestWatcher
from app.yeargrid.media.aspect import AspectRatioSource
from app.yeargrid.slideshow import SlideshowSession, year_label
from app.yeargrid.utils.logging import init_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="yeargrid", description="Year photo grid manifest and layout tools")
    parser.add_argument("--config", help="JSON config file with overrides")
    parser.add_argument("--log-dir", help="Also write rotating logs to this directory")
    parser.add_argument("--verbose", action="store_true", help="Log debug output")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Write manifest.json from the images directory")
    gen.add_argument("--images-dir")
    gen.add_argument("--manifest")

    watch = sub.add_parser("watch", help="Regenerate manifest.json whenever images change")
    watch.add_argument("--images-dir")
    watch.add_argument("--manifest")
    watch.add_argument("--poll", type=float, help="Seconds between directory scans")
    watch.add_argument("--debounce", type=float, help="Seconds the directory must stay unchanged")

    layout = sub.add_parser("layout", help="Print the grid layout chosen for one group")
    layout.add_argument("--manifest")
    layout.add_argument("--images-dir", help="Read real aspect ratios from the image files")
    layout.add_argument("--group", help="Group id (defaults to the first group)")
    layout.add_argument("--width", type=float, required=True)
    layout.add_argument("--height", type=float, required=True)
    layout.add_argument("--gutter", type=float)
    layout.add_argument("--min-columns", type=int)
    layout.add_argument("--max-columns", type=int)
    return parser


def _layout_params(args: argparse.Namespace, config: AppConfig) -> LayoutParameters:
    base = config.layout
    return LayoutParameters(
        gutter_px=base.gutter_px if args.gutter is None else args.gutter,
        min_columns=base.min_columns if args.min_columns is None else args.min_columns,
        max_columns=base.max_columns if args.max_columns is None else args.max_columns,
    )


def describe_layout(layout: GridLayout) -> str:
    if layout.is_empty:
        return "No layout (empty group or container without area)"
    tile = layout.placements[0].width
    return (
        f"columns={layout.columns} scale={layout.scale:.4f} safety={layout.safety_scale:.4f} "
        f"tile={tile:.2f}px max_column_height={layout.max_column_height:.2f}px items={len(layout.placements)}"
    )


def run_generate(args: argparse.Namespace, config: AppConfig) -> int:
    generate_manifest(
        args.images_dir or config.manifest.images_dir,
        args.manifest or config.manifest.manifest_path,
    )
    return 0


def run_watch(args: argparse.Namespace, config: AppConfig) -> int:
    watcher = ManifestWatcher(
        args.images_dir or config.manifest.images_dir,
        args.manifest or config.manifest.manifest_path,
        poll_interval=config.manifest.poll_interval_s if args.poll is None else args.poll,
        debounce=config.manifest.debounce_s if args.debounce is None else args.debounce,
    )
    watcher.start()
    logger.info("Press Ctrl+C to stop.")
    try:
        while watcher.running:
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()
    return 0


def run_layout(args: argparse.Namespace, config: AppConfig) -> int:
    try:
        params = _layout_params(args, config)
    except ValueError as e:
        logger.error("Invalid layout parameters: {}", e)
        return 2

    store = ManifestStore(args.manifest or config.manifest.manifest_path)
    session = SlideshowSession()
    group = session.load(store.load(), args.group)
    if args.group is not None and group != args.group:
        logger.warning("Year {} not in manifest, showing {}", args.group, group)

    if args.images_dir:
        ratios = AspectRatioSource(args.images_dir).ratios(group, session.images)
    else:
        ratios = [None] * len(session.images)

    layout = pack_grid(args.width, args.height, ratios, params)
    print(year_label(group))
    print(describe_layout(layout))
    return 0


COMMANDS = {
    "generate": run_generate,
    "watch": run_watch,
    "layout": run_layout,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    init_logging(args.log_dir, level="DEBUG" if args.verbose else "INFO")

    try:
        config = load_config(Path(args.config) if args.config else None)
        return COMMANDS[args.command](args, config)
    except YearGridError as e:
        logger.error("{}", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
