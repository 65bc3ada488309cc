"""Command-line entrypoint for the indexed bitmap viewer."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from indexed_view.api.bitmap import IndexedImage
from indexed_view.assets.loader import DEFAULT_DEMO_SIZE, demo_image, load_indexed_image
from indexed_view.runtime.app import ViewerApp
from indexed_view.runtime.config import ViewerConfig, load_viewer_config, parse_resolution
from indexed_view.runtime.errors import BitmapFormatError, GpuInitError
from indexed_view.runtime.logging import configure_logging, shutdown_logging

EXIT_OK = 0
EXIT_STARTUP_FAILURE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="indexed-view",
        description="Present an indexed-color bitmap with integer-zoom letterboxing.",
    )
    parser.add_argument("image", nargs="?", type=Path, default=None, help="Image file to index and show.")
    parser.add_argument("--scale", type=int, default=None, help="Initial window scale factor.")
    parser.add_argument("--min-zoom", type=int, default=None, help="Lower bound for the integer zoom.")
    parser.add_argument("--cycle", action="store_true", help="Animate a cycling palette.")
    parser.add_argument("--log-level", default=None, help="Root log level (DEBUG, INFO, ...).")
    parser.add_argument(
        "--demo-size",
        default=None,
        help="Size of the generated demo bitmap as WxH (used when no image is given).",
    )
    return parser


def apply_overrides(config: ViewerConfig, args: argparse.Namespace) -> ViewerConfig:
    """Overlay CLI flags on the env-derived configuration."""
    render = config.render
    window = config.window
    logging_config = config.logging
    if args.min_zoom is not None:
        render = replace(render, min_zoom=max(0, int(args.min_zoom)))
    if args.cycle:
        render = replace(render, palette_cycle=True)
    if args.scale is not None:
        window = replace(window, initial_scale=max(1, int(args.scale)))
    if args.log_level:
        logging_config = replace(logging_config, level_name=str(args.log_level).strip().upper())
    return replace(config, logging=logging_config, render=render, window=window)


def load_image(args: argparse.Namespace) -> IndexedImage:
    if args.image is not None:
        return load_indexed_image(args.image)
    if args.demo_size is None:
        return demo_image(*DEFAULT_DEMO_SIZE)
    size = parse_resolution(args.demo_size)
    if size is None:
        raise BitmapFormatError(f"invalid --demo-size {args.demo_size!r}; expected WxH")
    return demo_image(*size)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = apply_overrides(load_viewer_config(), args)
    configure_logging(config.logging)
    try:
        try:
            image = load_image(args)
        except (BitmapFormatError, FileNotFoundError) as exc:
            _LOG.error("startup_failed reason=image error=%s", exc)
            return EXIT_STARTUP_FAILURE
        app = ViewerApp(image, config)
        try:
            app.run()
        except GpuInitError as exc:
            _LOG.error("startup_failed reason=gpu error=%s details=%s", exc, exc.details)
            return EXIT_STARTUP_FAILURE
        return EXIT_OK
    finally:
        shutdown_logging()


_LOG = logging.getLogger("indexed_view.runtime.cli")

__all__ = ["EXIT_OK", "EXIT_STARTUP_FAILURE", "apply_overrides", "build_parser", "main"]
