"""Decode images into indexed bitmaps with a first-seen-order palette."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from indexed_view.api.bitmap import IndexedBitmap, IndexedImage
from indexed_view.rendering.palette import PALETTE_SIZE, default_palette, pad_palette
from indexed_view.runtime.errors import BitmapFormatError

DEFAULT_DEMO_SIZE = (320, 240)


def index_rgba_pixels(rgba: np.ndarray) -> tuple[bytes, tuple[tuple[int, int, int, int], ...]]:
    """Map an ``(h, w, 4)`` uint8 array to palette indices in first-seen order."""
    if rgba.ndim != 3 or rgba.shape[2] != 4:
        raise BitmapFormatError(f"expected an RGBA pixel array, got shape {rgba.shape}")
    flat = np.ascontiguousarray(rgba, dtype=np.uint8).reshape(-1, 4)
    if flat.shape[0] == 0:
        raise BitmapFormatError("image has no pixels")
    packed = flat.view(np.uint32).reshape(-1)
    unique, first_seen, inverse = np.unique(packed, return_index=True, return_inverse=True)
    if unique.size > PALETTE_SIZE:
        raise BitmapFormatError(
            f"image uses {unique.size} distinct colors; at most {PALETTE_SIZE} are supported"
        )
    order = np.argsort(first_seen, kind="stable")
    rank = np.empty_like(order)
    rank[order] = np.arange(order.size)
    indices = rank[inverse.reshape(-1)].astype(np.uint8)
    colors = flat[first_seen[order]]
    palette = tuple(
        (int(r), int(g), int(b), int(a))
        for r, g, b, a in colors.tolist()
    )
    return indices.tobytes(), palette


def load_indexed_image(path: str | Path) -> IndexedImage:
    """Load ``path`` with Pillow and index its RGBA colors."""
    source = Path(path)
    try:
        with Image.open(source) as image:
            rgba = np.asarray(image.convert("RGBA"), dtype=np.uint8)
    except FileNotFoundError:
        raise
    except (UnidentifiedImageError, OSError) as exc:
        raise BitmapFormatError(f"cannot decode image {source}: {exc}") from exc
    height, width = int(rgba.shape[0]), int(rgba.shape[1])
    if width <= 0 or height <= 0:
        raise BitmapFormatError(f"image {source} has zero size ({width}x{height})")
    pixels, colors = index_rgba_pixels(rgba)
    bitmap = IndexedBitmap(width=width, height=height, pixels=pixels)
    _LOG.info(
        "image_loaded path=%s size=%sx%s colors=%s",
        source,
        width,
        height,
        len(colors),
    )
    return IndexedImage(
        bitmap=bitmap,
        palette=pad_palette(colors),
        source=str(source),
        color_count=len(colors),
    )


def demo_image(width: int = DEFAULT_DEMO_SIZE[0], height: int = DEFAULT_DEMO_SIZE[1]) -> IndexedImage:
    """Procedural XOR pattern over the default palette ramp."""
    if width <= 0 or height <= 0:
        raise BitmapFormatError(f"demo image must have positive size (got {width}x{height})")
    ys, xs = np.indices((int(height), int(width)))
    pixels = ((xs ^ ys) & 0xFF).astype(np.uint8)
    return IndexedImage(
        bitmap=IndexedBitmap(width=int(width), height=int(height), pixels=pixels.tobytes()),
        palette=default_palette(),
        source="demo",
        color_count=PALETTE_SIZE,
    )


_LOG = logging.getLogger("indexed_view.assets")

__all__ = ["DEFAULT_DEMO_SIZE", "demo_image", "index_rgba_pixels", "load_indexed_image"]
