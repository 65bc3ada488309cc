"""Integer-zoom letterbox quad math."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

QUAD_INDICES: tuple[int, ...] = (0, 1, 2, 2, 3, 0)
VERTEX_STRIDE = 16  # position float32x2 + uv float32x2


@dataclass(frozen=True, slots=True)
class Vertex:
    position: tuple[float, float]
    uv: tuple[float, float]


@dataclass(frozen=True, slots=True)
class Quad:
    """Centered quad in normalized device coordinates."""

    vertices: tuple[Vertex, Vertex, Vertex, Vertex]
    zoom: int
    scaled_width: int
    scaled_height: int

    @property
    def half_extent(self) -> tuple[float, float]:
        x, y = self.vertices[2].position
        return (x, y)

    @property
    def is_degenerate(self) -> bool:
        hx, hy = self.half_extent
        return hx == 0.0 or hy == 0.0

    def vertex_bytes(self) -> bytes:
        packed = [
            (v.position[0], v.position[1], v.uv[0], v.uv[1])
            for v in self.vertices
        ]
        return np.asarray(packed, dtype=np.float32).tobytes()

    @staticmethod
    def index_bytes() -> bytes:
        # Padded to a 4-byte multiple for buffer mapping.
        return np.asarray(QUAD_INDICES + (0, 0), dtype=np.uint16).tobytes()


def compute_zoom(
    bitmap_width: int,
    bitmap_height: int,
    window_width: int,
    window_height: int,
    *,
    min_zoom: int = 0,
) -> int:
    """Largest integer zoom at which the bitmap fits the window."""
    _require_bitmap_size(bitmap_width, bitmap_height)
    if window_width <= 0 or window_height <= 0:
        return 0
    width_ratio = float(window_width) / float(bitmap_width)
    height_ratio = float(window_height) / float(bitmap_height)
    zoom = int(math.floor(min(width_ratio, height_ratio)))
    return max(zoom, int(min_zoom), 0)


def compute_quad(
    bitmap_width: int,
    bitmap_height: int,
    window_width: int,
    window_height: int,
    *,
    min_zoom: int = 0,
) -> Quad:
    """Build the letterboxed quad for the current window size."""
    _require_bitmap_size(bitmap_width, bitmap_height)
    if window_width <= 0 or window_height <= 0:
        return _quad(0.0, 0.0, zoom=0, scaled_width=0, scaled_height=0)
    zoom = compute_zoom(
        bitmap_width,
        bitmap_height,
        window_width,
        window_height,
        min_zoom=min_zoom,
    )
    scaled_width = int(bitmap_width) * zoom
    scaled_height = int(bitmap_height) * zoom
    hx = float(scaled_width) / float(window_width)
    hy = float(scaled_height) / float(window_height)
    return _quad(hx, hy, zoom=zoom, scaled_width=scaled_width, scaled_height=scaled_height)


def _quad(hx: float, hy: float, *, zoom: int, scaled_width: int, scaled_height: int) -> Quad:
    return Quad(
        vertices=(
            Vertex(position=(-hx, -hy), uv=(0.0, 1.0)),
            Vertex(position=(hx, -hy), uv=(1.0, 1.0)),
            Vertex(position=(hx, hy), uv=(1.0, 0.0)),
            Vertex(position=(-hx, hy), uv=(0.0, 0.0)),
        ),
        zoom=zoom,
        scaled_width=scaled_width,
        scaled_height=scaled_height,
    )


def _require_bitmap_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"bitmap dimensions must be positive (got {width}x{height})")


__all__ = ["QUAD_INDICES", "Quad", "VERTEX_STRIDE", "Vertex", "compute_quad", "compute_zoom"]
