from __future__ import annotations

import numpy as np
import pytest

from indexed_view.rendering.geometry import QUAD_INDICES, Quad, compute_quad, compute_zoom


def test_exact_double_fill() -> None:
    quad = compute_quad(320, 240, 640, 480)

    assert quad.zoom == 2
    assert quad.half_extent == (1.0, 1.0)
    assert (quad.scaled_width, quad.scaled_height) == (640, 480)


def test_horizontal_letterbox() -> None:
    quad = compute_quad(320, 240, 800, 480)

    assert quad.zoom == 2
    hx, hy = quad.half_extent
    assert hx == 0.8
    assert hy == 1.0


def test_corners_and_uvs_follow_fixed_layout() -> None:
    quad = compute_quad(100, 50, 300, 300)
    hx, hy = quad.half_extent

    assert [v.position for v in quad.vertices] == [(-hx, -hy), (hx, -hy), (hx, hy), (-hx, hy)]
    assert [v.uv for v in quad.vertices] == [(0.0, 1.0), (1.0, 1.0), (1.0, 0.0), (0.0, 0.0)]
    assert QUAD_INDICES == (0, 1, 2, 2, 3, 0)


def test_window_smaller_than_bitmap_gives_degenerate_quad() -> None:
    quad = compute_quad(320, 240, 200, 200)

    assert quad.zoom == 0
    assert quad.is_degenerate
    assert all(abs(coord) == 0.0 for v in quad.vertices for coord in v.position)


def test_min_zoom_floor_keeps_image_visible() -> None:
    quad = compute_quad(320, 240, 200, 200, min_zoom=1)

    assert quad.zoom == 1
    assert quad.half_extent == (1.6, 1.2)


def test_zero_window_dimension_is_degenerate_without_division() -> None:
    quad = compute_quad(320, 240, 0, 480)

    assert quad.zoom == 0
    assert quad.is_degenerate


def test_rejects_non_positive_bitmap() -> None:
    with pytest.raises(ValueError):
        compute_quad(0, 10, 100, 100)
    with pytest.raises(ValueError):
        compute_zoom(10, -1, 100, 100)


def test_zoom_bounds_hold_across_sizes() -> None:
    for bw, bh in ((1, 1), (7, 3), (320, 240), (256, 256)):
        for ww, wh in ((1, 1), (640, 480), (1920, 1080), (333, 2000), (bw, bh)):
            quad = compute_quad(bw, bh, ww, wh)
            hx, hy = quad.half_extent
            assert quad.zoom >= 0
            assert 0.0 <= hx <= 1.0
            assert 0.0 <= hy <= 1.0


def test_geometry_is_idempotent() -> None:
    assert compute_quad(160, 144, 1024, 768) == compute_quad(160, 144, 1024, 768)


def test_vertex_and_index_packing() -> None:
    quad = compute_quad(320, 240, 800, 480)

    floats = np.frombuffer(quad.vertex_bytes(), dtype=np.float32)
    indices = np.frombuffer(Quad.index_bytes(), dtype=np.uint16)

    assert floats.size == 16
    assert floats[:4].tolist() == pytest.approx([-0.8, -1.0, 0.0, 1.0])
    assert tuple(indices[:6].tolist()) == QUAD_INDICES
    assert len(Quad.index_bytes()) % 4 == 0
