"""Pixel sources for the viewer."""

from indexed_view.assets.loader import demo_image, index_rgba_pixels, load_indexed_image

__all__ = ["demo_image", "index_rgba_pixels", "load_indexed_image"]
