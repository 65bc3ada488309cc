"""Window backend selection and factory helpers."""

from __future__ import annotations

from indexed_view.api.window import WindowPort
from indexed_view.runtime.config import WindowConfig
from indexed_view.window.rendercanvas_glfw import create_rendercanvas_window


def create_window_layer(
    config: WindowConfig,
    *,
    width: int,
    height: int,
    title: str,
) -> WindowPort:
    if config.backend == "rendercanvas_glfw":
        return create_rendercanvas_window(
            width=int(width),
            height=int(height),
            title=title,
            resizable=bool(config.resizable),
            max_fps=float(config.max_fps),
        )
    raise RuntimeError(f"Unsupported INDEXED_VIEW_WINDOW_BACKEND: {config.backend!r}")


__all__ = ["create_window_layer"]
