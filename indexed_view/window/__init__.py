"""Window subsystem adapters."""

from indexed_view.window.factory import create_window_layer
from indexed_view.window.rendercanvas_glfw import RenderCanvasWindow, create_rendercanvas_window

__all__ = ["RenderCanvasWindow", "create_rendercanvas_window", "create_window_layer"]
