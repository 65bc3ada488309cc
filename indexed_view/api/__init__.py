"""Public viewer API contracts."""

from indexed_view.api.bitmap import RGBA, IndexedBitmap, IndexedImage
from indexed_view.api.surface import PresentationSurface, SurfaceConfig, SurfaceHandle
from indexed_view.api.window import (
    KeyInputEvent,
    ModifiersChangedEvent,
    MouseButtonEvent,
    MouseWheelEvent,
    WindowCloseEvent,
    WindowEvent,
    WindowEventListener,
    WindowFocusEvent,
    WindowPort,
    WindowRedrawEvent,
    WindowResizeEvent,
)

__all__ = [
    "IndexedBitmap",
    "IndexedImage",
    "KeyInputEvent",
    "ModifiersChangedEvent",
    "MouseButtonEvent",
    "MouseWheelEvent",
    "PresentationSurface",
    "RGBA",
    "SurfaceConfig",
    "SurfaceHandle",
    "WindowCloseEvent",
    "WindowEvent",
    "WindowEventListener",
    "WindowFocusEvent",
    "WindowPort",
    "WindowRedrawEvent",
    "WindowResizeEvent",
]
