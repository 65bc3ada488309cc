"""Rendercanvas/GLFW-backed window implementation."""

from __future__ import annotations

import itertools
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from indexed_view.api.surface import SurfaceHandle
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
    WindowResizeEvent,
)
from indexed_view.runtime.errors import RECOVERABLE_RUNTIME_ERRORS, log_recoverable

_WINDOW_IDS = itertools.count(1)


def set_glfw_fullscreen(
    canvas: Any,
    enabled: bool,
    *,
    windowed_geometry: tuple[int, int, int, int] | None = None,
) -> tuple[int, int, int, int] | None:
    """Switch monitor attachment via GLFW; returns the geometry to restore later."""
    try:
        import rendercanvas.glfw as rc_glfw
    except ImportError:
        log_recoverable(_LOG, "glfw backend unavailable for fullscreen toggle")
        return windowed_geometry
    window = getattr(canvas, "_window", None)
    if window is None:
        return windowed_geometry
    glfw = rc_glfw.glfw
    if not enabled:
        x, y, w, h = windowed_geometry or (100, 100, 640, 480)
        try:
            glfw.set_window_monitor(window, None, int(x), int(y), int(w), int(h), 0)
        except RECOVERABLE_RUNTIME_ERRORS:
            log_recoverable(_LOG, "glfw windowed restore failed")
        return None
    monitor = glfw.get_primary_monitor()
    if not monitor:
        return windowed_geometry
    try:
        x, y = glfw.get_window_pos(window)
        w, h = glfw.get_window_size(window)
        geometry = (int(x), int(y), int(w), int(h))
    except RECOVERABLE_RUNTIME_ERRORS:
        log_recoverable(_LOG, "glfw window geometry query failed")
        geometry = windowed_geometry
    video_mode = glfw.get_video_mode(monitor)
    if video_mode is None:
        return geometry
    try:
        glfw.set_window_monitor(
            window,
            monitor,
            0,
            0,
            int(video_mode.size.width),
            int(video_mode.size.height),
            int(video_mode.refresh_rate),
        )
    except RECOVERABLE_RUNTIME_ERRORS:
        log_recoverable(_LOG, "glfw fullscreen switch failed")
    return geometry


def run_backend_loop(rc_auto: Any) -> None:
    """Run rendercanvas backend loop."""
    loop = getattr(rc_auto, "loop", None)
    if loop is not None and hasattr(loop, "run"):
        loop.run()
        return
    run_func = getattr(rc_auto, "run", None)
    if callable(run_func):
        run_func()
        return
    raise RuntimeError("rendercanvas.auto did not expose a runnable loop.")


def stop_backend_loop(rc_auto: Any) -> None:
    """Stop rendercanvas backend loop when supported."""
    loop = getattr(rc_auto, "loop", None)
    if loop is not None and hasattr(loop, "stop"):
        loop.stop()


@dataclass(slots=True)
class RenderCanvasWindow(WindowPort):
    """Window adapter over an existing rendercanvas canvas."""

    canvas: Any
    backend: str = "rendercanvas.glfw"
    _window_id: str = field(default="", repr=False)
    _events: deque[WindowEvent] = field(default_factory=deque)
    _listener: WindowEventListener | None = field(default=None, repr=False)
    _rc_auto: Any | None = field(default=None, repr=False)
    _fullscreen: bool = field(default=False, repr=False)
    _windowed_geometry: tuple[int, int, int, int] | None = field(default=None, repr=False)
    _closed: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        if not self._window_id:
            self._window_id = f"window-{next(_WINDOW_IDS)}"
        if self._rc_auto is None:
            try:
                import rendercanvas.auto as rc_auto
            except ImportError:
                log_recoverable(_LOG, "rendercanvas.auto unavailable; loop control disabled")
                rc_auto = None
            self._rc_auto = rc_auto
        self._bind_window_events()

    @property
    def window_id(self) -> str:
        return self._window_id

    @property
    def fullscreen(self) -> bool:
        return self._fullscreen

    def create_surface(self) -> SurfaceHandle:
        return SurfaceHandle(surface_id=f"{id(self.canvas)}", backend=self.backend, provider=self.canvas)

    def physical_size(self) -> tuple[int, int]:
        getter = getattr(self.canvas, "get_physical_size", None)
        if not callable(getter):
            return (0, 0)
        width, height = getter()
        return (int(width), int(height))

    def poll_events(self) -> tuple[WindowEvent, ...]:
        drained = tuple(self._events)
        self._events.clear()
        return drained

    def set_event_listener(self, listener: WindowEventListener | None) -> None:
        self._listener = listener

    def set_draw_handler(self, handler: Callable[[], None]) -> None:
        self.canvas.request_draw(handler)

    def request_draw(self) -> None:
        if self._closed:
            return
        request_draw = getattr(self.canvas, "request_draw", None)
        if callable(request_draw):
            request_draw()

    def set_title(self, title: str) -> None:
        setter = getattr(self.canvas, "set_title", None)
        if callable(setter):
            setter(title)

    def toggle_fullscreen(self) -> bool:
        enabled = not self._fullscreen
        self._windowed_geometry = set_glfw_fullscreen(
            self.canvas,
            enabled,
            windowed_geometry=self._windowed_geometry,
        )
        self._fullscreen = enabled
        _LOG.info("window_fullscreen id=%s enabled=%s", self._window_id, enabled)
        return enabled

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        closer = getattr(self.canvas, "close", None)
        if callable(closer):
            closer()

    def run_loop(self) -> None:
        if self._rc_auto is None:
            return
        run_backend_loop(self._rc_auto)

    def stop_loop(self) -> None:
        if self._rc_auto is None:
            return
        stop_backend_loop(self._rc_auto)

    def _bind_window_events(self) -> None:
        add_handler = getattr(self.canvas, "add_event_handler", None)
        if not callable(add_handler):
            return
        self._try_add_event_handler(add_handler, self._on_resize, "resize")
        self._try_add_event_handler(add_handler, self._on_close, "close")
        self._try_add_event_handler(add_handler, self._on_focus, "focus")
        self._try_add_event_handler(add_handler, self._on_key_down, "key_down")
        self._try_add_event_handler(add_handler, self._on_key_up, "key_up")
        self._try_add_event_handler(add_handler, self._on_wheel, "wheel")
        self._try_add_event_handler(add_handler, self._on_pointer_down, "pointer_down")
        self._try_add_event_handler(add_handler, self._on_pointer_up, "pointer_up")

    def _emit(self, event: WindowEvent) -> None:
        if self._listener is not None:
            self._listener(event)
            return
        self._events.append(event)

    def _on_resize(self, event: object) -> None:
        width = _event_value(event, "width")
        height = _event_value(event, "height")
        if not isinstance(width, (int, float)) or not isinstance(height, (int, float)):
            size = _event_value(event, "size")
            if not (isinstance(size, (tuple, list)) and len(size) >= 2):
                return
            width, height = size[0], size[1]
        if not isinstance(width, (int, float)) or not isinstance(height, (int, float)):
            return
        ratio_raw = _event_value(event, "pixel_ratio", 1.0)
        dpi_scale = float(ratio_raw) if isinstance(ratio_raw, (int, float)) and ratio_raw > 0 else 1.0
        # Physical pixels, not clamped: zero sizes signal minimization.
        self._emit(
            WindowResizeEvent(
                width=max(0, int(float(width) * dpi_scale)),
                height=max(0, int(float(height) * dpi_scale)),
                dpi_scale=dpi_scale,
            )
        )

    def _on_close(self, event: object) -> None:
        _ = event
        self._emit(WindowCloseEvent())

    def _on_focus(self, event: object) -> None:
        focused = _event_value(event, "focused")
        if isinstance(focused, bool):
            self._emit(WindowFocusEvent(focused=focused))

    def _on_key_down(self, event: object) -> None:
        self._on_key(event, pressed=True)

    def _on_key_up(self, event: object) -> None:
        self._on_key(event, pressed=False)

    def _on_key(self, event: object, *, pressed: bool) -> None:
        modifiers = _event_value(event, "modifiers")
        if isinstance(modifiers, (tuple, list)):
            self._emit(ModifiersChangedEvent(modifiers=tuple(str(item) for item in modifiers)))
        key = _event_value(event, "key")
        if isinstance(key, str) and key:
            self._emit(KeyInputEvent(code=key, pressed=pressed))

    def _on_wheel(self, event: object) -> None:
        dx = _event_value(event, "dx", 0.0)
        dy = _event_value(event, "dy", 0.0)
        if isinstance(dx, (int, float)) and isinstance(dy, (int, float)):
            self._emit(MouseWheelEvent(dx=float(dx), dy=float(dy)))

    def _on_pointer_down(self, event: object) -> None:
        self._on_pointer(event, pressed=True)

    def _on_pointer_up(self, event: object) -> None:
        self._on_pointer(event, pressed=False)

    def _on_pointer(self, event: object, *, pressed: bool) -> None:
        button = _event_value(event, "button", 0)
        self._emit(MouseButtonEvent(button=int(button) if isinstance(button, int) else 0, pressed=pressed))

    def _try_add_event_handler(self, add_handler: Any, handler: Any, event_type: str) -> None:
        try:
            add_handler(handler, event_type)
        except RECOVERABLE_RUNTIME_ERRORS:
            log_recoverable(_LOG, f"window event binding failed type={event_type}")


def create_rendercanvas_window(
    canvas: Any | None = None,
    *,
    width: int = 640,
    height: int = 480,
    title: str = "Window",
    resizable: bool = True,
    max_fps: float = 60.0,
    vsync: bool = True,
) -> RenderCanvasWindow:
    """Create window adapter over an existing or newly created rendercanvas canvas."""
    if canvas is not None:
        return RenderCanvasWindow(canvas=canvas)
    try:
        import rendercanvas.auto as rc_auto
    except ImportError as exc:
        raise RuntimeError(
            "Render canvas backend unavailable. Install rendercanvas with the glfw backend."
        ) from exc
    canvas_cls = getattr(rc_auto, "RenderCanvas", None)
    if canvas_cls is None:
        raise RuntimeError("rendercanvas.auto did not expose RenderCanvas.")
    try:
        canvas = canvas_cls(
            size=(int(width), int(height)),
            title=title,
            update_mode="continuous",
            max_fps=float(max_fps),
            vsync=bool(vsync),
        )
    except TypeError:
        canvas = canvas_cls(size=(int(width), int(height)), title=title)
    if not resizable:
        _disable_resize(canvas)
    window = RenderCanvasWindow(canvas=canvas, _rc_auto=rc_auto)
    _LOG.info("window_created id=%s size=%sx%s title=%s", window.window_id, width, height, title)
    return window


def _disable_resize(canvas: Any) -> None:
    try:
        import rendercanvas.glfw as rc_glfw
    except ImportError:
        return
    window = getattr(canvas, "_window", None)
    if window is None:
        return
    glfw = rc_glfw.glfw
    try:
        glfw.set_window_attrib(window, glfw.RESIZABLE, glfw.FALSE)
    except RECOVERABLE_RUNTIME_ERRORS:
        log_recoverable(_LOG, "glfw resizable attribute update failed")


def _event_value(event: object, key: str, default: object | None = None) -> object | None:
    if isinstance(event, dict):
        return event.get(key, default)
    return getattr(event, key, default)


_LOG = logging.getLogger("indexed_view.window")

__all__ = [
    "RenderCanvasWindow",
    "create_rendercanvas_window",
    "run_backend_loop",
    "set_glfw_fullscreen",
    "stop_backend_loop",
]
