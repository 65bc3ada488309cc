"""Viewer application: windows, key bindings and per-window presenters."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from indexed_view.api.bitmap import IndexedImage
from indexed_view.api.window import (
    KeyInputEvent,
    WindowCloseEvent,
    WindowEvent,
    WindowPort,
    WindowRedrawEvent,
    WindowResizeEvent,
)
from indexed_view.rendering.device import GpuHandles, request_gpu
from indexed_view.rendering.frame_stats import FrameStats
from indexed_view.rendering.palette import cycling_palette
from indexed_view.rendering.presenter import FrameOutcome, IndexedPresenter, PresenterConfig
from indexed_view.rendering.surface import CanvasSurface
from indexed_view.runtime.commands import (
    ACTION_CLOSE_WINDOW,
    ACTION_NEW_WINDOW,
    ACTION_TOGGLE_FULLSCREEN,
    CommandQueue,
    CreateWindowCommand,
    KeyBindings,
    default_key_bindings,
)
from indexed_view.runtime.config import RenderConfig, ViewerConfig
from indexed_view.runtime.errors import GpuInitError, RenderFailure
from indexed_view.window.factory import create_window_layer

WindowFactory = Callable[[int, int, str], WindowPort]
PresenterFactory = Callable[[WindowPort, IndexedImage], IndexedPresenter]


@dataclass(slots=True)
class AppContext:
    """Per-application state shared by all windows."""

    window_counter: int = 0

    def next_window_title(self, prefix: str = "Window") -> str:
        self.window_counter += 1
        return f"{prefix} {self.window_counter}"


@dataclass(slots=True)
class _OpenWindow:
    window: WindowPort
    presenter: IndexedPresenter
    title: str


@dataclass(slots=True)
class GpuPresenterFactory:
    """Builds canvas-backed presenters sharing one lazily-acquired GPU device."""

    render: RenderConfig
    _gpu: GpuHandles | None = field(default=None, repr=False)

    @property
    def gpu(self) -> GpuHandles:
        if self._gpu is None:
            self._gpu = request_gpu(self.render.wgpu_backends)
        return self._gpu

    def __call__(self, window: WindowPort, image: IndexedImage) -> IndexedPresenter:
        gpu = self.gpu
        handle = window.create_surface()
        get_context = getattr(handle.provider, "get_context", None)
        if not callable(get_context):
            raise GpuInitError(
                "window provider does not expose a wgpu canvas context",
                details={"surface_id": handle.surface_id, "backend": handle.backend},
            )
        surface = CanvasSurface(get_context("wgpu"), adapter=gpu.adapter)
        return IndexedPresenter(
            gpu.device,
            surface,
            image.bitmap,
            palette=image.palette,
            config=PresenterConfig(
                present_mode=self.render.present_mode,
                min_zoom=self.render.min_zoom,
                row_alignment=self.render.row_alignment,
                clear_color=self.render.clear_color,
            ),
            stats=FrameStats(threshold=self.render.stats_window),
        )


class ViewerApp:
    """Owns every open window and routes its events to its presenter."""

    def __init__(
        self,
        image: IndexedImage,
        config: ViewerConfig,
        *,
        window_factory: WindowFactory | None = None,
        presenter_factory: PresenterFactory | None = None,
        context: AppContext | None = None,
        key_bindings: KeyBindings | None = None,
    ) -> None:
        self._image = image
        self._config = config
        self._window_factory = window_factory or self._default_window_factory
        self._presenter_factory = presenter_factory or GpuPresenterFactory(config.render)
        self._context = context or AppContext()
        self._bindings = key_bindings or default_key_bindings()
        self._commands = CommandQueue()
        self._windows: dict[str, _OpenWindow] = {}
        self._loop_owner: WindowPort | None = None
        self._running = False

    @property
    def context(self) -> AppContext:
        return self._context

    @property
    def commands(self) -> CommandQueue:
        return self._commands

    @property
    def window_ids(self) -> tuple[str, ...]:
        return tuple(self._windows)

    @property
    def running(self) -> bool:
        return self._running

    def presenter(self, window_id: str) -> IndexedPresenter | None:
        entry = self._windows.get(window_id)
        return None if entry is None else entry.presenter

    def window(self, window_id: str) -> WindowPort | None:
        entry = self._windows.get(window_id)
        return None if entry is None else entry.window

    def initial_size(self) -> tuple[int, int]:
        scale = max(1, int(self._config.window.initial_scale))
        bitmap = self._image.bitmap
        return (bitmap.width * scale, bitmap.height * scale)

    def open_window(self, title: str | None = None) -> str:
        """Create a window plus its presenter and configure it at the initial size."""
        resolved_title = title or self._config.window.title
        width, height = self.initial_size()
        window = self._window_factory(width, height, resolved_title)
        try:
            presenter = self._presenter_factory(window, self._image)
            physical_width, physical_height = window.physical_size()
            if physical_width <= 0 or physical_height <= 0:
                physical_width, physical_height = width, height
            presenter.configure(physical_width, physical_height)
        except Exception:
            window.close()
            raise
        window_id = window.window_id
        self._windows[window_id] = _OpenWindow(window=window, presenter=presenter, title=resolved_title)
        if self._loop_owner is None:
            self._loop_owner = window
        window.set_event_listener(lambda event, wid=window_id: self.handle_event(wid, event))
        window.set_draw_handler(lambda wid=window_id: self.tick(wid))
        _LOG.info("window_opened id=%s title=%s size=%sx%s", window_id, resolved_title, width, height)
        return window_id

    def handle_event(self, window_id: str, event: WindowEvent) -> None:
        """Dispatch one event, then apply deferred commands."""
        self._dispatch(window_id, event)
        self._apply_commands()

    def tick(self, window_id: str) -> None:
        """Per-frame draw callback for one window."""
        entry = self._windows.get(window_id)
        if entry is None:
            return
        for event in entry.window.poll_events():
            self._dispatch(window_id, event)
        self._dispatch(window_id, WindowRedrawEvent())
        self._apply_commands()
        entry = self._windows.get(window_id)
        if entry is not None:
            entry.window.request_draw()

    def close_window(self, window_id: str) -> None:
        entry = self._windows.pop(window_id, None)
        if entry is None:
            return
        entry.presenter.close()
        entry.window.close()
        _LOG.info("window_closed id=%s remaining=%s", window_id, len(self._windows))
        if not self._windows:
            self.stop()

    def run(self) -> None:
        """Open the first window and enter the backend event loop."""
        if not self._windows:
            self.open_window()
        owner = self._loop_owner
        if owner is None:
            return
        self._running = True
        try:
            owner.run_loop()
        finally:
            self._running = False

    def stop(self) -> None:
        owner = self._loop_owner
        self._running = False
        if owner is not None:
            owner.stop_loop()

    def _dispatch(self, window_id: str, event: WindowEvent) -> None:
        entry = self._windows.get(window_id)
        if entry is None:
            return
        if isinstance(event, WindowRedrawEvent):
            self._render(window_id, entry)
            return
        if isinstance(event, WindowResizeEvent):
            entry.presenter.resize(event.width, event.height)
            return
        if isinstance(event, WindowCloseEvent):
            self.close_window(window_id)
            return
        if isinstance(event, KeyInputEvent):
            self._on_key_input(window_id, entry, event)
            return
        _LOG.debug("window_event_ignored id=%s event=%r", window_id, event)

    def _on_key_input(self, window_id: str, entry: _OpenWindow, event: KeyInputEvent) -> None:
        action = self._bindings.resolve(event.code, pressed=event.pressed)
        if action is None:
            return
        if action == ACTION_CLOSE_WINDOW:
            self.close_window(window_id)
        elif action == ACTION_TOGGLE_FULLSCREEN:
            entry.window.toggle_fullscreen()
        elif action == ACTION_NEW_WINDOW:
            self._commands.add(CreateWindowCommand(title=self._context.next_window_title()))

    def _render(self, window_id: str, entry: _OpenWindow) -> None:
        render = self._config.render
        presenter = entry.presenter
        if render.palette_cycle:
            frames = max(1, int(render.palette_cycle_frames))
            presenter.set_palette(cycling_palette((presenter.frame_index % frames) / frames))
        try:
            outcome = presenter.render()
        except RenderFailure:
            _LOG.exception("window_render_failed id=%s", window_id)
            self.close_window(window_id)
            return
        if outcome is FrameOutcome.CLOSED:
            self.close_window(window_id)

    def _apply_commands(self) -> None:
        for command in self._commands.drain():
            if isinstance(command, CreateWindowCommand):
                try:
                    self.open_window(command.title)
                except GpuInitError:
                    _LOG.exception("window_open_failed title=%s", command.title)

    def _default_window_factory(self, width: int, height: int, title: str) -> WindowPort:
        return create_window_layer(self._config.window, width=width, height=height, title=title)


_LOG = logging.getLogger("indexed_view.runtime.app")

__all__ = ["AppContext", "GpuPresenterFactory", "PresenterFactory", "ViewerApp", "WindowFactory"]
