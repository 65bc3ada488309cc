"""Window and window-event contracts."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from indexed_view.api.surface import SurfaceHandle


@dataclass(frozen=True, slots=True)
class WindowResizeEvent:
    """Resize in physical pixels; either dimension may be zero (minimized)."""

    width: int
    height: int
    dpi_scale: float = 1.0


@dataclass(frozen=True, slots=True)
class WindowCloseEvent:
    """Normalized close-request event."""

    requested: bool = True


@dataclass(frozen=True, slots=True)
class WindowRedrawEvent:
    """Redraw tick for one window."""


@dataclass(frozen=True, slots=True)
class KeyInputEvent:
    """Physical key transition."""

    code: str
    pressed: bool


@dataclass(frozen=True, slots=True)
class WindowFocusEvent:
    focused: bool


@dataclass(frozen=True, slots=True)
class ModifiersChangedEvent:
    modifiers: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class MouseWheelEvent:
    dx: float
    dy: float


@dataclass(frozen=True, slots=True)
class MouseButtonEvent:
    button: int
    pressed: bool


WindowEvent = (
    WindowResizeEvent
    | WindowCloseEvent
    | WindowRedrawEvent
    | KeyInputEvent
    | WindowFocusEvent
    | ModifiersChangedEvent
    | MouseWheelEvent
    | MouseButtonEvent
)

WindowEventListener = Callable[[WindowEvent], None]


class WindowPort(Protocol):
    """Viewer-facing window/event-loop ownership contract."""

    @property
    def window_id(self) -> str:
        """Stable identifier used to route events."""

    def create_surface(self) -> SurfaceHandle:
        """Create a surface handle used by the presenter."""

    def physical_size(self) -> tuple[int, int]:
        """Current drawable size in physical pixels."""

    def poll_events(self) -> tuple[WindowEvent, ...]:
        """Drain queued normalized events."""

    def set_event_listener(self, listener: WindowEventListener | None) -> None:
        """Deliver events immediately instead of queueing them."""

    def set_draw_handler(self, handler: Callable[[], None]) -> None:
        """Register the per-frame draw callback."""

    def request_draw(self) -> None:
        """Schedule another draw callback."""

    def set_title(self, title: str) -> None:
        """Set OS window title."""

    def toggle_fullscreen(self) -> bool:
        """Switch between fullscreen and windowed; returns the new fullscreen state."""

    def run_loop(self) -> None:
        """Run the OS/backend event loop."""

    def stop_loop(self) -> None:
        """Stop the OS/backend event loop when supported."""

    def close(self) -> None:
        """Close window and release backend resources."""


__all__ = [
    "KeyInputEvent",
    "ModifiersChangedEvent",
    "MouseButtonEvent",
    "MouseWheelEvent",
    "WindowCloseEvent",
    "WindowEvent",
    "WindowEventListener",
    "WindowFocusEvent",
    "WindowPort",
    "WindowRedrawEvent",
    "WindowResizeEvent",
]
