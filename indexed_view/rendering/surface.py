"""Canvas-context surface adapter and acquire-error classification."""

from __future__ import annotations

import logging
from enum import Enum

from indexed_view.api.surface import SurfaceConfig
from indexed_view.rendering.usage import texture_usage
from indexed_view.runtime.errors import RECOVERABLE_RUNTIME_ERRORS, log_recoverable

FALLBACK_SURFACE_FORMAT = "bgra8unorm"


class SurfaceStatus(Enum):
    OK = "ok"
    LOST = "lost"
    OUTDATED = "outdated"
    TIMEOUT = "timeout"
    OUT_OF_MEMORY = "out_of_memory"
    DEVICE_LOST = "device_lost"
    UNKNOWN = "unknown"

    @property
    def recoverable(self) -> bool:
        return self in {SurfaceStatus.LOST, SurfaceStatus.OUTDATED, SurfaceStatus.TIMEOUT}


class SurfaceAcquireError(RuntimeError):
    """Raised by surfaces that know the acquire status up front."""

    def __init__(self, status: SurfaceStatus, message: str = "") -> None:
        super().__init__(message or f"surface acquire failed: {status.value}")
        self.status = status


# Checked in order; "device lost" must win over plain "lost".
_STATUS_MARKERS: tuple[tuple[SurfaceStatus, tuple[str, ...]], ...] = (
    (SurfaceStatus.OUT_OF_MEMORY, ("outofmemory", "out_of_memory", "out of memory")),
    (SurfaceStatus.DEVICE_LOST, ("devicelost", "device_lost", "device lost")),
    (SurfaceStatus.OUTDATED, ("outdated",)),
    (SurfaceStatus.TIMEOUT, ("timeout", "timed out")),
    (SurfaceStatus.LOST, ("lost",)),
)


def classify_surface_error(exc: BaseException) -> SurfaceStatus:
    """Map an acquire exception onto a ``SurfaceStatus``."""
    status = getattr(exc, "status", None)
    if isinstance(status, SurfaceStatus):
        return status
    if isinstance(exc, MemoryError):
        return SurfaceStatus.OUT_OF_MEMORY
    text = f"{exc.__class__.__name__} {exc}".lower()
    for candidate, markers in _STATUS_MARKERS:
        if any(marker in text for marker in markers):
            return candidate
    return SurfaceStatus.UNKNOWN


class CanvasSurface:
    """Presentable surface backed by a rendercanvas ``wgpu`` context."""

    def __init__(
        self,
        context: object,
        *,
        adapter: object | None = None,
        manual_present: bool = False,
    ) -> None:
        self._context = context
        self._adapter = adapter
        self._manual_present = bool(manual_present)
        self._format: str | None = None
        self._config: SurfaceConfig | None = None

    @property
    def format(self) -> str:
        if self._format is None:
            self._format = self.preferred_format()
        return self._format

    @property
    def config(self) -> SurfaceConfig | None:
        return self._config

    def preferred_format(self) -> str:
        get_preferred_format = getattr(self._context, "get_preferred_format", None)
        if not callable(get_preferred_format):
            return FALLBACK_SURFACE_FORMAT
        try:
            value = get_preferred_format(self._adapter)
        except RECOVERABLE_RUNTIME_ERRORS:
            log_recoverable(_LOG, "surface preferred format query failed")
            return FALLBACK_SURFACE_FORMAT
        return str(value) if value else FALLBACK_SURFACE_FORMAT

    def configure(self, device: object, config: SurfaceConfig) -> None:
        configure = getattr(self._context, "configure")
        try:
            configure(
                device=device,
                format=config.format,
                usage=texture_usage("RENDER_ATTACHMENT"),
                alpha_mode="opaque",
                present_mode=config.present_mode,
            )
        except TypeError:
            # Older context signatures do not accept present_mode.
            configure(
                device=device,
                format=config.format,
                usage=texture_usage("RENDER_ATTACHMENT"),
                alpha_mode="opaque",
            )
        self._format = config.format
        self._config = config

    def acquire(self) -> object:
        return self._context.get_current_texture()  # type: ignore[attr-defined]

    def present(self) -> None:
        if not self._manual_present:
            return
        present = getattr(self._context, "present", None)
        if callable(present):
            present()

    def release(self) -> None:
        unconfigure = getattr(self._context, "unconfigure", None)
        if callable(unconfigure):
            try:
                unconfigure()
            except RECOVERABLE_RUNTIME_ERRORS:
                log_recoverable(_LOG, "surface unconfigure failed")
        self._config = None


_LOG = logging.getLogger("indexed_view.rendering.surface")

__all__ = [
    "CanvasSurface",
    "FALLBACK_SURFACE_FORMAT",
    "SurfaceAcquireError",
    "SurfaceStatus",
    "classify_surface_error",
]
