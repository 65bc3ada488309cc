"""Presentable surface contracts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class SurfaceHandle:
    """Opaque renderer-attachable surface handle."""

    surface_id: str
    backend: str
    provider: object | None = None


@dataclass(frozen=True, slots=True)
class SurfaceConfig:
    """Live surface configuration; mirrors the window's physical size."""

    format: str
    width: int
    height: int
    present_mode: str = "fifo"

    def __post_init__(self) -> None:
        if int(self.width) <= 0 or int(self.height) <= 0:
            raise ValueError(
                f"surface configuration requires positive size (got {self.width}x{self.height})"
            )


class PresentationSurface(Protocol):
    """Surface operations the presenter depends on."""

    @property
    def format(self) -> str:
        """Texture format of the presentable images."""

    def configure(self, device: object, config: SurfaceConfig) -> None:
        """Apply (or re-apply) the surface configuration."""

    def acquire(self) -> object:
        """Return the next presentable texture; raises when unavailable."""

    def present(self) -> None:
        """Present the most recently acquired texture."""

    def release(self) -> None:
        """Drop the surface configuration."""


__all__ = ["PresentationSurface", "SurfaceConfig", "SurfaceHandle"]
