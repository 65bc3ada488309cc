"""Viewer runtime modules."""

from indexed_view.runtime.config import ViewerConfig, load_viewer_config
from indexed_view.runtime.errors import BitmapFormatError, GpuInitError, RenderFailure
from indexed_view.runtime.logging import configure_logging, setup_logging

__all__ = [
    "BitmapFormatError",
    "GpuInitError",
    "RenderFailure",
    "ViewerConfig",
    "configure_logging",
    "load_viewer_config",
    "setup_logging",
]
