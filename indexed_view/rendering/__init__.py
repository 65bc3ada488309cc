"""Indexed-bitmap rendering modules."""

from indexed_view.rendering.buffers import BufferArena, BufferHandle
from indexed_view.rendering.frame_stats import FrameStats, FrameStatsSummary
from indexed_view.rendering.geometry import QUAD_INDICES, Quad, Vertex, compute_quad, compute_zoom
from indexed_view.rendering.palette import (
    PALETTE_SIZE,
    PaletteStore,
    cycling_palette,
    default_palette,
    pad_palette,
    palette_from_payload,
)
from indexed_view.rendering.pipeline import INDEXED_PALETTE_PIPELINE, PipelineConfig, build_pipeline
from indexed_view.rendering.presenter import (
    FrameOutcome,
    IndexedPresenter,
    PresentationState,
    PresenterConfig,
)
from indexed_view.rendering.surface import CanvasSurface, SurfaceStatus, classify_surface_error
from indexed_view.rendering.texture_upload import (
    COPY_BYTES_PER_ROW_ALIGNMENT,
    pad_rows,
    padded_bytes_per_row,
    upload_texture,
)

__all__ = [
    "BufferArena",
    "BufferHandle",
    "COPY_BYTES_PER_ROW_ALIGNMENT",
    "CanvasSurface",
    "FrameOutcome",
    "FrameStats",
    "FrameStatsSummary",
    "INDEXED_PALETTE_PIPELINE",
    "IndexedPresenter",
    "PALETTE_SIZE",
    "PaletteStore",
    "PipelineConfig",
    "PresentationState",
    "PresenterConfig",
    "QUAD_INDICES",
    "Quad",
    "SurfaceStatus",
    "Vertex",
    "build_pipeline",
    "classify_surface_error",
    "compute_quad",
    "compute_zoom",
    "cycling_palette",
    "default_palette",
    "pad_palette",
    "pad_rows",
    "padded_bytes_per_row",
    "palette_from_payload",
    "upload_texture",
]
