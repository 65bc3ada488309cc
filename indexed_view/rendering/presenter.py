"""Per-window indexed-bitmap presentation state machine."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import NoReturn

from indexed_view.api.bitmap import IndexedBitmap
from indexed_view.api.surface import PresentationSurface, SurfaceConfig
from indexed_view.rendering.buffers import BufferArena, BufferHandle
from indexed_view.rendering.frame_stats import FrameStats
from indexed_view.rendering.geometry import Quad, compute_quad
from indexed_view.rendering.palette import PALETTE_SIZE, PaletteStore
from indexed_view.rendering.pipeline import (
    INDEXED_PALETTE_PIPELINE,
    PipelineConfig,
    PipelineResources,
    build_pipeline,
)
from indexed_view.rendering.surface import SurfaceStatus, classify_surface_error
from indexed_view.rendering.texture_upload import COPY_BYTES_PER_ROW_ALIGNMENT, upload_texture
from indexed_view.rendering.usage import buffer_usage, texture_usage
from indexed_view.runtime.errors import (
    RECOVERABLE_RUNTIME_ERRORS,
    GpuInitError,
    RenderFailure,
    log_recoverable,
)


class PresentationState(Enum):
    UNINITIALIZED = "uninitialized"
    CONFIGURED = "configured"
    RENDERING = "rendering"
    RESIZING = "resizing"
    CLOSED = "closed"


class FrameOutcome(Enum):
    PRESENTED = "presented"
    SKIPPED = "skipped"
    CLOSED = "closed"


@dataclass(frozen=True, slots=True)
class PresenterConfig:
    present_mode: str = "fifo"
    min_zoom: int = 0
    row_alignment: int = COPY_BYTES_PER_ROW_ALIGNMENT
    clear_color: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)

    def __post_init__(self) -> None:
        if self.row_alignment <= 0 or self.row_alignment % COPY_BYTES_PER_ROW_ALIGNMENT:
            raise ValueError(
                f"row_alignment must be a positive multiple of {COPY_BYTES_PER_ROW_ALIGNMENT} "
                f"(got {self.row_alignment})"
            )


class IndexedPresenter:
    """Presents one indexed bitmap through a palette lookup on one surface.

    Lifecycle: ``configure`` once with the window's physical size, then
    ``render`` per redraw tick and ``resize`` on window resize events.
    Fatal GPU failures close the presenter and raise ``RenderFailure``;
    transient surface loss skips the frame and reconfigures before the next.
    """

    def __init__(
        self,
        device: object,
        surface: PresentationSurface,
        bitmap: IndexedBitmap,
        *,
        palette: Iterable[Sequence[int]] | None = None,
        config: PresenterConfig | None = None,
        stats: FrameStats | None = None,
        pipeline_config: PipelineConfig = INDEXED_PALETTE_PIPELINE,
    ) -> None:
        self._device = device
        self._surface = surface
        self._bitmap = bitmap
        self._palette = PaletteStore(palette)
        self._config = config or PresenterConfig()
        self._stats = stats or FrameStats()
        self._pipeline_config = pipeline_config
        self._state = PresentationState.UNINITIALIZED
        self._arena = BufferArena()
        self._vertex_handle: BufferHandle | None = None
        self._index_buffer: object | None = None
        self._index_texture: object | None = None
        self._palette_texture: object | None = None
        self._bind_group: object | None = None
        self._pipeline: PipelineResources | None = None
        self._surface_config: SurfaceConfig | None = None
        self._quad: Quad | None = None
        self._reconfigure_pending = False
        self._frame_index = 0
        self._frames_presented = 0
        self._frames_skipped = 0
        self._reconfigure_count = 0
        self._resize_count = 0

    @property
    def state(self) -> PresentationState:
        return self._state

    @property
    def surface_config(self) -> SurfaceConfig | None:
        return self._surface_config

    @property
    def quad(self) -> Quad | None:
        return self._quad

    @property
    def vertex_handle(self) -> BufferHandle | None:
        return self._vertex_handle

    @property
    def frame_index(self) -> int:
        return self._frame_index

    @property
    def bitmap(self) -> IndexedBitmap:
        return self._bitmap

    @property
    def palette(self) -> PaletteStore:
        return self._palette

    @property
    def arena(self) -> BufferArena:
        return self._arena

    @property
    def reconfigure_pending(self) -> bool:
        return self._reconfigure_pending

    def configure(self, width: int, height: int) -> None:
        """Create GPU resources and apply the initial surface configuration."""
        if self._state is not PresentationState.UNINITIALIZED:
            raise RuntimeError(f"presenter already configured (state={self._state.value})")
        if width <= 0 or height <= 0:
            raise ValueError(f"initial surface size must be positive (got {width}x{height})")
        device = self._device
        config = self._pipeline_config
        try:
            surface_config = SurfaceConfig(
                format=self._surface.format,
                width=int(width),
                height=int(height),
                present_mode=self._config.present_mode,
            )
            self._surface.configure(device, surface_config)
            self._surface_config = surface_config
            self._index_texture = _create_texture(
                device,
                label="indexed_view.index_texture",
                size=(self._bitmap.width, self._bitmap.height),
                texture_format=config.index_format,
            )
            self._palette_texture = _create_texture(
                device,
                label="indexed_view.palette_texture",
                size=(PALETTE_SIZE, 1),
                texture_format=config.palette_format,
            )
            index_sampler = _create_sampler(device, "indexed_view.index_sampler", config.index_filter)
            palette_sampler = _create_sampler(
                device,
                "indexed_view.palette_sampler",
                config.palette_filter,
            )
            self._pipeline = build_pipeline(device, config, surface_config.format)
            self._bind_group = device.create_bind_group(  # type: ignore[attr-defined]
                label="indexed_view.bind_group",
                layout=self._pipeline.bind_group_layout,
                entries=[
                    {"binding": 0, "resource": self._index_texture.create_view()},  # type: ignore[attr-defined]
                    {"binding": 1, "resource": index_sampler},
                    {"binding": 2, "resource": self._palette_texture.create_view()},  # type: ignore[attr-defined]
                    {"binding": 3, "resource": palette_sampler},
                ],
            )
            self._index_buffer = device.create_buffer_with_data(  # type: ignore[attr-defined]
                label="indexed_view.index_buffer",
                data=Quad.index_bytes(),
                usage=buffer_usage("INDEX"),
            )
            self._quad = self._compute_quad(surface_config)
            self._vertex_handle = self._arena.insert(self._create_vertex_buffer(self._quad))
        except Exception as exc:
            self._release_resources()
            raise GpuInitError(
                "presenter resource creation failed",
                details={
                    "width": int(width),
                    "height": int(height),
                    "exception_type": exc.__class__.__name__,
                    "exception_message": str(exc),
                },
            ) from exc
        self._state = PresentationState.CONFIGURED
        _LOG.info(
            "presenter_configured size=%sx%s bitmap=%sx%s format=%s zoom=%s",
            surface_config.width,
            surface_config.height,
            self._bitmap.width,
            self._bitmap.height,
            surface_config.format,
            self._quad.zoom,
        )

    def resize(self, width: int, height: int) -> bool:
        """Reconfigure for a new window size; zero-area sizes are ignored."""
        if self._state is PresentationState.CLOSED:
            return False
        if self._state is PresentationState.UNINITIALIZED:
            raise RuntimeError("presenter must be configured before resize")
        if width <= 0 or height <= 0:
            _LOG.debug("resize_ignored size=%sx%s", width, height)
            return False
        if self._vertex_handle is None:
            raise RuntimeError("presenter has no vertex buffer to replace")
        self._state = PresentationState.RESIZING
        try:
            surface_config = SurfaceConfig(
                format=self._surface.format,
                width=int(width),
                height=int(height),
                present_mode=self._config.present_mode,
            )
            self._surface.configure(self._device, surface_config)
            self._surface_config = surface_config
            self._quad = self._compute_quad(surface_config)
            self._vertex_handle = self._arena.replace(
                self._vertex_handle,
                self._create_vertex_buffer(self._quad),
            )
        except Exception as exc:
            self._fail("resize", exc)
        self._reconfigure_pending = False
        self._resize_count += 1
        self._state = PresentationState.CONFIGURED
        _LOG.info(
            "presenter_resized size=%sx%s zoom=%s scaled=%sx%s",
            width,
            height,
            self._quad.zoom,
            self._quad.scaled_width,
            self._quad.scaled_height,
        )
        return True

    def set_palette(self, entries: Iterable[Sequence[int]]) -> None:
        self._palette.set(entries)

    def set_bitmap(self, bitmap: IndexedBitmap) -> None:
        if bitmap.size != self._bitmap.size:
            raise ValueError(
                f"bitmap size must stay {self._bitmap.width}x{self._bitmap.height} "
                f"(got {bitmap.width}x{bitmap.height})"
            )
        self._bitmap = bitmap

    def render(self) -> FrameOutcome:
        """Upload palette and pixels, draw the quad, submit and present."""
        if self._state is PresentationState.CLOSED:
            return FrameOutcome.CLOSED
        if self._state is PresentationState.UNINITIALIZED:
            raise RuntimeError("presenter must be configured before render")
        surface_config = self._surface_config
        if surface_config is None:
            raise RuntimeError("presenter has no surface configuration")
        self._frame_index += 1
        self._stats.record(surface_config.width, surface_config.height)
        if self._reconfigure_pending:
            self._reconfigure(surface_config)
        self._state = PresentationState.RENDERING
        device = self._device
        alignment = self._config.row_alignment
        try:
            encoder = device.create_command_encoder(label="indexed_view.frame")  # type: ignore[attr-defined]
            self._palette.upload(device, encoder, self._palette_texture, alignment=alignment)
            upload_texture(
                device,
                encoder,
                self._index_texture,
                self._bitmap.pixels,
                width=self._bitmap.width,
                height=self._bitmap.height,
                alignment=alignment,
            )
        except Exception as exc:
            self._fail("upload", exc)
        try:
            target = self._surface.acquire()
        except Exception as exc:
            status = classify_surface_error(exc)
            if not status.recoverable:
                self._fail("acquire", exc, status=status)
            self._reconfigure_pending = True
            self._frames_skipped += 1
            _LOG.warning("frame_skipped frame=%s status=%s", self._frame_index, status.value)
            return FrameOutcome.SKIPPED
        try:
            self._draw(encoder, target)
            device.queue.submit([encoder.finish()])  # type: ignore[attr-defined]
            self._surface.present()
        except Exception as exc:
            self._fail("submit", exc)
        self._frames_presented += 1
        return FrameOutcome.PRESENTED

    def close(self) -> None:
        if self._state is PresentationState.CLOSED:
            return
        self._release_resources()
        self._state = PresentationState.CLOSED
        _LOG.info("presenter_closed frames=%s", self._frames_presented)

    def telemetry(self) -> dict[str, object]:
        surface_config = self._surface_config
        quad = self._quad
        return {
            "state": self._state.value,
            "frame_index": self._frame_index,
            "frames_presented": self._frames_presented,
            "frames_skipped": self._frames_skipped,
            "reconfigure_count": self._reconfigure_count,
            "resize_count": self._resize_count,
            "surface_width": 0 if surface_config is None else surface_config.width,
            "surface_height": 0 if surface_config is None else surface_config.height,
            "zoom": 0 if quad is None else quad.zoom,
            "palette_revision": self._palette.revision,
            "stats_reports": self._stats.reports,
        }

    def _draw(self, encoder: object, target: object) -> None:
        if self._pipeline is None or self._vertex_handle is None:
            raise RuntimeError("presenter resources were released")
        create_view = getattr(target, "create_view", None)
        view = create_view() if callable(create_view) else target
        render_pass = encoder.begin_render_pass(  # type: ignore[attr-defined]
            color_attachments=[
                {
                    "view": view,
                    "resolve_target": None,
                    "clear_value": self._config.clear_color,
                    "load_op": "clear",
                    "store_op": "store",
                }
            ],
        )
        render_pass.set_pipeline(self._pipeline.pipeline)
        render_pass.set_bind_group(0, self._bind_group)
        render_pass.set_vertex_buffer(0, self._arena.get(self._vertex_handle))
        render_pass.set_index_buffer(self._index_buffer, self._pipeline_config.index_format_name)
        render_pass.draw_indexed(6, 1, 0, 0, 0)
        render_pass.end()

    def _reconfigure(self, surface_config: SurfaceConfig) -> None:
        try:
            self._surface.configure(self._device, surface_config)
        except Exception as exc:
            self._fail("reconfigure", exc)
        self._reconfigure_pending = False
        self._reconfigure_count += 1
        _LOG.info(
            "surface_reconfigured size=%sx%s count=%s",
            surface_config.width,
            surface_config.height,
            self._reconfigure_count,
        )

    def _compute_quad(self, surface_config: SurfaceConfig) -> Quad:
        return compute_quad(
            self._bitmap.width,
            self._bitmap.height,
            surface_config.width,
            surface_config.height,
            min_zoom=self._config.min_zoom,
        )

    def _create_vertex_buffer(self, quad: Quad) -> object:
        return self._device.create_buffer_with_data(  # type: ignore[attr-defined]
            label="indexed_view.vertex_buffer",
            data=quad.vertex_bytes(),
            usage=buffer_usage("VERTEX"),
        )

    def _fail(
        self,
        stage: str,
        exc: BaseException,
        *,
        status: SurfaceStatus | None = None,
    ) -> NoReturn:
        _LOG.error(
            "render_failure stage=%s status=%s frame=%s error=%s",
            stage,
            "n/a" if status is None else status.value,
            self._frame_index,
            exc,
        )
        self.close()
        detail = stage if status is None else f"{stage} ({status.value})"
        raise RenderFailure(f"{detail} failed: {exc}") from exc

    def _release_resources(self) -> None:
        self._arena.clear()
        self._vertex_handle = None
        for resource in (self._index_buffer, self._index_texture, self._palette_texture):
            destroy = getattr(resource, "destroy", None)
            if not callable(destroy):
                continue
            try:
                destroy()
            except RECOVERABLE_RUNTIME_ERRORS:
                log_recoverable(_LOG, "gpu resource destroy failed")
        self._index_buffer = None
        self._index_texture = None
        self._palette_texture = None
        self._bind_group = None
        self._pipeline = None
        try:
            self._surface.release()
        except RECOVERABLE_RUNTIME_ERRORS:
            log_recoverable(_LOG, "surface release failed")


def _create_texture(
    device: object,
    *,
    label: str,
    size: tuple[int, int],
    texture_format: str,
) -> object:
    return device.create_texture(  # type: ignore[attr-defined]
        label=label,
        size=(int(size[0]), int(size[1]), 1),
        format=texture_format,
        usage=texture_usage("TEXTURE_BINDING", "COPY_DST"),
        dimension="2d",
        mip_level_count=1,
        sample_count=1,
    )


def _create_sampler(device: object, label: str, filter_mode: str) -> object:
    return device.create_sampler(  # type: ignore[attr-defined]
        label=label,
        address_mode_u="clamp-to-edge",
        address_mode_v="clamp-to-edge",
        address_mode_w="clamp-to-edge",
        mag_filter=filter_mode,
        min_filter=filter_mode,
        mipmap_filter="nearest",
    )


_LOG = logging.getLogger("indexed_view.rendering.presenter")

__all__ = [
    "FrameOutcome",
    "IndexedPresenter",
    "PresentationState",
    "PresenterConfig",
]
