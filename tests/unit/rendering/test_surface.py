from __future__ import annotations

import pytest

from indexed_view.api.surface import SurfaceConfig
from indexed_view.rendering.surface import (
    FALLBACK_SURFACE_FORMAT,
    CanvasSurface,
    SurfaceAcquireError,
    SurfaceStatus,
    classify_surface_error,
)
from tests.conftest import FakeCanvasContext


class SurfaceLostError(RuntimeError):
    pass


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (SurfaceLostError("gone"), SurfaceStatus.LOST),
        (RuntimeError("Surface texture is Outdated"), SurfaceStatus.OUTDATED),
        (RuntimeError("acquire timed out"), SurfaceStatus.TIMEOUT),
        (RuntimeError("Out of memory"), SurfaceStatus.OUT_OF_MEMORY),
        (MemoryError(), SurfaceStatus.OUT_OF_MEMORY),
        (RuntimeError("device lost: reason unknown"), SurfaceStatus.DEVICE_LOST),
        (RuntimeError("boom"), SurfaceStatus.UNKNOWN),
        (SurfaceAcquireError(SurfaceStatus.TIMEOUT), SurfaceStatus.TIMEOUT),
    ],
)
def test_classify_surface_error(exc: BaseException, expected: SurfaceStatus) -> None:
    assert classify_surface_error(exc) is expected


def test_only_transient_statuses_are_recoverable() -> None:
    recoverable = {status for status in SurfaceStatus if status.recoverable}

    assert recoverable == {SurfaceStatus.LOST, SurfaceStatus.OUTDATED, SurfaceStatus.TIMEOUT}


def test_canvas_surface_configures_with_render_attachment_usage() -> None:
    context = FakeCanvasContext()
    surface = CanvasSurface(context, adapter="adapter")

    assert surface.format == "bgra8unorm-srgb"
    surface.configure("device", SurfaceConfig(format="bgra8unorm-srgb", width=640, height=480))

    call = context.configure_calls[0]
    assert call["device"] == "device"
    assert call["usage"] == 0x10
    assert call["present_mode"] == "fifo"
    assert call["alpha_mode"] == "opaque"
    assert surface.config is not None and surface.config.width == 640


def test_canvas_surface_falls_back_when_present_mode_is_unsupported() -> None:
    context = FakeCanvasContext(legacy_configure=True)
    surface = CanvasSurface(context)

    surface.configure("device", SurfaceConfig(format="bgra8unorm", width=10, height=10, present_mode="mailbox"))

    assert "present_mode" not in context.configure_calls[0]


def test_canvas_surface_uses_fallback_format_when_context_has_none() -> None:
    surface = CanvasSurface(FakeCanvasContext(preferred=None))

    assert surface.format == FALLBACK_SURFACE_FORMAT


def test_canvas_surface_present_only_when_manual() -> None:
    auto_context = FakeCanvasContext()
    manual_context = FakeCanvasContext()

    CanvasSurface(auto_context).present()
    CanvasSurface(manual_context, manual_present=True).present()

    assert auto_context.presented == 0
    assert manual_context.presented == 1


def test_canvas_surface_release_unconfigures() -> None:
    context = FakeCanvasContext()
    surface = CanvasSurface(context)
    surface.configure("device", SurfaceConfig(format="bgra8unorm", width=10, height=10))

    surface.release()

    assert context.unconfigured == 1
    assert surface.config is None


def test_surface_config_rejects_zero_size() -> None:
    with pytest.raises(ValueError):
        SurfaceConfig(format="bgra8unorm", width=0, height=10)
