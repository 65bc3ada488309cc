from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from types import ModuleType, SimpleNamespace

import pytest

from indexed_view.api.bitmap import IndexedBitmap, IndexedImage
from indexed_view.api.surface import SurfaceConfig, SurfaceHandle
from indexed_view.rendering.palette import default_palette


class FakeBuffer:
    def __init__(self, log: list[tuple], label: str, size: int, data: bytes | None = None) -> None:
        self._log = log
        self.label = label
        self.size = size
        self.data = bytearray(data or b"")
        self.unmapped = False
        self.destroyed = False

    def write_mapped(self, data: bytes) -> None:
        self.data = bytearray(data)
        self._log.append(("write_mapped", self.label, len(data)))

    def unmap(self) -> None:
        self.unmapped = True
        self._log.append(("unmap", self.label))

    def destroy(self) -> None:
        self.destroyed = True


class FakeTexture:
    def __init__(self, label: str, size: tuple[int, int, int], texture_format: str) -> None:
        self.label = label
        self.size = size
        self.format = texture_format
        self.destroyed = False

    def create_view(self) -> tuple[str, str]:
        return ("view", self.label)

    def destroy(self) -> None:
        self.destroyed = True


class FakeRenderPass:
    def __init__(self, log: list[tuple], descriptor: dict[str, object]) -> None:
        self._log = log
        self.descriptor = descriptor
        self.calls: list[tuple] = []
        self.ended = False

    def set_pipeline(self, pipeline: object) -> None:
        self.calls.append(("set_pipeline", pipeline))

    def set_bind_group(self, index: int, bind_group: object) -> None:
        self.calls.append(("set_bind_group", index, bind_group))

    def set_vertex_buffer(self, slot: int, buffer: object) -> None:
        self.calls.append(("set_vertex_buffer", slot, buffer))

    def set_index_buffer(self, buffer: object, index_format: str) -> None:
        self.calls.append(("set_index_buffer", buffer, index_format))

    def draw_indexed(self, *args: int) -> None:
        self.calls.append(("draw_indexed", *args))
        self._log.append(("draw_indexed", *args))

    def end(self) -> None:
        self.ended = True
        self._log.append(("end_pass",))


class FakeEncoder:
    def __init__(self, log: list[tuple]) -> None:
        self._log = log
        self.copies: list[tuple[dict, dict, tuple]] = []
        self.render_passes: list[FakeRenderPass] = []
        self.fail_copy = False

    def copy_buffer_to_texture(self, source: dict, destination: dict, copy_size: tuple) -> None:
        if self.fail_copy:
            raise RuntimeError("copy rejected")
        self.copies.append((source, destination, copy_size))
        self._log.append(("copy", destination["texture"].label, source["bytes_per_row"]))

    def begin_render_pass(self, **descriptor) -> FakeRenderPass:
        render_pass = FakeRenderPass(self._log, descriptor)
        self.render_passes.append(render_pass)
        self._log.append(("begin_pass",))
        return render_pass

    def finish(self) -> str:
        return "command-buffer"


class FakeQueue:
    def __init__(self, log: list[tuple]) -> None:
        self._log = log
        self.submissions: list[list[object]] = []
        self.fail_with: BaseException | None = None

    def submit(self, command_buffers: list[object]) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.submissions.append(command_buffers)
        self._log.append(("submit", len(command_buffers)))


class FakeDevice:
    """Records every GPU call in ``log`` in the order it happens."""

    def __init__(self, log: list[tuple] | None = None) -> None:
        self.log: list[tuple] = [] if log is None else log
        self.queue = FakeQueue(self.log)
        self.encoders: list[FakeEncoder] = []
        self.textures: list[FakeTexture] = []
        self.buffers: list[FakeBuffer] = []
        self.samplers: list[dict[str, object]] = []
        self.pipelines: list[dict[str, object]] = []
        self.bind_group_layouts: list[dict[str, object]] = []
        self.bind_groups: list[dict[str, object]] = []
        self.shader_modules: list[str] = []
        self.fail_copies = False

    def create_texture(self, **kwargs) -> FakeTexture:
        texture = FakeTexture(kwargs["label"], kwargs["size"], kwargs["format"])
        self.textures.append(texture)
        return texture

    def create_sampler(self, **kwargs) -> dict[str, object]:
        self.samplers.append(kwargs)
        return kwargs

    def create_bind_group_layout(self, **kwargs) -> dict[str, object]:
        self.bind_group_layouts.append(kwargs)
        return {"bind_group_layout": kwargs["label"]}

    def create_pipeline_layout(self, **kwargs) -> dict[str, object]:
        return {"pipeline_layout": kwargs["label"]}

    def create_shader_module(self, **kwargs) -> dict[str, object]:
        self.shader_modules.append(kwargs["code"])
        return {"shader": kwargs["label"]}

    def create_render_pipeline(self, **kwargs) -> dict[str, object]:
        self.pipelines.append(kwargs)
        return {"pipeline": kwargs["label"]}

    def create_bind_group(self, **kwargs) -> dict[str, object]:
        self.bind_groups.append(kwargs)
        return {"bind_group": kwargs["label"]}

    def create_buffer(self, **kwargs) -> FakeBuffer:
        buffer = FakeBuffer(self.log, kwargs["label"], kwargs["size"])
        self.buffers.append(buffer)
        return buffer

    def create_buffer_with_data(self, **kwargs) -> FakeBuffer:
        data = bytes(kwargs["data"])
        buffer = FakeBuffer(self.log, kwargs["label"], len(data), data)
        self.buffers.append(buffer)
        return buffer

    def create_command_encoder(self, **kwargs) -> FakeEncoder:
        _ = kwargs
        encoder = FakeEncoder(self.log)
        encoder.fail_copy = self.fail_copies
        self.encoders.append(encoder)
        return encoder

    def vertex_buffers(self) -> list[FakeBuffer]:
        return [buffer for buffer in self.buffers if buffer.label == "indexed_view.vertex_buffer"]


class FakeSurface:
    """PresentationSurface double; ``acquire_errors`` are raised in order before succeeding."""

    def __init__(self, log: list[tuple], surface_format: str = "bgra8unorm") -> None:
        self._log = log
        self.format = surface_format
        self.configs: list[SurfaceConfig] = []
        self.acquire_errors: list[BaseException] = []
        self.presented = 0
        self.released = 0

    def configure(self, device: object, config: SurfaceConfig) -> None:
        _ = device
        self.configs.append(config)
        self._log.append(("configure", config.width, config.height))

    def acquire(self) -> FakeTexture:
        if self.acquire_errors:
            raise self.acquire_errors.pop(0)
        self._log.append(("acquire",))
        return FakeTexture("swapchain", (0, 0, 1), self.format)

    def present(self) -> None:
        self.presented += 1
        self._log.append(("present",))

    def release(self) -> None:
        self.released += 1


class FakeCanvasContext:
    def __init__(self, *, preferred: str | None = "bgra8unorm-srgb", legacy_configure: bool = False) -> None:
        self.preferred = preferred
        self.legacy_configure = legacy_configure
        self.configure_calls: list[dict[str, object]] = []
        self.presented = 0
        self.unconfigured = 0
        self.texture = FakeTexture("current", (0, 0, 1), "bgra8unorm")

    def get_preferred_format(self, adapter: object) -> str | None:
        _ = adapter
        return self.preferred

    def configure(self, **kwargs) -> None:
        if self.legacy_configure and "present_mode" in kwargs:
            raise TypeError("unexpected keyword argument 'present_mode'")
        self.configure_calls.append(kwargs)

    def get_current_texture(self) -> FakeTexture:
        return self.texture

    def present(self) -> None:
        self.presented += 1

    def unconfigure(self) -> None:
        self.unconfigured += 1


_WINDOW_SEQ = [0]


@dataclass(slots=True)
class FakeWindow:
    """WindowPort double driven directly by tests."""

    width: int = 640
    height: int = 480
    title: str = ""
    window_id: str = ""
    events: list[object] = field(default_factory=list)
    listener: Callable[[object], None] | None = None
    draw_handler: Callable[[], None] | None = None
    draw_requests: int = 0
    fullscreen: bool = False
    closed: bool = False
    loop_runs: int = 0
    loop_stops: int = 0

    def __post_init__(self) -> None:
        if not self.window_id:
            _WINDOW_SEQ[0] += 1
            self.window_id = f"fake-{_WINDOW_SEQ[0]}"

    def create_surface(self) -> SurfaceHandle:
        return SurfaceHandle(surface_id=self.window_id, backend="fake", provider=None)

    def physical_size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def poll_events(self) -> tuple[object, ...]:
        drained = tuple(self.events)
        self.events.clear()
        return drained

    def set_event_listener(self, listener) -> None:
        self.listener = listener

    def set_draw_handler(self, handler) -> None:
        self.draw_handler = handler

    def request_draw(self) -> None:
        self.draw_requests += 1

    def set_title(self, title: str) -> None:
        self.title = title

    def toggle_fullscreen(self) -> bool:
        self.fullscreen = not self.fullscreen
        return self.fullscreen

    def run_loop(self) -> None:
        self.loop_runs += 1

    def stop_loop(self) -> None:
        self.loop_stops += 1

    def close(self) -> None:
        self.closed = True

    def emit(self, event: object) -> None:
        assert self.listener is not None
        self.listener(event)


def make_bitmap(width: int = 4, height: int = 3, *, fill: int | None = None) -> IndexedBitmap:
    if fill is None:
        pixels = bytes((x + y * width) % 256 for y in range(height) for x in range(width))
    else:
        pixels = bytes([fill]) * (width * height)
    return IndexedBitmap(width=width, height=height, pixels=pixels)


def make_image(width: int = 4, height: int = 3) -> IndexedImage:
    return IndexedImage(bitmap=make_bitmap(width, height), palette=default_palette(), source="test")


class FakeClock:
    def __init__(self, start: float = 0.0, step: float = 0.01) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


def make_fake_wgpu(**overrides: object) -> ModuleType:
    """Module standing in for ``wgpu`` with the flag enums the viewer reads."""
    fake = ModuleType("wgpu")
    fake.BufferUsage = SimpleNamespace(COPY_SRC=0x04, COPY_DST=0x08, INDEX=0x10, VERTEX=0x20)
    fake.TextureUsage = SimpleNamespace(COPY_DST=0x02, TEXTURE_BINDING=0x04, RENDER_ATTACHMENT=0x10)
    fake.ShaderStage = SimpleNamespace(VERTEX=0x1, FRAGMENT=0x2)
    for name, value in overrides.items():
        setattr(fake, name, value)
    return fake


@pytest.fixture(autouse=True)
def fake_wgpu(monkeypatch: pytest.MonkeyPatch) -> ModuleType:
    fake = make_fake_wgpu()
    monkeypatch.setitem(sys.modules, "wgpu", fake)
    return fake
