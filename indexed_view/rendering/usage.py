"""wgpu usage-flag resolution."""

from __future__ import annotations

from indexed_view.runtime.errors import GpuInitError

# WebGPU values, used only when the imported module lacks a flag.
_BUFFER_USAGE_DEFAULTS: dict[str, int] = {
    "MAP_READ": 0x01,
    "MAP_WRITE": 0x02,
    "COPY_SRC": 0x04,
    "COPY_DST": 0x08,
    "INDEX": 0x10,
    "VERTEX": 0x20,
    "UNIFORM": 0x40,
}
_TEXTURE_USAGE_DEFAULTS: dict[str, int] = {
    "COPY_SRC": 0x01,
    "COPY_DST": 0x02,
    "TEXTURE_BINDING": 0x04,
    "STORAGE_BINDING": 0x08,
    "RENDER_ATTACHMENT": 0x10,
}
_SHADER_STAGE_DEFAULTS: dict[str, int] = {
    "VERTEX": 0x1,
    "FRAGMENT": 0x2,
    "COMPUTE": 0x4,
}


def wgpu_module() -> object:
    """Return the imported ``wgpu`` module."""
    try:
        import wgpu
    except Exception as exc:
        raise GpuInitError(
            "wgpu dependency unavailable",
            details={
                "selected_backend": "unknown",
                "exception_type": exc.__class__.__name__,
                "exception_message": str(exc),
            },
        ) from exc
    return wgpu


def _resolve(enum_name: str, defaults: dict[str, int], names: tuple[str, ...]) -> int:
    flags = getattr(wgpu_module(), enum_name, None)
    value = 0
    for name in names:
        default = defaults[name]
        value |= default if flags is None else int(getattr(flags, name, default))
    return value


def buffer_usage(*names: str) -> int:
    return _resolve("BufferUsage", _BUFFER_USAGE_DEFAULTS, names)


def texture_usage(*names: str) -> int:
    return _resolve("TextureUsage", _TEXTURE_USAGE_DEFAULTS, names)


def shader_stage(*names: str) -> int:
    return _resolve("ShaderStage", _SHADER_STAGE_DEFAULTS, names)


__all__ = ["buffer_usage", "shader_stage", "texture_usage", "wgpu_module"]
