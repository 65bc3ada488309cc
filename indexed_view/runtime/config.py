"""Centralized viewer configuration sourced from environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from indexed_view.runtime.logging import LoggingConfig

DEFAULT_WGPU_BACKENDS: tuple[str, ...] = ("vulkan", "metal", "dx12")
PRESENT_MODES: tuple[str, ...] = ("fifo", "mailbox", "immediate")
# wgpu requires copy row strides in multiples of this.
ROW_ALIGNMENT_QUANTUM = 256


@dataclass(frozen=True, slots=True)
class RenderConfig:
    wgpu_backends: tuple[str, ...]
    present_mode: str
    min_zoom: int
    stats_window: int
    row_alignment: int
    clear_color: tuple[float, float, float, float]
    palette_cycle: bool
    palette_cycle_frames: int


@dataclass(frozen=True, slots=True)
class WindowConfig:
    backend: str
    title: str
    initial_scale: int
    resizable: bool
    max_fps: float


@dataclass(frozen=True, slots=True)
class ViewerConfig:
    logging: LoggingConfig
    render: RenderConfig
    window: WindowConfig


def _raw(name: str, *, env: Mapping[str, str] | None = None) -> str | None:
    value = os.getenv(name) if env is None else env.get(name)
    return None if value is None else str(value)


def _flag(name: str, default: bool, *, env: Mapping[str, str] | None = None) -> bool:
    raw = _raw(name, env=env)
    if raw is None:
        return bool(default)
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return bool(default)


def _int(
    name: str,
    default: int,
    *,
    minimum: int | None = None,
    env: Mapping[str, str] | None = None,
) -> int:
    raw = _raw(name, env=env)
    if raw is None:
        value = int(default)
    else:
        try:
            value = int(raw.strip())
        except ValueError:
            value = int(default)
    if minimum is None:
        return value
    return max(int(minimum), value)


def _float(
    name: str,
    default: float,
    *,
    minimum: float | None = None,
    env: Mapping[str, str] | None = None,
) -> float:
    raw = _raw(name, env=env)
    if raw is None:
        value = float(default)
    else:
        try:
            value = float(raw.strip())
        except ValueError:
            value = float(default)
    if minimum is None:
        return value
    return max(float(minimum), value)


def _text(name: str, default: str, *, env: Mapping[str, str] | None = None) -> str:
    raw = _raw(name, env=env)
    if raw is None:
        return str(default)
    value = raw.strip()
    return value if value else str(default)


def _csv(name: str, *, env: Mapping[str, str] | None = None) -> tuple[str, ...]:
    raw = _text(name, "", env=env)
    if not raw:
        return ()
    return tuple(item.strip().lower() for item in raw.split(",") if item.strip())


def parse_resolution(raw: str) -> tuple[int, int] | None:
    """Parse ``WxH`` (also ``W,H`` / ``W:H``) into a positive size pair."""
    value = str(raw).strip().lower()
    if not value:
        return None
    normalized = value.replace(" ", "")
    for sep in ("x", ",", ":"):
        if sep in normalized:
            left, right = normalized.split(sep, 1)
            try:
                width = int(left)
                height = int(right)
            except ValueError:
                return None
            if width <= 0 or height <= 0:
                return None
            return (width, height)
    return None


def parse_hex_color(raw: str) -> tuple[float, float, float, float] | None:
    """Parse ``#rgb``, ``#rgba``, ``#rrggbb`` or ``#rrggbbaa`` into unit floats."""
    normalized = raw.strip().lower()
    if not normalized.startswith("#"):
        return None
    value = normalized.removeprefix("#")
    if len(value) in {3, 4}:
        value = "".join(ch * 2 for ch in value)
    if len(value) == 6:
        value = f"{value}ff"
    if len(value) != 8:
        return None
    try:
        channels = tuple(int(value[index:index + 2], 16) for index in range(0, 8, 2))
    except ValueError:
        return None
    return (
        float(channels[0]) / 255.0,
        float(channels[1]) / 255.0,
        float(channels[2]) / 255.0,
        float(channels[3]) / 255.0,
    )


def resolve_log_level_name(default: str = "INFO", *, env: Mapping[str, str] | None = None) -> str:
    """Resolve log level with viewer-prefixed override."""
    value = _raw("INDEXED_VIEW_LOG_LEVEL", env=env)
    if value is None:
        value = _raw("LOG_LEVEL", env=env) or default
    return value.strip().upper()


def _normalize_window_backend(raw: str) -> str:
    value = str(raw).strip().lower()
    if value in {"rendercanvas", "rendercanvas_glfw", "glfw"}:
        return "rendercanvas_glfw"
    return value


def _normalize_present_mode(raw: str) -> str:
    value = str(raw).strip().lower()
    if value not in PRESENT_MODES:
        return "fifo"
    return value


def _normalize_row_alignment(value: int) -> int:
    quantum = ROW_ALIGNMENT_QUANTUM
    return max(quantum, -(-int(value) // quantum) * quantum)


def _normalize_log_format(raw: str) -> str:
    value = str(raw).strip().lower()
    return value if value in {"text", "json"} else "text"


def load_viewer_config(*, env: Mapping[str, str] | None = None) -> ViewerConfig:
    """Load immutable viewer configuration from env vars (or an explicit mapping)."""
    log_file = _text("INDEXED_VIEW_LOG_FILE", "", env=env)
    clear_color = parse_hex_color(_text("INDEXED_VIEW_CLEAR_COLOR", "#000000", env=env))
    return ViewerConfig(
        logging=LoggingConfig(
            level_name=resolve_log_level_name(env=env),
            console_format=_normalize_log_format(_text("INDEXED_VIEW_LOG_FORMAT", "text", env=env)),
            file_path=log_file or None,
            file_format=_normalize_log_format(_text("INDEXED_VIEW_LOG_FILE_FORMAT", "json", env=env)),
        ),
        render=RenderConfig(
            wgpu_backends=_csv("INDEXED_VIEW_WGPU_BACKENDS", env=env) or DEFAULT_WGPU_BACKENDS,
            present_mode=_normalize_present_mode(_text("INDEXED_VIEW_PRESENT_MODE", "fifo", env=env)),
            min_zoom=_int("INDEXED_VIEW_MIN_ZOOM", 0, minimum=0, env=env),
            stats_window=_int("INDEXED_VIEW_STATS_WINDOW", 100, minimum=1, env=env),
            row_alignment=_normalize_row_alignment(
                _int("INDEXED_VIEW_ROW_ALIGNMENT", ROW_ALIGNMENT_QUANTUM, minimum=1, env=env)
            ),
            clear_color=clear_color or (0.0, 0.0, 0.0, 1.0),
            palette_cycle=_flag("INDEXED_VIEW_PALETTE_CYCLE", False, env=env),
            palette_cycle_frames=_int("INDEXED_VIEW_PALETTE_CYCLE_FRAMES", 60, minimum=1, env=env),
        ),
        window=WindowConfig(
            backend=_normalize_window_backend(
                _text("INDEXED_VIEW_WINDOW_BACKEND", "rendercanvas_glfw", env=env)
            ),
            title=_text("INDEXED_VIEW_WINDOW_TITLE", "Window", env=env),
            initial_scale=_int("INDEXED_VIEW_WINDOW_SCALE", 1, minimum=1, env=env),
            resizable=_flag("INDEXED_VIEW_WINDOW_RESIZABLE", True, env=env),
            max_fps=_float("INDEXED_VIEW_MAX_FPS", 60.0, minimum=1.0, env=env),
        ),
    )


__all__ = [
    "DEFAULT_WGPU_BACKENDS",
    "PRESENT_MODES",
    "ROW_ALIGNMENT_QUANTUM",
    "RenderConfig",
    "ViewerConfig",
    "WindowConfig",
    "load_viewer_config",
    "parse_hex_color",
    "parse_resolution",
    "resolve_log_level_name",
]
