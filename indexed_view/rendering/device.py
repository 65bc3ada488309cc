"""wgpu adapter/device acquisition."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from indexed_view.runtime.errors import GpuInitError


@dataclass(frozen=True, slots=True)
class GpuHandles:
    adapter: object
    device: object
    backend: str
    adapter_info: dict[str, object]


def request_gpu(
    backends: Sequence[str] = ("vulkan", "metal", "dx12"),
    *,
    wgpu_mod: object | None = None,
) -> GpuHandles:
    """Request a high-performance adapter (trying ``backends`` in order) and its device."""
    if wgpu_mod is None:
        try:
            import wgpu as wgpu_mod
        except Exception as exc:
            raise GpuInitError(
                "wgpu dependency unavailable",
                details={
                    "selected_backend": "unknown",
                    "exception_type": exc.__class__.__name__,
                    "exception_message": str(exc),
                },
            ) from exc
    adapter, backend = _request_adapter(wgpu_mod, tuple(backends))
    adapter_info = _extract_adapter_info(adapter)
    device = _request_device(adapter, backend)
    _LOG.info("gpu_ready backend=%s adapter=%s", backend, adapter_info.get("device", "unknown"))
    return GpuHandles(adapter=adapter, device=device, backend=backend, adapter_info=adapter_info)


def _request_adapter(wgpu_mod: object, backend_order: tuple[str, ...]) -> tuple[object, str]:
    gpu = getattr(wgpu_mod, "gpu", None)
    request_adapter_sync = getattr(gpu, "request_adapter_sync", None)
    if not callable(request_adapter_sync):
        raise GpuInitError(
            "wgpu adapter request API unavailable",
            details={"selected_backend": "unknown", "attempted_backends": backend_order},
        )
    adapter = None
    selected_backend = "unknown"
    for backend_name in backend_order or ("default",):
        selected_backend = str(backend_name)
        try:
            adapter = request_adapter_sync(
                power_preference="high-performance",
                backend=backend_name,
            )
        except TypeError:
            adapter = request_adapter_sync(power_preference="high-performance")
        except Exception as exc:
            raise GpuInitError(
                "wgpu adapter request failed",
                details={
                    "selected_backend": selected_backend,
                    "attempted_backends": backend_order,
                    "exception_type": exc.__class__.__name__,
                    "exception_message": str(exc),
                },
            ) from exc
        if adapter is not None:
            break
    if adapter is None:
        raise GpuInitError(
            "wgpu adapter request returned None",
            details={"selected_backend": selected_backend, "attempted_backends": backend_order},
        )
    return adapter, selected_backend


def _request_device(adapter: object, backend: str) -> object:
    request_device_sync = getattr(adapter, "request_device_sync", None)
    if not callable(request_device_sync):
        raise GpuInitError(
            "wgpu device request API unavailable",
            details={"selected_backend": backend},
        )
    try:
        device = request_device_sync(label="indexed_view.device")
    except Exception as exc:
        raise GpuInitError(
            "wgpu device request failed",
            details={
                "selected_backend": backend,
                "exception_type": exc.__class__.__name__,
                "exception_message": str(exc),
            },
        ) from exc
    if device is None:
        raise GpuInitError("wgpu device request returned None", details={"selected_backend": backend})
    return device


def _extract_adapter_info(adapter: object) -> dict[str, object]:
    info = getattr(adapter, "info", None)
    if isinstance(info, dict):
        return {str(key): value for key, value in info.items()}
    return {}


_LOG = logging.getLogger("indexed_view.rendering.device")

__all__ = ["GpuHandles", "request_gpu"]
