"""CPU-to-GPU texture copies honoring the 256-byte row-stride rule."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from indexed_view.rendering.usage import buffer_usage
from indexed_view.runtime.errors import RenderFailure

COPY_BYTES_PER_ROW_ALIGNMENT = 256


@dataclass(frozen=True, slots=True)
class TextureUpload:
    """Record of one staged copy."""

    padded_stride: int
    byte_size: int
    staging_buffer: object


def padded_bytes_per_row(row_bytes: int, alignment: int = COPY_BYTES_PER_ROW_ALIGNMENT) -> int:
    """Round ``row_bytes`` up to the next multiple of ``alignment``."""
    if alignment <= 0:
        raise ValueError(f"row alignment must be positive (got {alignment})")
    if row_bytes < 0:
        raise ValueError(f"row byte count must be non-negative (got {row_bytes})")
    return (int(row_bytes) + alignment - 1) // alignment * alignment


def pad_rows(
    data: bytes | bytearray | memoryview | np.ndarray,
    width: int,
    height: int,
    *,
    bytes_per_pixel: int = 1,
    alignment: int = COPY_BYTES_PER_ROW_ALIGNMENT,
) -> bytes:
    """Lay tightly-packed rows out on a zero-filled padded-stride buffer.

    Row ``y`` of the result starts at ``y * padded_stride``; bytes between the
    end of a row and the next stride boundary are zero.
    """
    row_bytes = int(width) * int(bytes_per_pixel)
    if isinstance(data, np.ndarray):
        source = data.reshape(-1).astype(np.uint8, copy=False)
    else:
        source = np.frombuffer(bytes(data), dtype=np.uint8)
    expected = row_bytes * int(height)
    if source.size != expected:
        raise ValueError(
            f"texture data size mismatch: expected {expected} bytes, got {source.size}"
        )
    stride = padded_bytes_per_row(row_bytes, alignment)
    padded = np.zeros((int(height), stride), dtype=np.uint8)
    if row_bytes:
        padded[:, :row_bytes] = source.reshape(int(height), row_bytes)
    return padded.tobytes()


def upload_texture(
    device: object,
    encoder: object,
    texture: object,
    data: bytes | bytearray | memoryview | np.ndarray,
    *,
    width: int,
    height: int,
    bytes_per_pixel: int = 1,
    alignment: int = COPY_BYTES_PER_ROW_ALIGNMENT,
) -> TextureUpload:
    """Stage ``data`` in a mapped buffer and record a buffer-to-texture copy."""
    payload = pad_rows(
        data,
        width,
        height,
        bytes_per_pixel=bytes_per_pixel,
        alignment=alignment,
    )
    stride = padded_bytes_per_row(int(width) * int(bytes_per_pixel), alignment)
    try:
        staging = device.create_buffer(  # type: ignore[attr-defined]
            label="indexed_view.texture_upload.staging",
            size=len(payload),
            usage=buffer_usage("COPY_SRC"),
            mapped_at_creation=True,
        )
        staging.write_mapped(payload)
        staging.unmap()
        encoder.copy_buffer_to_texture(  # type: ignore[attr-defined]
            {
                "buffer": staging,
                "offset": 0,
                "bytes_per_row": stride,
                "rows_per_image": int(height),
            },
            {
                "texture": texture,
                "mip_level": 0,
                "origin": (0, 0, 0),
            },
            (int(width), int(height), 1),
        )
    except Exception as exc:
        _LOG.error(
            "texture_upload_failed width=%s height=%s stride=%s error=%s",
            width,
            height,
            stride,
            exc,
        )
        raise RenderFailure(f"texture upload failed: {exc}") from exc
    return TextureUpload(padded_stride=stride, byte_size=len(payload), staging_buffer=staging)


_LOG = logging.getLogger("indexed_view.rendering.texture_upload")

__all__ = [
    "COPY_BYTES_PER_ROW_ALIGNMENT",
    "TextureUpload",
    "pad_rows",
    "padded_bytes_per_row",
    "upload_texture",
]
