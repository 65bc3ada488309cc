"""256-entry RGBA palette store and generators."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np

from indexed_view.api.bitmap import RGBA
from indexed_view.rendering.texture_upload import (
    COPY_BYTES_PER_ROW_ALIGNMENT,
    TextureUpload,
    upload_texture,
)

PALETTE_SIZE = 256
TRANSPARENT_BLACK: RGBA = (0, 0, 0, 0)


def default_palette() -> tuple[RGBA, ...]:
    """Ramp used before any image palette is applied."""
    return tuple(
        ((i * 2) % 256, (i * 3) % 256, (i * 4) % 256, 255)
        for i in range(PALETTE_SIZE)
    )


def cycling_palette(phase: float) -> tuple[RGBA, ...]:
    """Palette-cycling animation frame for ``phase`` in ``[0, 1)``."""
    x = int(256 * float(phase)) % 256
    return tuple(
        ((x + 2 * i) % 256, (x + 4 * i) % 256, (x + i) % 256, 255)
        for i in range(PALETTE_SIZE)
    )


def pad_palette(entries: Iterable[Sequence[int]]) -> tuple[RGBA, ...]:
    """Validate entries and pad with transparent black up to 256."""
    normalized: list[RGBA] = []
    for index, entry in enumerate(entries):
        if len(entry) != 4:
            raise ValueError(f"palette entry {index} must have 4 channels (got {len(entry)})")
        channels = tuple(int(channel) for channel in entry)
        if any(channel < 0 or channel > 255 for channel in channels):
            raise ValueError(f"palette entry {index} has a channel outside 0-255: {channels}")
        normalized.append((channels[0], channels[1], channels[2], channels[3]))
    if len(normalized) > PALETTE_SIZE:
        raise ValueError(f"palette has {len(normalized)} entries; at most {PALETTE_SIZE} allowed")
    normalized.extend([TRANSPARENT_BLACK] * (PALETTE_SIZE - len(normalized)))
    return tuple(normalized)


def palette_payload(entries: Sequence[RGBA]) -> bytes:
    """Pack 256 entries into the 1024-byte RGBA texture payload."""
    if len(entries) != PALETTE_SIZE:
        raise ValueError(f"palette payload requires {PALETTE_SIZE} entries (got {len(entries)})")
    return np.asarray(entries, dtype=np.uint8).reshape(PALETTE_SIZE * 4).tobytes()


def palette_from_payload(payload: bytes | bytearray | memoryview) -> tuple[RGBA, ...]:
    """Rebuild entries from a 1024-byte RGBA payload."""
    raw = np.frombuffer(bytes(payload), dtype=np.uint8)
    if raw.size != PALETTE_SIZE * 4:
        raise ValueError(f"palette payload must be {PALETTE_SIZE * 4} bytes (got {raw.size})")
    return tuple(
        (int(r), int(g), int(b), int(a))
        for r, g, b, a in raw.reshape(PALETTE_SIZE, 4).tolist()
    )


class PaletteStore:
    """Current palette; replaced wholesale, uploaded every frame."""

    def __init__(self, entries: Iterable[Sequence[int]] | None = None) -> None:
        self._entries: tuple[RGBA, ...] = (
            default_palette() if entries is None else pad_palette(entries)
        )
        self._revision = 0

    @property
    def entries(self) -> tuple[RGBA, ...]:
        return self._entries

    @property
    def revision(self) -> int:
        return self._revision

    def set(self, entries: Iterable[Sequence[int]]) -> None:
        # Build fully before swapping so a frame never sees a partial palette.
        padded = pad_palette(entries)
        self._entries = padded
        self._revision += 1

    def payload(self) -> bytes:
        return palette_payload(self._entries)

    def upload(
        self,
        device: object,
        encoder: object,
        texture: object,
        *,
        alignment: int = COPY_BYTES_PER_ROW_ALIGNMENT,
    ) -> TextureUpload:
        return upload_texture(
            device,
            encoder,
            texture,
            self.payload(),
            width=PALETTE_SIZE,
            height=1,
            bytes_per_pixel=4,
            alignment=alignment,
        )


__all__ = [
    "PALETTE_SIZE",
    "PaletteStore",
    "TRANSPARENT_BLACK",
    "cycling_palette",
    "default_palette",
    "pad_palette",
    "palette_from_payload",
    "palette_payload",
]
