"""Indexed bitmap contracts."""

from __future__ import annotations

from dataclasses import dataclass

from indexed_view.runtime.errors import BitmapFormatError

RGBA = tuple[int, int, int, int]


@dataclass(frozen=True, slots=True)
class IndexedBitmap:
    """Width x height pixels, one palette index (0-255) per byte, row-major."""

    width: int
    height: int
    pixels: bytes

    def __post_init__(self) -> None:
        if int(self.width) <= 0 or int(self.height) <= 0:
            raise BitmapFormatError(
                f"indexed bitmap must have positive dimensions (got {self.width}x{self.height})"
            )
        expected = int(self.width) * int(self.height)
        if len(self.pixels) != expected:
            raise BitmapFormatError(
                f"indexed bitmap pixel count mismatch: expected {expected}, got {len(self.pixels)}"
            )
        if not isinstance(self.pixels, bytes):
            object.__setattr__(self, "pixels", bytes(self.pixels))

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def row(self, y: int) -> bytes:
        if not 0 <= y < self.height:
            raise IndexError(f"row {y} out of range for height {self.height}")
        start = y * self.width
        return self.pixels[start:start + self.width]


@dataclass(frozen=True, slots=True)
class IndexedImage:
    """Decoded pixel source: bitmap plus its palette padded to 256 entries."""

    bitmap: IndexedBitmap
    palette: tuple[RGBA, ...]
    source: str = ""
    color_count: int = 0


__all__ = ["IndexedBitmap", "IndexedImage", "RGBA"]
