"""Generation-checked GPU buffer slots."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from indexed_view.runtime.errors import RECOVERABLE_RUNTIME_ERRORS, log_recoverable


@dataclass(frozen=True, slots=True)
class BufferHandle:
    slot: int
    generation: int


@dataclass(slots=True)
class _Slot:
    buffer: object | None
    generation: int = 0


@dataclass(slots=True)
class BufferArena:
    """Owns GPU buffers; handles go stale when their slot is replaced or released."""

    _slots: list[_Slot] = field(default_factory=list)
    _free: list[int] = field(default_factory=list)

    def insert(self, buffer: object) -> BufferHandle:
        if self._free:
            index = self._free.pop()
            slot = self._slots[index]
            slot.buffer = buffer
            slot.generation += 1
        else:
            index = len(self._slots)
            slot = _Slot(buffer=buffer)
            self._slots.append(slot)
        return BufferHandle(slot=index, generation=slot.generation)

    def replace(self, handle: BufferHandle, buffer: object) -> BufferHandle:
        """Swap in ``buffer``, destroying the old one; ``handle`` becomes stale."""
        slot = self._live_slot(handle)
        _destroy(slot.buffer)
        slot.buffer = buffer
        slot.generation += 1
        return BufferHandle(slot=handle.slot, generation=slot.generation)

    def get(self, handle: BufferHandle) -> object:
        return self._live_slot(handle).buffer

    def is_live(self, handle: BufferHandle) -> bool:
        try:
            self._live_slot(handle)
        except KeyError:
            return False
        return True

    def release(self, handle: BufferHandle) -> None:
        slot = self._live_slot(handle)
        _destroy(slot.buffer)
        slot.buffer = None
        slot.generation += 1
        self._free.append(handle.slot)

    def clear(self) -> None:
        for index, slot in enumerate(self._slots):
            if slot.buffer is None:
                continue
            _destroy(slot.buffer)
            slot.buffer = None
            slot.generation += 1
            self._free.append(index)

    def __len__(self) -> int:
        return sum(1 for slot in self._slots if slot.buffer is not None)

    def _live_slot(self, handle: BufferHandle) -> _Slot:
        if not 0 <= handle.slot < len(self._slots):
            raise KeyError(f"unknown buffer slot {handle.slot}")
        slot = self._slots[handle.slot]
        if slot.buffer is None or slot.generation != handle.generation:
            raise KeyError(
                f"stale buffer handle slot={handle.slot} generation={handle.generation} "
                f"(current={slot.generation})"
            )
        return slot


def _destroy(buffer: object | None) -> None:
    destroy = getattr(buffer, "destroy", None)
    if not callable(destroy):
        return
    try:
        destroy()
    except RECOVERABLE_RUNTIME_ERRORS:
        log_recoverable(_LOG, "gpu buffer destroy failed")


_LOG = logging.getLogger("indexed_view.rendering.buffers")

__all__ = ["BufferArena", "BufferHandle"]
