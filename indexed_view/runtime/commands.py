"""Key bindings and deferred window commands."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CreateWindowCommand:
    """Request to open one more window, applied after event dispatch."""

    title: str


WindowCommand = CreateWindowCommand


class CommandQueue:
    """Deferred-action list drained once per loop tick."""

    def __init__(self) -> None:
        self._pending: deque[WindowCommand] = deque()

    def add(self, command: WindowCommand) -> None:
        self._pending.append(command)

    def drain(self) -> tuple[WindowCommand, ...]:
        drained = tuple(self._pending)
        self._pending.clear()
        return drained

    def __len__(self) -> int:
        return len(self._pending)


class KeyBindings:
    """Maps normalized key names to action names."""

    def __init__(self) -> None:
        self._key_down_bindings: dict[str, str] = {}

    def bind_key_down(self, key_name: str, action: str) -> None:
        normalized = key_name.strip().lower()
        if not normalized:
            raise ValueError("key_name must not be empty")
        self._key_down_bindings[normalized] = action

    def resolve(self, key_name: str, *, pressed: bool) -> str | None:
        if not pressed:
            return None
        return self._key_down_bindings.get(key_name.strip().lower())


ACTION_CLOSE_WINDOW = "close_window"
ACTION_TOGGLE_FULLSCREEN = "toggle_fullscreen"
ACTION_NEW_WINDOW = "new_window"


def default_key_bindings() -> KeyBindings:
    bindings = KeyBindings()
    bindings.bind_key_down("Escape", ACTION_CLOSE_WINDOW)
    bindings.bind_key_down("f", ACTION_TOGGLE_FULLSCREEN)
    bindings.bind_key_down("n", ACTION_NEW_WINDOW)
    return bindings


__all__ = [
    "ACTION_CLOSE_WINDOW",
    "ACTION_NEW_WINDOW",
    "ACTION_TOGGLE_FULLSCREEN",
    "CommandQueue",
    "CreateWindowCommand",
    "KeyBindings",
    "WindowCommand",
    "default_key_bindings",
]
