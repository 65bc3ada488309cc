"""Shared runtime exception types and policy helpers."""

from __future__ import annotations

import logging
from typing import TypeAlias

# Explicitly bounded fallback set for backend compatibility paths.
RecoverableRuntimeErrors: TypeAlias = tuple[type[BaseException], ...]
RECOVERABLE_RUNTIME_ERRORS: RecoverableRuntimeErrors = (
    RuntimeError,
    OSError,
    ValueError,
    TypeError,
    AttributeError,
    ImportError,
)


class GpuInitError(RuntimeError):
    """GPU adapter/device acquisition failure with structured details."""

    def __init__(self, message: str, *, details: dict[str, object]) -> None:
        super().__init__(message)
        self.details = details


class BitmapFormatError(ValueError):
    """Source image cannot be represented as an indexed bitmap."""


class RenderFailure(RuntimeError):
    """Fatal per-window rendering failure (device lost, out of memory, rejected copy)."""


def log_recoverable(
    logger: logging.Logger,
    message: str,
    *,
    level: int = logging.DEBUG,
) -> None:
    """Emit structured observability for tolerated recoverable exceptions."""
    logger.log(level, message, exc_info=True)


__all__ = [
    "BitmapFormatError",
    "GpuInitError",
    "RECOVERABLE_RUNTIME_ERRORS",
    "RenderFailure",
    "RecoverableRuntimeErrors",
    "log_recoverable",
]
