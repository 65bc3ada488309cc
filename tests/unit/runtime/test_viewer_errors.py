from __future__ import annotations

import logging

import pytest

from indexed_view.runtime.errors import (
    BitmapFormatError,
    GpuInitError,
    RenderFailure,
    log_recoverable,
)


def test_gpu_init_error_carries_details() -> None:
    error = GpuInitError("no adapter", details={"selected_backend": "vulkan"})

    assert isinstance(error, RuntimeError)
    assert error.details == {"selected_backend": "vulkan"}


def test_error_hierarchy() -> None:
    assert issubclass(BitmapFormatError, ValueError)
    assert issubclass(RenderFailure, RuntimeError)


def test_log_recoverable_attaches_exception_info(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("indexed_view.test.errors")
    caplog.set_level(logging.DEBUG, logger=logger.name)

    try:
        raise OSError("disk")
    except OSError:
        log_recoverable(logger, "tolerated")

    record = caplog.records[-1]
    assert record.levelno == logging.DEBUG
    assert record.exc_info is not None
