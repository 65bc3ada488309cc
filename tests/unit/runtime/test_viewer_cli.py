from __future__ import annotations

import logging
from pathlib import Path

import pytest

from indexed_view.runtime import cli
from indexed_view.runtime.config import load_viewer_config
from indexed_view.runtime.errors import BitmapFormatError, GpuInitError


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    try:
        yield
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)


class _RecordingApp:
    instances: list[_RecordingApp] = []

    def __init__(self, image, config) -> None:
        self.image = image
        self.config = config
        self.ran = False
        _RecordingApp.instances.append(self)

    def run(self) -> None:
        self.ran = True


class _FailingApp(_RecordingApp):
    def run(self) -> None:
        raise GpuInitError("no adapter", details={"attempted_backends": ["vulkan"]})


def test_apply_overrides_layers_flags_over_env_config() -> None:
    args = cli.build_parser().parse_args(
        ["--scale", "3", "--min-zoom", "2", "--cycle", "--log-level", "debug"]
    )

    config = cli.apply_overrides(load_viewer_config(env={}), args)

    assert config.window.initial_scale == 3
    assert config.render.min_zoom == 2
    assert config.render.palette_cycle is True
    assert config.logging.level_name == "DEBUG"


def test_apply_overrides_keeps_env_values_without_flags() -> None:
    base = load_viewer_config(env={"INDEXED_VIEW_MIN_ZOOM": "1"})

    config = cli.apply_overrides(base, cli.build_parser().parse_args([]))

    assert config == base


def test_load_image_defaults_to_demo_bitmap() -> None:
    image = cli.load_image(cli.build_parser().parse_args([]))

    assert image.bitmap.size == (320, 240)


def test_load_image_honors_demo_size() -> None:
    image = cli.load_image(cli.build_parser().parse_args(["--demo-size", "64x48"]))

    assert image.bitmap.size == (64, 48)


def test_load_image_rejects_bad_demo_size() -> None:
    with pytest.raises(BitmapFormatError):
        cli.load_image(cli.build_parser().parse_args(["--demo-size", "wide"]))


def test_main_runs_app_with_loaded_image(monkeypatch: pytest.MonkeyPatch) -> None:
    _RecordingApp.instances.clear()
    monkeypatch.setattr(cli, "ViewerApp", _RecordingApp)

    assert cli.main(["--demo-size", "16x8", "--scale", "2"]) == cli.EXIT_OK

    app = _RecordingApp.instances[-1]
    assert app.ran is True
    assert app.image.bitmap.size == (16, 8)
    assert app.config.window.initial_scale == 2


def test_main_returns_startup_failure_for_missing_file(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _RecordingApp.instances.clear()
    monkeypatch.setattr(cli, "ViewerApp", _RecordingApp)

    assert cli.main([str(tmp_path / "missing.png")]) == cli.EXIT_STARTUP_FAILURE
    assert _RecordingApp.instances == []


def test_main_returns_startup_failure_for_bad_demo_size(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "ViewerApp", _RecordingApp)

    assert cli.main(["--demo-size", "0x0"]) == cli.EXIT_STARTUP_FAILURE


def test_main_returns_startup_failure_when_gpu_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "ViewerApp", _FailingApp)

    assert cli.main(["--demo-size", "8x8"]) == cli.EXIT_STARTUP_FAILURE
