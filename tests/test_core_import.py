import importlib.util

import pytest


def test_app_main_callable():
    from DeskEye.app import main
    assert callable(main)


def test_run_module_entry():
    spec = importlib.util.find_spec("DeskEye.core.app")
    assert spec is not None, "core.app module should be discoverable"


def test_import_break_overlay():
    pytest.importorskip("PyQt6.QtWidgets")
    from DeskEye.ui.break_overlay import BreakOverlay  # noqa: F401
    from DeskEye.ui.main_window import MainWindow  # noqa: F401


def test_parse_args_defaults_and_overrides():
    from DeskEye.app import parse_args

    args = parse_args([])
    assert args.mode == "ui"
    assert args.pipeline is None
    args = parse_args(["--mode", "headless", "--pipeline", "model", "--framerate", "5", "--duration", "2"])
    assert args.mode == "headless"
    assert args.pipeline == "model"
    assert args.framerate == 5
    assert args.duration == 2.0
