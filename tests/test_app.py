"""Tests for the command line entry point and the frame sources."""

import numpy as np
import pytest
from mss.exception import ScreenShotError
from PIL import Image

from conftest import FakeEngine
from subtitle_region_reader import app, frame_source
from subtitle_region_reader.frame import InvalidFrame
from subtitle_region_reader.frame_source import ScreenFrameSource, load_frame


def _write_screenshot(path) -> None:
    rgb = np.full((100, 40, 3), 20, dtype=np.uint8)
    rgb[90:96, 10:30] = (250, 240, 60)  # yellow subtitle block
    Image.fromarray(rgb).save(path)


@pytest.fixture
def engine(monkeypatch):
    engine = FakeEngine("01:02 PR See you tomorrow")
    monkeypatch.setattr(app, "TesseractEngine", lambda config: engine)
    return engine


class TestLoadFrame:
    def test_png_to_rgba(self, tmp_path):
        path = tmp_path / "shot.png"
        _write_screenshot(path)

        frame = load_frame(str(path))

        assert (frame.width, frame.height) == (40, 100)
        rgba = frame.as_array()
        assert rgba[92, 15].tolist() == [250, 240, 60, 255]

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidFrame):
            load_frame(str(tmp_path / "nope.png"))

    def test_not_an_image(self, tmp_path):
        path = tmp_path / "notes.png"
        path.write_text("not an image")
        with pytest.raises(InvalidFrame):
            load_frame(str(path))


class FakeScreen:
    """mss stand-in returning a fixed BGRA grab."""

    def __init__(self, bgra=None, error=None):
        self.bgra = bgra
        self.error = error
        self.monitors = []

    def __call__(self):
        return self

    def __enter__(self):
        if self.error is not None:
            raise self.error
        return self

    def __exit__(self, *exc):
        return False

    def grab(self, monitor):
        self.monitors.append(monitor)
        return self.bgra


def _screen_bgra() -> np.ndarray:
    bgra = np.zeros((100, 40, 4), dtype=np.uint8)
    bgra[:, :, :3] = 20
    bgra[:, :, 3] = 255
    bgra[90:96, 10:30] = (60, 240, 250, 255)  # yellow in BGRA order
    return bgra


class TestScreenFrameSource:
    def test_rejects_empty_region(self):
        with pytest.raises(InvalidFrame):
            ScreenFrameSource((0, 0, 0, 10))

    def test_capture_converts_bgra_to_rgba(self, monkeypatch):
        screen = FakeScreen(_screen_bgra())
        monkeypatch.setattr(frame_source, "mss", screen)

        frame = ScreenFrameSource((5, 7, 40, 100)).capture()

        assert screen.monitors == [{"left": 5, "top": 7, "width": 40, "height": 100}]
        assert (frame.width, frame.height) == (40, 100)
        assert frame.as_array()[92, 15].tolist() == [250, 240, 60, 255]

    def test_capture_failure_is_invalid_frame(self, monkeypatch):
        monkeypatch.setattr(
            frame_source, "mss", FakeScreen(error=ScreenShotError("no display"))
        )
        with pytest.raises(InvalidFrame, match="no display"):
            ScreenFrameSource((0, 0, 40, 100)).capture()


class TestMain:
    def test_prints_cleaned_text(self, tmp_path, engine, capsys):
        path = tmp_path / "shot.png"
        _write_screenshot(path)

        code = app.main(["image", str(path)])

        assert code == app.EXIT_OK
        assert capsys.readouterr().out.strip() == "See you tomorrow"
        assert engine.images[0].shape == (20, 80)

    def test_options_override_config(self, tmp_path, engine):
        path = tmp_path / "shot.png"
        _write_screenshot(path)

        app.main(["--scale", "3", "--bottom-fraction", "0.2", "image", str(path)])

        # 20 rows x 40 columns, upscaled 3x
        assert engine.images[0].shape == (60, 120)

    def test_no_text(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(app, "TesseractEngine", lambda config: FakeEngine("  "))
        path = tmp_path / "shot.png"
        _write_screenshot(path)

        assert app.main(["image", str(path)]) == app.EXIT_NO_TEXT
        assert capsys.readouterr().out == ""

    def test_failure_reported(self, tmp_path, engine, capsys):
        code = app.main(["image", str(tmp_path / "missing.png")])

        assert code == app.EXIT_FAILED
        assert "recognition failed" in capsys.readouterr().err

    def test_invalid_option_reported(self, tmp_path, engine, capsys):
        path = tmp_path / "shot.png"
        _write_screenshot(path)

        code = app.main(["--scale", "0", "image", str(path)])

        assert code == app.EXIT_FAILED
        assert "upscale_factor" in capsys.readouterr().err

    def test_debug_dir(self, tmp_path, engine):
        path = tmp_path / "shot.png"
        _write_screenshot(path)
        debug_root = tmp_path / "debug"

        app.main(["--debug-dir", str(debug_root), "image", str(path)])

        sessions = list(debug_root.iterdir())
        assert len(sessions) == 1
        assert (sessions[0] / "001" / "binarized.png").is_file()

    def test_screen_source(self, engine, monkeypatch, capsys):
        monkeypatch.setattr(frame_source, "mss", FakeScreen(_screen_bgra()))

        code = app.main(["screen", "0", "0", "40", "100"])

        assert code == app.EXIT_OK
        assert capsys.readouterr().out.strip() == "See you tomorrow"
        assert engine.images[0].shape == (20, 80)

    def test_screen_failure_reported(self, engine, monkeypatch, capsys):
        monkeypatch.setattr(
            frame_source, "mss", FakeScreen(error=ScreenShotError("no display"))
        )

        code = app.main(["screen", "0", "0", "40", "100"])

        assert code == app.EXIT_FAILED
        assert "recognition failed" in capsys.readouterr().err
        assert engine.images == []
