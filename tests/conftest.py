from __future__ import annotations

import numpy as np
import pytest
from PyQt6.QtCore import QCoreApplication

from subtitle_region_reader.frame import RawFrame


class FakeEngine:
    """OCR engine stand-in: records every image and returns canned text."""

    def __init__(self, text: str = "Hello world", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.images: list[np.ndarray] = []

    def recognize(self, image: np.ndarray) -> str:
        self.images.append(image)
        if self.error is not None:
            raise self.error
        return self.text


def solid_frame(width: int, height: int, rgb=(20, 20, 20)) -> RawFrame:
    rgba = np.zeros((height, width, 4), dtype=np.uint8)
    rgba[:, :, :3] = rgb
    rgba[:, :, 3] = 255
    return RawFrame.from_array(rgba)


def subtitle_frame(width: int = 40, height: int = 100) -> RawFrame:
    """Dark frame with a bright block where the subtitle band sits.

    With the default band (bottom 10%, lifted 2%) the band covers rows
    88..97; the block fills band rows 2..7, columns 10..29.
    """
    rgba = np.zeros((height, width, 4), dtype=np.uint8)
    rgba[:, :, :3] = 20
    rgba[:, :, 3] = 255
    rgba[90:96, 10:30, :3] = (250, 250, 250)
    return RawFrame.from_array(rgba)


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app
