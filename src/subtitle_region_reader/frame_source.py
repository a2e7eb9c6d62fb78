"""Frame suppliers: produce a ``RawFrame`` for the pipeline.

The caller pauses playback first, so the captured surface is stable and
not torn mid-update.
"""

from __future__ import annotations

import logging
import os

import cv2
import numpy as np
from mss import mss
from mss.exception import ScreenShotError

from subtitle_region_reader.frame import InvalidFrame, RawFrame

logger = logging.getLogger(__name__)


def load_frame(path: str) -> RawFrame:
    """Load a screenshot file as an RGBA frame."""
    if not os.path.isfile(path):
        raise InvalidFrame(f"image file not found: {path}")
    bgr = cv2.imread(path, cv2.IMREAD_COLOR)
    if bgr is None or bgr.size == 0:
        raise InvalidFrame(f"could not decode image: {path}")
    rgba = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGBA)
    logger.debug("Loaded %s (%dx%d)", path, rgba.shape[1], rgba.shape[0])
    return RawFrame.from_array(rgba)


class ScreenFrameSource:
    """Grabs a screen region (the paused video surface) via mss."""

    def __init__(self, region: tuple[int, int, int, int]) -> None:
        left, top, width, height = region
        if width <= 0 or height <= 0:
            raise InvalidFrame(f"capture region has invalid size {width}x{height}")
        self._monitor = {
            "left": left,
            "top": top,
            "width": width,
            "height": height,
        }

    def capture(self) -> RawFrame:
        try:
            with mss() as sct:
                screenshot = sct.grab(self._monitor)
        except ScreenShotError as e:
            raise InvalidFrame(f"screen capture of {self._monitor} failed: {e}") from e
        bgra = np.array(screenshot, dtype=np.uint8)
        rgba = cv2.cvtColor(bgra, cv2.COLOR_BGRA2RGBA)
        logger.debug("Captured screen region %s", self._monitor)
        return RawFrame.from_array(rgba)
