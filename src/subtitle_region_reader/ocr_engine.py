"""OCR engines that turn a binarized subtitle band into raw text.

The pipeline only depends on the ``OcrEngine`` protocol: anything with a
``recognize(image) -> str`` method that accepts an ``(h, w)`` uint8 array
of 0/255 values can be plugged in. ``TesseractEngine`` is the default.
"""

from __future__ import annotations

import logging
import shlex
import time
from typing import Protocol

import numpy as np
import pytesseract
from PIL import Image

from subtitle_region_reader.frame import PipelineError
from subtitle_region_reader.settings import RecognitionConfig

logger = logging.getLogger(__name__)


class OcrEngineError(PipelineError):
    """The OCR engine is missing, crashed, or timed out."""


# ── OCR Engine Protocol ────────────────────────────────────────────

class OcrEngine(Protocol):
    """Protocol for OCR backends."""

    def recognize(self, image: np.ndarray) -> str:
        """Recognize text in a binarized image.

        Args:
            image: ``(h, w)`` uint8 array, every value 0 or 255.

        Returns:
            Raw recognized text, possibly multi-line.
        """
        ...


# ── Tesseract Engine ──────────────────────────────────────────────

# Page segmentation modes: 7 = single text line (typical subtitle),
# 6 = single uniform block (two-line subtitles).
_PSM_BY_MODE: dict[str, int] = {
    "single-line": 7,
    "auto-block": 6,
}

# OEM 1 = LSTM neural net only.
_OEM = 1


def build_tesseract_config(config: RecognitionConfig) -> str:
    """Build the Tesseract command-line config string for a recognition config."""
    psm = _PSM_BY_MODE[config.page_segmentation_mode]
    parts = [f"--oem {_OEM}", f"--psm {psm}", "-c preserve_interword_spaces=1"]
    if config.allowed_characters:
        whitelist = f"tessedit_char_whitelist={config.allowed_characters}"
        parts.append(f"-c {shlex.quote(whitelist)}")
    return " ".join(parts)


class TesseractEngine:
    """Tesseract OCR via pytesseract.

    Configured once from a ``RecognitionConfig``; holds no per-request state,
    so one instance can serve requests from several worker threads.
    """

    def __init__(self, config: RecognitionConfig | None = None) -> None:
        config = config or RecognitionConfig()
        config.validate()
        self._language = config.language
        self._timeout_s = config.ocr_timeout_s
        self._tesseract_config = build_tesseract_config(config)

    @property
    def tesseract_config(self) -> str:
        return self._tesseract_config

    def recognize(self, image: np.ndarray) -> str:
        pil_image = Image.fromarray(np.ascontiguousarray(image, dtype=np.uint8))

        t0 = time.monotonic()
        try:
            text = pytesseract.image_to_string(
                pil_image,
                lang=self._language,
                config=self._tesseract_config,
                timeout=self._timeout_s,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise OcrEngineError("tesseract is not installed or not on PATH") from e
        except pytesseract.TesseractError as e:
            raise OcrEngineError(f"tesseract failed: {e}") from e
        except RuntimeError as e:
            # pytesseract signals a timeout with a bare RuntimeError
            raise OcrEngineError(f"tesseract did not finish: {e}") from e

        ocr_ms = int((time.monotonic() - t0) * 1000)
        logger.debug("Tesseract (%dms): %s", ocr_ms, repr(text[:200]))
        return text
