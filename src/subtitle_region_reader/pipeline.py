"""Recognize subtitle text from a paused video frame.

Pipeline (one synchronous pass per request):
1. Crop the subtitle band from the bottom of the frame
2. Nearest-neighbor upscale
3. BT.601 luma conversion
4. 3x3 median denoise
5. Histogram equalization
6. Otsu binarization
7. OCR engine
8. Prefix/whitespace cleanup of the recognized text

Every stage allocates its own output; nothing is cached between calls,
so concurrent requests never share buffers.
"""

from __future__ import annotations

import logging
import time

import numpy as np

from subtitle_region_reader.binarizer import binarize
from subtitle_region_reader.debug_service import DebugRequest, DebugService
from subtitle_region_reader.filters import equalize, median_denoise, to_grayscale
from subtitle_region_reader.frame import RawFrame
from subtitle_region_reader.ocr_engine import OcrEngine
from subtitle_region_reader.region import extract, upscale
from subtitle_region_reader.settings import RecognitionConfig
from subtitle_region_reader.text_cleaner import clean_subtitle_text

logger = logging.getLogger(__name__)


def preprocess(
    frame: RawFrame,
    config: RecognitionConfig,
    debug: DebugRequest | None = None,
) -> np.ndarray:
    """Run the image half of the pipeline and return the binarized band."""
    config.validate()
    t0 = time.monotonic()

    crop = extract(frame, config.bottom_fraction, config.vertical_offset_fraction)
    scaled = upscale(crop, config.upscale_factor)
    gray = to_grayscale(scaled)
    denoised = median_denoise(gray)
    equalized = equalize(denoised)
    binary = binarize(equalized)

    if debug:
        debug.save_stage("crop", crop)
        debug.save_stage("upscaled", scaled)
        debug.save_stage("gray", gray)
        debug.save_stage("denoised", denoised)
        debug.save_stage("equalized", equalized)
        debug.save_stage("binarized", binary)

    logger.debug(
        "Preprocessed %dx%d frame -> %dx%d band in %dms",
        frame.width, frame.height, binary.shape[1], binary.shape[0],
        int((time.monotonic() - t0) * 1000),
    )
    return binary


def recognize_subtitle_region(
    frame: RawFrame,
    config: RecognitionConfig,
    engine: OcrEngine,
    debug: DebugService | None = None,
) -> str:
    """Recognize and clean the subtitle text in a frame.

    Raises a ``PipelineError`` subclass on invalid input or engine failure;
    an empty return value means no subtitle was detected.
    """
    request = debug.begin_request() if debug else None

    binary = preprocess(frame, config, request)
    raw = engine.recognize(binary)
    text = clean_subtitle_text(raw)

    if request:
        request.save_text("raw", raw)
        request.save_text("text", text)

    logger.debug("OCR raw: %s", repr(raw[:200]))
    if not text:
        logger.warning("No subtitle text detected in %dx%d frame", frame.width, frame.height)
    else:
        logger.debug("OCR cleaned: %s", repr(text[:200]))
    return text
