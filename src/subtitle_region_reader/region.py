"""Cut the subtitle band out of a frame and magnify it for OCR."""

from __future__ import annotations

import math

import numpy as np

from subtitle_region_reader.frame import EmptyRegion, InvalidConfig, RawFrame


def band_bounds(
    height: int,
    bottom_fraction: float,
    vertical_offset_fraction: float,
) -> tuple[int, int]:
    """Return ``(y0, crop_height)`` of the subtitle band.

    The band covers ``bottom_fraction`` of the frame height and is lifted
    ``vertical_offset_fraction`` of the height above the bottom edge, so
    the crop skips player chrome that sits flush with the bottom.
    """
    if not 0.0 < bottom_fraction <= 1.0:
        raise InvalidConfig(f"bottom_fraction must be in (0, 1], got {bottom_fraction}")
    if not 0.0 <= vertical_offset_fraction < bottom_fraction:
        raise InvalidConfig(
            "vertical_offset_fraction must be in [0, bottom_fraction), "
            f"got {vertical_offset_fraction}"
        )

    crop_height = math.floor(height * bottom_fraction)
    if crop_height <= 0:
        raise EmptyRegion(
            f"bottom_fraction {bottom_fraction} of height {height} is less than one row"
        )
    offset = math.floor(height * vertical_offset_fraction)
    y0 = height - crop_height - offset
    y0 = min(max(y0, 0), height - crop_height)
    return y0, crop_height


def extract(
    frame: RawFrame,
    bottom_fraction: float,
    vertical_offset_fraction: float,
) -> np.ndarray:
    """Crop the subtitle band from a frame.

    Returns a new ``(crop_height, width, 4)`` RGBA array; the frame buffer
    itself is never modified.
    """
    rgba = frame.as_array()
    y0, crop_height = band_bounds(frame.height, bottom_fraction, vertical_offset_fraction)
    return rgba[y0 : y0 + crop_height].copy()


def upscale(image: np.ndarray, factor: int) -> np.ndarray:
    """Nearest-neighbor magnification by an integer factor.

    Each source pixel becomes a ``factor x factor`` block. No interpolation:
    smoothing would blur thin glyph strokes before thresholding.
    """
    if isinstance(factor, bool) or not isinstance(factor, (int, np.integer)) or factor < 1:
        raise InvalidConfig(f"upscale factor must be an integer >= 1, got {factor!r}")
    if factor == 1:
        return image.copy()
    return np.repeat(np.repeat(image, factor, axis=0), factor, axis=1)
