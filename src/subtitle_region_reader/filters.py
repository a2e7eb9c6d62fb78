"""Grayscale conversion, denoising and contrast stretch.

Every function takes an array and returns a freshly allocated one; inputs
are never written to.
"""

from __future__ import annotations

import numpy as np

from subtitle_region_reader.frame import InvalidFrame

# ITU-R BT.601 luma weights
LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114

HISTOGRAM_BINS = 256


def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


def to_grayscale(rgba: np.ndarray) -> np.ndarray:
    """Convert an RGBA (or RGB) image to a luma plane.

    Perceptual weighting keeps white/yellow subtitle text brighter than
    most backgrounds, where a flat channel average would not.
    """
    if rgba.ndim != 3 or rgba.shape[2] < 3:
        raise InvalidFrame(f"expected an (h, w, 3|4) color image, got {rgba.shape}")

    rgb = rgba[:, :, :3].astype(np.float64)
    luma = LUMA_R * rgb[:, :, 0] + LUMA_G * rgb[:, :, 1] + LUMA_B * rgb[:, :, 2]
    return np.clip(_round_half_up(luma), 0, 255).astype(np.uint8)


def median_denoise(plane: np.ndarray) -> np.ndarray:
    """3x3 median filter; border rows and columns pass through unchanged.

    Removes salt-and-pepper compression noise that would otherwise pull a
    single global threshold off.
    """
    result = plane.copy()
    h, w = plane.shape
    if h < 3 or w < 3:
        return result

    # The 9 neighbors of every interior pixel, stacked on axis 0.
    neighbors = np.stack([
        plane[dy : h - 2 + dy, dx : w - 2 + dx]
        for dy in range(3)
        for dx in range(3)
    ])
    result[1 : h - 1, 1 : w - 1] = np.partition(neighbors, 4, axis=0)[4]
    return result


def histogram(plane: np.ndarray) -> np.ndarray:
    """Count pixels per intensity value (256 buckets)."""
    return np.bincount(plane.ravel(), minlength=HISTOGRAM_BINS)[:HISTOGRAM_BINS]


def equalize(plane: np.ndarray) -> np.ndarray:
    """Histogram equalization through the cumulative distribution.

    A constant plane (every pixel in one bucket) has no spread to stretch;
    it maps to all zeros instead of dividing by zero.
    """
    hist = histogram(plane)
    cdf = np.cumsum(hist)
    total = int(plane.size)
    if total == 0:
        return plane.copy()

    cdf_min = int(cdf[np.flatnonzero(cdf)[0]])
    if total == cdf_min:
        return np.zeros_like(plane)

    scaled = (cdf - cdf_min) / (total - cdf_min) * 255.0
    lut = np.clip(_round_half_up(scaled), 0, 255).astype(np.uint8)
    return lut[plane]
