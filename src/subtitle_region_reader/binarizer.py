from __future__ import annotations

import numpy as np

from subtitle_region_reader.filters import histogram

FOREGROUND = 255
BACKGROUND = 0

# Used when the histogram holds a single intensity and no cut point exists.
DEGENERATE_THRESHOLD = 0


def otsu_threshold(plane: np.ndarray) -> int:
    """Pick the cut point that maximizes between-class variance.

    Runs one pass over the 256 candidates keeping the background weight and
    intensity sum. Empty buckets between two populations produce a run of
    candidates with identical variance; the middle of the first such run is
    returned so the cut falls between the modes rather than on one of them.
    """
    hist = histogram(plane).tolist()
    total = int(plane.size)
    sum_all = sum(v * count for v, count in enumerate(hist))

    w_b = 0
    sum_b = 0
    best_var = -1.0
    run_start: int | None = None
    run_end: int | None = None

    for t in range(256):
        w_b += hist[t]
        sum_b += t * hist[t]
        if w_b == 0:
            continue
        w_f = total - w_b
        if w_f == 0:
            break

        m_b = sum_b / w_b
        m_f = (sum_all - sum_b) / w_f
        variance = w_b * w_f * (m_b - m_f) ** 2

        if variance > best_var:
            best_var = variance
            run_start = run_end = t
        elif variance == best_var and run_end == t - 1:
            run_end = t

    if run_start is None or run_end is None:
        return DEGENERATE_THRESHOLD
    return (run_start + run_end) // 2


def binarize(plane: np.ndarray, threshold: int | None = None) -> np.ndarray:
    """Binarize a plane: 255 where ``value > threshold``, 0 elsewhere.

    The threshold is computed with Otsu's method unless given. A
    single-valued plane falls back to threshold 0, so any non-zero constant
    plane comes out entirely foreground and an all-zero plane entirely
    background.
    """
    if threshold is None:
        threshold = otsu_threshold(plane)
    return np.where(plane > threshold, FOREGROUND, BACKGROUND).astype(np.uint8)
