"""Sliding-median baseline estimation for spectral rows."""

from __future__ import annotations

import numpy as np
from scipy.ndimage import median_filter

DEFAULT_WINDOW = 7


def effective_window(length: int, requested: int = DEFAULT_WINDOW) -> int:
    """Largest odd window not exceeding ``requested`` or ``length``."""

    requested = int(requested)
    if requested < 1:
        raise ValueError("Median window must be a positive integer")
    eff = min(requested, int(length))
    if eff < 1:
        return 0
    if eff % 2 == 0:
        eff -= 1
    return eff


def rolling_median(values: np.ndarray, window: int = DEFAULT_WINDOW) -> np.ndarray:
    """Median filter along the last axis with windows that shrink at the edges.

    No samples are fabricated beyond the ends: the first and last
    ``window // 2`` outputs use truncated windows instead of reflected padding.
    """

    arr = np.asarray(values, dtype=float)
    squeeze = arr.ndim == 1
    if squeeze:
        arr = arr[np.newaxis, :]
    n = arr.shape[-1]
    size = effective_window(n, window)
    if size == 0 or arr.shape[0] == 0:
        out = arr.copy()
        return out[0] if squeeze else out
    half = size // 2

    # interior samples see a full window, only the edges need truncation
    out = median_filter(arr, size=(1, size), mode="reflect")
    for idx in range(half):
        out[..., idx] = np.median(arr[..., : idx + half + 1], axis=-1)
        right = n - 1 - idx
        out[..., right] = np.median(arr[..., max(0, right - half) :], axis=-1)

    return out[0] if squeeze else out


def estimate_baseline(matrix: np.ndarray, window: int = DEFAULT_WINDOW) -> np.ndarray:
    return rolling_median(np.asarray(matrix, dtype=float), window)


def residuals(matrix: np.ndarray, window: int = DEFAULT_WINDOW) -> np.ndarray:
    """Return ``matrix - baseline`` for every row."""

    data = np.asarray(matrix, dtype=float)
    return data - estimate_baseline(data, window)
