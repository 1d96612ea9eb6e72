"""Robust per-row noise statistics."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

MAD_TO_SIGMA = 1.4826


@dataclass
class RowStatistics:
    scale: np.ndarray           # one positive value per row
    normalized: np.ndarray      # residual / scale, row-wise
    degenerate_rows: int        # rows whose scale was substituted with 1


def robust_scale(residual: np.ndarray) -> tuple[np.ndarray, int]:
    """Scaled MAD per row; non-positive or non-finite estimates become ``1``."""

    data = np.atleast_2d(np.asarray(residual, dtype=float))
    if data.shape[0] == 0:
        return np.ones(0, dtype=float), 0
    if data.shape[1] == 0:
        return np.ones(data.shape[0], dtype=float), data.shape[0]
    center = np.median(data, axis=1, keepdims=True)
    scale = MAD_TO_SIGMA * np.median(np.abs(data - center), axis=1)
    degenerate = ~np.isfinite(scale) | (scale <= 0)
    if np.any(degenerate):
        for row in np.flatnonzero(degenerate):
            logger.debug("Row %d has degenerate robust scale %r; using 1", row, scale[row])
        scale = np.where(degenerate, 1.0, scale)
    return scale, int(np.count_nonzero(degenerate))


def row_statistics(residual: np.ndarray) -> RowStatistics:
    data = np.atleast_2d(np.asarray(residual, dtype=float))
    scale, degenerate = robust_scale(data)
    if degenerate:
        logger.info("Substituted unit scale for %d degenerate row(s)", degenerate)
    normalized = data / scale[:, np.newaxis] if data.size else data.copy()
    return RowStatistics(scale=scale, normalized=normalized, degenerate_rows=degenerate)
