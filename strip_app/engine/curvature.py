"""Second-difference curvature scores."""

from __future__ import annotations

import numpy as np


def second_difference(normalized: np.ndarray) -> np.ndarray:
    """``r[i+1] - 2 r[i] + r[i-1]`` over interior samples of every row."""

    data = np.atleast_2d(np.asarray(normalized, dtype=float))
    return data[:, 2:] - 2.0 * data[:, 1:-1] + data[:, :-2]


def curvature_scores(normalized: np.ndarray) -> np.ndarray:
    """Maximum absolute second difference per row (``0`` when W < 3)."""

    data = np.atleast_2d(np.asarray(normalized, dtype=float))
    if data.shape[1] < 3:
        return np.zeros(data.shape[0], dtype=float)
    return np.max(np.abs(second_difference(data)), axis=1)
