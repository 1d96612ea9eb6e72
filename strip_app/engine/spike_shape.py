"""Shape test separating narrow cosmic spikes from genuine spectral bands.

A row passes when its normalized residual contains at least one local
maximum that is tall (``min_amplitude`` noise units), isolated (its height is
``contrast_factor`` times the larger of the samples two positions away on
either side) and narrow (at most ``max_width`` samples above half maximum).
Sharp Raman lines easily reach a high curvature score but are several
samples wide, so they fail the width or contrast test.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np


@dataclass(frozen=True)
class ShapeLimits:
    min_amplitude: float = 6.0
    contrast_factor: float = 2.5
    max_width: int = 3
    edge_guard: int = 2
    neighbour_offset: int = 2


def _guarded(row: np.ndarray, guard: int) -> np.ndarray:
    r = np.array(row, dtype=float, copy=True).ravel()
    r[~np.isfinite(r)] = 0.0
    if guard > 0:
        r[:guard] = 0.0
        r[-guard:] = 0.0
    return r


def local_maxima(r: np.ndarray) -> np.ndarray:
    """Indices where ``r[i] > 0``, ``r[i] >= r[i+1]`` and ``r[i] > r[i-1]``."""

    if r.size < 3:
        return np.zeros(0, dtype=int)
    centre = r[1:-1]
    is_max = (centre > 0) & (centre >= r[2:]) & (centre > r[:-2])
    return np.flatnonzero(is_max) + 1


def half_max_width(r: np.ndarray, peak: int) -> int:
    half = 0.5 * r[peak]
    left = peak
    while left > 0 and r[left - 1] > half:
        left -= 1
    right = peak
    while right < r.size - 1 and r[right + 1] > half:
        right += 1
    return right - left + 1


def _contrast(r: np.ndarray, peak: int, offset: int) -> float:
    neighbours = [abs(r[idx]) for idx in (peak - offset, peak + offset) if 0 <= idx < r.size]
    reference = max(neighbours) if neighbours else 0.0
    if reference <= 0:
        return float("inf")
    return float(r[peak] / reference)


def find_spikes(row: np.ndarray, limits: ShapeLimits = ShapeLimits()) -> List[int]:
    """Return indices of peaks in ``row`` that satisfy every shape constraint."""

    r = _guarded(row, limits.edge_guard)
    candidates = local_maxima(r)
    candidates = candidates[r[candidates] > limits.min_amplitude]
    accepted: List[int] = []
    for peak in candidates:
        peak = int(peak)
        if _contrast(r, peak, limits.neighbour_offset) < limits.contrast_factor:
            continue
        if half_max_width(r, peak) <= limits.max_width:
            accepted.append(peak)
    return accepted


def has_spike(row: np.ndarray, limits: ShapeLimits = ShapeLimits()) -> bool:
    return bool(find_spikes(row, limits))


def spike_flags(normalized: np.ndarray, limits: ShapeLimits = ShapeLimits()) -> np.ndarray:
    data = np.atleast_2d(np.asarray(normalized, dtype=float))
    return np.fromiter((has_spike(row, limits) for row in data), dtype=bool, count=data.shape[0])
