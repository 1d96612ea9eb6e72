"""Cosmic-spike detection combining curvature scores with the shape test."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from strip_app.engine.baseline import DEFAULT_WINDOW, residuals
from strip_app.engine.curvature import curvature_scores
from strip_app.engine.robust_stats import row_statistics
from strip_app.engine.spike_shape import ShapeLimits, spike_flags

logger = logging.getLogger(__name__)


@dataclass
class RowAnalysis:
    """Threshold-independent per-row results for one matrix."""

    scores: np.ndarray
    has_spike: np.ndarray
    scale: np.ndarray
    normalized: np.ndarray
    degenerate_rows: int


def analyse_rows(
    matrix: np.ndarray,
    *,
    window: int = DEFAULT_WINDOW,
    limits: ShapeLimits = ShapeLimits(),
) -> RowAnalysis:
    data = np.atleast_2d(np.asarray(matrix, dtype=float))
    resid = residuals(data, window)
    stats = row_statistics(resid)
    return RowAnalysis(
        scores=curvature_scores(stats.normalized),
        has_spike=spike_flags(stats.normalized, limits),
        scale=stats.scale,
        normalized=stats.normalized,
        degenerate_rows=stats.degenerate_rows,
    )


def combine(scores: np.ndarray, has_spike: np.ndarray, threshold: float) -> np.ndarray:
    return (np.asarray(scores, dtype=float) > float(threshold)) & np.asarray(has_spike, dtype=bool)


class CosmicDetector:
    """Caches row analysis so threshold changes only redo the boolean combination."""

    def __init__(
        self,
        threshold: float = 80.0,
        *,
        window: int = DEFAULT_WINDOW,
        limits: Optional[ShapeLimits] = None,
    ):
        self._threshold = self._check_threshold(threshold)
        self._window = self._check_window(window)
        self.limits = limits or ShapeLimits()
        self._snapshot: Optional[np.ndarray] = None
        self._analysis: Optional[RowAnalysis] = None
        self.passes = 0

    @staticmethod
    def _check_threshold(value: float) -> float:
        value = float(value)
        if not math.isfinite(value):
            raise ValueError("Detection threshold must be finite")
        return value

    @staticmethod
    def _check_window(value: int) -> int:
        if int(value) < 1:
            raise ValueError("Median window must be a positive integer")
        return int(value)

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def window(self) -> int:
        return self._window

    def set_threshold(self, value: float) -> None:
        self._threshold = self._check_threshold(value)

    def set_window(self, value: int) -> None:
        value = self._check_window(value)
        if value != self._window:
            self._window = value
            self._analysis = None

    def analyse(self, matrix: np.ndarray) -> RowAnalysis:
        """Analyse ``matrix``; cached results are reused while its values are unchanged."""

        data = np.asarray(matrix, dtype=float)
        if (
            self._analysis is not None
            and self._snapshot is not None
            and self._snapshot.shape == data.shape
            and np.array_equal(self._snapshot, data, equal_nan=True)
        ):
            return self._analysis
        # keep a private copy so in-place edits of the caller's array are noticed
        self._snapshot = data.copy()
        self._analysis = analyse_rows(data, window=self._window, limits=self.limits)
        self.passes += 1
        logger.debug(
            "Analysed %d rows (window=%d, degenerate=%d)",
            self._analysis.scores.size,
            self._window,
            self._analysis.degenerate_rows,
        )
        return self._analysis

    def invalidate(self) -> None:
        self._snapshot = None
        self._analysis = None

    def mask(self, matrix: np.ndarray) -> np.ndarray:
        analysis = self.analyse(matrix)
        return combine(analysis.scores, analysis.has_spike, self._threshold)
