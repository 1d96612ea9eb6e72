"""Spectral matrix container and the orientation rule used on ingest/export."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import numpy as np

from strip_app.engine.errors import InputShapeError

logger = logging.getLogger(__name__)


@dataclass
class SpectralMatrix:
    data: np.ndarray                # rows = spectra, columns = samples
    transposed: bool = False        # True when the external block was samples x spectra
    axis: Optional[np.ndarray] = None  # sample coordinates, labeling only

    def __post_init__(self) -> None:
        self.data = np.array(self.data, dtype=float)
        if self.data.ndim != 2:
            raise ValueError(f"Spectral matrix must be two-dimensional, got shape {self.data.shape}")
        # rows only change through compaction, which builds a new matrix
        self.data.flags.writeable = False
        if self.axis is not None:
            axis = np.asarray(self.axis, dtype=float).ravel()
            if axis.size != self.data.shape[1]:
                raise ValueError(
                    f"Sample axis has {axis.size} entries, expected {self.data.shape[1]}"
                )
            self.axis = axis

    @property
    def row_count(self) -> int:
        return int(self.data.shape[0])

    @property
    def sample_count(self) -> int:
        return int(self.data.shape[1])

    def materialize(self) -> np.ndarray:
        """Return a copy of the data in the orientation it was supplied in."""

        out = self.data.copy()
        return out.T.copy() if self.transposed else out

    def without_rows(self, remove: np.ndarray) -> "SpectralMatrix":
        remove = np.asarray(remove, dtype=bool)
        return SpectralMatrix(
            data=self.data[~remove].copy(),
            transposed=self.transposed,
            axis=None if self.axis is None else self.axis.copy(),
        )


def resolve_orientation(shape: Tuple[int, ...], expected_samples: int) -> bool:
    """Return ``True`` when a block of ``shape`` must be transposed.

    A block whose second dimension equals ``expected_samples`` is already
    spectra x samples; otherwise a matching first dimension means the block is
    samples x spectra. Anything else is rejected.
    """

    if len(shape) != 2:
        raise InputShapeError(shape, expected_samples)
    rows, cols = int(shape[0]), int(shape[1])
    if cols == expected_samples:
        return False
    if rows == expected_samples:
        return True
    raise InputShapeError(shape, expected_samples)


def load_matrix(
    raw: Any,
    expected_samples: int,
    *,
    axis: Any = None,
) -> Tuple[SpectralMatrix, bool]:
    """Validate ``raw`` against the sample dimension and wrap it.

    Returns the matrix (always spectra x samples) and whether a transpose was
    applied. Raises :class:`InputShapeError` without creating any state when
    neither dimension matches.
    """

    expected = int(expected_samples)
    if expected < 1:
        raise ValueError("Expected sample dimension must be positive")
    block = np.array(raw, dtype=float, copy=True)
    try:
        transposed = resolve_orientation(block.shape, expected)
    except InputShapeError:
        logger.warning(
            "Rejected matrix of shape %s (expected sample dimension %d)", block.shape, expected
        )
        raise
    data = block.T.copy() if transposed else block
    matrix = SpectralMatrix(
        data=data,
        transposed=transposed,
        axis=None if axis is None else np.asarray(axis, dtype=float),
    )
    logger.info(
        "Loaded %d spectra x %d samples (transposed=%s)",
        matrix.row_count,
        matrix.sample_count,
        transposed,
    )
    return matrix, transposed
