"""Row removal with consistent re-derivation of the selection state."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from strip_app.engine.detector import CosmicDetector
from strip_app.engine.errors import EmptySelectionError
from strip_app.engine.matrix_model import SpectralMatrix
from strip_app.engine.selection import SelectionState

logger = logging.getLogger(__name__)


@dataclass
class CompactionResult:
    matrix: SpectralMatrix
    state: SelectionState
    removed: np.ndarray     # 0-based indices of the removed rows
    kept: np.ndarray        # 0-based indices (in the old matrix) of surviving rows


def compact(
    matrix: SpectralMatrix,
    state: SelectionState,
    remove: np.ndarray,
    detector: CosmicDetector,
    *,
    selection: str,
) -> CompactionResult:
    """Drop the rows flagged in ``remove`` and rebuild masks for the smaller matrix.

    Manual marks of surviving rows follow them to their new positions; the
    automatic mask is recomputed from scratch and both ranges span the new
    extent.
    """

    remove = np.asarray(remove, dtype=bool)
    if remove.size != matrix.row_count:
        raise ValueError(f"Removal mask has {remove.size} rows, expected {matrix.row_count}")
    if not np.any(remove):
        raise EmptySelectionError(selection)

    kept = np.flatnonzero(~remove)
    removed = np.flatnonzero(remove)
    reduced = matrix.without_rows(remove)
    detector.invalidate()
    auto = detector.mask(reduced.data)

    new_state = SelectionState(
        auto_mask=auto,
        manual_mask=state.manual_mask[kept].copy(),
        transposed=state.transposed,
    )
    new_state.reset_ranges()
    logger.info(
        "Removed %d %s spectra; %d remain (%d automatic candidates)",
        removed.size,
        selection,
        reduced.row_count,
        new_state.candidate_count,
    )
    return CompactionResult(matrix=reduced, state=new_state, removed=removed, kept=kept)


def delete_marked(
    matrix: SpectralMatrix, state: SelectionState, detector: CosmicDetector
) -> CompactionResult:
    """Remove every manually marked row, regardless of automatic status."""

    return compact(matrix, state, state.manual_mask, detector, selection="marked")


def delete_cosmic(
    matrix: SpectralMatrix, state: SelectionState, detector: CosmicDetector
) -> CompactionResult:
    """Remove every automatic candidate across the whole collection."""

    return compact(matrix, state, state.auto_mask, detector, selection="cosmic")
