"""Editing session owning the matrix, detector and selection state.

Every command the interface layer can issue (threshold changes, manual
marks, range changes, deletions) goes through :class:`SelectionSession`, so
masks, scores and ranges always describe the matrix currently held.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np
import pandas as pd

from strip_app.engine.audit import log_step, start_audit
from strip_app.engine.compaction import CompactionResult, delete_cosmic, delete_marked
from strip_app.engine.detector import CosmicDetector
from strip_app.engine.errors import EmptySelectionError, RecipeError
from strip_app.engine.matrix_model import SpectralMatrix, load_matrix
from strip_app.engine.playback import CandidatePlayback
from strip_app.engine.recipe_model import DetectionRecipe
from strip_app.engine.selection import RangeKind, RowClass, SelectionState, classify
from strip_app.engine.spike_shape import find_spikes

logger = logging.getLogger(__name__)


class EditStatus(str, Enum):
    UPDATED = "updated"
    NOTHING_SELECTED = "nothing_selected"
    OUT_OF_RANGE = "out_of_range"


@dataclass
class EditResult:
    status: EditStatus
    data: np.ndarray            # matrix in the caller's orientation
    removed: int = 0
    message: str = ""
    display_range: Optional[Tuple[int, int]] = None

    @property
    def changed(self) -> bool:
        return self.status is EditStatus.UPDATED


class SelectionSession:
    def __init__(
        self,
        matrix: SpectralMatrix,
        *,
        recipe: Optional[DetectionRecipe] = None,
        name: Optional[str] = None,
    ):
        recipe = recipe or DetectionRecipe()
        errs = recipe.validate()
        if errs:
            raise RecipeError(errs)
        self.recipe = recipe
        self.name = name
        self.audit = start_audit()
        self.detector = CosmicDetector(
            recipe.threshold,
            window=recipe.window,
            limits=recipe.shape_limits(),
        )
        self._install(matrix)

    @classmethod
    def load(
        cls,
        raw: Any,
        expected_samples: int,
        *,
        recipe: Optional[DetectionRecipe] = None,
        name: Optional[str] = None,
        axis: Any = None,
    ) -> "SelectionSession":
        matrix, _ = load_matrix(raw, expected_samples, axis=axis)
        return cls(matrix, recipe=recipe, name=name)

    def _install(self, matrix: SpectralMatrix) -> None:
        self.matrix = matrix
        self.detector.invalidate()
        auto = self.detector.mask(matrix.data)
        self.state = SelectionState.fresh(auto, transposed=matrix.transposed)
        log_step(
            self.audit,
            f"Loaded {self.name or 'matrix'}: {matrix.row_count} spectra x "
            f"{matrix.sample_count} samples (transposed={matrix.transposed}), "
            f"{self.state.candidate_count} cosmic candidates",
        )

    def replace(self, raw: Any, expected_samples: int, *, name: Optional[str] = None, axis: Any = None) -> None:
        """Switch to a different dataset; manual marks and ranges start over."""

        matrix, _ = load_matrix(raw, expected_samples, axis=axis)
        self.name = name
        self._install(matrix)

    # Configuration -----------------------------------------------------

    def set_threshold(self, value: float) -> np.ndarray:
        self.detector.set_threshold(value)
        self.state.set_auto_mask(self.detector.mask(self.matrix.data))
        logger.info(
            "Threshold set to %g: %d cosmic candidates", self.detector.threshold, self.state.candidate_count
        )
        log_step(self.audit, f"Threshold {self.detector.threshold:g}: {self.state.candidate_count} candidates")
        return self.get_auto_mask()

    def set_window(self, window: int) -> np.ndarray:
        self.detector.set_window(window)
        self.state.set_auto_mask(self.detector.mask(self.matrix.data))
        log_step(self.audit, f"Median window {self.detector.window}: {self.state.candidate_count} candidates")
        return self.get_auto_mask()

    # Queries -----------------------------------------------------------

    @property
    def row_count(self) -> int:
        return self.matrix.row_count

    @property
    def threshold(self) -> float:
        return self.detector.threshold

    @property
    def degenerate_rows(self) -> int:
        return self.detector.analyse(self.matrix.data).degenerate_rows

    def get_auto_mask(self) -> np.ndarray:
        return self.state.auto_mask.copy()

    def get_manual_mask(self) -> np.ndarray:
        return self.state.manual_mask.copy()

    def get_scores(self) -> np.ndarray:
        return self.detector.analyse(self.matrix.data).scores.copy()

    def get_display_ranges(self) -> Dict[str, Tuple[int, int]]:
        return {
            RangeKind.ALL.value: self.state.all_range,
            RangeKind.COSMIC.value: self.state.cosmic_range,
        }

    def classify_row(self, row: int) -> Optional[RowClass]:
        """Classification of 1-based ``row`` for rendering; ``None`` when out of range."""

        index = int(row) - 1
        if not 0 <= index < self.row_count:
            logger.debug("No classification for row %s (row count %d)", row, self.row_count)
            return None
        return classify(bool(self.state.auto_mask[index]), bool(self.state.manual_mask[index]))

    def report(self) -> pd.DataFrame:
        analysis = self.detector.analyse(self.matrix.data)
        spikes = [
            [int(i) + 1 for i in find_spikes(row, self.detector.limits)] if flagged else []
            for row, flagged in zip(analysis.normalized, analysis.has_spike)
        ]
        return pd.DataFrame(
            {
                "row": np.arange(1, self.row_count + 1),
                "score": analysis.scores,
                "scale": analysis.scale,
                "has_spike": analysis.has_spike,
                "auto": self.state.auto_mask,
                "manual": self.state.manual_mask,
                "classification": [c.value for c in self.state.classify_rows()],
                "spike_samples": spikes,
            }
        )

    def summary(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "spectra": self.row_count,
            "samples": self.matrix.sample_count,
            "transposed": self.matrix.transposed,
            "threshold": self.detector.threshold,
            "window": self.detector.window,
            "cosmic_candidates": self.state.candidate_count,
            "manual_marks": int(np.count_nonzero(self.state.manual_mask)),
            "degenerate_rows": self.degenerate_rows,
        }

    # Mutations ---------------------------------------------------------

    def toggle_manual(self, row: int) -> EditResult:
        if self.state.toggle_manual(row):
            return EditResult(EditStatus.UPDATED, self.materialize())
        return EditResult(
            EditStatus.OUT_OF_RANGE,
            self.materialize(),
            message=f"Row {row} outside 1..{self.row_count}",
        )

    def set_display_range(self, kind: RangeKind | str, start: int, end: int) -> EditResult:
        requested = (min(int(start), int(end)), max(int(start), int(end)))
        clamped = self.state.set_display_range(kind, start, end)
        message = "" if clamped == requested else f"Range {requested} clamped to {clamped}"
        return EditResult(EditStatus.UPDATED, self.materialize(), message=message, display_range=clamped)

    def _apply(self, operation, label: str) -> EditResult:
        try:
            result: CompactionResult = operation(self.matrix, self.state, self.detector)
        except EmptySelectionError as exc:
            logger.info("%s", exc)
            log_step(self.audit, f"Delete {label}: nothing selected")
            return EditResult(EditStatus.NOTHING_SELECTED, self.materialize(), message=str(exc))
        self.matrix = result.matrix
        self.state = result.state
        removed_rows = ", ".join(str(i + 1) for i in result.removed)
        log_step(
            self.audit,
            f"Deleted {result.removed.size} {label} spectra (rows {removed_rows}); "
            f"{self.row_count} remain",
        )
        return EditResult(EditStatus.UPDATED, self.materialize(), removed=int(result.removed.size))

    def delete_marked(self) -> EditResult:
        return self._apply(delete_marked, "marked")

    def delete_cosmic(self) -> EditResult:
        return self._apply(delete_cosmic, "cosmic")

    # Export ------------------------------------------------------------

    def materialize(self) -> np.ndarray:
        return self.matrix.materialize()

    def playback(self, kind: RangeKind | str = RangeKind.COSMIC) -> CandidatePlayback:
        """Iterator over the rows shown by the range of ``kind`` (0-based)."""

        return CandidatePlayback(self.state.rows_in_range(kind))
