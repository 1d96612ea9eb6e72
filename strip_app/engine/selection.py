"""Selection state: automatic/manual masks and the two display ranges."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

import numpy as np

logger = logging.getLogger(__name__)


class RangeKind(str, Enum):
    ALL = "all"
    COSMIC = "cosmic"


class RowClass(str, Enum):
    NORMAL = "normal"
    MANUAL = "manual"
    AUTO = "auto"
    BOTH = "both"


def classify(auto: bool, manual: bool) -> RowClass:
    if auto and manual:
        return RowClass.BOTH
    if auto:
        return RowClass.AUTO
    if manual:
        return RowClass.MANUAL
    return RowClass.NORMAL


def clamp_range(start: int, end: int, limit: int) -> Tuple[int, int]:
    """Order and clamp a 1-based inclusive range into ``[1, limit]``.

    An empty domain (``limit < 1``) collapses to the ``(1, 1)`` sentinel.
    """

    start, end = int(start), int(end)
    if start > end:
        start, end = end, start
    if limit < 1:
        return 1, 1
    start = min(max(start, 1), limit)
    end = min(max(end, 1), limit)
    return start, end


def full_range(limit: int) -> Tuple[int, int]:
    return (1, int(limit)) if limit >= 1 else (1, 1)


@dataclass
class SelectionState:
    auto_mask: np.ndarray
    manual_mask: np.ndarray
    transposed: bool = False
    all_range: Tuple[int, int] = (1, 1)
    cosmic_range: Tuple[int, int] = (1, 1)
    rejected_toggles: int = field(default=0, repr=False)

    @classmethod
    def fresh(cls, auto_mask: np.ndarray, *, transposed: bool = False) -> "SelectionState":
        auto = np.asarray(auto_mask, dtype=bool).copy()
        state = cls(
            auto_mask=auto,
            manual_mask=np.zeros(auto.size, dtype=bool),
            transposed=transposed,
        )
        state.reset_ranges()
        return state

    @property
    def row_count(self) -> int:
        return int(self.auto_mask.size)

    @property
    def candidate_count(self) -> int:
        return int(np.count_nonzero(self.auto_mask))

    def candidate_rows(self) -> np.ndarray:
        return np.flatnonzero(self.auto_mask)

    def range_limit(self, kind: RangeKind | str) -> int:
        kind = RangeKind(kind)
        return self.row_count if kind is RangeKind.ALL else self.candidate_count

    def set_auto_mask(self, auto_mask: np.ndarray) -> None:
        """Install a recomputed automatic mask and reset the candidate range."""

        auto = np.asarray(auto_mask, dtype=bool).copy()
        if auto.size != self.row_count:
            raise ValueError(
                f"Automatic mask has {auto.size} rows, expected {self.row_count}"
            )
        self.auto_mask = auto
        self.cosmic_range = full_range(self.candidate_count)

    def reset_ranges(self) -> None:
        self.all_range = full_range(self.row_count)
        self.cosmic_range = full_range(self.candidate_count)

    def toggle_manual(self, row: int) -> bool:
        """Flip the manual mark of 1-based ``row``; out-of-range rows are ignored."""

        index = int(row) - 1
        if not 0 <= index < self.row_count:
            self.rejected_toggles += 1
            logger.debug("Ignored toggle for row %s (row count %d)", row, self.row_count)
            return False
        self.manual_mask[index] = not self.manual_mask[index]
        return True

    def set_display_range(self, kind: RangeKind | str, start: int, end: int) -> Tuple[int, int]:
        kind = RangeKind(kind)
        clamped = clamp_range(start, end, self.range_limit(kind))
        if kind is RangeKind.ALL:
            self.all_range = clamped
        else:
            self.cosmic_range = clamped
        return clamped

    def rows_in_range(self, kind: RangeKind | str) -> np.ndarray:
        """0-based matrix rows addressed by the current range of ``kind``."""

        kind = RangeKind(kind)
        if kind is RangeKind.ALL:
            if self.row_count == 0:
                return np.zeros(0, dtype=int)
            start, end = self.all_range
            return np.arange(start - 1, end)
        candidates = self.candidate_rows()
        if candidates.size == 0:
            return candidates
        start, end = self.cosmic_range
        return candidates[start - 1 : end]

    def classify_rows(self) -> list[RowClass]:
        return [classify(bool(a), bool(m)) for a, m in zip(self.auto_mask, self.manual_mask)]
