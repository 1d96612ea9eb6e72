"""Exceptions raised by the spike-strip engine."""

from __future__ import annotations

from typing import Sequence, Tuple


class InputShapeError(ValueError):
    """Raised when a raw block matches neither orientation of the sample axis."""

    def __init__(self, shape: Tuple[int, ...], expected: int):
        self.shape = tuple(shape)
        self.expected = int(expected)
        super().__init__(
            f"Matrix of shape {self.shape} has no dimension matching the "
            f"expected sample dimension {self.expected}"
        )


class EmptySelectionError(RuntimeError):
    """Raised when a delete operation finds nothing selected."""

    def __init__(self, selection: str):
        self.selection = selection
        super().__init__(f"No spectra selected for deletion ({selection})")


class RecipeError(ValueError):
    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))
