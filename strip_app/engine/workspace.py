"""Helpers for choosing which named matrices a session should offer."""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Mapping, Sequence

import numpy as np

from strip_app.engine.errors import InputShapeError
from strip_app.engine.matrix_model import resolve_orientation


def split_affixes(text: str | None) -> List[str]:
    """Split comma-separated user input, dropping blanks."""

    if not text:
        return []
    return [chunk.strip() for chunk in str(text).split(",") if chunk.strip()]


def build_pattern(prefixes: Sequence[str] = (), suffixes: Sequence[str] = ()) -> str:
    prefix_part = "|".join(re.escape(p) for p in prefixes if p)
    suffix_part = "|".join(re.escape(s) for s in suffixes if s)
    if prefix_part and suffix_part:
        return f"^({prefix_part}).*({suffix_part})$"
    if prefix_part:
        return f"^({prefix_part}).*"
    if suffix_part:
        return f".*({suffix_part})$"
    return ".*"


def match_variables(
    names: Iterable[str],
    prefixes: Sequence[str] = (),
    suffixes: Sequence[str] = (),
) -> List[str]:
    pattern = re.compile(build_pattern(prefixes, suffixes))
    return [name for name in names if pattern.fullmatch(name)]


def parse_dimension(text: Any) -> int:
    """Parse a user-entered wavenumber dimension into a positive integer."""

    try:
        value = float(str(text).strip())
    except (TypeError, ValueError):
        raise ValueError(f"Invalid wavenumber dimension: {text!r}") from None
    if not np.isfinite(value) or value != int(value) or value < 1:
        raise ValueError(f"Invalid wavenumber dimension: {text!r}")
    return int(value)


def candidate_variables(
    workspace: Mapping[str, Any],
    expected_samples: int,
    prefixes: Sequence[str] = (),
    suffixes: Sequence[str] = (),
) -> List[str]:
    """Names in ``workspace`` that match the affixes and hold a loadable matrix."""

    accepted: List[str] = []
    for name in match_variables(workspace.keys(), prefixes, suffixes):
        shape = np.shape(workspace[name])
        try:
            resolve_orientation(shape, expected_samples)
        except InputShapeError:
            continue
        accepted.append(name)
    return accepted
