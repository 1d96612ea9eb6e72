from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from strip_app.engine.spike_shape import ShapeLimits

DEFAULT_DETECTION_CONFIG: Dict[str, Any] = {
    "threshold": 80.0,
    "window": 7,
    "min_amplitude": 6.0,
    "contrast_factor": 2.5,
    "max_width": 3,
    "edge_guard": 2,
}

PRESET_DIR = Path(__file__).resolve().parent.parent / "config" / "presets"


def resolve_detection_config(cfg: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return detection settings merged over the shared defaults."""

    resolved = dict(DEFAULT_DETECTION_CONFIG)
    if cfg:
        resolved.update({k: v for k, v in cfg.items() if v is not None})
    return resolved


def _as_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_int(value: Any) -> int | None:
    number = _as_float(value)
    if number is None or not math.isfinite(number) or number != int(number):
        return None
    return int(number)


@dataclass
class DetectionRecipe:
    params: Dict[str, Any] = field(default_factory=dict)
    version: str = "0.1.0"

    @property
    def resolved(self) -> Dict[str, Any]:
        return resolve_detection_config(self.params.get("detection", self.params))

    @property
    def threshold(self) -> float:
        return float(self.resolved["threshold"])

    @property
    def window(self) -> int:
        return int(self.resolved["window"])

    def shape_limits(self) -> ShapeLimits:
        cfg = self.resolved
        return ShapeLimits(
            min_amplitude=float(cfg["min_amplitude"]),
            contrast_factor=float(cfg["contrast_factor"]),
            max_width=int(cfg["max_width"]),
            edge_guard=int(cfg["edge_guard"]),
        )

    def validate(self) -> list[str]:
        errs = []
        cfg = self.resolved

        threshold = _as_float(cfg.get("threshold"))
        if threshold is None or not math.isfinite(threshold):
            errs.append("Detection threshold must be a finite number")

        window = _as_int(cfg.get("window"))
        if window is None:
            errs.append("Median window must be an integer")
        else:
            if window < 1:
                errs.append("Median window must be at least 1 point")
            if window % 2 == 0:
                errs.append("Median window must be odd")

        for key, label in (
            ("min_amplitude", "Spike amplitude threshold"),
            ("contrast_factor", "Spike contrast factor"),
        ):
            value = _as_float(cfg.get(key))
            if value is None:
                errs.append(f"{label} must be numeric")
            elif value <= 0:
                errs.append(f"{label} must be positive")

        max_width = _as_int(cfg.get("max_width"))
        if max_width is None or max_width < 1:
            errs.append("Maximum spike width must be a positive integer")

        edge_guard = _as_int(cfg.get("edge_guard"))
        if edge_guard is None or edge_guard < 0:
            errs.append("Edge guard must be a non-negative integer")
        return errs

    def to_dict(self) -> Dict[str, Any]:
        return {"version": self.version, "detection": dict(self.resolved)}


def load_recipe(path: str | Path) -> DetectionRecipe:
    with open(path, "r", encoding="utf-8") as handle:
        content = yaml.safe_load(handle) or {}
    if not isinstance(content, dict):
        raise ValueError(f"Recipe file {path} must contain a mapping")
    version = str(content.get("version", "0.1.0"))
    detection = content.get("detection", {}) or {}
    if not isinstance(detection, dict):
        raise ValueError(f"'detection' section in {path} must be a mapping")
    return DetectionRecipe(params={"detection": dict(detection)}, version=version)


def save_recipe(recipe: DetectionRecipe, path: str | Path) -> None:
    with open(path, "w", encoding="utf-8") as handle:
        yaml.safe_dump(recipe.to_dict(), handle, sort_keys=False)


def load_preset(name: str = "default") -> DetectionRecipe:
    return load_recipe(PRESET_DIR / f"{name}.yaml")
