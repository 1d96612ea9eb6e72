import math

import pytest
import yaml

from strip_app.engine.recipe_model import (
    DEFAULT_DETECTION_CONFIG,
    DetectionRecipe,
    load_preset,
    load_recipe,
    resolve_detection_config,
    save_recipe,
)
from strip_app.engine.spike_shape import ShapeLimits


def test_default_recipe_is_valid():
    recipe = DetectionRecipe()
    assert recipe.validate() == []
    assert recipe.threshold == 80.0
    assert recipe.window == 7
    assert recipe.shape_limits() == ShapeLimits()


def test_resolve_ignores_none_values():
    resolved = resolve_detection_config({"threshold": None, "window": 9})
    assert resolved["threshold"] == DEFAULT_DETECTION_CONFIG["threshold"]
    assert resolved["window"] == 9


def test_recipe_validation_flags_bad_values():
    params = {
        "detection": {
            "threshold": math.nan,
            "window": 6,
            "min_amplitude": -1,
            "contrast_factor": "steep",
            "max_width": 0,
            "edge_guard": -2,
        }
    }
    errs = DetectionRecipe(params=params).validate()
    assert "Detection threshold must be a finite number" in errs
    assert "Median window must be odd" in errs
    assert "Spike amplitude threshold must be positive" in errs
    assert "Spike contrast factor must be numeric" in errs
    assert "Maximum spike width must be a positive integer" in errs
    assert "Edge guard must be a non-negative integer" in errs


def test_recipe_accepts_flat_params():
    recipe = DetectionRecipe(params={"threshold": 40, "max_width": 2})
    assert recipe.validate() == []
    assert recipe.threshold == 40.0
    assert recipe.shape_limits().max_width == 2


def test_recipe_yaml_round_trip(tmp_path):
    recipe = DetectionRecipe(params={"detection": {"threshold": 55.5, "window": 9}})
    path = tmp_path / "strip.yaml"
    save_recipe(recipe, path)
    with path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle)
    assert raw["detection"]["threshold"] == 55.5
    restored = load_recipe(path)
    assert restored.threshold == 55.5
    assert restored.window == 9
    assert restored.validate() == []


def test_load_recipe_rejects_non_mapping(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_recipe(path)


def test_default_preset_matches_defaults():
    preset = load_preset("default")
    assert preset.validate() == []
    assert preset.resolved == DEFAULT_DETECTION_CONFIG
