import numpy as np
import pytest

from strip_app.engine.workspace import (
    build_pattern,
    candidate_variables,
    match_variables,
    parse_dimension,
    split_affixes,
)


def test_split_affixes_drops_blanks():
    assert split_affixes(" raw, map_ ,,") == ["raw", "map_"]
    assert split_affixes("") == []
    assert split_affixes(None) == []


def test_build_pattern_variants():
    assert build_pattern(["raw"], []) == "^(raw).*"
    assert build_pattern([], ["_cm", "_nm"]) == ".*(_cm|_nm)$"
    assert build_pattern(["a", "b"], ["x"]) == "^(a|b).*(x)$"
    assert build_pattern([], []) == ".*"


def test_match_variables_preserves_order_and_escapes():
    names = ["raw_1_cm", "raw_2", "map.cm", "mapXcm", "other_cm"]
    assert match_variables(names, ["raw"], ["_cm"]) == ["raw_1_cm"]
    assert match_variables(names, [], [".cm"]) == ["map.cm"]
    assert match_variables(names, ["raw", "map"]) == ["raw_1_cm", "raw_2", "map.cm", "mapXcm"]


def test_parse_dimension():
    assert parse_dimension("660") == 660
    assert parse_dimension(" 1024 ") == 1024
    for bad in ("abc", "0", "-3", "6.5", "nan", None):
        with pytest.raises(ValueError):
            parse_dimension(bad)


def test_candidate_variables_requires_matching_shape():
    workspace = {
        "raw_a": np.zeros((10, 660)),
        "raw_b": np.zeros((660, 4)),
        "raw_c": np.zeros((10, 20)),
        "raw_label": "not a matrix",
        "other": np.zeros((10, 660)),
    }
    assert candidate_variables(workspace, 660, ["raw"]) == ["raw_a", "raw_b"]
