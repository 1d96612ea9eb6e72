import numpy as np
import pytest

from strip_app.engine.detector import CosmicDetector, analyse_rows, combine


def _noisy_matrix(rows: int = 100, cols: int = 50, seed: int = 1234) -> np.ndarray:
    rng = np.random.default_rng(seed)
    trend = np.linspace(0.0, 3.0, cols)
    return rng.normal(0.0, 1.0, size=(rows, cols)) + trend


def test_single_spike_row_is_the_only_candidate():
    data = _noisy_matrix()
    data[9, 25] += 50.0
    detector = CosmicDetector(80.0)
    mask = detector.mask(data)
    np.testing.assert_array_equal(np.flatnonzero(mask), [9])
    scores = detector.analyse(data).scores
    assert scores[9] > 80.0
    assert np.max(np.delete(scores, 9)) < 40.0


def test_twenty_sigma_spike_scores_well_above_noise():
    data = _noisy_matrix(seed=7)
    data[9, 25] += 20.0
    analysis = analyse_rows(data)
    assert analysis.has_spike[9]
    assert analysis.scores[9] > 25.0
    np.testing.assert_array_equal(np.flatnonzero(combine(analysis.scores, analysis.has_spike, 25.0)), [9])


def test_detection_is_idempotent():
    data = _noisy_matrix(seed=3)
    data[40, 10] += 60.0
    detector = CosmicDetector(80.0)
    first_mask = detector.mask(data)
    first_scores = detector.analyse(data).scores.copy()
    detector.invalidate()
    second_mask = detector.mask(data)
    second_scores = detector.analyse(data).scores
    np.testing.assert_array_equal(first_mask, second_mask)
    np.testing.assert_array_equal(first_scores, second_scores)
    assert detector.passes == 2


def test_threshold_change_reuses_cached_analysis():
    data = _noisy_matrix(seed=5)
    detector = CosmicDetector(80.0)
    detector.mask(data)
    detector.set_threshold(10.0)
    detector.mask(data)
    assert detector.passes == 1
    detector.set_window(5)
    detector.mask(data)
    assert detector.passes == 2


def test_raising_threshold_never_adds_candidates():
    data = _noisy_matrix(seed=11)
    for row, amplitude in zip((5, 20, 35, 60, 90), (15.0, 30.0, 45.0, 60.0, 90.0)):
        data[row, 25] += amplitude
    analysis = analyse_rows(data)
    previous = None
    for threshold in (0.0, 20.0, 40.0, 60.0, 80.0, 120.0, 200.0):
        mask = combine(analysis.scores, analysis.has_spike, threshold)
        if previous is not None:
            assert not np.any(mask & ~previous)
        previous = mask


def test_threshold_must_be_finite():
    with pytest.raises(ValueError):
        CosmicDetector(float("nan"))
    detector = CosmicDetector(1.0)
    with pytest.raises(ValueError):
        detector.set_threshold(float("inf"))
    with pytest.raises(ValueError):
        detector.set_window(0)


def test_in_place_edit_is_picked_up_by_the_next_mask():
    data = np.zeros((100, 50))
    detector = CosmicDetector(80.0)
    assert not detector.mask(data).any()
    data[9, 25] += 50.0
    np.testing.assert_array_equal(np.flatnonzero(detector.mask(data)), [9])
    assert detector.analyse(data).scores[9] > 80.0
    assert detector.passes == 2
