import numpy as np
import pytest

from strip_app.engine.baseline import effective_window, residuals, rolling_median
from strip_app.engine.curvature import curvature_scores, second_difference
from strip_app.engine.robust_stats import MAD_TO_SIGMA, robust_scale, row_statistics


def test_rolling_median_shrinks_windows_at_edges():
    values = np.array([1.0, 5.0, 2.0, 8.0, 3.0])
    result = rolling_median(values, 3)
    np.testing.assert_allclose(result, [3.0, 2.0, 5.0, 3.0, 5.5])


def test_rolling_median_uses_largest_odd_window_for_short_rows():
    values = np.array([4.0, 1.0, 3.0, 2.0])
    assert effective_window(values.size, 7) == 3
    np.testing.assert_allclose(rolling_median(values, 7), [2.5, 3.0, 2.0, 2.5])


def test_rolling_median_processes_rows_independently():
    matrix = np.array(
        [
            [0.0, 0.0, 9.0, 0.0, 0.0, 0.0, 0.0],
            [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0],
        ]
    )
    baseline = rolling_median(matrix, 3)
    assert baseline.shape == matrix.shape
    np.testing.assert_allclose(baseline[0], np.zeros(7))
    np.testing.assert_allclose(baseline[1, 1:-1], matrix[1, 1:-1])


def test_effective_window_rules():
    assert effective_window(100, 7) == 7
    assert effective_window(100, 6) == 5
    assert effective_window(1, 7) == 1
    assert effective_window(0, 7) == 0
    with pytest.raises(ValueError):
        effective_window(10, 0)


def test_residuals_of_linear_trend_vanish_in_the_interior():
    row = np.linspace(0.0, 10.0, 30)
    resid = residuals(row[np.newaxis, :], 7)
    np.testing.assert_allclose(resid[0, 3:-3], 0.0, atol=1e-12)


def test_robust_scale_is_scaled_mad():
    scale, degenerate = robust_scale(np.array([[1.0, 2.0, 3.0, 4.0, 100.0]]))
    assert degenerate == 0
    assert scale[0] == pytest.approx(MAD_TO_SIGMA)


def test_constant_rows_fall_back_to_unit_scale():
    residual = np.array([[0.0, 0.0, 0.0, 0.0], [1.0, -1.0, 2.0, -2.0]])
    stats = row_statistics(residual)
    assert stats.degenerate_rows == 1
    assert stats.scale[0] == 1.0
    assert stats.scale[1] > 0
    np.testing.assert_allclose(stats.normalized[1], residual[1] / stats.scale[1])


def test_curvature_score_is_max_absolute_second_difference():
    row = np.array([[0.0, 0.0, 5.0, 0.0, 0.0]])
    np.testing.assert_allclose(second_difference(row), [[5.0, -10.0, 5.0]])
    np.testing.assert_allclose(curvature_scores(row), [10.0])


def test_curvature_score_is_zero_for_rows_shorter_than_three_samples():
    np.testing.assert_allclose(curvature_scores(np.ones((4, 2))), np.zeros(4))
