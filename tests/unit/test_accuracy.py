import pytest

from app.services.accuracy_service import rmse, score_fit


def test_rmse_is_zero_for_an_exact_fit():
    assert rmse([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == 0.0


def test_rmse_is_positive_for_any_difference():
    assert rmse([1.0, 2.0, 3.0], [1.0, 2.0, 3.001]) > 0


def test_rmse_truncates_to_the_shorter_series():
    assert rmse([3.0, 4.0, 99.0], [0.0, 0.0]) == pytest.approx(((9 + 16) / 2) ** 0.5)


def test_rmse_of_nothing_is_zero():
    assert rmse([], [1.0, 2.0]) == 0.0


def test_accuracy_is_normalised_by_the_peak():
    score = score_fit([90.0, 110.0], [100.0, 100.0])
    assert score.rmse == pytest.approx(10.0)
    assert score.accuracy == pytest.approx(0.9)


def test_accuracy_is_clamped_at_zero():
    score = score_fit([1000.0, -1000.0], [10.0, 20.0])
    assert score.accuracy == 0.0


def test_accuracy_without_donations_is_zero_not_nan():
    score = score_fit([5.0, 5.0, 5.0], [0.0, 0.0, 0.0])
    assert score.rmse == pytest.approx(5.0)
    assert score.accuracy == 0.0
