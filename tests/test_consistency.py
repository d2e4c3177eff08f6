from datetime import date, timedelta

import pytest

from accountability_engine.consistency import consistency, consistency_windows
from accountability_engine.errors import InvalidConfiguration
from accountability_engine.schema import ScoreSnapshot

TODAY = date(2025, 3, 1)


def days_ago(n: int) -> date:
    return TODAY - timedelta(days=n)


def sample_series(percents_oldest_first):
    count = len(percents_oldest_first)
    return [ScoreSnapshot("g", days_ago(count - 1 - i), float(p)) for i, p in enumerate(percents_oldest_first)]


def test_window_is_truncated_at_creation():
    series = sample_series([100, 100, 0, 100, 100])
    assert consistency(series, 30, created_at=days_ago(4), as_of=TODAY) == pytest.approx(80.0)


def test_defaults_use_series_bounds():
    series = sample_series([100, 100, 0, 100, 100])
    assert consistency(series, 30) == pytest.approx(80.0)


def test_all_qualifying_is_exactly_100():
    series = sample_series([100] * 30)
    assert consistency(series, 30) == 100.0
    assert consistency(series, 30, half_life_days=7) == 100.0


def test_none_qualifying_is_exactly_0():
    series = sample_series([10] * 30)
    assert consistency(series, 30) == 0.0
    assert consistency(series, 30, half_life_days=7) == 0.0


def test_missing_days_count_as_misses():
    series = [ScoreSnapshot("g", days_ago(0), 100.0)]
    assert consistency(series, 7, created_at=days_ago(3), as_of=TODAY) == pytest.approx(25.0)


def test_recency_weighting_favours_recent_days():
    recent_good = sample_series([0] * 10 + [100] * 4)
    old_good = sample_series([100] * 4 + [0] * 10)
    simple_recent = consistency(recent_good, 14)
    simple_old = consistency(old_good, 14)
    assert simple_recent == pytest.approx(simple_old)
    assert consistency(recent_good, 14, half_life_days=3) > simple_recent
    assert consistency(old_good, 14, half_life_days=3) < simple_old


def test_threshold_is_configurable():
    series = sample_series([60, 40, 80])
    assert consistency(series, 3, threshold=50) == pytest.approx(200 / 3)


def test_result_stays_in_bounds():
    series = sample_series([100, 0, 55, 100, 0, 100, 90])
    for window in (1, 3, 7, 30):
        for half_life in (None, 0.5, 2, 30):
            assert 0.0 <= consistency(series, window, half_life) <= 100.0


def test_invalid_windows_are_rejected():
    series = sample_series([100])
    with pytest.raises(InvalidConfiguration):
        consistency(series, 0)
    with pytest.raises(InvalidConfiguration):
        consistency(series, 7, half_life_days=0)
    with pytest.raises(InvalidConfiguration):
        consistency(series, 7, half_life_days=-2)


def test_empty_series_scores_zero():
    assert consistency([], 7) == 0.0
    assert consistency([], 7, created_at=days_ago(3), as_of=TODAY) == 0.0


def test_consistency_windows():
    series = sample_series([0] * 20 + [100] * 10)
    result = consistency_windows(series, windows=(7, 30))
    assert result[7] == 100.0
    assert result[30] == pytest.approx(100 / 3)


def test_rest_days_leave_the_denominator():
    series = [
        ScoreSnapshot("g", days_ago(3), 100.0),
        ScoreSnapshot("g", days_ago(2), 0.0, reported=0, scheduled=0),
        ScoreSnapshot("g", days_ago(1), 0.0),
        ScoreSnapshot("g", days_ago(0), 100.0),
    ]
    assert consistency(series, 30) == pytest.approx(200 / 3)
    assert consistency([ScoreSnapshot("g", days_ago(0), 0.0, reported=0, scheduled=0)], 7) == 0.0
