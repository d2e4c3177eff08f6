from datetime import date, timedelta

import pytest

from accountability_engine.errors import InvalidConfiguration, OutOfRange
from accountability_engine.schema import Goal, ScoreSnapshot
from accountability_engine.streaks import resolve_threshold, streak, streak_as_of

START = date(2025, 1, 1)


def day(n: int) -> date:
    return START + timedelta(days=n - 1)


def sample_series(percents, first=1):
    return [ScoreSnapshot("g", day(first + i), float(p)) for i, p in enumerate(percents)]


def test_non_qualifying_day_resets_current_but_keeps_longest():
    series = sample_series([100, 100, 100, 40, 100, 100])
    state = streak(series, threshold=100, today=day(6))
    assert state.current == 2
    assert state.longest == 3
    assert state.last_qualifying_date == day(6)


def test_gap_in_series_breaks_the_run():
    series = sample_series([100, 100]) + sample_series([100], first=5)
    state = streak(series, threshold=100, today=day(5))
    assert state.current == 1
    assert state.longest == 2


def test_yesterday_still_counts_as_current():
    series = sample_series([100, 100, 100])
    assert streak(series, today=day(4)).current == 3


def test_stale_series_has_no_current_streak():
    series = sample_series([100, 100, 100])
    state = streak(series, today=day(5))
    assert state.current == 0
    assert state.longest == 3


def test_threshold_controls_qualification():
    series = sample_series([60, 55, 70])
    assert streak(series, threshold=50, today=day(3)).current == 3
    state = streak(series, threshold=100, today=day(3))
    assert (state.current, state.longest) == (0, 0)


def test_longest_never_below_current():
    patterns = [[100] * 5, [0] * 5, [100, 0, 100, 100], [0, 100, 100, 100, 0, 100]]
    for percents in patterns:
        state = streak(sample_series(percents), today=day(len(percents)))
        assert 0 <= state.current <= state.longest
        assert isinstance(state.current, int) and isinstance(state.longest, int)


def test_empty_series():
    state = streak([], today=day(1))
    assert (state.current, state.longest, state.last_qualifying_date) == (0, 0, None)


def test_unordered_series_is_rejected():
    series = list(reversed(sample_series([100, 100])))
    with pytest.raises(InvalidConfiguration):
        streak(series, today=day(2))


def test_future_dates_are_rejected():
    with pytest.raises(OutOfRange):
        streak(sample_series([100, 100]), today=day(1))


def test_resolve_threshold_prefers_goal_setting():
    assert resolve_threshold(Goal("g", priority=1, threshold=60)) == 60.0
    assert resolve_threshold(Goal("g", priority=1)) == 100.0
    assert resolve_threshold(None, default=80) == 80.0


def test_streak_as_of_counts_back_from_date():
    series = sample_series([100, 0, 100, 100, 100])
    assert streak_as_of(series, day(5)) == 3
    assert streak_as_of(series, day(2)) == 0
    assert streak_as_of(series, day(9)) == 0


def rest_day(n: int) -> ScoreSnapshot:
    return ScoreSnapshot("g", day(n), 0.0, reported=0, scheduled=0)


def test_rest_days_neither_count_nor_break():
    series = sample_series([100, 100]) + [rest_day(3), rest_day(4)] + sample_series([100], first=5)
    state = streak(series, today=day(5))
    assert (state.current, state.longest) == (3, 3)
    assert streak_as_of(series, day(5)) == 3
    assert streak_as_of(series, day(4)) == 2


def test_unreported_today_is_still_open():
    pending = sample_series([100, 100, 100]) + [ScoreSnapshot("g", day(4), 0.0, reported=0)]
    assert streak(pending, today=day(4)).current == 3

    missed = sample_series([100, 100, 100, 0])
    assert streak(missed, today=day(4)).current == 0
