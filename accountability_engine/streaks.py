"""Current and longest streaks of qualifying days."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta
from typing import Optional

from accountability_engine.errors import OutOfRange
from accountability_engine.history import ensure_ascending
from accountability_engine.schema import Goal, ScoreSnapshot, StreakState

DEFAULT_THRESHOLD = 100.0


def resolve_threshold(goal: Optional[Goal], default: float = DEFAULT_THRESHOLD) -> float:
    """Use the goal's own threshold when it has one."""

    if goal is not None and goal.threshold is not None:
        return float(goal.threshold)
    return float(default)


def streak(
    series: Sequence[ScoreSnapshot],
    threshold: float = DEFAULT_THRESHOLD,
    today: Optional[date] = None,
) -> StreakState:
    """Compute current and longest streaks from an ascending score series.

    Calendar days missing between two snapshots break the run, while rest
    days (nothing scheduled, nothing reported) neither count nor break it.
    The final run only counts as current when the series reaches today or
    yesterday, since today's entry may not exist yet. For the same reason a
    trailing row for today with nothing reported is left out.
    """

    today = today or date.today()
    if not series:
        return StreakState()

    ensure_ascending([snapshot.day for snapshot in series], label="streak series")
    if series[-1].day > today:
        raise OutOfRange(f"streak series ends on {series[-1].day}, after today ({today})")

    if series[-1].day == today and series[-1].reported == 0:
        series = series[:-1]
        if not series:
            return StreakState()

    run = 0
    longest = 0
    last_qualifying: Optional[date] = None
    previous_day: Optional[date] = None
    for snapshot in series:
        if previous_day is not None and (snapshot.day - previous_day).days > 1:
            run = 0
        previous_day = snapshot.day
        if snapshot.is_rest_day:
            continue
        if snapshot.percent >= threshold:
            run += 1
            last_qualifying = snapshot.day
        else:
            run = 0
        longest = max(longest, run)

    current = run if series[-1].day >= today - timedelta(days=1) else 0
    return StreakState(current=current, longest=longest, last_qualifying_date=last_qualifying)


def streak_as_of(
    series: Sequence[ScoreSnapshot],
    as_of: date,
    threshold: float = DEFAULT_THRESHOLD,
) -> int:
    """Count consecutive qualifying days ending on as_of, stepping over rest days."""

    by_day = {snapshot.day: snapshot for snapshot in series}
    count = 0
    day = as_of
    while day in by_day:
        snapshot = by_day[day]
        if not snapshot.is_rest_day:
            if snapshot.percent < threshold:
                break
            count += 1
        day -= timedelta(days=1)
    return count
