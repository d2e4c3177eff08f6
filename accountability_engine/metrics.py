"""Period-level accountability metrics over a score series."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Optional

from accountability_engine.consistency import consistency
from accountability_engine.schema import ScoreSnapshot
from accountability_engine.streaks import DEFAULT_THRESHOLD, streak

IMPROVING_THRESHOLD = 5.0
DECLINING_THRESHOLD = -10.0


def _active(series: Sequence[ScoreSnapshot]) -> list[ScoreSnapshot]:
    return [snapshot for snapshot in series if snapshot.reported > 0]


def period_score(series: Sequence[ScoreSnapshot]) -> float:
    """Mean percent over the days on which anything was reported."""

    active = _active(series)
    if not active:
        return 0.0
    return sum(snapshot.percent for snapshot in active) / len(active)


def completion_rate(series: Sequence[ScoreSnapshot]) -> float:
    """Unweighted share of reported task-days that were fully completed."""

    reported = sum(snapshot.reported for snapshot in series)
    if reported == 0:
        return 0.0
    return 100.0 * sum(snapshot.completed for snapshot in series) / reported


def is_perfect_day(snapshot: ScoreSnapshot) -> bool:
    return snapshot.reported > 0 and snapshot.completed == snapshot.reported


def perfect_days(series: Sequence[ScoreSnapshot]) -> int:
    return sum(1 for snapshot in series if is_perfect_day(snapshot))


def trend(
    current: float,
    previous: float,
    improving: float = IMPROVING_THRESHOLD,
    declining: float = DECLINING_THRESHOLD,
) -> str:
    """Classify the change between two scores as improving, stable or declining."""

    difference = current - previous
    if difference > improving:
        return "improving"
    if difference < declining:
        return "declining"
    return "stable"


def compute_metrics(
    series: Sequence[ScoreSnapshot],
    threshold: float = DEFAULT_THRESHOLD,
    previous_score: Optional[float] = None,
    today: Optional[date] = None,
    improving: float = IMPROVING_THRESHOLD,
    declining: float = DECLINING_THRESHOLD,
) -> dict:
    """Compute score, completion, consistency, streak and trend metrics."""

    if not series:
        return {
            "score": 0.0,
            "completion": 0.0,
            "consistency": 0.0,
            "current_streak": 0,
            "longest_streak": 0,
            "perfect_days": 0,
            "trend": "stable",
            "tasks_completed": 0,
            "tasks_reported": 0,
        }

    score = period_score(series)
    span = (series[-1].day - series[0].day).days + 1
    state = streak(series, threshold=threshold, today=today)

    return {
        "score": score,
        "completion": completion_rate(series),
        "consistency": consistency(series, span, threshold=threshold),
        "current_streak": state.current,
        "longest_streak": state.longest,
        "perfect_days": perfect_days(series),
        "trend": "stable" if previous_score is None else trend(score, previous_score, improving, declining),
        "tasks_completed": sum(snapshot.completed for snapshot in series),
        "tasks_reported": sum(snapshot.reported for snapshot in series),
    }
