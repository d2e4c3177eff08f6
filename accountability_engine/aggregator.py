"""Goal scores from task fractions, and priority-weighted rollups across goals."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping, Sequence
from datetime import date
from typing import Optional

from accountability_engine.errors import InvalidConfiguration, OutOfRange
from accountability_engine.history import date_range
from accountability_engine.normalizer import fraction, is_completed, is_scheduled
from accountability_engine.schema import LEVELS, Goal, ScoreSnapshot, Task


def goal_tasks(goal: Goal, tasks: Iterable[Task] | Mapping[Hashable, Task]) -> list[Task]:
    if isinstance(tasks, Mapping):
        tasks = tasks.values()
    return [task for task in tasks if task.id in goal.task_ids or task.goal_id == goal.id]


def task_weight(task: Task) -> int:
    """Importance counts double: (importance * 2) + difficulty, from 3 to 9."""

    importance = LEVELS.get(task.importance, 1)
    difficulty = LEVELS.get(task.difficulty, 1)
    return importance * 2 + difficulty


def importance_weights(tasks: Iterable[Task]) -> dict:
    return {task.id: float(task_weight(task)) for task in tasks}


def goal_snapshot(
    goal: Goal,
    tasks: Iterable[Task] | Mapping[Hashable, Task],
    day: date,
    today: Optional[date] = None,
    weights: Optional[Mapping[Hashable, float]] = None,
) -> ScoreSnapshot:
    """Score the goal on one day, counting only the tasks that reported."""

    today = today or date.today()
    if day > today:
        raise OutOfRange(f"Goal {goal.id}: {day} is after today ({today})")

    weighted_sum = 0.0
    weight_total = 0.0
    reported = 0
    completed = 0
    scheduled = 0
    for task in goal_tasks(goal, tasks):
        if day < task.created_at:
            continue
        scheduled += 1 if is_scheduled(task, day) else 0
        value = fraction(task, day, today=today)
        if value is None:
            continue

        weight = 1.0 if weights is None else float(weights.get(task.id, 1.0))
        if weight <= 0:
            raise InvalidConfiguration(f"Task {task.id}: weight must be > 0, got {weight!r}")

        weighted_sum += weight * value
        weight_total += weight
        reported += 1
        completed += 1 if is_completed(task, task.entry_for(day)) else 0

    percent = 0.0 if weight_total == 0 else min(100.0, 100.0 * weighted_sum / weight_total)
    return ScoreSnapshot(
        subject_id=goal.id, day=day, percent=percent, reported=reported, completed=completed, scheduled=scheduled
    )


def goal_score(
    goal: Goal,
    tasks: Iterable[Task] | Mapping[Hashable, Task],
    day: date,
    today: Optional[date] = None,
    weights: Optional[Mapping[Hashable, float]] = None,
) -> float:
    """Weighted mean of reporting task fractions, as a percent; 0 when none reported."""

    return goal_snapshot(goal, tasks, day, today=today, weights=weights).percent


def goal_series(
    goal: Goal,
    tasks: Iterable[Task] | Mapping[Hashable, Task],
    start: date,
    end: date,
    today: Optional[date] = None,
    weights: Optional[Mapping[Hashable, float]] = None,
) -> list[ScoreSnapshot]:
    """One snapshot per calendar day, including silent days scored 0.

    Days on which no owned task is scheduled and nothing was reported come
    back as rest days (scheduled == 0).
    """

    today = today or date.today()
    owned = goal_tasks(goal, tasks)
    if goal.created_at is not None:
        start = max(start, goal.created_at)
    end = min(end, today)
    return [goal_snapshot(goal, owned, day, today=today, weights=weights) for day in date_range(start, end)]


def priority_weight(priority: int) -> int:
    """Priority 1 weighs 5, priority 5 weighs 1."""

    if not 1 <= priority <= 5:
        raise InvalidConfiguration(f"priority must be in 1..5, got {priority!r}")
    return 6 - priority


def rollup(scores: Mapping[Hashable, float], goals: Iterable[Goal] | Mapping[Hashable, Goal]) -> float:
    """Combine goal percents into one overall percent weighted by goal priority."""

    if isinstance(goals, Mapping):
        goals = goals.values()
    by_id = {goal.id: goal for goal in goals}

    weights = {}
    for goal_id in scores:
        if goal_id not in by_id:
            raise InvalidConfiguration(f"score given for unknown goal {goal_id!r}")
        weights[goal_id] = priority_weight(by_id[goal_id].priority)

    total = sum(weights.values())
    if total == 0:
        return 0.0
    combined = sum(scores[goal_id] * weight / total for goal_id, weight in weights.items())
    return max(0.0, min(100.0, combined))


def settled(series: Sequence[ScoreSnapshot], today: date) -> list[ScoreSnapshot]:
    """Drop a trailing row for today when nothing has been reported on it yet."""

    series = list(series)
    if series and series[-1].day == today and series[-1].reported == 0:
        series.pop()
    return series
