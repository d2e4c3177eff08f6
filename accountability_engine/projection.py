"""Trend-based estimates of whether a target will be met by a deadline.

Both estimators return estimates, not guarantees: they extrapolate past
behaviour and say nothing about what the user will actually do.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping
from datetime import date
from math import erf, sqrt
from typing import Optional

import numpy as np
from sklearn.linear_model import LinearRegression

from accountability_engine.errors import InsufficientData, InvalidConfiguration, NotApplicable, OutOfRange
from accountability_engine.aggregator import goal_tasks
from accountability_engine.history import date_range
from accountability_engine.normalizer import is_completed, is_scheduled
from accountability_engine.schema import CHECKBOX, Goal, Projection, Task

_ZERO_TOLERANCE = 1e-9


def _normal_cdf(value: float) -> float:
    return 0.5 * (1.0 + erf(value / sqrt(2.0)))


def _progress_points(task: Task, as_of: date, cumulative: bool) -> tuple[date, np.ndarray, np.ndarray]:
    entries = [entry for entry in task.history if entry.day <= as_of and entry.value is not None]
    if len(entries) < 2:
        raise InsufficientData(f"Task {task.id}: need at least 2 history points up to {as_of}, got {len(entries)}")

    origin = entries[0].day
    x = np.array([(entry.day - origin).days for entry in entries], dtype=float)
    y = np.array([entry.value for entry in entries], dtype=float)
    if cumulative:
        y = np.cumsum(y)
    return origin, x, y


def project_completion(task: Task, as_of: date, deadline: Optional[date], *, cumulative: bool = False) -> Projection:
    """Extrapolate a number task's progress to the deadline.

    Progress is regressed on elapsed days with ordinary least squares. Entry
    values are read as progress-to-date; pass cumulative=True when they are
    daily increments to be summed. The probability is the normal CDF of
    (projected - target) / residual standard error.
    """

    if task.type == CHECKBOX:
        raise NotApplicable(f"Task {task.id}: projection needs a number task")
    if deadline is None:
        raise NotApplicable(f"Task {task.id}: projection needs a deadline")
    if task.target is None or task.target <= 0:
        raise InvalidConfiguration(f"Task {task.id}: number tasks need a target > 0, got {task.target!r}")
    if deadline < as_of:
        raise OutOfRange(f"Task {task.id}: deadline {deadline} is before {as_of}")

    origin, x, y = _progress_points(task, as_of, cumulative)

    model = LinearRegression()
    model.fit(x.reshape(-1, 1), y)
    horizon = float((deadline - origin).days)
    projected = float(model.predict(np.array([[horizon]]))[0])

    residuals = y - model.predict(x.reshape(-1, 1))
    dof = len(x) - 2
    residual_std = float(sqrt(np.sum(residuals**2) / dof)) if dof > 0 else 0.0

    target = float(task.target)
    scale = max(1.0, abs(target), abs(projected))
    if residual_std <= _ZERO_TOLERANCE * scale:
        probability = 1.0 if projected >= target - _ZERO_TOLERANCE * scale else 0.0
    else:
        probability = _normal_cdf((projected - target) / residual_std)

    return Projection(probability=max(0.0, min(1.0, probability)), projected_value=projected)


def _elapsed_caps(time_elapsed: float) -> float:
    if time_elapsed < 25:
        return 80.0
    if time_elapsed < 50:
        return 90.0
    if time_elapsed < 75:
        return 95.0
    return 99.0


def goal_on_track(
    goal: Goal,
    tasks: Iterable[Task] | Mapping[Hashable, Task],
    today: Optional[date] = None,
) -> int:
    """Estimate, in percent, how likely the goal is to be met by its deadline.

    The completion rate over scheduled task-days so far is nudged by how far
    ahead or behind the elapsed share of the goal's timeline it is (at most
    15 points either way), then capped by how much of the timeline has
    passed. The result stays within 5..99; 50 means there is nothing to
    judge yet.
    """

    today = today or date.today()
    if goal.deadline is None:
        raise NotApplicable(f"Goal {goal.id}: on-track estimate needs a deadline")

    owned = goal_tasks(goal, tasks)
    if not owned:
        return 50

    started = goal.created_at or min(task.created_at for task in owned)
    expected = 0
    actual = 0
    for task in owned:
        for day in date_range(max(started, task.created_at), today):
            if not is_scheduled(task, day):
                continue
            expected += 1
            actual += 1 if is_completed(task, task.entry_for(day)) else 0

    if expected == 0:
        return 50

    task_rate = actual / expected * 100.0
    total_days = (goal.deadline - started).days
    elapsed_days = (today - started).days
    time_elapsed = 100.0 if total_days <= 0 else min(100.0, max(0.0, elapsed_days / total_days * 100.0))

    pace_bonus = max(-15.0, min(15.0, (task_rate - time_elapsed) * 0.15))
    probability = max(5.0, min(_elapsed_caps(time_elapsed), task_rate + pace_bonus))
    return int(round(probability))
