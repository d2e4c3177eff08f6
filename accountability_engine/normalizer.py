"""Per-day completion fractions for single tasks."""

from __future__ import annotations

from datetime import date
from typing import Optional

from accountability_engine.errors import InvalidConfiguration, OutOfRange
from accountability_engine.history import date_range
from accountability_engine.schema import CHECKBOX, DailyEntry, ScoreSnapshot, Task


def _require_target(task: Task) -> float:
    if task.target is None or task.target <= 0:
        raise InvalidConfiguration(f"Task {task.id}: number tasks need a target > 0, got {task.target!r}")
    return float(task.target)


def entry_fraction(task: Task, entry: DailyEntry) -> float:
    """Fraction in [0, 1] for an entry that has been reported."""

    if task.type == CHECKBOX:
        return 1.0 if entry.completed else 0.0

    target = _require_target(task)
    value = entry.value or 0.0
    return max(0.0, min(1.0, value / target))


def fraction(task: Task, day: date, today: Optional[date] = None) -> Optional[float]:
    """Return the task's completion fraction for day, or None when nothing was reported.

    An unreported day is not a zero: aggregation leaves it out of the
    denominator. Days before the task existed or after today are rejected.
    """

    today = today or date.today()
    if day < task.created_at or day > today:
        raise OutOfRange(f"Task {task.id}: {day} is outside [{task.created_at}, {today}]")

    if task.type != CHECKBOX:
        _require_target(task)

    entry = task.entry_for(day)
    if entry is None:
        return None
    return entry_fraction(task, entry)


def is_completed(task: Task, entry: Optional[DailyEntry]) -> bool:
    """A number task counts as done once its value reaches the target."""

    if entry is None:
        return False
    if task.type == CHECKBOX:
        return entry.completed
    return (entry.value or 0.0) >= _require_target(task)


def is_scheduled(task: Task, day: date) -> bool:
    """A task is due on its selected weekdays, starting the day it was created."""

    return day >= task.created_at and day.weekday() in task.selected_days


def task_series(task: Task, start: date, end: date, today: Optional[date] = None) -> list[ScoreSnapshot]:
    """Build one snapshot per reported day of the task between start and end.

    Unscheduled days without an entry are kept as rest days so that streaks
    step over them instead of breaking.
    """

    today = today or date.today()
    start = max(start, task.created_at)
    end = min(end, today)

    series: list[ScoreSnapshot] = []
    for day in date_range(start, end):
        entry = task.entry_for(day)
        scheduled = 1 if is_scheduled(task, day) else 0
        if entry is None:
            if not scheduled:
                series.append(ScoreSnapshot(subject_id=task.id, day=day, percent=0.0, reported=0, scheduled=0))
            continue
        series.append(
            ScoreSnapshot(
                subject_id=task.id,
                day=day,
                percent=100.0 * entry_fraction(task, entry),
                reported=1,
                completed=1 if is_completed(task, entry) else 0,
                scheduled=scheduled,
            )
        )
    return series
