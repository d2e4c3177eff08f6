"""One-time milestones and per-report highlights.

Both are checks over an AchievementSnapshot: a flat record of the streak,
score, completion and perfect-day numbers the rest of the engine already
computes, plus a few all-time counts taken straight from task histories.
"""

from __future__ import annotations

import calendar
import logging
from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from accountability_engine.aggregator import goal_series, settled
from accountability_engine.errors import InvalidConfiguration
from accountability_engine.history import month_start, week_start
from accountability_engine.metrics import completion_rate, compute_metrics, period_score
from accountability_engine.normalizer import is_completed
from accountability_engine.schema import Goal, Task
from accountability_engine.streaks import DEFAULT_THRESHOLD

logger = logging.getLogger(__name__)

HARD_DIFFICULTIES = ("high", "maximum")
REPORT_TYPES = ("daily", "weekly", "monthly")
OVERALL_ID = "__overall__"


@dataclass(frozen=True)
class AchievementSnapshot:
    current_streak: int = 0
    longest_streak: int = 0
    today_score: float = 0.0
    today_tasks_scheduled: int = 0
    today_tasks_completed: int = 0
    today_completion: float = 0.0
    weekly_score: float = 0.0
    monthly_score: float = 0.0
    all_time_average: float = 0.0
    consistency: float = 0.0
    weekly_completion: float = 0.0
    monthly_completion: float = 0.0
    perfect_days_this_week: int = 0
    perfect_days_this_month: int = 0
    perfect_days_all_time: int = 0
    weekly_trend: str = "stable"
    total_tasks_completed: int = 0
    days_tracked: int = 0
    hard_tasks_completed: int = 0
    goals_completed: int = 0
    perfect_weeks_all_time: int = 0
    perfect_months_all_time: int = 0


@dataclass(frozen=True)
class Achievement:
    id: str
    description: str
    category: str
    check: Callable[[AchievementSnapshot], bool]


@dataclass(frozen=True)
class Highlight:
    id: str
    description: str
    report_type: str
    check: Callable[[AchievementSnapshot], bool]


def _tasks_milestone(count: int) -> Achievement:
    return Achievement(
        f"tasks_{count}",
        f"{count:,} Tasks Completed",
        "tasks",
        lambda snapshot: snapshot.total_tasks_completed >= count,
    )


def _perfect_days_milestone(count: int) -> Achievement:
    return Achievement(
        f"perfect_{count}",
        f"{count} Perfect Days",
        "perfect_days",
        lambda snapshot: snapshot.perfect_days_all_time >= count,
    )


def _streak_highlight(days: int) -> Highlight:
    return Highlight(
        f"highlight_streak_{days}",
        f"{days} Day Streak",
        "daily",
        lambda snapshot: snapshot.current_streak == days,
    )


ACHIEVEMENTS = (
    *(_tasks_milestone(count) for count in (50, 100, 250, 500, 1000)),
    Achievement("perfect_week", "First Perfect Week", "perfect_days", lambda s: s.perfect_weeks_all_time >= 1),
    Achievement("perfect_month", "First Perfect Month", "perfect_days", lambda s: s.perfect_months_all_time >= 1),
    *(_perfect_days_milestone(count) for count in (10, 25, 50, 100, 150, 200, 250)),
    Achievement("goals_1", "Goal Completed", "goals", lambda s: s.goals_completed >= 1),
)
ACHIEVEMENT_MAP = {achievement.id: achievement for achievement in ACHIEVEMENTS}

HIGHLIGHTS = (
    *(_streak_highlight(days) for days in (7, 14, 30, 60, 90, 180, 365)),
    Highlight(
        "highlight_streak_longest",
        "New Personal Best Streak",
        "daily",
        lambda s: s.longest_streak >= 7 and s.current_streak == s.longest_streak,
    ),
    Highlight(
        "highlight_perfect_day",
        "Perfect Day",
        "daily",
        lambda s: s.today_score == 100 and s.today_tasks_scheduled > 0,
    ),
    Highlight("highlight_perfect_week", "Perfect Week", "weekly", lambda s: s.weekly_score == 100),
    Highlight("highlight_perfect_month", "Perfect Month", "monthly", lambda s: s.monthly_score == 100),
    Highlight("highlight_score_weekly_90", "Weekly Score 90+", "weekly", lambda s: s.weekly_score >= 90),
    Highlight("highlight_score_monthly_90", "Monthly Score 90+", "monthly", lambda s: s.monthly_score >= 90),
)


def day_tallies(tasks: Iterable[Task], today: date) -> dict[date, tuple[int, int]]:
    """Logged and completed entry counts per day, up to today."""

    logged: dict[date, int] = defaultdict(int)
    done: dict[date, int] = defaultdict(int)
    for task in tasks:
        for entry in task.history:
            if entry.day > today:
                break
            logged[entry.day] += 1
            done[entry.day] += 1 if is_completed(task, entry) else 0
    return {day: (logged[day], done[day]) for day in logged}


def perfect_weeks(tallies: dict[date, tuple[int, int]]) -> int:
    """Monday-to-Sunday weeks in which every day was logged and fully completed."""

    weeks: dict[date, list[bool]] = defaultdict(list)
    for day, (logged, done) in tallies.items():
        weeks[week_start(day)].append(done == logged)
    return sum(1 for flags in weeks.values() if len(flags) == 7 and all(flags))


def perfect_months(tallies: dict[date, tuple[int, int]]) -> int:
    months: dict[date, list[bool]] = defaultdict(list)
    for day, (logged, done) in tallies.items():
        months[month_start(day)].append(done == logged)
    return sum(
        1
        for first, flags in months.items()
        if len(flags) == calendar.monthrange(first.year, first.month)[1] and all(flags)
    )


def build_snapshot(
    tasks: Iterable[Task],
    goals: Iterable[Goal] = (),
    today: Optional[date] = None,
    threshold: float = DEFAULT_THRESHOLD,
) -> AchievementSnapshot:
    """Collect the numbers milestones and highlights are checked against.

    Every task is scored together as if it belonged to one goal, so the
    streaks and scores here are the user's overall ones.
    """

    today = today or date.today()
    tasks = list(tasks)

    series = []
    if tasks:
        everything = Goal(OVERALL_ID, priority=1, task_ids=frozenset(task.id for task in tasks))
        started = min(task.created_at for task in tasks)
        series = goal_series(everything, tasks, started, today, today=today)
    today_row = series[-1] if series and series[-1].day == today else None
    series = settled(series, today)

    monday = week_start(today)
    week = [snapshot for snapshot in series if snapshot.day >= monday]
    previous_week = [snapshot for snapshot in series if monday - timedelta(days=7) <= snapshot.day < monday]
    month = [snapshot for snapshot in series if snapshot.day >= month_start(today)]

    week_metrics = compute_metrics(
        week,
        threshold=threshold,
        previous_score=period_score(previous_week) if previous_week else None,
        today=today,
    )
    month_metrics = compute_metrics(month, threshold=threshold, today=today)
    overall = compute_metrics(series, threshold=threshold, today=today)

    tallies = day_tallies(tasks, today)
    hard = [task for task in tasks if task.difficulty in HARD_DIFFICULTIES]
    reported_today = today_row is not None and today_row.reported > 0

    return AchievementSnapshot(
        current_streak=overall["current_streak"],
        longest_streak=overall["longest_streak"],
        today_score=today_row.percent if reported_today else 0.0,
        today_tasks_scheduled=today_row.scheduled if today_row is not None else 0,
        today_tasks_completed=today_row.completed if today_row is not None else 0,
        today_completion=completion_rate([today_row]) if reported_today else 0.0,
        weekly_score=week_metrics["score"],
        monthly_score=month_metrics["score"],
        all_time_average=overall["score"],
        consistency=overall["consistency"],
        weekly_completion=week_metrics["completion"],
        monthly_completion=month_metrics["completion"],
        perfect_days_this_week=week_metrics["perfect_days"],
        perfect_days_this_month=month_metrics["perfect_days"],
        perfect_days_all_time=overall["perfect_days"],
        weekly_trend=week_metrics["trend"],
        total_tasks_completed=sum(done for _, done in tallies.values()),
        days_tracked=sum(1 for _, done in tallies.values() if done > 0),
        hard_tasks_completed=sum(done for _, done in day_tallies(hard, today).values()),
        goals_completed=sum(1 for goal in goals if goal.completed),
        perfect_weeks_all_time=perfect_weeks(tallies),
        perfect_months_all_time=perfect_months(tallies),
    )


def detect_new(snapshot: AchievementSnapshot, unlocked: Iterable[str] = ()) -> list[Achievement]:
    """Milestones the snapshot meets that are not already unlocked."""

    unlocked = set(unlocked)
    found = [
        achievement
        for achievement in ACHIEVEMENTS
        if achievement.id not in unlocked and achievement.check(snapshot)
    ]
    logger.debug("Detected %d new achievements", len(found))
    return found


def highlights(snapshot: AchievementSnapshot, report_type: str) -> list[Highlight]:
    if report_type not in REPORT_TYPES:
        raise InvalidConfiguration(f"report_type must be one of {REPORT_TYPES}, got {report_type!r}")
    return [highlight for highlight in HIGHLIGHTS if highlight.report_type == report_type and highlight.check(snapshot)]


def verify(achievement_id: str, snapshot: AchievementSnapshot) -> bool:
    """Whether an unlocked milestone is still earned; unknown ids are not."""

    achievement = ACHIEVEMENT_MAP.get(achievement_id)
    return achievement is not None and achievement.check(snapshot)
