"""Dashboard report: every number the rings, cards and badges draw."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Callable, Optional

from accountability_engine.achievements import REPORT_TYPES, build_snapshot, detect_new, highlights
from accountability_engine.aggregator import goal_series, rollup, settled
from accountability_engine.config import EngineConfig
from accountability_engine.consistency import consistency
from accountability_engine.edit_window import can_edit_date
from accountability_engine.errors import EngineError
from accountability_engine.history import month_start, week_start
from accountability_engine.metrics import compute_metrics, period_score
from accountability_engine.normalizer import fraction, task_series
from accountability_engine.projection import goal_on_track, project_completion
from accountability_engine.schema import NUMBER, Goal, Snapshot, Task
from accountability_engine.streaks import resolve_threshold, streak
from accountability_engine.tiers import goal_color, tier

logger = logging.getLogger(__name__)


def _safe(label: str, compute: Callable[[], Any]) -> Any:
    try:
        return compute()
    except EngineError as exc:
        logger.warning("Skipping %s: %s", label, exc)
        return None


def _tier_payload(percent: Optional[float]) -> Optional[dict]:
    if percent is None:
        return None
    entry = tier(percent)
    return {"name": entry.name, "color": entry.color}


def _streak_payload(state) -> dict:
    return {
        "current": state.current,
        "longest": state.longest,
        "last_qualifying_date": state.last_qualifying_date.isoformat() if state.last_qualifying_date else None,
    }


def _task_report(task: Task, goal: Goal, today: date, config: EngineConfig) -> dict:
    today_fraction = _safe(f"task {task.id} fraction", lambda: fraction(task, today, today=today))
    series = _safe(f"task {task.id} series", lambda: task_series(task, task.created_at, today, today=today)) or []
    threshold = resolve_threshold(goal, config.streak_threshold)

    payload = {
        "id": task.id,
        "name": task.name,
        "type": task.type,
        "today_fraction": today_fraction,
        "tier": _tier_payload(None if today_fraction is None else 100.0 * today_fraction),
        "streak": _streak_payload(streak(series, threshold=threshold, today=today)),
        "projection": None,
    }
    if task.type == NUMBER and goal.deadline is not None and goal.deadline >= today:
        projection = _safe(f"task {task.id} projection", lambda: project_completion(task, today, goal.deadline))
        if projection is not None:
            payload["projection"] = {
                "probability": projection.probability,
                "projected_value": projection.projected_value,
            }
    return payload


def _goal_report(goal: Goal, snapshot: Snapshot, today: date, config: EngineConfig) -> dict:
    tasks = snapshot.tasks_for(goal)
    if goal.created_at is not None:
        started = goal.created_at
    elif tasks:
        started = min(task.created_at for task in tasks)
    else:
        started = today

    full_series = _safe(f"goal {goal.id} series", lambda: goal_series(goal, tasks, started, today, today=today)) or []
    threshold = resolve_threshold(goal, config.streak_threshold)
    today_percent = full_series[-1].percent if full_series and full_series[-1].day == today else None

    # Today stays open until something is logged, so it is not yet a miss.
    series = settled(full_series, today)
    as_of = today if len(series) == len(full_series) else today - timedelta(days=1)

    monday = week_start(today)
    week = [entry for entry in series if entry.day >= monday]
    previous_week = [entry for entry in series if monday - timedelta(days=7) <= entry.day < monday]
    month = [entry for entry in series if entry.day >= month_start(today)]

    consistency_payload = {}
    for window in config.consistency_windows:
        consistency_payload[str(window)] = {
            "simple": _safe(
                f"goal {goal.id} consistency {window}d",
                lambda: consistency(
                    series, window, threshold=config.consistency_threshold, created_at=started, as_of=as_of
                ),
            ),
            "weighted": _safe(
                f"goal {goal.id} weighted consistency {window}d",
                lambda: consistency(
                    series,
                    window,
                    config.half_life_days,
                    threshold=config.consistency_threshold,
                    created_at=started,
                    as_of=as_of,
                ),
            ),
        }

    on_track = None
    if goal.deadline is not None:
        on_track = _safe(f"goal {goal.id} on-track", lambda: goal_on_track(goal, tasks, today=today))

    return {
        "id": goal.id,
        "name": goal.name,
        "priority": goal.priority,
        "color": goal_color(goal.priority),
        "today_percent": today_percent,
        "tier": _tier_payload(today_percent),
        "streak": _streak_payload(streak(series, threshold=threshold, today=today)),
        "consistency": consistency_payload,
        "week": compute_metrics(
            week,
            threshold=threshold,
            previous_score=period_score(previous_week) if previous_week else None,
            today=today,
            improving=config.trend_improving,
            declining=config.trend_declining,
        ),
        "month": compute_metrics(month, threshold=threshold, today=today),
        "on_track": on_track,
        "tasks": [_task_report(task, goal, today, config) for task in tasks],
    }


def _achievements_report(snapshot: Snapshot, today: date, config: EngineConfig) -> dict:
    state = build_snapshot(
        snapshot.tasks.values(), snapshot.goals.values(), today=today, threshold=config.streak_threshold
    )
    return {
        "unlocked": [achievement.id for achievement in detect_new(state)],
        "highlights": {
            report_type: [highlight.id for highlight in highlights(state, report_type)] for report_type in REPORT_TYPES
        },
    }


def _loggable_days(today: date, config: EngineConfig) -> list[dict]:
    days = []
    for offset in range(config.late_log_days + 1):
        day = today - timedelta(days=offset)
        window = can_edit_date(day, now=today, late_days=config.late_log_days)
        if window.can_edit:
            days.append({"day": day.isoformat(), "late": window.is_late_log})
    return days


def build_report(snapshot: Snapshot, today: Optional[date] = None, config: Optional[EngineConfig] = None) -> dict:
    """Compute the per-goal dashboard numbers and the priority-weighted overall score."""

    today = today or date.today()
    config = config or EngineConfig()

    goals = sorted(snapshot.goals.values(), key=lambda goal: (goal.priority, str(goal.id)))
    logger.debug("Building report for %d goals and %d tasks as of %s", len(goals), len(snapshot.tasks), today)

    goal_reports = [_goal_report(goal, snapshot, today, config) for goal in goals]
    scores = {item["id"]: item["today_percent"] for item in goal_reports if item["today_percent"] is not None}
    overall = rollup(scores, goals)

    return {
        "today": today.isoformat(),
        "overall": {"percent": overall, "tier": _tier_payload(overall)},
        "goals": goal_reports,
        "achievements": _safe("achievements", lambda: _achievements_report(snapshot, today, config)),
        "loggable_days": _loggable_days(today, config),
        "config": config.to_dict(),
    }
