"""JSON adapter: persistence rows (goals, tasks, completions) to an engine snapshot."""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Any, Optional

from accountability_engine.schema import ALL_DAYS, TASK_TYPES, DailyEntry, Goal, Snapshot, Task

logger = logging.getLogger(__name__)

_GOAL_FIELDS = {"id", "priority"}
_TASK_FIELDS = {"id", "goal_id", "type", "created_at"}
_COMPLETION_FIELDS = {"task_id", "date"}
TRUE_VALUES = {"1", "true", "yes", "y", "t"}
FALSE_VALUES = {"", "0", "false", "no", "n", "f"}


def parse_day(raw: Any) -> date:
    """Accept YYYY-MM-DD or a full ISO timestamp and keep the calendar day."""

    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = str(raw).strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    return datetime.fromisoformat(text.replace("Z", "+00:00")).date()


def parse_flag(raw: Any) -> bool:
    """Read a completed flag from a bool, 0/1 or a yes/no style string."""

    if isinstance(raw, bool):
        return raw
    if raw is None:
        return False
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    text = str(raw).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"invalid completed flag '{raw}'")


def _parse_days(raw: Any) -> frozenset:
    if raw in (None, ""):
        return ALL_DAYS
    if isinstance(raw, str):
        raw = [part for part in raw.split(",") if part.strip()]
    return frozenset(int(day) for day in raw)


def _optional_day(raw: Any) -> Optional[date]:
    if raw in (None, ""):
        return None
    return parse_day(raw)


def _missing(item: dict, required: set[str]) -> list[str]:
    return sorted(field for field in required if item.get(field) in (None, ""))


def _parse_completion(item: dict, index: int) -> tuple[str, DailyEntry]:
    missing = _missing(item, _COMPLETION_FIELDS)
    if missing:
        raise ValueError(f"Completion {index}: missing required fields {missing}")

    try:
        day = parse_day(item["date"])
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Completion {index}: malformed date") from exc

    try:
        completed = parse_flag(item.get("completed"))
    except ValueError as exc:
        raise ValueError(f"Completion {index}: {exc}") from exc

    value_raw = item.get("value")
    try:
        value = None if value_raw is None else float(value_raw)
        entry = DailyEntry(day=day, completed=completed, value=value)
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Completion {index}: invalid value") from exc

    return str(item["task_id"]).strip(), entry


def _parse_task(item: dict, index: int, history: list[DailyEntry]) -> Task:
    missing = _missing(item, _TASK_FIELDS)
    if missing:
        raise ValueError(f"Task {index}: missing required fields {missing}")

    task_type = str(item["type"]).strip()
    if task_type not in TASK_TYPES:
        raise ValueError(f"Task {index}: invalid type '{task_type}'")

    target_raw = item.get("target")
    try:
        target = None if target_raw in (None, "") else float(target_raw)
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Task {index}: invalid target") from exc

    try:
        selected_days = _parse_days(item.get("selected_days"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Task {index}: invalid selected_days") from exc

    try:
        return Task(
            id=str(item["id"]).strip(),
            goal_id=str(item["goal_id"]).strip(),
            type=task_type,
            created_at=parse_day(item["created_at"]),
            history=tuple(sorted(history, key=lambda entry: entry.day)),
            target=target,
            importance=str(item.get("importance") or "medium"),
            difficulty=str(item.get("difficulty") or "medium"),
            name=str(item.get("name") or ""),
            selected_days=selected_days,
        )
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Task {index}: {exc}") from exc


def _parse_goal(item: dict, index: int, task_ids: set[str]) -> Goal:
    missing = _missing(item, _GOAL_FIELDS)
    if missing:
        raise ValueError(f"Goal {index}: missing required fields {missing}")

    threshold_raw = item.get("threshold")
    try:
        return Goal(
            id=str(item["id"]).strip(),
            priority=int(item["priority"]),
            task_ids=frozenset(task_ids),
            created_at=_optional_day(item.get("created_at")),
            deadline=_optional_day(item.get("target_date", item.get("deadline"))),
            threshold=None if threshold_raw in (None, "") else float(threshold_raw),
            name=str(item.get("name") or ""),
            completed=parse_flag(item.get("completed")),
        )
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Goal {index}: {exc}") from exc


def parse_payload(payload: dict) -> Snapshot:
    """Build a snapshot from rows shaped like the persistence tables."""

    if not isinstance(payload, dict):
        raise ValueError("JSON payload must be an object with goals, tasks and completions")

    histories: dict[str, list[DailyEntry]] = defaultdict(list)
    for index, item in enumerate(payload.get("completions", []), start=1):
        task_id, entry = _parse_completion(item, index)
        histories[task_id].append(entry)

    tasks: dict[str, Task] = {}
    for index, item in enumerate(payload.get("tasks", []), start=1):
        task_id = str(item.get("id", "")).strip()
        task = _parse_task(item, index, histories.get(task_id, []))
        tasks[task.id] = task

    orphans = sorted(set(histories) - set(tasks))
    if orphans:
        logger.warning("Ignoring completions for unknown tasks %s", orphans)

    owned: dict[str, set[str]] = defaultdict(set)
    for task in tasks.values():
        owned[task.goal_id].add(task.id)

    goals: dict[str, Goal] = {}
    for index, item in enumerate(payload.get("goals", []), start=1):
        goal_id = str(item.get("id", "")).strip()
        goal = _parse_goal(item, index, owned.get(goal_id, set()))
        goals[goal.id] = goal

    logger.debug("Parsed snapshot with %d goals, %d tasks", len(goals), len(tasks))
    return Snapshot(goals=goals, tasks=tasks)


def parse(file_path: str) -> Snapshot:
    """Parse a JSON snapshot file into engine records."""

    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)

    return parse_payload(payload)
