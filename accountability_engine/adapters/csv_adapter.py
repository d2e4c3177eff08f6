"""CSV adapter for exported completion rows."""

from __future__ import annotations

import csv
import dataclasses
from collections import defaultdict

from accountability_engine.adapters.json_adapter import parse_day, parse_flag
from accountability_engine.schema import DailyEntry, Snapshot

_REQUIRED_FIELDS = {"task_id", "date"}


def _parse_row(row: dict, row_number: int) -> tuple[str, DailyEntry]:
    missing = sorted(field for field in _REQUIRED_FIELDS if not row.get(field))
    if missing:
        raise ValueError(f"Row {row_number}: missing required fields {missing}")

    try:
        day = parse_day(row["date"])
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Row {row_number}: malformed date") from exc

    try:
        completed = parse_flag(row.get("completed") or "")
    except ValueError as exc:
        raise ValueError(f"Row {row_number}: {exc}") from exc

    value_raw = row.get("value")
    value = None
    if value_raw not in (None, ""):
        try:
            value = float(value_raw)
        except Exception as exc:  # noqa: BLE001
            raise ValueError(f"Row {row_number}: invalid value") from exc

    try:
        entry = DailyEntry(day=day, completed=completed, value=value)
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Row {row_number}: {exc}") from exc
    return row["task_id"].strip(), entry


def parse(file_path: str) -> dict[str, tuple[DailyEntry, ...]]:
    """Parse CSV completion rows into one ascending history per task id."""

    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return {}

        by_task: dict[str, list[DailyEntry]] = defaultdict(list)
        for row_number, row in enumerate(reader, start=2):
            task_id, entry = _parse_row(row, row_number)
            by_task[task_id].append(entry)

    histories = {}
    for task_id, entries in by_task.items():
        entries.sort(key=lambda entry: entry.day)
        for previous, current in zip(entries, entries[1:]):
            if previous.day == current.day:
                raise ValueError(f"Task {task_id}: duplicate completion for {current.day}")
        histories[task_id] = tuple(entries)
    return histories


def apply_histories(snapshot: Snapshot, histories: dict[str, tuple[DailyEntry, ...]]) -> Snapshot:
    """Return a new snapshot whose tasks carry the given histories."""

    tasks = {
        task_id: dataclasses.replace(task, history=histories[task_id]) if task_id in histories else task
        for task_id, task in snapshot.tasks.items()
    }
    return Snapshot(goals=dict(snapshot.goals), tasks=tasks)
