"""Calendar helpers shared by the score series builders."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator

from accountability_engine.errors import InvalidConfiguration


def date_range(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end, both inclusive."""

    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def week_start(day: date) -> date:
    """Monday of the week containing day."""

    return day - timedelta(days=day.weekday())


def month_start(day: date) -> date:
    return day.replace(day=1)


def ensure_ascending(days: list[date], label: str = "series") -> None:
    """Reject day sequences that are not strictly ascending."""

    for previous, current in zip(days, days[1:]):
        if current <= previous:
            raise InvalidConfiguration(f"{label} dates must be strictly ascending ({previous} then {current})")
