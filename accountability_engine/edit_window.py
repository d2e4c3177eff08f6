"""Which past days may still be logged, and whether that counts as late."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from accountability_engine.errors import InvalidConfiguration


@dataclass(frozen=True)
class EditWindow:
    can_edit: bool
    is_late_log: bool


def can_edit_date(target: date, now: Optional[date] = None, late_days: int = 1) -> EditWindow:
    """Return whether target may be edited relative to now."""

    if late_days < 0:
        raise InvalidConfiguration(f"late_days must be >= 0, got {late_days!r}")

    today = now or date.today()
    if target > today:
        return EditWindow(can_edit=False, is_late_log=False)
    if target == today:
        return EditWindow(can_edit=True, is_late_log=False)
    if target >= today - timedelta(days=late_days):
        return EditWindow(can_edit=True, is_late_log=True)
    return EditWindow(can_edit=False, is_late_log=False)
