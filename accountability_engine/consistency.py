"""Rolling-window adherence, plain or weighted toward recent days."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from typing import Optional

import numpy as np

from accountability_engine.errors import InvalidConfiguration
from accountability_engine.history import ensure_ascending
from accountability_engine.schema import ScoreSnapshot

DEFAULT_WINDOWS = (7, 30, 90)


def _qualifying_indicator(
    series: Sequence[ScoreSnapshot],
    start: date,
    end: date,
    threshold: float,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    days = (end - start).days + 1
    indicator = np.zeros(days, dtype=bool)
    available = np.ones(days, dtype=bool)
    for snapshot in series:
        if not start <= snapshot.day <= end:
            continue
        offset = (snapshot.day - start).days
        if snapshot.is_rest_day:
            available[offset] = False
        elif snapshot.percent >= threshold:
            indicator[offset] = True
    days_ago = np.arange(days - 1, -1, -1, dtype=float)
    return indicator, available, days_ago


def consistency(
    series: Sequence[ScoreSnapshot],
    window_days: int,
    half_life_days: Optional[float] = None,
    *,
    threshold: float = 100.0,
    created_at: Optional[date] = None,
    as_of: Optional[date] = None,
) -> float:
    """Share of qualifying days in the window ending at as_of, as a percent.

    Days before created_at and rest days are left out of the denominator,
    and days with no snapshot count as misses. With half_life_days each day
    is weighted by 2 ** (-days_ago / half_life_days).
    """

    if window_days <= 0:
        raise InvalidConfiguration(f"window_days must be > 0, got {window_days!r}")
    if half_life_days is not None and half_life_days <= 0:
        raise InvalidConfiguration(f"half_life_days must be > 0, got {half_life_days!r}")

    if series:
        ensure_ascending([snapshot.day for snapshot in series], label="consistency series")
    if as_of is None:
        if not series:
            return 0.0
        as_of = series[-1].day
    if created_at is None:
        if not series:
            return 0.0
        created_at = series[0].day

    start = max(as_of - timedelta(days=window_days - 1), created_at)
    if start > as_of:
        return 0.0

    indicator, available, days_ago = _qualifying_indicator(series, start, as_of, threshold)
    if not available.any():
        return 0.0
    if half_life_days is None:
        weights = np.ones(len(indicator), dtype=float)
    else:
        weights = np.power(2.0, -days_ago / float(half_life_days))
    weights = np.where(available, weights, 0.0)

    percent = 100.0 * float(weights[indicator].sum() / weights.sum())
    return max(0.0, min(100.0, percent))


def consistency_windows(
    series: Sequence[ScoreSnapshot],
    windows: Iterable[int] = DEFAULT_WINDOWS,
    half_life_days: Optional[float] = None,
    **kwargs,
) -> dict[int, float]:
    """Consistency for several window lengths at once, keyed by window size."""

    return {window: consistency(series, window, half_life_days, **kwargs) for window in windows}
