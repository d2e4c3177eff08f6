"""Current vs previous period comparison."""

from __future__ import annotations

from accountability_engine.metrics import DECLINING_THRESHOLD, IMPROVING_THRESHOLD, trend


def compare(current_score: float, previous_score: float) -> dict:
    """Absolute rounded difference between two scores and its direction."""

    difference = current_score - previous_score
    return {
        "value": abs(round(difference)),
        "direction": "up" if difference >= 0 else "down",
    }


def compare_periods(
    current_metrics: dict,
    previous_metrics: dict,
    improving: float = IMPROVING_THRESHOLD,
    declining: float = DECLINING_THRESHOLD,
) -> dict:
    """Compare two compute_metrics results with point deltas and a trend label."""

    def delta(key: str) -> float:
        return current_metrics.get(key, 0.0) - previous_metrics.get(key, 0.0)

    return {
        "score_delta": delta("score"),
        "completion_delta": delta("completion"),
        "consistency_delta": delta("consistency"),
        "score_change": compare(current_metrics.get("score", 0.0), previous_metrics.get("score", 0.0)),
        "trend": trend(
            current_metrics.get("score", 0.0),
            previous_metrics.get("score", 0.0),
            improving,
            declining,
        ),
    }
