from accountability_engine.evaluator import compare, compare_periods


def test_compare_direction():
    assert compare(72.4, 60) == {"value": 12, "direction": "up"}
    assert compare(40, 55.6) == {"value": 16, "direction": "down"}


def test_compare_periods():
    current = {"score": 80.0, "completion": 75.0, "consistency": 70.0}
    previous = {"score": 60.0, "completion": 80.0, "consistency": 70.0}
    result = compare_periods(current, previous)
    assert round(result["score_delta"], 2) == 20.0
    assert round(result["completion_delta"], 2) == -5.0
    assert result["consistency_delta"] == 0.0
    assert result["score_change"]["direction"] == "up"
    assert result["trend"] == "improving"
