from datetime import date, timedelta

import pytest

from accountability_engine.aggregator import (
    goal_score,
    goal_series,
    importance_weights,
    priority_weight,
    rollup,
    settled,
    task_weight,
)
from accountability_engine.errors import InvalidConfiguration, OutOfRange
from accountability_engine.schema import DailyEntry, Goal, Task
from accountability_engine.streaks import streak

START = date(2025, 1, 1)


def day(n: int) -> date:
    return START + timedelta(days=n - 1)


def sample_checkbox_goal(days=10):
    tasks = [
        Task(
            task_id,
            "g1",
            "checkbox",
            created_at=START,
            history=tuple(DailyEntry(day(n), completed=True) for n in range(1, days + 1)),
        )
        for task_id in ("t1", "t2")
    ]
    goal = Goal("g1", priority=1, task_ids={"t1", "t2"}, created_at=START)
    return goal, tasks


def test_fully_completed_checkbox_goal_scores_100_with_full_streak():
    goal, tasks = sample_checkbox_goal()
    series = goal_series(goal, tasks, START, day(10), today=day(10))

    assert len(series) == 10
    assert all(snapshot.percent == 100.0 for snapshot in series)

    state = streak(series, threshold=100, today=day(10))
    assert state.current == 10
    assert state.longest == 10


def test_only_reporting_tasks_count_toward_goal_score():
    tasks = [
        Task("a", "g", "number", created_at=START, history=(DailyEntry(day(1), value=15),), target=30),
        Task("b", "g", "checkbox", created_at=START),
        Task("c", "g", "checkbox", created_at=START),
    ]
    goal = Goal("g", priority=2, task_ids={"a", "b", "c"}, created_at=START)
    assert goal_score(goal, tasks, day(1), today=day(1)) == pytest.approx(50.0)


def test_goal_with_no_reports_scores_zero():
    goal = Goal("g", priority=3, task_ids={"a"}, created_at=START)
    tasks = [Task("a", "g", "checkbox", created_at=START)]
    assert goal_score(goal, tasks, day(2), today=day(2)) == 0.0


def test_tasks_created_later_are_skipped():
    tasks = [
        Task("old", "g", "checkbox", created_at=START, history=(DailyEntry(day(2), completed=True),)),
        Task("new", "g", "checkbox", created_at=day(3)),
    ]
    goal = Goal("g", priority=1, task_ids={"old", "new"})
    assert goal_score(goal, {task.id: task for task in tasks}, day(2), today=day(5)) == 100.0


def test_future_day_is_rejected():
    goal, tasks = sample_checkbox_goal()
    with pytest.raises(OutOfRange):
        goal_score(goal, tasks, day(11), today=day(10))


def test_importance_weights_shift_the_mean():
    done = Task(
        "done", "g", "checkbox", created_at=START, history=(DailyEntry(day(1), completed=True),),
        importance="maximum", difficulty="maximum",
    )
    missed = Task("missed", "g", "checkbox", created_at=START, history=(DailyEntry(day(1)),))
    goal = Goal("g", priority=1, task_ids={"done", "missed"})

    assert task_weight(done) == 9
    assert task_weight(missed) == 3
    weighted = goal_score(goal, [done, missed], day(1), today=day(1), weights=importance_weights([done, missed]))
    assert weighted == pytest.approx(75.0)
    assert goal_score(goal, [done, missed], day(1), today=day(1)) == pytest.approx(50.0)


def test_goal_series_keeps_silent_days():
    tasks = [Task("a", "g", "checkbox", created_at=START, history=(DailyEntry(day(1), completed=True),))]
    goal = Goal("g", priority=1, task_ids={"a"}, created_at=START)
    series = goal_series(goal, tasks, START, day(3), today=day(3))
    assert [snapshot.percent for snapshot in series] == [100.0, 0.0, 0.0]
    assert [snapshot.reported for snapshot in series] == [1, 0, 0]


def test_priority_weights():
    assert [priority_weight(p) for p in range(1, 6)] == [5, 4, 3, 2, 1]
    with pytest.raises(InvalidConfiguration):
        priority_weight(6)


def test_rollup_weights_by_priority():
    goals = [Goal("top", priority=1), Goal("bottom", priority=5)]
    assert rollup({"top": 100.0, "bottom": 0.0}, goals) == pytest.approx(100.0 * 5 / 6)
    assert rollup({}, goals) == 0.0


def test_rollup_rejects_unknown_goal():
    with pytest.raises(InvalidConfiguration):
        rollup({"ghost": 50.0}, [Goal("top", priority=1)])


def test_unreported_today_does_not_break_goal_streak():
    goal, tasks = sample_checkbox_goal(days=5)
    series = goal_series(goal, tasks, START, day(6), today=day(6))
    assert series[-1].day == day(6)
    assert series[-1].reported == 0

    state = streak(series, threshold=100, today=day(6))
    assert (state.current, state.longest) == (5, 5)
    assert settled(series, day(6))[-1].day == day(5)
    assert len(settled(series, day(7))) == 6


def test_unscheduled_days_come_back_as_rest_days():
    mon_wed_fri = {0, 2, 4}
    done = [n for n in range(1, 9) if day(n).weekday() in mon_wed_fri]
    task = Task(
        "gym",
        "g",
        "checkbox",
        created_at=START,
        history=tuple(DailyEntry(day(n), completed=True) for n in done),
        selected_days=mon_wed_fri,
    )
    goal = Goal("g", priority=1, task_ids={"gym"}, created_at=START)
    series = goal_series(goal, [task], START, day(8), today=day(8))

    assert [snapshot.day for snapshot in series if snapshot.is_rest_day] == [
        day(n) for n in range(1, 9) if n not in done
    ]
    state = streak(series, today=day(8))
    assert (state.current, state.longest) == (len(done), len(done))
