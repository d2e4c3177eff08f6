"""Core data schema for goals, tasks and their daily history."""

from dataclasses import dataclass, field
from datetime import date
from typing import Hashable, Optional

from accountability_engine.errors import InvalidConfiguration, OutOfRange
from accountability_engine.tiers import Tier, tier

CHECKBOX = "checkbox"
NUMBER = "number"
TASK_TYPES = (CHECKBOX, NUMBER)

LEVELS = {"medium": 1, "high": 2, "maximum": 3}

# Monday is 0, matching date.weekday().
ALL_DAYS = frozenset(range(7))


@dataclass(frozen=True)
class DailyEntry:
    """One reported day of a task: a checkmark or a measured value."""

    day: date
    completed: bool = False
    value: Optional[float] = None

    def __post_init__(self) -> None:
        if self.value is not None and self.value < 0:
            raise InvalidConfiguration(f"{self.day}: value must be >= 0, got {self.value!r}")


@dataclass(frozen=True)
class Task:
    """A trackable task owned by one goal, with its ascending daily history."""

    id: Hashable
    goal_id: Hashable
    type: str
    created_at: date
    history: tuple[DailyEntry, ...] = ()
    target: Optional[float] = None
    importance: str = "medium"
    difficulty: str = "medium"
    name: str = ""
    selected_days: frozenset = ALL_DAYS

    def __post_init__(self) -> None:
        if self.type not in TASK_TYPES:
            raise InvalidConfiguration(f"Task {self.id}: invalid type '{self.type}'")
        object.__setattr__(self, "selected_days", frozenset(self.selected_days))
        if not self.selected_days or not self.selected_days <= ALL_DAYS:
            raise InvalidConfiguration(
                f"Task {self.id}: selected_days must be weekdays 0..6, got {sorted(self.selected_days)!r}"
            )
        object.__setattr__(self, "history", tuple(self.history))
        for previous, entry in zip(self.history, self.history[1:]):
            if entry.day <= previous.day:
                raise InvalidConfiguration(
                    f"Task {self.id}: history dates must be strictly ascending ({previous.day} then {entry.day})"
                )

    def entry_for(self, day: date) -> Optional[DailyEntry]:
        for entry in self.history:
            if entry.day == day:
                return entry
            if entry.day > day:
                break
        return None


@dataclass(frozen=True)
class Goal:
    """A goal groups tasks by id and carries the priority used for rollups."""

    id: Hashable
    priority: int
    task_ids: frozenset = frozenset()
    created_at: Optional[date] = None
    deadline: Optional[date] = None
    threshold: Optional[float] = None
    name: str = ""
    completed: bool = False

    def __post_init__(self) -> None:
        if not 1 <= self.priority <= 5:
            raise InvalidConfiguration(f"Goal {self.id}: priority must be in 1..5, got {self.priority!r}")
        object.__setattr__(self, "task_ids", frozenset(self.task_ids))


@dataclass(frozen=True)
class Snapshot:
    """Flat id-keyed store of the goals and tasks handed over by the data layer."""

    goals: dict = field(default_factory=dict)
    tasks: dict = field(default_factory=dict)

    def tasks_for(self, goal: Goal) -> list[Task]:
        return [self.tasks[task_id] for task_id in sorted(goal.task_ids, key=str) if task_id in self.tasks]


@dataclass(frozen=True)
class ScoreSnapshot:
    """Score of a task or goal on one day."""

    subject_id: Hashable
    day: date
    percent: float
    reported: int = 1
    completed: int = 0
    scheduled: int = 1

    def __post_init__(self) -> None:
        if not 0.0 <= self.percent <= 100.0:
            raise OutOfRange(f"{self.subject_id} on {self.day}: percent {self.percent!r} is outside [0, 100]")

    @property
    def tier(self) -> Tier:
        return tier(self.percent)

    @property
    def is_rest_day(self) -> bool:
        """Nothing was scheduled and nothing was reported."""
        return self.scheduled == 0 and self.reported == 0


@dataclass(frozen=True)
class StreakState:
    current: int = 0
    longest: int = 0
    last_qualifying_date: Optional[date] = None


@dataclass(frozen=True)
class Projection:
    """Estimated value at the deadline and the chance it meets the target."""

    probability: float
    projected_value: float
