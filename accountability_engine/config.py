"""Engine thresholds and windows, with JSON loading."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Optional

from accountability_engine.errors import InvalidConfiguration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    """Tunable defaults shared by the report builder and the demo UI."""

    streak_threshold: float = 100.0
    consistency_threshold: float = 100.0
    consistency_windows: tuple[int, ...] = (7, 30, 90)
    half_life_days: float = 7.0
    trend_improving: float = 5.0
    trend_declining: float = -10.0
    late_log_days: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "consistency_windows", tuple(int(w) for w in self.consistency_windows))
        if not self.consistency_windows or any(window <= 0 for window in self.consistency_windows):
            raise InvalidConfiguration(f"consistency_windows must be positive, got {self.consistency_windows!r}")
        if self.half_life_days <= 0:
            raise InvalidConfiguration(f"half_life_days must be > 0, got {self.half_life_days!r}")
        for name in ("streak_threshold", "consistency_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 100.0:
                raise InvalidConfiguration(f"{name} must be within [0, 100], got {value!r}")
        if self.late_log_days < 0:
            raise InvalidConfiguration(f"late_log_days must be >= 0, got {self.late_log_days!r}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineConfig":
        known = {field.name for field in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidConfiguration(f"unknown config keys {unknown}")
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["consistency_windows"] = list(self.consistency_windows)
        return payload


def load_config(file_path: Optional[str] = None) -> EngineConfig:
    """Load settings from a JSON file, or the defaults when there is none."""

    if file_path is None or not Path(file_path).exists():
        logger.debug("No engine config at %s, using defaults", file_path)
        return EngineConfig()

    with open(file_path, encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise InvalidConfiguration(f"{file_path}: malformed JSON") from exc

    if not isinstance(payload, dict):
        raise InvalidConfiguration(f"{file_path}: config must be a JSON object")
    return EngineConfig.from_dict(payload)
