"""Score tiers and their display colors."""

from __future__ import annotations

from dataclasses import dataclass

from accountability_engine.errors import InvalidConfiguration, OutOfRange


@dataclass(frozen=True)
class Tier:
    """A discrete score bracket with the color every ring and badge uses."""

    name: str
    color: str
    lower: float


# Ordered from the highest lower edge down; lower edges are inclusive.
TIERS: tuple[Tier, ...] = (
    Tier("excellent", "#00FFFF", 90.0),
    Tier("high", "#38BDF8", 75.0),
    Tier("medium", "#2563EB", 50.0),
    Tier("low", "#A78BFA", 25.0),
    Tier("critical", "#7C3AED", 0.0),
)

_BY_NAME = {entry.name: entry for entry in TIERS}


def tier(percent: float) -> Tier:
    """Classify a percent in [0, 100] into exactly one tier."""

    if not 0.0 <= percent <= 100.0:
        raise OutOfRange(f"percent {percent!r} is outside [0, 100]")
    for entry in TIERS:
        if percent >= entry.lower:
            return entry
    return TIERS[-1]


def tier_color(name: str) -> str:
    """Return the display color of a tier by name."""

    try:
        return _BY_NAME[name].color
    except KeyError as exc:
        raise InvalidConfiguration(f"unknown tier '{name}'") from exc


def goal_color(priority: int) -> str:
    """Goal badges reuse the tier palette: priority 1 is the top tier color."""

    if priority < 1 or priority > len(TIERS):
        raise InvalidConfiguration(f"priority {priority!r} is outside 1..{len(TIERS)}")
    return TIERS[priority - 1].color
