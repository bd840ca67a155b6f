"""
Rule engine - Ordered (condition, command) table for wall following.

The wall is kept on the robot's left. Rules are checked top to bottom
and the first match wins:

1. loop_closed           near start               → stop
2. left_front_open       LEFT_FRONT > 0.9         → (0.2, +1.5) swing toward wall
3. obstacle_ahead        FRONT < 0.7              → (0.0, -1.5) rotate away
4. front_left_obstacle   FRONT_LEFT < 0.6         → (0.3, -1.5) turn away
5. front_right_obstacle  FRONT_RIGHT < 0.6        → (0.3, +1.5) turn toward wall
6. wall_receding         LEFT_FRONT > 0.6         → (0.3, +1.5) curve back in
7. follow_wall           always                   → (0.3, 0.0) straight

Thresholds and speeds come from Parameters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from wall_follower.perception.scan import Sector, SectorReading

Condition = Callable[[SectorReading, bool], bool]


@dataclass(frozen=True)
class VelocityCommand:
    """Linear (m/s) and angular (rad/s) velocity."""

    linear: float
    angular: float

    def scaled(self, factor: float) -> VelocityCommand:
        return VelocityCommand(self.linear * factor, self.angular * factor)

    def to_dict(self) -> dict[str, float]:
        return {"linear": round(self.linear, 4), "angular": round(self.angular, 4)}


STOP = VelocityCommand(0.0, 0.0)


@dataclass(frozen=True)
class Rule:
    """One row of the rule table."""

    name: str
    condition: Condition
    command: VelocityCommand
    description: str = ""

    def matches(self, sectors: SectorReading, near_start: bool) -> bool:
        return self.condition(sectors, near_start)


class RuleEngine:
    """
    First-match evaluation over an ordered rule list.

    Usage:
        engine = RuleEngine(default_rules(params))

        # Every tick:
        rule = engine.select(sectors, near_start)
        command = rule.command
    """

    def __init__(self, rules: Sequence[Rule]):
        if not rules:
            raise ValueError("Rule table is empty")
        self.rules = tuple(rules)

    def select(self, sectors: SectorReading, near_start: bool) -> Rule:
        """
        Pick the first rule whose condition holds.

        Raises:
            LookupError: no rule matched (table without a fallback row)
        """
        for rule in self.rules:
            if rule.matches(sectors, near_start):
                return rule
        raise LookupError("No rule matched the current sectors")

    def evaluate(self, sectors: SectorReading, near_start: bool) -> VelocityCommand:
        return self.select(sectors, near_start).command

    @property
    def names(self) -> list[str]:
        return [rule.name for rule in self.rules]


def above(sector: Sector, threshold: float) -> Condition:
    return lambda sectors, near_start: sectors[sector] > threshold


def below(sector: Sector, threshold: float) -> Condition:
    return lambda sectors, near_start: sectors[sector] < threshold


def default_rules(params) -> list[Rule]:
    """Build the wall-following table from Parameters."""
    linear = params.linear_speed
    angular = params.angular_speed

    return [
        Rule(
            "loop_closed",
            lambda sectors, near_start: near_start,
            STOP,
            "Near start detected, stopping",
        ),
        Rule(
            "left_front_open",
            above(Sector.LEFT_FRONT, params.left_front_open),
            VelocityCommand(params.open_space_linear_speed, angular),
            "Left front clear, turning left",
        ),
        Rule(
            "obstacle_ahead",
            below(Sector.FRONT, params.front_blocked),
            VelocityCommand(0.0, -angular),
            "Obstacle ahead, turning right",
        ),
        Rule(
            "front_left_obstacle",
            below(Sector.FRONT_LEFT, params.front_left_near),
            VelocityCommand(linear, -angular),
            "Front left obstacle, turning right",
        ),
        Rule(
            "front_right_obstacle",
            below(Sector.FRONT_RIGHT, params.front_right_near),
            VelocityCommand(linear, angular),
            "Front right obstacle, turning left",
        ),
        Rule(
            "wall_receding",
            above(Sector.LEFT_FRONT, params.left_front_receding),
            VelocityCommand(linear, angular),
            "Wall receding, curving left",
        ),
        Rule(
            "follow_wall",
            lambda sectors, near_start: True,
            VelocityCommand(linear, 0.0),
            "Path clear, moving forward",
        ),
    ]
