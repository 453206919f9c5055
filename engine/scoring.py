"""
Prediction scoring.

A prediction is scored against the stored result string of its match.  Four
rules are evaluated independently and their points summed:

    exact score        10
    correct outcome     5
    correct total       3
    correct difference  2

Results are stored as ``"<home>:<away>"``.  Both ``""`` and ``"0:0"`` mean the
match has not been played yet, so a genuine 0:0 final always scores zero.
Anything that is not two integers separated by a colon also scores zero.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

EXACT_SCORE_POINTS = 10
OUTCOME_POINTS = 5
TOTAL_GOALS_POINTS = 3
GOAL_DIFFERENCE_POINTS = 2

UNPLAYED_RESULTS = frozenset({"", "0:0"})

_INT_RE = re.compile(r"[+-]?[0-9]+")


class Outcome(str, Enum):
    HOME_WIN = "home_win"
    AWAY_WIN = "away_win"
    DRAW = "draw"


@dataclass(frozen=True)
class ScoreBreakdown:
    exact_score: bool = False
    outcome: bool = False
    total_goals: bool = False
    goal_difference: bool = False

    @property
    def points(self) -> int:
        return (
            EXACT_SCORE_POINTS * self.exact_score
            + OUTCOME_POINTS * self.outcome
            + TOTAL_GOALS_POINTS * self.total_goals
            + GOAL_DIFFERENCE_POINTS * self.goal_difference
        )


def outcome(home: int, away: int) -> Outcome:
    if home > away:
        return Outcome.HOME_WIN
    if away > home:
        return Outcome.AWAY_WIN
    return Outcome.DRAW


def parse_result(result: str) -> tuple[int, int] | None:
    """Return ``(home, away)`` for a played result, ``None`` otherwise."""
    if result in UNPLAYED_RESULTS:
        return None
    parts = result.split(":")
    if len(parts) != 2:
        return None
    if not all(_INT_RE.fullmatch(p) for p in parts):
        return None
    return int(parts[0]), int(parts[1])


def score_breakdown(predicted_home: int, predicted_away: int, result: str) -> ScoreBreakdown:
    actual = parse_result(result)
    if actual is None:
        return ScoreBreakdown()
    actual_home, actual_away = actual

    return ScoreBreakdown(
        exact_score=predicted_home == actual_home and predicted_away == actual_away,
        outcome=outcome(predicted_home, predicted_away) == outcome(actual_home, actual_away),
        total_goals=predicted_home + predicted_away == actual_home + actual_away,
        goal_difference=predicted_home - predicted_away == actual_home - actual_away,
    )


def score(predicted_home: int, predicted_away: int, result: str) -> int:
    return score_breakdown(predicted_home, predicted_away, result).points
