"""
Leaderboard aggregation.

Totals are summed per user over all scored predictions.  Ranks are sequential
with no sharing: users on equal points get consecutive ranks, ordered by
username and then user id so the output is reproducible.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import Prediction, User


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: Any
    username: str
    total_points: int
    prediction_count: int
    rank: int


def _sort_key(row: tuple[Any, str, int, int]):
    user_id, username, total_points, _ = row
    return -total_points, username, str(user_id)


def rank_entries(rows: Iterable[tuple[Any, str, int, int]]) -> list[LeaderboardEntry]:
    """Rank ``(user_id, username, total_points, prediction_count)`` rows."""
    ordered = sorted(rows, key=_sort_key)
    return [
        LeaderboardEntry(user_id, username, int(total), int(count), rank)
        for rank, (user_id, username, total, count) in enumerate(ordered, start=1)
    ]


def aggregate_predictions(predictions: Iterable[Any]) -> list[LeaderboardEntry]:
    """Build the leaderboard from objects exposing user_id, username and points."""
    totals: dict[Any, list] = {}
    for p in predictions:
        entry = totals.setdefault(p.user_id, [p.username, 0, 0])
        entry[1] += p.points
        entry[2] += 1
    return rank_entries(
        (user_id, username, total, count)
        for user_id, (username, total, count) in totals.items()
    )


class LeaderboardAggregator:
    """Ranks every prediction owner.

    Users are left-joined: predictions whose owner has no ``users`` row still
    count, listed under an empty username.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def build(self) -> list[LeaderboardEntry]:
        stmt = (
            select(
                Prediction.user_id,
                func.coalesce(User.username, ""),
                func.coalesce(func.sum(Prediction.points), 0),
                func.count(Prediction.id),
            )
            .select_from(Prediction)
            .outerjoin(User, User.id == Prediction.user_id)
            .group_by(Prediction.user_id, User.username)
        )
        rows = (await self.session.execute(stmt)).all()
        return rank_entries(tuple(row) for row in rows)
