"""
Mentor statistics and leaderboard.

Stats are always re-derived from the full session collection, never
patched incrementally, so they cannot drift from the sessions they
summarise. Only ratings received as a mentor count: mentoring earns XP,
asking does not.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from loguru import logger

from src.core.levels import XP_PER_RATING_POINT, level_for_xp
from src.core.models import Session, User
from src.ledger.state import LedgerState


@dataclass(frozen=True)
class MentorStats:
    """Aggregate mentoring stats for one user."""

    xp: int = 0
    level: int = 1
    rating_avg: float = 0.0
    rating_count: int = 0

    def as_user_fields(self) -> dict:
        return {
            "xp": self.xp,
            "level": self.level,
            "rating_avg": self.rating_avg,
            "rating_count": self.rating_count,
        }


def rated_mentor_sessions(state: LedgerState, user_id: str) -> list[Session]:
    """Completed sessions mentored by user_id that carry a mentor rating."""
    return [
        s
        for s in state.sessions
        if s.mentor_id == user_id and s.is_completed and s.rating_for_mentor is not None
    ]


def completed_mentor_sessions(state: LedgerState, user_id: str) -> int:
    """Completed sessions mentored by user_id, rated or not."""
    return sum(1 for s in state.sessions if s.mentor_id == user_id and s.is_completed)


def compute_mentor_stats(state: LedgerState, user_id: str) -> MentorStats:
    """
    Derive xp, level and rating average for a mentor.

    xp = sum(rating * 10) over completed, mentor-rated sessions;
    rating_avg is 0 when there are no such sessions.
    """
    ratings = [s.rating_for_mentor for s in rated_mentor_sessions(state, user_id)]
    count = len(ratings)
    total = sum(ratings)
    xp = total * XP_PER_RATING_POINT
    return MentorStats(
        xp=xp,
        level=level_for_xp(xp),
        rating_avg=total / count if count else 0.0,
        rating_count=count,
    )


def apply_mentor_stats(state: LedgerState, user_id: str) -> LedgerState:
    """Snapshot with user_id's stored stats replaced by freshly derived ones."""
    user = state.get_user(user_id)
    stats = compute_mentor_stats(state, user_id)
    logger.debug(
        f"Stats for {user_id}: xp={stats.xp} level={stats.level} "
        f"avg={stats.rating_avg:.2f} n={stats.rating_count}"
    )
    return state.replace_user(user.revise(**stats.as_user_fields()))


# =============================================================================
# Leaderboard
# =============================================================================


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    user: User
    completed_sessions: int


class Leaderboard:
    """
    Ranked view over all users of a snapshot.

    Ordering: xp desc, rating_avg desc, completed mentor sessions desc,
    then id asc so ties always resolve the same way. Ranking is computed
    on iteration, and every iteration starts over from the first place.
    """

    def __init__(self, state: LedgerState):
        self._state = state

    def _sort_key(self, user: User, completed: int) -> tuple:
        return (-user.xp, -user.rating_avg, -completed, user.id)

    def __iter__(self) -> Iterator[LeaderboardEntry]:
        counted = [
            (user, completed_mentor_sessions(self._state, user.id)) for user in self._state.users
        ]
        counted.sort(key=lambda pair: self._sort_key(*pair))
        for rank, (user, completed) in enumerate(counted, start=1):
            yield LeaderboardEntry(rank=rank, user=user, completed_sessions=completed)

    def __len__(self) -> int:
        return len(self._state.users)

    def top(self, limit: int) -> list[LeaderboardEntry]:
        """First `limit` entries."""
        entries = []
        for entry in self:
            if len(entries) >= limit:
                break
            entries.append(entry)
        return entries

    def rank_of(self, user_id: str) -> int | None:
        return next((e.rank for e in self if e.user.id == user_id), None)
