"""
Read-side views over a snapshot.

Pure helpers the front end renders from: the query feed a mentor browses,
a user's sessions and the actions available on them, profile history and
notifications.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from src.core.models import Notification, Query, Session, SessionStatus, User, Year
from src.ledger.state import LedgerState

ParticipantRole = Literal["mentor", "mentee"]


def browse_queries(
    state: LedgerState,
    viewer: User,
    subject: str | None = None,
    year: Year | str | None = None,
    only_fresh: bool = False,
    search: str | None = None,
) -> list[Query]:
    """
    Open queries a viewer could accept.

    Args:
        state: Snapshot to read
        viewer: The would-be mentor; their own queries are never listed
        subject: Keep queries tagged with this subject
        year: Keep queries whose asker is in this year of study
        only_fresh: Keep queries nobody has accepted yet
        search: Case-insensitive substring of title or description

    Returns:
        Queries matching the viewer's strong subjects first, newest first
        within each group
    """
    year_value = Year(year) if year else None
    needle = search.lower() if search else None

    def keep(query: Query) -> bool:
        if query.asker_id == viewer.id or not query.is_open:
            return False
        if subject and subject not in query.subject_tags:
            return False
        if year_value is not None:
            asker = state.find_user(query.asker_id)
            if asker is None or asker.year != year_value:
                return False
        if only_fresh and state.session_for_query(query.id) is not None:
            return False
        if needle and needle not in f"{query.title} {query.description}".lower():
            return False
        return True

    strong = set(viewer.strong_subjects)
    matches = [q for q in state.queries if keep(q)]
    # Stable two-pass sort: recency first, then subject match on top
    matches.sort(key=lambda q: q.created_at, reverse=True)
    matches.sort(key=lambda q: not strong.intersection(q.subject_tags))
    return matches


@dataclass(frozen=True)
class SessionBoard:
    as_mentor: list[Session]
    as_mentee: list[Session]


def sessions_for(state: LedgerState, user_id: str) -> SessionBoard:
    return SessionBoard(
        as_mentor=[s for s in state.sessions if s.mentor_id == user_id],
        as_mentee=[s for s in state.sessions if s.mentee_id == user_id],
    )


def role_in(session: Session, user_id: str) -> ParticipantRole | None:
    if session.mentor_id == user_id:
        return "mentor"
    if session.mentee_id == user_id:
        return "mentee"
    return None


def can_mark_outcome(session: Session, now: datetime) -> bool:
    """Outcome buttons appear once the scheduled time has arrived."""
    return session.status == SessionStatus.CONFIRMED and session.date_time <= now


def can_rate(session: Session, role: ParticipantRole) -> bool:
    """
    Whether `role` still has a rating to give.

    The mentee rates the mentor and the mentor rates the mentee.
    """
    if not session.is_completed:
        return False
    given = session.rating_for_mentor if role == "mentee" else session.rating_for_mentee
    return given is None


@dataclass(frozen=True)
class ProfileHistory:
    mentored: list[Session]
    attended: list[Session]


def profile_history(state: LedgerState, user_id: str) -> ProfileHistory:
    """Completed sessions a user mentored and attended as mentee."""
    completed = [s for s in state.sessions if s.is_completed]
    return ProfileHistory(
        mentored=[s for s in completed if s.mentor_id == user_id],
        attended=[s for s in completed if s.mentee_id == user_id],
    )


def notifications_for(
    state: LedgerState, user_id: str, unread_only: bool = False
) -> list[Notification]:
    """A user's notifications, newest first."""
    mine = [
        n for n in state.notifications if n.user_id == user_id and not (unread_only and n.read)
    ]
    return sorted(mine, key=lambda n: n.created_at, reverse=True)
