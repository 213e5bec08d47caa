"""
Query lifecycle.

Posting a query and accepting it. Acceptance is the one cross-entity
operation: the session, the query status flip and the asker's
notification land in a single new snapshot or not at all.
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from src.core.errors import AlreadyMentoredError, SelfAcceptError
from src.core.models import (
    MentorType,
    Notification,
    PreferredMode,
    Query,
    QueryStatus,
    Session,
    SessionMode,
)
from src.ledger.context import LedgerContext
from src.ledger.state import LedgerState, Transition


def post_query(
    state: LedgerState,
    ctx: LedgerContext,
    asker_id: str,
    title: str,
    description: str = "",
    subject_tags: Iterable[str] = (),
    preferred_mentor_type: MentorType | str = MentorType.ANY,
    preferred_mode: PreferredMode | str = PreferredMode.EITHER,
    time_preference: str = "",
) -> Transition[Query]:
    """
    Create an Open query at the front of the feed.

    Raises:
        UserNotFoundError: Unknown asker
    """
    asker = state.get_user(asker_id)
    query = Query.create(
        id=state.new_id(ctx.id_factory),
        asker_id=asker.id,
        title=title,
        description=description,
        subject_tags=tuple(subject_tags),
        preferred_mentor_type=preferred_mentor_type,
        preferred_mode=preferred_mode,
        time_preference=time_preference,
        status=QueryStatus.OPEN,
        created_at=ctx.now(),
    )
    logger.info(f"Query {query.id} posted by {asker.email}: {query.title}")
    return Transition(state.with_changes(queries=(query, *state.queries)), query)


def acceptance_message(query: Query, mentor_name: str) -> str:
    return f'Your query "{query.title}" has been accepted by {mentor_name}.'


def accept_query(
    state: LedgerState, ctx: LedgerContext, query_id: str, mentor_id: str
) -> Transition[Session]:
    """
    Become the mentor for a query.

    Schedules a Confirmed session one offset from now, marks the query
    In Progress and notifies the asker.

    Raises:
        QueryNotFoundError: Unknown query
        UserNotFoundError: Unknown mentor
        SelfAcceptError: Mentor is the asker
        AlreadyMentoredError: Query already has a session
    """
    query = state.get_query(query_id)
    mentor = state.get_user(mentor_id)
    if query.asker_id == mentor.id:
        logger.warning(f"{mentor.email} tried to accept own query {query.id}")
        raise SelfAcceptError(query.id)
    if state.session_for_query(query.id) is not None:
        logger.warning(f"Query {query.id} already has a mentor")
        raise AlreadyMentoredError(query.id)

    now = ctx.now()
    policy = ctx.policy
    mode = SessionMode.from_preference(query.preferred_mode)
    session_id = state.new_id(ctx.id_factory)
    session = Session.create(
        id=session_id,
        query_id=query.id,
        mentor_id=mentor.id,
        mentee_id=query.asker_id,
        date_time=now + policy.session_offset,
        mode=mode,
        location_or_link=(
            policy.offline_location if mode == SessionMode.OFFLINE else policy.online_meeting_link
        ),
    )
    notification = Notification.create(
        id=state.new_id(ctx.id_factory, session_id),
        user_id=query.asker_id,
        message=acceptance_message(query, mentor.name),
        created_at=now,
    )

    # All three writes go into one snapshot
    next_state = state.replace_query(query.revise(status=QueryStatus.IN_PROGRESS)).with_changes(
        sessions=(*state.sessions, session),
        notifications=(*state.notifications, notification),
    )
    logger.info(
        f"Query {query.id} accepted by {mentor.email}; session {session.id} "
        f"({session.mode.value}) at {session.date_time.isoformat()}"
    )
    return Transition(next_state, session)


def mark_notification_read(state: LedgerState, notification_id: str) -> Transition[Notification]:
    """
    Flag a notification as read.

    Raises:
        NotificationNotFoundError: Unknown notification
    """
    notification = state.get_notification(notification_id)
    if notification.read:
        return Transition(state, notification)
    updated = notification.revise(read=True)
    logger.debug(f"Notification {notification.id} read")
    return Transition(state.replace_notification(updated), updated)
