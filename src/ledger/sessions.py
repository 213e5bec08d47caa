"""
Session lifecycle.

State machine: Confirmed -> {Completed, No-show}. Either participant may
record the outcome and rate the other side.

By default the operations stay permissive: an outcome can be re-recorded
and a rating can be set on any session. With strict session guards on,
settled outcomes are final, outcomes wait for the scheduled time, and
each rating can be given once on a completed session.
"""

from __future__ import annotations

from loguru import logger

from src.core.errors import SessionStateError
from src.core.models import Session, SessionStatus
from src.ledger.context import LedgerContext
from src.ledger.state import LedgerState, Transition
from src.ledger.stats import apply_mentor_stats


def mark_outcome(
    state: LedgerState, ctx: LedgerContext, session_id: str, did_happen: bool
) -> Transition[Session]:
    """
    Record whether a session took place.

    Raises:
        SessionNotFoundError: Unknown session
        SessionStateError: Strict guards reject the change
    """
    session = state.get_session(session_id)
    outcome = SessionStatus.COMPLETED if did_happen else SessionStatus.NO_SHOW

    if ctx.policy.strict_session_guards:
        if session.status.is_terminal and session.status != outcome:
            raise SessionStateError(session.id, f"outcome already recorded as {session.status.value}")
        if ctx.now() < session.date_time:
            raise SessionStateError(session.id, "session has not started yet")
    elif session.status.is_terminal and session.status != outcome:
        logger.warning(
            f"Session {session.id} outcome overwritten: {session.status.value} -> {outcome.value}"
        )

    updated = session.revise(status=outcome)
    next_state = state.replace_session(updated)
    if session.rating_for_mentor is not None and session.status != outcome:
        # Completed-ness decides whether an existing mentor rating counts
        next_state = apply_mentor_stats(next_state, session.mentor_id)

    logger.info(f"Session {session.id} marked {outcome.value}")
    return Transition(next_state, updated)


def rate_session(
    state: LedgerState,
    ctx: LedgerContext,
    session_id: str,
    rating: int,
    for_mentor: bool,
) -> Transition[Session | None]:
    """
    Rate one side of a session.

    for_mentor=True is the mentee rating the mentor and feeds the mentor's
    XP; for_mentor=False is the mentor rating the mentee and affects no
    stats. Unknown sessions are ignored.

    Raises:
        ValidationError: Rating outside 1-5
        SessionStateError: Strict guards reject the rating
    """
    session = state.find_session(session_id)
    if session is None:
        logger.warning(f"Rating ignored: unknown session {session_id}")
        return Transition(state, None)

    field = "rating_for_mentor" if for_mentor else "rating_for_mentee"
    if ctx.policy.strict_session_guards:
        if not session.is_completed:
            raise SessionStateError(session.id, "only completed sessions can be rated")
        if getattr(session, field) is not None:
            raise SessionStateError(session.id, f"{field.replace('_', ' ')} already given")

    updated = session.revise(**{field: rating})
    next_state = state.replace_session(updated)
    if for_mentor:
        next_state = apply_mentor_stats(next_state, session.mentor_id)

    logger.info(f"Session {session.id} {field.replace('_', ' ')} set to {rating}")
    return Transition(next_state, updated)
