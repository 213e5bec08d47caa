"""
Unit tests for the read-side views.
"""

from datetime import UTC, datetime, timedelta

import pytest

from src.core.models import Notification, Query, QueryStatus, Session, SessionStatus, User, Year
from src.ledger.feed import (
    browse_queries,
    can_mark_outcome,
    can_rate,
    notifications_for,
    profile_history,
    role_in,
    sessions_for,
)
from src.ledger.state import LedgerState

T0 = datetime(2025, 1, 6, 10, 0, tzinfo=UTC)


def user(user_id: str, **fields) -> User:
    return User.create(id=user_id, email=f"{user_id}@pccoepune.org", password="p", **fields)


def query(query_id: str, asker: str, minutes: int, tags=("DSA",), **fields) -> Query:
    return Query.create(
        id=query_id,
        asker_id=asker,
        title=fields.pop("title", f"Query {query_id}"),
        subject_tags=tags,
        created_at=T0 + timedelta(minutes=minutes),
        **fields,
    )


def session(session_id: str, query_id: str, mentor: str, mentee: str, **fields) -> Session:
    return Session.create(
        id=session_id,
        query_id=query_id,
        mentor_id=mentor,
        mentee_id=mentee,
        date_time=fields.pop("date_time", T0 + timedelta(hours=1)),
        **fields,
    )


@pytest.fixture
def viewer():
    return user("viewer", year=Year.THIRD, strong_subjects=["OS"])


@pytest.fixture
def feed_state(viewer):
    return LedgerState(
        users=(
            viewer,
            user("fy", year=Year.FIRST),
            user("sy", year=Year.SECOND),
        ),
        queries=(
            query("q-own", "viewer", 50),
            query("q-taken", "fy", 40, status=QueryStatus.IN_PROGRESS),
            query("q-os-old", "sy", 10, tags=("OS",), title="Paging faults"),
            query("q-dsa-new", "fy", 30, description="Heaps and priority queues"),
            query("q-dsa-old", "sy", 20),
        ),
    )


class TestBrowseQueries:
    def test_hides_own_and_non_open(self, feed_state, viewer):
        ids = [q.id for q in browse_queries(feed_state, viewer)]
        assert "q-own" not in ids
        assert "q-taken" not in ids

    def test_strong_subject_first_then_newest(self, feed_state, viewer):
        ids = [q.id for q in browse_queries(feed_state, viewer)]
        assert ids == ["q-os-old", "q-dsa-new", "q-dsa-old"]

    def test_subject_filter(self, feed_state, viewer):
        ids = [q.id for q in browse_queries(feed_state, viewer, subject="DSA")]
        assert ids == ["q-dsa-new", "q-dsa-old"]

    def test_year_filter_uses_asker_year(self, feed_state, viewer):
        ids = [q.id for q in browse_queries(feed_state, viewer, year="1st Year")]
        assert ids == ["q-dsa-new"]

    def test_search_is_case_insensitive_over_title_and_description(self, feed_state, viewer):
        assert [q.id for q in browse_queries(feed_state, viewer, search="HEAPS")] == ["q-dsa-new"]
        assert [q.id for q in browse_queries(feed_state, viewer, search="paging")] == ["q-os-old"]

    def test_only_fresh_skips_accepted(self, feed_state, viewer):
        # An Open query that somehow has a session is filtered by only_fresh
        state = feed_state.with_changes(
            sessions=(session("s1", "q-dsa-old", "viewer", "sy"),)
        )
        ids = [q.id for q in browse_queries(state, viewer, only_fresh=True)]
        assert "q-dsa-old" not in ids
        assert "q-dsa-old" in [q.id for q in browse_queries(state, viewer)]


@pytest.fixture
def session_state():
    return LedgerState(
        users=(user("a"), user("b")),
        sessions=(
            session("s1", "q1", "a", "b", status=SessionStatus.COMPLETED),
            session("s2", "q2", "b", "a"),
            session("s3", "q3", "a", "b", status=SessionStatus.NO_SHOW),
        ),
    )


class TestSessionViews:
    def test_sessions_split_by_role(self, session_state):
        board = sessions_for(session_state, "a")
        assert [s.id for s in board.as_mentor] == ["s1", "s3"]
        assert [s.id for s in board.as_mentee] == ["s2"]

    def test_role_in(self, session_state):
        s1 = session_state.get_session("s1")
        assert role_in(s1, "a") == "mentor"
        assert role_in(s1, "b") == "mentee"
        assert role_in(s1, "c") is None

    def test_can_mark_outcome_after_start(self, session_state):
        s2 = session_state.get_session("s2")
        assert not can_mark_outcome(s2, T0)
        assert can_mark_outcome(s2, T0 + timedelta(hours=1))
        assert not can_mark_outcome(session_state.get_session("s1"), T0 + timedelta(days=1))

    def test_can_rate(self, session_state):
        s1 = session_state.get_session("s1")
        assert can_rate(s1, "mentee")
        assert can_rate(s1, "mentor")
        rated = s1.revise(rating_for_mentor=5)
        assert not can_rate(rated, "mentee")
        assert can_rate(rated, "mentor")
        assert not can_rate(session_state.get_session("s3"), "mentee")

    def test_profile_history_only_completed(self, session_state):
        history = profile_history(session_state, "a")
        assert [s.id for s in history.mentored] == ["s1"]
        assert history.attended == []


def test_notifications_newest_first_and_unread_filter():
    def note(note_id, minutes, read=False, user_id="a"):
        return Notification.create(
            id=note_id,
            user_id=user_id,
            message=note_id,
            read=read,
            created_at=T0 + timedelta(minutes=minutes),
        )

    state = LedgerState(
        notifications=(note("n1", 1), note("n2", 2, read=True), note("n3", 3), note("x", 4, user_id="b"))
    )
    assert [n.id for n in notifications_for(state, "a")] == ["n3", "n2", "n1"]
    assert [n.id for n in notifications_for(state, "a", unread_only=True)] == ["n3", "n1"]
