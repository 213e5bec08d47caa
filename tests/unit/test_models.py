"""
Unit tests for ledger records.

Covers constructor invariants, revise() and the camelCase wire format.
"""

from datetime import UTC, datetime

import pytest

from src.core.errors import ValidationError
from src.core.models import (
    PreferredMode,
    Query,
    Role,
    Session,
    SessionMode,
    SessionStatus,
    User,
    Year,
)

WHEN = datetime(2025, 1, 6, 11, 0, tzinfo=UTC)


def make_session(**overrides):
    fields = {
        "id": "s-1",
        "query_id": "q-1",
        "mentor_id": "u-mentor",
        "mentee_id": "u-mentee",
        "date_time": WHEN,
    }
    fields.update(overrides)
    return Session.create(**fields)


class TestSession:
    def test_defaults_to_confirmed_online(self):
        session = make_session()
        assert session.status == SessionStatus.CONFIRMED
        assert session.mode == SessionMode.ONLINE
        assert session.rating_for_mentor is None

    def test_mentor_cannot_be_mentee(self):
        with pytest.raises(ValidationError, match="mentor and mentee"):
            make_session(mentee_id="u-mentor")

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rating_out_of_range_rejected(self, rating):
        with pytest.raises(ValidationError):
            make_session(rating_for_mentor=rating)

    def test_revise_keeps_invariants(self):
        session = make_session()
        with pytest.raises(ValidationError):
            session.revise(rating_for_mentee=9)

    def test_records_are_frozen(self):
        session = make_session()
        with pytest.raises(Exception):
            session.status = SessionStatus.COMPLETED

    def test_terminal_states(self):
        assert not SessionStatus.CONFIRMED.is_terminal
        assert SessionStatus.COMPLETED.is_terminal
        assert SessionStatus.NO_SHOW.is_terminal


class TestSessionMode:
    @pytest.mark.parametrize(
        "preference,expected",
        [
            (PreferredMode.OFFLINE, SessionMode.OFFLINE),
            (PreferredMode.ONLINE, SessionMode.ONLINE),
            (PreferredMode.EITHER, SessionMode.ONLINE),
        ],
    )
    def test_offline_only_when_requested(self, preference, expected):
        assert SessionMode.from_preference(preference) == expected


class TestUser:
    def test_strong_subjects_are_distinct(self):
        user = User.create(
            id="u-1",
            email="a@pccoepune.org",
            password="p",
            strong_subjects=["DSA", " DSA", "OS", ""],
        )
        assert user.strong_subjects == ("DSA", "OS")

    def test_needs_profile_until_year_and_subject(self):
        user = User.create(id="u-1", email="a@pccoepune.org", password="p")
        assert user.needs_profile_completion
        assert user.revise(year=Year.SECOND).needs_profile_completion
        done = user.revise(year=Year.SECOND, strong_subjects=["DSA"])
        assert not done.needs_profile_completion

    def test_wire_format_is_camel_case(self):
        user = User.create(id="u-1", email="a@pccoepune.org", password="p", role=Role.ADMIN)
        data = user.model_dump(mode="json", by_alias=True)
        assert data["isBlocked"] is False
        assert data["ratingAvg"] == 0.0
        assert data["strongSubjects"] == []
        assert data["year"] is None
        assert data["role"] == "admin"

    def test_loads_from_wire_format(self):
        user = User.model_validate(
            {
                "id": "u-1",
                "email": "a@pccoepune.org",
                "password": "p",
                "year": "3rd Year",
                "strongSubjects": ["AI"],
                "isBlocked": True,
                "xp": 120,
                "level": 2,
            }
        )
        assert user.year == Year.THIRD
        assert user.is_blocked
        assert user.strong_subjects == ("AI",)


class TestQuery:
    def test_tags_deduplicated(self):
        query = Query.create(
            id="q-1",
            asker_id="u-1",
            title="Paging",
            subject_tags=["OS", "OS", "DBMS"],
            created_at=WHEN,
        )
        assert query.subject_tags == ("OS", "DBMS")
        assert query.is_open

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValidationError):
            Query.create(id="q-1", asker_id="u-1", title="x", preferred_mode="Hybrid", created_at=WHEN)
