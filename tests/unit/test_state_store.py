"""
Unit tests for the JSON StateStore.
"""

import json

import pytest

from src.core.models import Year
from src.ledger.accounts import register, update_profile
from src.ledger.queries import accept_query, post_query
from src.ledger.sessions import mark_outcome, rate_session
from src.ledger.state import LedgerState
from src.ledger.store import StateStore


@pytest.fixture
def busy_state(empty_state, ctx):
    """A snapshot touching every collection and nullable field."""
    state = empty_state
    asker = register(state, ctx, "b@pccoepune.org", "p")
    mentor = register(asker.state, ctx, "a@pccoepune.org", "p")
    state = update_profile(mentor.state, mentor.value.id, year=Year.FOURTH, strong_subjects=["ML"]).state
    query = post_query(state, ctx, asker.value.id, title="Overfitting", subject_tags=["ML"])
    session = accept_query(query.state, ctx, query.value.id, mentor.value.id)
    state = mark_outcome(session.state, ctx, session.value.id, True).state
    return rate_session(state, ctx, session.value.id, 4, for_mentor=True).state


class TestLoad:
    def test_missing_file_is_empty(self, tmp_path):
        store = StateStore(tmp_path / "nested" / "state.json")
        assert store.state == LedgerState()
        assert (tmp_path / "nested").is_dir()

    def test_corrupt_file_is_empty_and_kept_aside(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")
        store = StateStore(path)
        assert store.state == LedgerState()
        assert list(tmp_path.glob("state.json.corrupt-*"))

    def test_other_key_is_ignored(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"something_else": {}}), encoding="utf-8")
        assert StateStore(path).state == LedgerState()


class TestCommit:
    def test_round_trip(self, store, busy_state):
        store.commit(busy_state)
        reloaded = StateStore(store.path)
        assert reloaded.state == busy_state

    def test_layout_on_disk(self, store, busy_state):
        store.commit(busy_state)
        raw = json.loads(store.path.read_text(encoding="utf-8"))
        assert list(raw) == ["queryup_state_v1"]
        doc = raw["queryup_state_v1"]
        assert set(doc) == {"users", "queries", "sessions", "notifications"}
        session = doc["sessions"][0]
        assert session["ratingForMentor"] == 4
        assert session["ratingForMentee"] is None
        assert session["status"] == "Completed"
        assert doc["queries"][0]["status"] == "In Progress"
        assert doc["users"][0]["branch"] is None

    def test_custom_storage_key(self, tmp_path, busy_state):
        store = StateStore(tmp_path / "s.json", storage_key="custom")
        store.commit(busy_state)
        assert "custom" in json.loads(store.path.read_text(encoding="utf-8"))
        assert StateStore(tmp_path / "s.json", storage_key="custom").state == busy_state

    def test_failed_write_keeps_current_state(self, store, busy_state, monkeypatch):
        def broken_dump(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr("src.ledger.store.json.dump", broken_dump)
        with pytest.raises(OSError):
            store.commit(busy_state)
        assert store.state == LedgerState()
        assert not store.path.exists()
        assert not list(store.path.parent.glob("*.tmp"))


class TestApply:
    def test_apply_commits_transition(self, store, ctx):
        t = store.apply(register, ctx, "a@pccoepune.org", "p")
        assert store.state is t.state
        assert StateStore(store.path).state.users[0].email == "a@pccoepune.org"

    def test_failed_transition_writes_nothing(self, store, ctx):
        with pytest.raises(Exception):
            store.apply(register, ctx, "a@gmail.com", "p")
        assert not store.path.exists()

    def test_unchanged_state_is_not_written(self, store, ctx):
        t = store.apply(rate_session, ctx, "missing", 5, True)
        assert t.value is None
        assert not store.path.exists()
