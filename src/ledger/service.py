"""
Mentorship Ledger facade.

The single entry point a front end talks to. It owns a StateStore and
the active identity, runs each operation as a pure transition against the
current snapshot and returns the committed Transition.

Usage:
    ledger = MentorshipLedger.open()
    ledger.register("asha.k@pccoepune.org", "secret")
    query = ledger.post_query(ledger.active_user_id, title="Dijkstra?").value
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from config import Settings, get_settings
from src.core.errors import AccountBlockedError
from src.core.models import MentorType, Notification, PreferredMode, Query, Session, User
from src.ledger import accounts, feed, queries, sessions, stats
from src.ledger.accounts import AuthResult
from src.ledger.context import LedgerContext
from src.ledger.state import LedgerState, Transition
from src.ledger.store import StateStore


class MentorshipLedger:
    """Accounts, queries, sessions and stats over one persisted snapshot."""

    def __init__(self, store: StateStore, context: LedgerContext | None = None):
        self.store = store
        self.context = context or LedgerContext.from_settings(get_settings())
        self.active_user_id: str | None = None

    @classmethod
    def open(cls, settings: Settings | None = None) -> MentorshipLedger:
        """Ledger backed by the configured state file."""
        settings = settings or get_settings()
        store = StateStore(settings.state_path, storage_key=settings.storage_key)
        return cls(store, LedgerContext.from_settings(settings))

    @property
    def state(self) -> LedgerState:
        return self.store.state

    @property
    def active_user(self) -> User | None:
        if self.active_user_id is None:
            return None
        return self.state.find_user(self.active_user_id)

    # =========================================================================
    # Accounts
    # =========================================================================

    def register(self, email: str, password: str) -> Transition[User]:
        transition = self.store.apply(accounts.register, self.context, email, password)
        self.active_user_id = transition.value.id
        return transition

    def authenticate(self, email: str, password: str) -> AuthResult:
        result = accounts.authenticate(self.state, email, password)
        self.active_user_id = result.user.id
        logger.info(f"{result.user.email} logged in")
        return result

    def resume(self, user_id: str) -> User:
        """
        Restore a remembered identity.

        Raises:
            UserNotFoundError: The user no longer exists
            AccountBlockedError: The user was blocked since
        """
        user = self.state.get_user(user_id)
        if user.is_blocked:
            raise AccountBlockedError(user.email)
        self.active_user_id = user.id
        return user

    def logout(self) -> None:
        self.active_user_id = None

    def update_profile(self, user_id: str, **fields) -> Transition[User]:
        return self.store.apply(accounts.update_profile, user_id, **fields)

    def set_blocked(self, user_id: str, blocked: bool) -> Transition[User]:
        return self.store.apply(accounts.set_blocked, user_id, blocked)

    # =========================================================================
    # Queries
    # =========================================================================

    def post_query(
        self,
        asker_id: str,
        title: str,
        description: str = "",
        subject_tags: Iterable[str] = (),
        preferred_mentor_type: MentorType | str = MentorType.ANY,
        preferred_mode: PreferredMode | str = PreferredMode.EITHER,
        time_preference: str = "",
    ) -> Transition[Query]:
        return self.store.apply(
            queries.post_query,
            self.context,
            asker_id,
            title,
            description=description,
            subject_tags=subject_tags,
            preferred_mentor_type=preferred_mentor_type,
            preferred_mode=preferred_mode,
            time_preference=time_preference,
        )

    def accept_query(self, query_id: str, mentor_id: str) -> Transition[Session]:
        return self.store.apply(queries.accept_query, self.context, query_id, mentor_id)

    def mark_notification_read(self, notification_id: str) -> Transition[Notification]:
        return self.store.apply(queries.mark_notification_read, notification_id)

    # =========================================================================
    # Sessions
    # =========================================================================

    def mark_outcome(self, session_id: str, did_happen: bool) -> Transition[Session]:
        return self.store.apply(sessions.mark_outcome, self.context, session_id, did_happen)

    def rate_session(
        self, session_id: str, rating: int, for_mentor: bool
    ) -> Transition[Session | None]:
        return self.store.apply(sessions.rate_session, self.context, session_id, rating, for_mentor)

    # =========================================================================
    # Stats & views
    # =========================================================================

    def recompute_stats(self, user_id: str) -> stats.MentorStats:
        """Freshly derived stats for a user; does not write anything."""
        self.state.get_user(user_id)
        return stats.compute_mentor_stats(self.state, user_id)

    def leaderboard(self) -> stats.Leaderboard:
        return stats.Leaderboard(self.state)

    def browse_queries(self, viewer_id: str, **filters) -> list[Query]:
        return feed.browse_queries(self.state, self.state.get_user(viewer_id), **filters)

    def sessions_for(self, user_id: str) -> feed.SessionBoard:
        return feed.sessions_for(self.state, user_id)

    def profile_history(self, user_id: str) -> feed.ProfileHistory:
        return feed.profile_history(self.state, user_id)

    def notifications_for(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        return feed.notifications_for(self.state, user_id, unread_only=unread_only)
