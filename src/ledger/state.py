"""
Ledger snapshot.

A LedgerState is the whole persisted world: four independent collections
cross-referenced by id. Snapshots are immutable; every mutation builds a
new one and hands it back inside a Transition.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from src.core.errors import (
    NotificationNotFoundError,
    QueryNotFoundError,
    SessionNotFoundError,
    UserNotFoundError,
)
from src.core.models import Notification, Query, Session, User

T = TypeVar("T")

# Re-draw limit for id collisions; uuid4 never gets near it
MAX_ID_ATTEMPTS = 16


class LedgerState(BaseModel):
    """Immutable snapshot of users, queries, sessions and notifications."""

    model_config = ConfigDict(frozen=True)

    users: tuple[User, ...] = ()
    queries: tuple[Query, ...] = ()  # most recent first
    sessions: tuple[Session, ...] = ()
    notifications: tuple[Notification, ...] = ()

    # =========================================================================
    # Lookups
    # =========================================================================

    def find_user(self, user_id: str) -> User | None:
        return next((u for u in self.users if u.id == user_id), None)

    def get_user(self, user_id: str) -> User:
        user = self.find_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def user_by_email(self, email: str) -> User | None:
        return next((u for u in self.users if u.email == email), None)

    def find_query(self, query_id: str) -> Query | None:
        return next((q for q in self.queries if q.id == query_id), None)

    def get_query(self, query_id: str) -> Query:
        query = self.find_query(query_id)
        if query is None:
            raise QueryNotFoundError(query_id)
        return query

    def find_session(self, session_id: str) -> Session | None:
        return next((s for s in self.sessions if s.id == session_id), None)

    def get_session(self, session_id: str) -> Session:
        session = self.find_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def session_for_query(self, query_id: str) -> Session | None:
        """The session spawned by a query, if it has been accepted."""
        return next((s for s in self.sessions if s.query_id == query_id), None)

    def get_notification(self, notification_id: str) -> Notification:
        for notification in self.notifications:
            if notification.id == notification_id:
                return notification
        raise NotificationNotFoundError(notification_id)

    # =========================================================================
    # Copy-on-write helpers
    # =========================================================================

    def with_changes(self, **collections: Any) -> LedgerState:
        """New snapshot with whole collections replaced."""
        return self.model_copy(update=collections)

    def replace_user(self, user: User) -> LedgerState:
        return self.with_changes(users=tuple(user if u.id == user.id else u for u in self.users))

    def replace_query(self, query: Query) -> LedgerState:
        return self.with_changes(
            queries=tuple(query if q.id == query.id else q for q in self.queries)
        )

    def replace_session(self, session: Session) -> LedgerState:
        return self.with_changes(
            sessions=tuple(session if s.id == session.id else s for s in self.sessions)
        )

    def replace_notification(self, notification: Notification) -> LedgerState:
        return self.with_changes(
            notifications=tuple(
                notification if n.id == notification.id else n for n in self.notifications
            )
        )

    def new_id(self, id_factory: Callable[[], str], *reserved: str) -> str:
        """
        Draw an id that no record in this snapshot uses yet.

        Raises:
            RuntimeError: If the factory keeps returning taken ids
        """
        taken = {
            record.id
            for collection in (self.users, self.queries, self.sessions, self.notifications)
            for record in collection
        }
        taken.update(reserved)
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = id_factory()
            if candidate not in taken:
                return candidate
        raise RuntimeError(f"Id factory produced {MAX_ID_ATTEMPTS} colliding ids in a row")

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_document(self) -> dict:
        """JSON-ready dict with camelCase record fields."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, data: dict) -> LedgerState:
        return cls.model_validate(data)


@dataclass(frozen=True)
class Transition(Generic[T]):
    """Result of a mutation: the new snapshot plus what the operation produced."""

    state: LedgerState
    value: T
