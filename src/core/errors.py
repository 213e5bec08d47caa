"""
Ledger error taxonomy.

Every error is raised before any state is built, so a failed operation
never leaves a partially-updated snapshot behind.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for all refused ledger operations."""

    pass


class ValidationError(LedgerError):
    """Raised when input is malformed or breaks a record constraint."""

    pass


class DuplicateAccountError(LedgerError):
    """Raised when signing up with an email that already has an account."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"An account for {email} already exists. Please log in.")


class InvalidCredentialsError(LedgerError):
    """Raised when no account matches the email and password."""

    def __init__(self):
        super().__init__("Invalid credentials.")


class AccountBlockedError(LedgerError):
    """Raised when a blocked account tries to log in."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("Your account is blocked. Contact admin.")


class SelfAcceptError(LedgerError):
    """Raised when a user tries to mentor their own query."""

    def __init__(self, query_id: str):
        self.query_id = query_id
        super().__init__("You cannot accept your own query.")


class AlreadyMentoredError(LedgerError):
    """Raised when a query already has a session."""

    def __init__(self, query_id: str):
        self.query_id = query_id
        super().__init__("This query already has a mentor.")


class SessionStateError(LedgerError):
    """Raised by strict session guards for a disallowed transition."""

    def __init__(self, session_id: str, reason: str):
        self.session_id = session_id
        self.reason = reason
        super().__init__(f"Session {session_id}: {reason}")


class EntityNotFoundError(LedgerError):
    """Raised when an id does not exist in the snapshot."""

    kind = "Entity"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"{self.kind} not found: {entity_id}")


class UserNotFoundError(EntityNotFoundError):
    kind = "User"


class QueryNotFoundError(EntityNotFoundError):
    kind = "Query"


class SessionNotFoundError(EntityNotFoundError):
    kind = "Session"


class NotificationNotFoundError(EntityNotFoundError):
    kind = "Notification"
