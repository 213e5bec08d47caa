"""
Core Module - Shared domain records and rules.

This module contains the canonical definitions used across the ledger
and the CLI.

Components:
- models: Immutable records (User, Query, Session, Notification) and enums
- errors: LedgerError taxonomy
- levels: XP tiers and level lookup

Design Principle:
src/ledger/ and src/cli/ import from src/core/ rather than redefining
records or level rules.
"""

from src.core.errors import (
    AccountBlockedError,
    AlreadyMentoredError,
    DuplicateAccountError,
    EntityNotFoundError,
    InvalidCredentialsError,
    LedgerError,
    NotificationNotFoundError,
    QueryNotFoundError,
    SelfAcceptError,
    SessionNotFoundError,
    SessionStateError,
    UserNotFoundError,
    ValidationError,
)
from src.core.levels import XP_LEVELS, XpTier, level_for_xp, xp_to_next_level
from src.core.models import (
    SUBJECT_OPTIONS,
    Branch,
    MentorType,
    Notification,
    PreferredMode,
    Query,
    QueryStatus,
    Role,
    Session,
    SessionMode,
    SessionStatus,
    User,
    Year,
)

__all__ = [
    # Errors
    "LedgerError",
    "ValidationError",
    "DuplicateAccountError",
    "InvalidCredentialsError",
    "AccountBlockedError",
    "SelfAcceptError",
    "AlreadyMentoredError",
    "SessionStateError",
    "EntityNotFoundError",
    "UserNotFoundError",
    "QueryNotFoundError",
    "SessionNotFoundError",
    "NotificationNotFoundError",
    # Levels
    "XP_LEVELS",
    "XpTier",
    "level_for_xp",
    "xp_to_next_level",
    # Records
    "SUBJECT_OPTIONS",
    "Role",
    "Year",
    "Branch",
    "MentorType",
    "PreferredMode",
    "SessionMode",
    "QueryStatus",
    "SessionStatus",
    "User",
    "Query",
    "Session",
    "Notification",
]
