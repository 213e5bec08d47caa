"""
Ledger Records.

Immutable pydantic models for the four entity kinds kept in a snapshot:
users, queries, sessions and notifications. Records reference each other
by id only.

Design:
- Field names are snake_case in Python, camelCase on disk (askerId, isBlocked)
- Records are frozen; changes go through ``revise`` which re-validates
- Constructor-level invariants (distinct tags, rating range, mentor != mentee)
  are enforced by validators and surface as ledger ValidationError
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from src.core.errors import ValidationError
from src.core.levels import MAX_LEVEL, MIN_LEVEL

# =============================================================================
# Option Lists
# =============================================================================

SUBJECT_OPTIONS = (
    "DSA",
    "DBMS",
    "OS",
    "CN",
    "OOP",
    "Maths",
    "AI",
    "ML",
    "Cyber Security",
)


class Role(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"


class Year(str, Enum):
    FIRST = "1st Year"
    SECOND = "2nd Year"
    THIRD = "3rd Year"
    FOURTH = "4th Year"


class Branch(str, Enum):
    IT = "IT"
    CS = "CS"
    ENTC = "ENTC"
    MECHANICAL = "Mechanical"
    CIVIL = "Civil"
    OTHER = "Other"


class MentorType(str, Enum):
    """Who the asker would like to be mentored by."""

    ANY = "Any"
    SENIOR = "Senior"
    SAME_YEAR = "Same year"


class PreferredMode(str, Enum):
    EITHER = "Either"
    ONLINE = "Online"
    OFFLINE = "Offline"


class SessionMode(str, Enum):
    ONLINE = "Online"
    OFFLINE = "Offline"

    @classmethod
    def from_preference(cls, preference: PreferredMode) -> SessionMode:
        """Offline only when explicitly requested, Online otherwise."""
        if preference == PreferredMode.OFFLINE:
            return cls.OFFLINE
        return cls.ONLINE


class QueryStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"


class SessionStatus(str, Enum):
    """
    Session state machine.

    CONFIRMED is assigned on creation; COMPLETED and NO_SHOW are terminal.
    """

    CONFIRMED = "Confirmed"
    COMPLETED = "Completed"
    NO_SHOW = "No-show"

    @property
    def is_terminal(self) -> bool:
        return self != SessionStatus.CONFIRMED


# =============================================================================
# Base Record
# =============================================================================


def _distinct(values: tuple[str, ...]) -> tuple[str, ...]:
    """Strip, drop blanks and de-duplicate while keeping first-seen order."""
    cleaned = (v.strip() for v in values)
    return tuple(dict.fromkeys(v for v in cleaned if v))


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error["loc"]) or "record"
        parts.append(f"{loc}: {error['msg']}")
    return "; ".join(parts)


class LedgerRecord(BaseModel):
    """Common config and helpers for every persisted record."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @classmethod
    def create(cls, **fields: Any):
        """Build a record, translating constraint failures into ValidationError."""
        try:
            return cls(**fields)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid {cls.__name__.lower()}: {_describe(exc)}") from exc

    def revise(self, **changes: Any):
        """Return a re-validated copy with changes applied."""
        return type(self).create(**{**self.model_dump(), **changes})


# =============================================================================
# Entities
# =============================================================================


class User(LedgerRecord):
    """A registered participant."""

    id: str
    email: str
    password: str

    # Profile
    name: str = ""
    year: Year | None = None
    branch: Branch | None = None
    strong_subjects: tuple[str, ...] = ()
    bio: str = ""
    avatar: str | None = None

    role: Role = Role.STUDENT

    # Gamification (derived from sessions mentored)
    xp: int = Field(default=0, ge=0)
    level: int = Field(default=MIN_LEVEL, ge=MIN_LEVEL, le=MAX_LEVEL)
    rating_avg: float = Field(default=0.0, ge=0.0, le=5.0)
    rating_count: int = Field(default=0, ge=0)

    is_blocked: bool = False

    @field_validator("strong_subjects", mode="after")
    @classmethod
    def normalize_subjects(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _distinct(value)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def needs_profile_completion(self) -> bool:
        """Year and at least one strong subject are required before browsing."""
        return self.year is None or not self.strong_subjects


class Query(LedgerRecord):
    """A request for help posted by a student."""

    id: str
    asker_id: str
    title: str
    description: str = ""
    subject_tags: tuple[str, ...] = ()
    preferred_mentor_type: MentorType = MentorType.ANY
    preferred_mode: PreferredMode = PreferredMode.EITHER
    time_preference: str = ""
    status: QueryStatus = QueryStatus.OPEN
    created_at: datetime

    @field_validator("subject_tags", mode="after")
    @classmethod
    def normalize_tags(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _distinct(value)

    @property
    def is_open(self) -> bool:
        return self.status == QueryStatus.OPEN


class Session(LedgerRecord):
    """A scheduled mentoring meeting, one per accepted query."""

    id: str
    query_id: str
    mentor_id: str
    mentee_id: str
    date_time: datetime
    mode: SessionMode = SessionMode.ONLINE
    location_or_link: str = ""
    status: SessionStatus = SessionStatus.CONFIRMED
    rating_for_mentor: int | None = Field(default=None, ge=1, le=5)
    rating_for_mentee: int | None = Field(default=None, ge=1, le=5)

    @model_validator(mode="after")
    def check_participants(self) -> Session:
        if self.mentor_id == self.mentee_id:
            raise ValueError("mentor and mentee must be different users")
        return self

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    def involves(self, user_id: str) -> bool:
        return user_id in (self.mentor_id, self.mentee_id)


class Notification(LedgerRecord):
    """An informational message for one user."""

    id: str
    user_id: str
    message: str
    read: bool = False
    created_at: datetime
