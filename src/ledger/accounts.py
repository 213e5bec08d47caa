"""
Account lifecycle.

Signup, login, profile completion and admin blocking. Login is not a
security boundary: passwords are stored and compared as given.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from src.core.errors import (
    AccountBlockedError,
    DuplicateAccountError,
    InvalidCredentialsError,
    ValidationError,
)
from src.core.models import Role, User
from src.ledger.context import LedgerContext
from src.ledger.state import LedgerState, Transition

PROFILE_FIELDS = frozenset({"name", "year", "branch", "bio", "strong_subjects", "avatar"})


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful login."""

    user: User
    needs_profile: bool


def default_display_name(email: str) -> str:
    """'jane.doe@pccoepune.org' -> 'jane doe'."""
    return email.split("@")[0].replace(".", " ")


def register(state: LedgerState, ctx: LedgerContext, email: str, password: str) -> Transition[User]:
    """
    Create an account.

    The first account ever created becomes the admin; every later one is
    a student.

    Raises:
        ValidationError: Email is outside the institution domain
        DuplicateAccountError: Email already registered
    """
    domain = ctx.policy.institution_domain
    if not email.endswith(domain) or len(email) <= len(domain):
        logger.warning(f"Signup refused for {email}: outside {domain}")
        raise ValidationError(f"Only {domain} emails are allowed.")
    if state.user_by_email(email) is not None:
        logger.warning(f"Signup refused for {email}: already registered")
        raise DuplicateAccountError(email)

    role = Role.ADMIN if not state.users else Role.STUDENT
    user = User.create(
        id=state.new_id(ctx.id_factory),
        email=email,
        password=password,
        name=default_display_name(email),
        role=role,
    )
    logger.info(f"Registered {user.email} as {role.value} ({user.id})")
    return Transition(state.with_changes(users=(*state.users, user)), user)


def authenticate(state: LedgerState, email: str, password: str) -> AuthResult:
    """
    Match an email/password pair.

    Raises:
        InvalidCredentialsError: No exact match
        AccountBlockedError: Matched account is blocked
    """
    user = next((u for u in state.users if u.email == email and u.password == password), None)
    if user is None:
        logger.warning(f"Login failed for {email}")
        raise InvalidCredentialsError()
    if user.is_blocked:
        logger.warning(f"Login refused for blocked account {email}")
        raise AccountBlockedError(email)
    return AuthResult(user=user, needs_profile=user.needs_profile_completion)


def update_profile(state: LedgerState, user_id: str, **fields) -> Transition[User]:
    """
    Merge profile fields into a user.

    Only profile fields may be changed here; role, email and stats are not.
    Required-field checks (name, year, one subject) are the caller's job.
    """
    unknown = set(fields) - PROFILE_FIELDS
    if unknown:
        raise ValidationError(f"Not a profile field: {', '.join(sorted(unknown))}")

    user = state.get_user(user_id).revise(**fields)
    logger.info(f"Profile updated for {user.id}: {', '.join(sorted(fields)) or 'no changes'}")
    return Transition(state.replace_user(user), user)


def set_blocked(state: LedgerState, user_id: str, blocked: bool) -> Transition[User]:
    """Block or unblock a user. Scheduled sessions are left alone."""
    user = state.get_user(user_id).revise(is_blocked=blocked)
    logger.info(f"{'Blocked' if blocked else 'Unblocked'} {user.email}")
    return Transition(state.replace_user(user), user)
