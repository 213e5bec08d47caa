"""
Transition context.

Bundles everything a transition needs from the outside world: the
institution policy, a clock and an id factory. Tests swap the clock and
id factory for deterministic values.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import uuid4

from config import Settings


def utc_now() -> datetime:
    return datetime.now(UTC)


def uuid_factory() -> str:
    return str(uuid4())


@dataclass(frozen=True)
class LedgerPolicy:
    """Institution-level rules applied by the transitions."""

    institution_domain: str = "@pccoepune.org"
    session_offset: timedelta = timedelta(hours=1)
    online_meeting_link: str = "https://meet.google.com/example"
    offline_location: str = "PCCOE Library"
    strict_session_guards: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> LedgerPolicy:
        return cls(
            institution_domain=settings.institution_domain,
            session_offset=timedelta(minutes=settings.session_offset_minutes),
            online_meeting_link=settings.online_meeting_link,
            offline_location=settings.offline_location,
            strict_session_guards=settings.strict_session_guards,
        )


@dataclass(frozen=True)
class LedgerContext:
    policy: LedgerPolicy = field(default_factory=LedgerPolicy)
    clock: Callable[[], datetime] = utc_now
    id_factory: Callable[[], str] = uuid_factory

    @classmethod
    def from_settings(cls, settings: Settings) -> LedgerContext:
        return cls(policy=LedgerPolicy.from_settings(settings))

    def now(self) -> datetime:
        return self.clock()
