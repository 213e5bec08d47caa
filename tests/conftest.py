"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import itertools
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.core.models import Year  # noqa: E402
from src.ledger.context import LedgerContext, LedgerPolicy  # noqa: E402
from src.ledger.service import MentorshipLedger  # noqa: E402
from src.ledger.state import LedgerState  # noqa: E402
from src.ledger.store import StateStore  # noqa: E402

START = datetime(2025, 1, 6, 10, 0, tzinfo=UTC)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (ledger on a real state file)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class FakeClock:
    """Settable clock for transitions."""

    def __init__(self, start: datetime = START):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **delta) -> datetime:
        self.current += timedelta(**delta)
        return self.current


def counter_ids(prefix: str = "id"):
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter):03d}"


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ctx(clock):
    """Permissive context with a fake clock and predictable ids."""
    return LedgerContext(policy=LedgerPolicy(), clock=clock, id_factory=counter_ids())


@pytest.fixture
def strict_ctx(clock):
    """Context with strict session guards switched on."""
    return LedgerContext(
        policy=LedgerPolicy(strict_session_guards=True), clock=clock, id_factory=counter_ids()
    )


@pytest.fixture
def empty_state():
    return LedgerState()


@pytest.fixture
def store(tmp_path):
    """State store writing to a temporary file."""
    return StateStore(tmp_path / "state.json")


@pytest.fixture
def ledger(store, ctx):
    return MentorshipLedger(store, ctx)


@pytest.fixture
def people(ledger):
    """
    Three users with completed profiles.

    Returns:
        Dict of name -> User: admin (first signup), asker and mentor
    """
    admin = ledger.register("asha.k@pccoepune.org", "admin-pass").value
    asker = ledger.register("ravi.m@pccoepune.org", "ravi-pass").value
    mentor = ledger.register("neha.p@pccoepune.org", "neha-pass").value

    ledger.update_profile(asker.id, name="Ravi", year=Year.FIRST, strong_subjects=["Maths"])
    ledger.update_profile(mentor.id, name="Neha", year=Year.THIRD, strong_subjects=["DSA", "OS"])
    return {
        "admin": ledger.state.get_user(admin.id),
        "asker": ledger.state.get_user(asker.id),
        "mentor": ledger.state.get_user(mentor.id),
    }


@pytest.fixture
def sample_query_fields():
    """Form fields for a typical query."""
    return {
        "title": "Dijkstra with negative edges?",
        "description": "My shortest paths come out wrong when one edge weight is negative.",
        "subject_tags": ["DSA"],
        "time_preference": "Today evening",
    }
