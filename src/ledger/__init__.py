"""
Ledger Module - State transitions over one persisted snapshot.

Components:
- state: Immutable LedgerState snapshot and the Transition result type
- context: Policy, clock and id factory the transitions read
- accounts / queries / sessions: Pure transitions (state in, Transition out)
- stats: Mentor stats derivation and the Leaderboard view
- feed: Read-side views (query feed, session boards, notifications)
- store: JSON write-through StateStore
- service: MentorshipLedger facade used by front ends
"""

from src.ledger.context import LedgerContext, LedgerPolicy
from src.ledger.state import LedgerState, Transition
from src.ledger.stats import Leaderboard, LeaderboardEntry, MentorStats
from src.ledger.store import StateStore
from src.ledger.service import MentorshipLedger

__all__ = [
    "LedgerContext",
    "LedgerPolicy",
    "LedgerState",
    "Transition",
    "Leaderboard",
    "LeaderboardEntry",
    "MentorStats",
    "StateStore",
    "MentorshipLedger",
]
