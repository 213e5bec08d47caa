"""
XP Levels.

Maps experience points to the five mentor levels shown on profiles
and the leaderboard. Tiers are inclusive on both ends; the top tier
is open-ended.
"""

from __future__ import annotations

from dataclasses import dataclass

XP_PER_RATING_POINT = 10


@dataclass(frozen=True)
class XpTier:
    """A single level with its inclusive XP range."""

    level: int
    min_xp: int
    max_xp: int | None  # None = no upper bound

    def contains(self, xp: float) -> bool:
        """Check if xp falls inside this tier."""
        if xp < self.min_xp:
            return False
        return self.max_xp is None or xp <= self.max_xp

    @property
    def is_top(self) -> bool:
        return self.max_xp is None


XP_LEVELS: tuple[XpTier, ...] = (
    XpTier(level=1, min_xp=0, max_xp=99),
    XpTier(level=2, min_xp=100, max_xp=299),
    XpTier(level=3, min_xp=300, max_xp=699),
    XpTier(level=4, min_xp=700, max_xp=1499),
    XpTier(level=5, min_xp=1500, max_xp=None),
)

MIN_LEVEL = XP_LEVELS[0].level
MAX_LEVEL = XP_LEVELS[-1].level


def tier_for_xp(xp: float) -> XpTier:
    """
    Find the tier whose range contains xp.

    Args:
        xp: Experience points (negative values fall back to the first tier)

    Returns:
        Matching XpTier
    """
    for tier in XP_LEVELS:
        if tier.contains(xp):
            return tier
    # Negative or fractional gaps (e.g. 99.5) stay on the lower tier
    for tier in reversed(XP_LEVELS):
        if xp >= tier.min_xp:
            return tier
    return XP_LEVELS[0]


def level_for_xp(xp: float) -> int:
    """Level (1-5) for a given amount of XP."""
    return tier_for_xp(xp).level


def xp_to_next_level(xp: float) -> int | None:
    """
    XP still needed to reach the next level.

    Returns:
        Remaining XP, or None when already at the top level
    """
    tier = tier_for_xp(xp)
    if tier.is_top:
        return None
    return int(tier.max_xp + 1 - max(xp, 0))
