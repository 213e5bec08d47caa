"""
Active identity persistence for the QueryUp CLI.

Each CLI invocation is a new process, so the logged-in user is remembered
in a small JSON file (~/.queryup/identity.json) between commands.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path


@dataclass
class Identity:
    """Serializable login record."""

    user_id: str
    email: str
    logged_in_at: str  # ISO format

    @classmethod
    def from_dict(cls, data: dict) -> Identity:
        return cls(**data)


class IdentityStore:
    """Reads and writes the remembered identity file."""

    def __init__(self, path: Path):
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def save(self, user_id: str, email: str) -> Identity:
        identity = Identity(user_id=user_id, email=email, logged_in_at=datetime.now().isoformat())
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(asdict(identity), f, indent=2)
        return identity

    def load(self) -> Identity | None:
        if not self.path.exists():
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                return Identity.from_dict(json.load(f))
        except (json.JSONDecodeError, KeyError, TypeError):
            return None

    def clear(self) -> bool:
        if self.path.exists():
            self.path.unlink()
            return True
        return False
