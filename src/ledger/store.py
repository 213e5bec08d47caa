"""
JSON State Store for the ledger.

Persists the whole snapshot as one JSON document:

    {"queryup_state_v1": {"users": [...], "queries": [...],
                          "sessions": [...], "notifications": [...]}}

Writes are write-through: every committed transition is written to a
temporary file and renamed over the state file before the in-memory
snapshot is swapped, so a failed write changes nothing.

Default location: ~/.queryup/state.json
"""

from __future__ import annotations

import json
import os
import shutil
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from src.ledger.state import LedgerState, Transition

DEFAULT_STORAGE_KEY = "queryup_state_v1"


class StateStore:
    """
    Owner of the current snapshot and its file.

    Handles:
    - Loading the snapshot at startup (missing/unreadable file = empty ledger)
    - Atomic write-through on every commit
    - Running transitions against the current snapshot
    """

    DEFAULT_PATH = Path.home() / ".queryup" / "state.json"

    def __init__(self, path: Path | None = None, storage_key: str = DEFAULT_STORAGE_KEY):
        """
        Initialize the state store.

        Args:
            path: Custom snapshot path (defaults to ~/.queryup/state.json)
            storage_key: Top-level key the snapshot lives under
        """
        self.path = Path(path) if path else self.DEFAULT_PATH
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.storage_key = storage_key

        self._state = self._load()
        logger.debug(
            f"StateStore loaded {len(self._state.users)} users, "
            f"{len(self._state.queries)} queries from {self.path}"
        )

    @property
    def state(self) -> LedgerState:
        return self._state

    def _load(self) -> LedgerState:
        if not self.path.exists():
            return LedgerState()

        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
            document = raw.get(self.storage_key)
            if document is None:
                return LedgerState()
            return LedgerState.from_document(document)
        except (json.JSONDecodeError, OSError, AttributeError, PydanticValidationError) as e:
            backup = self._quarantine()
            logger.warning(f"Unreadable state at {self.path} ({e}); starting empty, kept {backup}")
            return LedgerState()

    def _quarantine(self) -> Path:
        """Copy an unreadable state file aside before it gets overwritten."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup = self.path.with_name(f"{self.path.name}.corrupt-{timestamp}")
        shutil.copy2(self.path, backup)
        return backup

    def reload(self) -> LedgerState:
        """Re-read the snapshot from disk."""
        self._state = self._load()
        return self._state

    def commit(self, state: LedgerState) -> LedgerState:
        """
        Persist a snapshot and make it current.

        Raises:
            OSError: If the file cannot be written (current snapshot is kept)
        """
        payload = {self.storage_key: state.to_document()}
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            logger.error(f"Failed to write state to {self.path}")
            raise

        self._state = state
        return state

    def apply(self, operation: Callable[..., Transition], *args: Any, **kwargs: Any) -> Transition:
        """
        Run a transition against the current snapshot and commit it.

        A transition that leaves the snapshot untouched is not written.
        """
        transition = operation(self._state, *args, **kwargs)
        if transition.state is not self._state:
            self.commit(transition.state)
        return transition
