"""Read-only access to the persisted installation hint.

The host application may remember the binary the user picked. The stored
path is only a hint: it short-circuits discovery when it still points at a
regular file. Nothing here ever writes to the store.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Protocol

logger = logging.getLogger(__name__)

TOOL_BINARY_PATH_KEY = "tool_binary_path"
TOOL_INSTALLATION_PREFERENCE_KEY = "tool_installation_preference"
DEFAULT_PREFERENCE = "system"


class HintStore(Protocol):
    """Key-value store the host application persists settings in."""

    def get(self, key: str) -> Optional[str]:
        ...


class MappingHintStore:
    """Hint store backed by a plain mapping."""

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        self._values = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)


class SqliteHintStore:
    """Reads settings from the ``app_settings(key, value)`` table of a SQLite file.

    A missing file, table or row reads as None. The database is opened
    read-only.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    def get(self, key: str) -> Optional[str]:
        if not self.db_path.is_file():
            return None
        try:
            conn = sqlite3.connect(f"{self.db_path.resolve().as_uri()}?mode=ro", uri=True)
        except sqlite3.Error as e:
            logger.warning("Cannot open settings database %s: %s", self.db_path, e)
            return None
        try:
            row = conn.execute("SELECT value FROM app_settings WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            logger.debug("No %s setting in %s: %s", key, self.db_path, e)
            return None
        finally:
            conn.close()
        return row[0] if row else None


@dataclass(frozen=True)
class PersistedHint:
    """Stored path and installation preference (the preference is informational)."""

    stored_path: Optional[str]
    preference: str = DEFAULT_PREFERENCE

    def usable_path(self) -> Optional[str]:
        """The stored path if it still exists as a regular file."""
        if not self.stored_path:
            return None
        if Path(self.stored_path).is_file():
            return self.stored_path
        return None


def read_persisted_hint(store: Optional[HintStore]) -> Optional[PersistedHint]:
    """Read the hint from ``store``; None when there is no store."""
    if store is None:
        return None
    stored_path = store.get(TOOL_BINARY_PATH_KEY)
    preference = store.get(TOOL_INSTALLATION_PREFERENCE_KEY) or DEFAULT_PREFERENCE
    return PersistedHint(stored_path=stored_path, preference=preference)
