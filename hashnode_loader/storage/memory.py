"""In-memory content store.

Site builders supply their own store; this one implements the same contract
so loaders can run standalone from the CLI and in tests.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol

from hashnode_loader.core.data_models import StoredEntry


class DataStore(Protocol):
    """What a loader needs from a content store."""

    def set(self, entry: StoredEntry) -> bool:
        """Store ``entry``; return False when it was unchanged and skipped."""
        ...


class MemoryDataStore:
    """Dictionary-backed store keyed by entry id."""

    def __init__(self) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)
        self._entries: Dict[str, StoredEntry] = {}

    def set(self, entry: StoredEntry) -> bool:
        """
        Store an entry.

        Args:
            entry: Entry to store

        Returns:
            False if an entry with the same id and digest is already stored,
            True otherwise
        """
        existing = self._entries.get(entry.id)
        if existing is not None and existing.digest == entry.digest:
            self.logger.debug("Unchanged entry skipped: %s", entry.id)
            return False
        self._entries[entry.id] = entry
        return True

    def get(self, entry_id: str) -> Optional[StoredEntry]:
        return self._entries.get(entry_id)

    def has(self, entry_id: str) -> bool:
        return entry_id in self._entries

    def keys(self) -> List[str]:
        return list(self._entries)

    def entries(self) -> List[StoredEntry]:
        return list(self._entries.values())

    def delete(self, entry_id: str) -> bool:
        return self._entries.pop(entry_id, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
