"""Bounded most-recent-first booking ledgers."""

import logging
from collections import deque

from ..errors import NotFoundError
from ..metrics import update_ledger_size
from .models import LedgerEntry

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10


class BookingLedger:
    """
    Fixed-capacity sequence of ledger entries, newest first.

    Appending past capacity evicts the oldest entry from the back. Entries
    are never modified once added, only removed.
    """

    def __init__(self, name: str, capacity: int = DEFAULT_CAPACITY):
        self.name = name
        self.capacity = capacity
        self._entries: deque[LedgerEntry] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: LedgerEntry) -> None:
        """Insert at the front, evicting the oldest entry when full."""
        if len(self._entries) == self.capacity:
            evicted = self._entries[-1]
            logger.debug(f"{self.name} ledger full, evicting {evicted.id}")
        self._entries.appendleft(entry)
        update_ledger_size(self.name, len(self._entries))

    def list(self) -> list[LedgerEntry]:
        """Entries in most-recent-first order."""
        return list(self._entries)

    def remove(self, entry_id: str) -> LedgerEntry:
        """
        Remove one entry by id.

        Raises:
            NotFoundError: If no entry has this id
        """
        for entry in self._entries:
            if entry.id == entry_id:
                self._entries.remove(entry)
                update_ledger_size(self.name, len(self._entries))
                return entry
        raise NotFoundError("Booking not found")

    def clear(self) -> None:
        self._entries.clear()
        update_ledger_size(self.name, 0)
