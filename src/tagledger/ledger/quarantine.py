"""Bounded buffer of scans that could not be resolved to an item."""

import itertools
import logging
from collections import deque
from typing import Optional

from ..utils import utc_now_iso
from .models import Mode, UnknownScan

logger = logging.getLogger(__name__)


class UnknownScanQuarantine:
    """Recent unresolved scans for operator triage.

    Holds at most ``capacity`` entries; the oldest is dropped first. Purely
    observational: nothing here feeds back into the ledger.
    """

    def __init__(self, capacity: int = 200):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._entries: deque[UnknownScan] = deque(maxlen=capacity)
        self._ids = itertools.count(1)

    def record(
        self,
        card_hex: str,
        mode: Mode,
        qty: int,
        actor: str,
        error: str,
        location_id: Optional[str] = None,
    ) -> UnknownScan:
        entry = UnknownScan(
            id=f"UNK-{next(self._ids)}",
            timestamp=utc_now_iso(),
            card_hex=card_hex,
            mode=mode,
            qty=qty,
            actor=actor,
            location_id=location_id,
            error=error,
        )
        self._entries.append(entry)
        logger.info(f"Quarantined unknown scan {card_hex} ({error}, {entry.id})")
        return entry

    def clear(self, card_hex: str) -> int:
        """Drop every entry for one tag. Returns how many were removed."""
        kept = [e for e in self._entries if e.card_hex != card_hex]
        removed = len(self._entries) - len(kept)
        if removed:
            self._entries = deque(kept, maxlen=self.capacity)
            logger.info(f"Cleared {removed} quarantined scan(s) for {card_hex}")
        return removed

    def list(self) -> list[UnknownScan]:
        """Entries most-recent-first."""
        return list(reversed(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
