"""Append-only transaction log."""

import itertools
import logging
from typing import Iterable, Optional

from ..utils import utc_now_iso
from .models import LogEntry, Mode

logger = logging.getLogger(__name__)


class TransactionLog:
    """Every IN/OUT movement, in creation order. Entries are never edited or removed."""

    def __init__(self, entries: Iterable[LogEntry] = (), start_id: int = 1001):
        self._entries: list[LogEntry] = list(entries)
        self._ids = itertools.count(start_id + len(self._entries))

    def append(
        self,
        item_id: str,
        location_id: str,
        mode: Mode,
        qty: int,
        actor: Optional[str] = None,
        reason: Optional[str] = None,
        work_order: Optional[str] = None,
    ) -> LogEntry:
        """Append a movement to the log.

        Args:
            item_id: Item that moved
            location_id: Location it moved in or out of
            mode: IN or OUT
            qty: Positive quantity moved
            actor: Who performed the movement (defaults to "unknown")
            reason: Optional free-text reason
            work_order: Optional work order reference

        Returns:
            The appended entry
        """
        entry = LogEntry(
            id=f"LOG-{next(self._ids)}",
            timestamp=utc_now_iso(),
            item_id=item_id,
            location_id=location_id,
            mode=mode,
            qty=qty,
            actor=actor or "unknown",
            reason=reason,
            work_order=work_order,
        )
        self._entries.append(entry)
        logger.info(f"Logged {mode.value} {qty}x {item_id}@{location_id} by {entry.actor} ({entry.id})")
        return entry

    def list(self, item_id: Optional[str] = None, limit: Optional[int] = None) -> list[LogEntry]:
        """Entries most-recent-first, optionally for one item only."""
        entries = [e for e in reversed(self._entries) if item_id is None or e.item_id == item_id]
        return entries[:limit] if limit is not None else entries

    def __len__(self) -> int:
        return len(self._entries)
