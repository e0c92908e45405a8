"""Tag directory: normalized tag -> item and last known location."""

import logging
from typing import Iterable, Optional

from ..exceptions import BadgeScanError
from ..utils import normalize_tag
from .models import TagEntry

logger = logging.getLogger(__name__)


class TagDirectory:
    """Mapping from tag to item, plus the disjoint set of operator badges.

    The directory is the only record of where a tag physically is
    (``last_location_id``); the stock ledger does not track tags.
    """

    def __init__(self, badges: Iterable[str] = ()):
        self._entries: dict[str, TagEntry] = {}
        self._badges: set[str] = set()
        for badge in badges:
            self.add_badge(badge)

    def add_badge(self, tag: str) -> str:
        card_hex = normalize_tag(tag)
        if card_hex in self._entries:
            raise ValueError(f"Tag {card_hex} is mapped to an item and cannot become a badge")
        self._badges.add(card_hex)
        return card_hex

    def is_badge(self, tag: str) -> bool:
        return normalize_tag(tag) in self._badges

    @property
    def badges(self) -> frozenset[str]:
        return frozenset(self._badges)

    def get(self, tag: str) -> Optional[TagEntry]:
        return self._entries.get(normalize_tag(tag))

    def set(self, tag: str, item_id: str, last_location_id: Optional[str]) -> TagEntry:
        """Create or overwrite the entry for a tag. Badges are refused."""
        card_hex = normalize_tag(tag)
        if card_hex in self._badges:
            raise BadgeScanError(card_hex)
        previous = self._entries.get(card_hex)
        entry = TagEntry(card_hex=card_hex, item_id=item_id, last_location_id=last_location_id)
        self._entries[card_hex] = entry
        if previous is not None and previous.item_id != item_id:
            logger.info(f"Tag {card_hex} remapped {previous.item_id} -> {item_id}")
        return entry

    def move(self, tag: str, location_id: str) -> TagEntry:
        """Rewrite the last known location of an existing entry."""
        entry = self._entries[normalize_tag(tag)]
        entry.last_location_id = location_id
        return entry

    def entries(self) -> list[TagEntry]:
        return list(self._entries.values())

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and normalize_tag(tag) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
