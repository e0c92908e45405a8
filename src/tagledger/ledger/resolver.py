"""Scan resolution: raw tag + intended mode -> ledger mutation.

Resolution order for one scan:

1. Normalize the tag.
2. Badge tags are refused (``BADGE_SCAN``).
3. Unmapped tags are quarantined (``CARD_NOT_MAPPED``).
4. Mapped tags whose item is missing from the catalog fail (``BAD_ITEM_MAPPING``).
5. The item's category picks the rule:

   ========  =====  ==========================================================
   category  mode   location
   ========  =====  ==========================================================
   FOOD      OUT    explicit request location; tag remaps to the paired
                    disposal item afterwards
   TRASH     IN     forced to the registry's disposal location
   GEN       any    explicit request location
   (none)    any    request location, else the tag's last location, else the
                    configured default
   ========  =====  ==========================================================

Every check runs before the first mutation, so a failed scan leaves the
ledger, directory and log untouched. On success the tag's
``last_location_id`` becomes the location the scan landed in.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..exceptions import (
    BadItemMappingError,
    BadgeScanError,
    CardNotMappedError,
    FoodOnlyOutError,
    TrashOnlyInError,
)
from ..utils import normalize_tag
from .catalog import ItemCatalog, LocationRegistry
from .models import (
    CONSUMED_TO_TRASH,
    Action,
    Category,
    Item,
    Mode,
    ScanResult,
    TagEntry,
)
from .quarantine import UnknownScanQuarantine
from .stock import StockLedger
from .tags import TagDirectory
from .transactions import TransactionLog

logger = logging.getLogger(__name__)


@dataclass
class ScanRequest:
    card_hex: str
    mode: Mode = Mode.OUT
    qty: int = 1
    actor: str = "rfid"
    location_id: Optional[str] = None
    reason: Optional[str] = None
    work_order: Optional[str] = None


@dataclass
class _Plan:
    """A fully validated scan, ready to commit."""

    card_hex: str
    entry: TagEntry
    item: Item
    location_id: str
    next_item: Optional[Item] = None


class ScanResolver:
    """Turns scans into ledger mutations. Callers hold the ledger lock."""

    def __init__(
        self,
        catalog: ItemCatalog,
        locations: LocationRegistry,
        stock: StockLedger,
        tags: TagDirectory,
        log: TransactionLog,
        quarantine: UnknownScanQuarantine,
        default_location_id: Optional[str] = None,
    ):
        self.catalog = catalog
        self.locations = locations
        self.stock = stock
        self.tags = tags
        self.log = log
        self.quarantine = quarantine
        self.default_location_id = default_location_id

    def resolve(self, request: ScanRequest) -> ScanResult:
        plan = self._plan(request)
        return self._commit(plan, request)

    # ----- validation -----

    def _plan(self, request: ScanRequest) -> _Plan:
        card_hex = normalize_tag(request.card_hex)

        if self.tags.is_badge(card_hex):
            raise BadgeScanError(card_hex)

        entry = self.tags.get(card_hex)
        if entry is None:
            self.quarantine.record(
                card_hex=card_hex,
                mode=request.mode,
                qty=request.qty,
                actor=request.actor,
                location_id=request.location_id,
                error=CardNotMappedError.code,
            )
            raise CardNotMappedError(card_hex)

        item = self.catalog.get(entry.item_id)
        if item is None:
            logger.error(f"Tag {card_hex} points at missing item {entry.item_id}")
            raise BadItemMappingError(card_hex, entry.item_id)

        if item.category is Category.FOOD:
            plan = self._plan_food(card_hex, entry, item, request)
        elif item.category is Category.TRASH:
            plan = self._plan_trash(card_hex, entry, item, request)
        elif item.category is Category.GEN:
            location = self.locations.require(request.location_id)
            plan = _Plan(card_hex, entry, item, location.id)
        else:
            location_id = request.location_id or entry.last_location_id or self.default_location_id
            location = self.locations.require(location_id)
            plan = _Plan(card_hex, entry, item, location.id)

        self.stock.check(item.id, plan.location_id, request.mode, request.qty)
        return plan

    def _plan_food(self, card_hex: str, entry: TagEntry, item: Item, request: ScanRequest) -> _Plan:
        if request.mode is not Mode.OUT:
            raise FoodOnlyOutError(card_hex, item.id)
        location = self.locations.require(request.location_id)
        next_item = self.catalog.paired_disposal(item)
        if next_item is None:
            logger.warning(f"No disposal item paired with {item.id}; tag {card_hex} keeps its mapping")
        return _Plan(card_hex, entry, item, location.id, next_item=next_item)

    def _plan_trash(self, card_hex: str, entry: TagEntry, item: Item, request: ScanRequest) -> _Plan:
        if request.mode is not Mode.IN:
            raise TrashOnlyInError(card_hex, item.id)
        location = self.locations.disposal()
        if request.location_id and request.location_id != location.id:
            logger.info(f"Trash scan {card_hex}: ignoring {request.location_id}, using {location.id}")
        return _Plan(card_hex, entry, item, location.id)

    # ----- commit -----

    def _commit(self, plan: _Plan, request: ScanRequest) -> ScanResult:
        item = plan.item
        new_qty = self.stock.adjust(item.id, plan.location_id, request.mode, request.qty)

        if plan.next_item is not None:
            self.tags.set(plan.card_hex, plan.next_item.id, plan.location_id)
            status = CONSUMED_TO_TRASH
        else:
            self.tags.move(plan.card_hex, plan.location_id)
            status = item.status.value

        entry = self.log.append(
            item_id=item.id,
            location_id=plan.location_id,
            mode=request.mode,
            qty=request.qty,
            actor=request.actor,
            reason=request.reason,
            work_order=request.work_order,
        )
        return ScanResult(
            action=Action.CHECKOUT if request.mode is Mode.OUT else Action.CHECKIN,
            item_id=item.id,
            item_sku=item.sku,
            location_id=plan.location_id,
            card_hex=plan.card_hex,
            qty=request.qty,
            new_qty=new_qty,
            total=item.total,
            status=status,
            next_item_id=plan.next_item.id if plan.next_item is not None else None,
            log=entry,
        )
