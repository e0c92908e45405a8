"""The inventory ledger: one object owning all mutable state behind one lock."""

import logging
import threading
from datetime import date
from typing import Iterable, Optional

from ..exceptions import CardNotMappedError, InvalidRequestError, LedgerError
from ..utils import normalize_tag
from .catalog import ItemCatalog, LocationRegistry
from .models import (
    Action,
    AdjustmentResult,
    Item,
    Location,
    LogEntry,
    Mode,
    ScanResult,
    StockRow,
    TagEntry,
    UnknownScan,
)
from .quarantine import UnknownScanQuarantine
from .resolver import ScanRequest, ScanResolver
from .stock import StockLedger
from .tags import TagDirectory
from .transactions import TransactionLog

logger = logging.getLogger(__name__)


class InventoryLedger:
    """Catalog, stock rows, tag directory, transaction log and quarantine.

    Every mutating operation runs entirely under one re-entrant lock, so a
    scan that touches both the stock rows and the tag directory is never
    observed half-applied. Read operations take the same lock and return
    copies.

    Construct one at process start and hand it to the API layer.
    """

    def __init__(
        self,
        items: Iterable[Item] = (),
        locations: Iterable[Location] = (),
        rows: Iterable[StockRow] = (),
        badges: Iterable[str] = (),
        log_entries: Iterable[LogEntry] = (),
        default_location_id: Optional[str] = None,
        disposal_location_id: Optional[str] = None,
        quarantine_capacity: int = 200,
    ):
        self._lock = threading.RLock()
        self.catalog = ItemCatalog(items)
        self.locations = LocationRegistry(locations, disposal_location_id=disposal_location_id)
        self.stock = StockLedger(self.catalog, rows)
        self.tags = TagDirectory(badges)
        self.log = TransactionLog(log_entries)
        self.quarantine = UnknownScanQuarantine(quarantine_capacity)
        self.resolver = ScanResolver(
            catalog=self.catalog,
            locations=self.locations,
            stock=self.stock,
            tags=self.tags,
            log=self.log,
            quarantine=self.quarantine,
            default_location_id=default_location_id,
        )

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    # ===== Reference data =====

    def add_item(self, item: Item) -> Item:
        with self._lock:
            self.catalog.add(item)
            self.stock.recalculate(item.id)
            return item.model_copy()

    def add_location(self, location: Location) -> Location:
        with self._lock:
            return self.locations.add(location)

    def add_badge(self, tag: str) -> str:
        with self._lock:
            return self.tags.add_badge(tag)

    # ===== Scans =====

    def scan(self, request: ScanRequest) -> ScanResult:
        """Resolve an RFID scan into a ledger mutation.

        Raises:
            BadgeScanError, CardNotMappedError, BadItemMappingError,
            FoodOnlyOutError, TrashOnlyInError, UnknownLocationError,
            InsufficientStockError
        """
        _require_tag(request.card_hex)
        _require_positive(request.qty)
        with self._lock:
            try:
                return self.resolver.resolve(request)
            except LedgerError as e:
                logger.warning(f"Rejected scan {request.card_hex!r} ({request.mode.value}): {e.code}")
                raise

    # ===== Direct adjustments =====

    def checkout(
        self,
        item_id: str,
        location_id: str,
        qty: int,
        actor: Optional[str] = None,
        reason: Optional[str] = None,
        work_order: Optional[str] = None,
        expires_at: Optional[date] = None,
    ) -> AdjustmentResult:
        """Take stock out of a location without going through a tag."""
        return self._adjust(Mode.OUT, item_id, location_id, qty, actor, reason, work_order, expires_at)

    def checkin(
        self,
        item_id: str,
        location_id: str,
        qty: int,
        actor: Optional[str] = None,
        reason: Optional[str] = None,
        work_order: Optional[str] = None,
        expires_at: Optional[date] = None,
    ) -> AdjustmentResult:
        """Put stock into a location without going through a tag."""
        return self._adjust(Mode.IN, item_id, location_id, qty, actor, reason, work_order, expires_at)

    def _adjust(
        self,
        mode: Mode,
        item_id: str,
        location_id: str,
        qty: int,
        actor: Optional[str],
        reason: Optional[str],
        work_order: Optional[str],
        expires_at: Optional[date],
    ) -> AdjustmentResult:
        _require_positive(qty)
        with self._lock:
            item = self.catalog.require(item_id)
            location = self.locations.require(location_id)
            new_qty = self.stock.adjust(item.id, location.id, mode, qty, expires_at)
            entry = self.log.append(
                item_id=item.id,
                location_id=location.id,
                mode=mode,
                qty=qty,
                actor=actor,
                reason=reason,
                work_order=work_order,
            )
            return AdjustmentResult(
                action=Action.CHECKOUT if mode is Mode.OUT else Action.CHECKIN,
                item_id=item.id,
                location_id=location.id,
                qty=qty,
                new_qty=new_qty,
                total=item.total,
                status=item.status.value,
                log=entry,
            )

    # ===== Tag administration =====

    def set_mapping(self, tag: str, item_id: str, location_id: str) -> TagEntry:
        """Map a tag to an item at a location and clear its quarantined scans."""
        _require_tag(tag)
        with self._lock:
            item = self.catalog.require(item_id)
            location = self.locations.require(location_id)
            entry = self.tags.set(tag, item.id, location.id)
            self.quarantine.clear(entry.card_hex)
            logger.info(f"Mapped tag {entry.card_hex} -> {item.id}@{location.id}")
            return entry.model_copy()

    def force_move(self, tag: str, location_id: str) -> TagEntry:
        """Relocate a tag in the directory only; stock rows are untouched."""
        card_hex = normalize_tag(tag)
        with self._lock:
            if self.tags.get(card_hex) is None:
                raise CardNotMappedError(card_hex)
            location = self.locations.require(location_id)
            entry = self.tags.move(card_hex, location.id)
            logger.info(f"Moved tag {card_hex} to {location.id}")
            return entry.model_copy()

    # ===== Snapshots =====

    def items(self) -> list[Item]:
        with self._lock:
            return [item.model_copy() for item in self.catalog]

    def get_item(self, item_id: str) -> Optional[Item]:
        with self._lock:
            item = self.catalog.get(item_id)
            return item.model_copy() if item is not None else None

    def list_locations(self) -> list[Location]:
        with self._lock:
            return list(self.locations)

    def stock_rows(self, item_id: Optional[str] = None) -> list[StockRow]:
        with self._lock:
            rows = self.stock.rows_for(item_id) if item_id else self.stock.rows()
            return [row.model_copy() for row in rows]

    def logs(self, item_id: Optional[str] = None, limit: Optional[int] = None) -> list[LogEntry]:
        with self._lock:
            return self.log.list(item_id=item_id, limit=limit)

    def mappings(self) -> list[TagEntry]:
        with self._lock:
            return [entry.model_copy() for entry in self.tags.entries()]

    def get_mapping(self, tag: str) -> Optional[TagEntry]:
        with self._lock:
            entry = self.tags.get(tag)
            return entry.model_copy() if entry is not None else None

    def unknown_scans(self) -> list[UnknownScan]:
        with self._lock:
            return self.quarantine.list()


def _require_positive(qty: int) -> None:
    if qty < 1:
        raise InvalidRequestError(f"qty must be at least 1, got {qty}", qty=qty)


def _require_tag(tag: str) -> None:
    if not normalize_tag(tag):
        raise InvalidRequestError("cardHex must not be blank", cardHex=tag)
