"""Per-location stock ledger."""

import logging
from datetime import date
from typing import Iterable, Optional

from ..exceptions import InsufficientStockError
from .catalog import ItemCatalog
from .models import Item, ItemStatus, Mode, StockRow

logger = logging.getLogger(__name__)

RowKey = tuple[str, str, Optional[date]]


class StockLedger:
    """Quantity-at-location rows plus the derived per-item totals.

    Rows are created lazily on the first IN at a location and are kept when
    they drop to zero. An OUT larger than the row's quantity is rejected with
    ``InsufficientStockError``; it never clamps.
    """

    def __init__(self, catalog: ItemCatalog, rows: Iterable[StockRow] = ()):
        self.catalog = catalog
        self._rows: dict[RowKey, StockRow] = {}
        for row in rows:
            self._rows[row.key] = row
        for item in catalog:
            self.recalculate(item.id)

    def get_row(
        self, item_id: str, location_id: str, expires_at: Optional[date] = None
    ) -> Optional[StockRow]:
        return self._rows.get((item_id, location_id, expires_at))

    def get_or_create_row(
        self, item_id: str, location_id: str, expires_at: Optional[date] = None
    ) -> StockRow:
        key = (item_id, location_id, expires_at)
        row = self._rows.get(key)
        if row is None:
            row = StockRow(item_id=item_id, location_id=location_id, qty=0, expires_at=expires_at)
            self._rows[key] = row
            logger.debug(f"Created stock row {item_id}@{location_id} (expires={expires_at})")
        return row

    def available(self, item_id: str, location_id: str, expires_at: Optional[date] = None) -> int:
        row = self.get_row(item_id, location_id, expires_at)
        return row.qty if row else 0

    def check(
        self,
        item_id: str,
        location_id: str,
        mode: Mode,
        qty: int,
        expires_at: Optional[date] = None,
    ) -> None:
        """Validate an adjustment without applying it.

        Raises:
            ValueError: qty is not positive
            InsufficientStockError: OUT exceeds the row's quantity
        """
        if qty <= 0:
            raise ValueError(f"qty must be positive, got {qty}")
        if mode is Mode.OUT:
            available = self.available(item_id, location_id, expires_at)
            if qty > available:
                raise InsufficientStockError(item_id, location_id, qty, available)

    def adjust(
        self,
        item_id: str,
        location_id: str,
        mode: Mode,
        qty: int,
        expires_at: Optional[date] = None,
    ) -> int:
        """Apply an IN/OUT movement and recalculate the item.

        Returns:
            The row's quantity after the adjustment
        """
        self.check(item_id, location_id, mode, qty, expires_at)
        if mode is Mode.IN:
            row = self.get_or_create_row(item_id, location_id, expires_at)
            row.qty += qty
        else:
            row = self._rows[(item_id, location_id, expires_at)]
            row.qty -= qty
        self.recalculate(item_id)
        return row.qty

    def recalculate(self, item_id: str) -> Optional[Item]:
        """Recompute an item's total, locQty and status by re-summing all of its rows."""
        item = self.catalog.get(item_id)
        if item is None:
            return None
        rows = self.rows_for(item_id)
        item.total = sum(row.qty for row in rows)
        item.loc_qty = rows[0].qty if rows else 0
        item.status = ItemStatus.RISK if item.total <= (item.reorder_point or 0) else ItemStatus.OK
        return item

    def rows_for(self, item_id: str) -> list[StockRow]:
        return [row for row in self._rows.values() if row.item_id == item_id]

    def rows(self) -> list[StockRow]:
        return list(self._rows.values())
