"""Pydantic models for ledger records.

Records use snake_case attributes and serialize with camelCase aliases
(``model_dump(by_alias=True)``), which is the shape the scanner UI consumes.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Mode(str, Enum):
    IN = "IN"
    OUT = "OUT"


class Category(str, Enum):
    """Catalog classification driving scan-mode restrictions."""

    GEN = "GEN"
    FOOD = "FOOD"
    TRASH = "TRASH"


class ItemStatus(str, Enum):
    OK = "OK"
    RISK = "RISK"


class Action(str, Enum):
    CHECKIN = "CHECKIN"
    CHECKOUT = "CHECKOUT"


CONSUMED_TO_TRASH = "CONSUMED_TO_TRASH"


class LedgerModel(BaseModel):
    """Base class for all ledger records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Location(LedgerModel):
    """Named physical storage bin."""

    model_config = ConfigDict(frozen=True)

    id: str
    code: str
    description: Optional[str] = None

    def __repr__(self) -> str:
        return f"<Location(id='{self.id}', code='{self.code}')>"


class Item(LedgerModel):
    """Stock-keeping unit.

    ``loc_qty``, ``total`` and ``status`` are derived by
    ``StockLedger.recalculate`` and must not be assigned anywhere else.
    """

    id: str
    sku: str
    name: str
    description: Optional[str] = None
    safety_stock: Optional[int] = None
    reorder_point: Optional[int] = None
    category: Optional[Category] = None
    paired_disposal_id: Optional[str] = None

    loc_qty: int = 0
    total: int = 0
    status: ItemStatus = ItemStatus.RISK

    def __repr__(self) -> str:
        return f"<Item(id='{self.id}', sku='{self.sku}', total={self.total})>"


class StockRow(LedgerModel):
    """Quantity of one item at one location, optionally one expiry lot."""

    item_id: str
    location_id: str
    qty: int = Field(0, ge=0)
    expires_at: Optional[date] = None

    @property
    def key(self) -> tuple[str, str, Optional[date]]:
        return (self.item_id, self.location_id, self.expires_at)


class LogEntry(LedgerModel):
    """One IN/OUT movement. Never edited once appended."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: str
    item_id: str
    location_id: str
    mode: Mode
    qty: int
    actor: str
    reason: Optional[str] = None
    work_order: Optional[str] = None


class TagEntry(LedgerModel):
    """Tag directory entry: which item a card resolves to and where it was last seen."""

    card_hex: str
    item_id: str
    last_location_id: Optional[str] = None


class UnknownScan(LedgerModel):
    """Scan that could not be resolved to an item."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: str
    card_hex: str
    mode: Mode
    qty: int
    actor: str
    location_id: Optional[str] = None
    error: str


class AdjustmentResult(LedgerModel):
    """Outcome of a direct checkin/checkout."""

    ok: bool = True
    action: Action
    item_id: str
    location_id: str
    qty: int
    new_qty: int
    total: int
    status: str
    log: LogEntry


class ScanResult(AdjustmentResult):
    """Outcome of a resolved RFID scan.

    ``status`` is the item's risk status, or ``CONSUMED_TO_TRASH`` when the
    scan remapped the tag to its disposal item (``next_item_id``).
    """

    item_sku: str
    card_hex: str
    next_item_id: Optional[str] = None
