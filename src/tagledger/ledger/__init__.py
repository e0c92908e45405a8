"""Ledger package initialization."""

from .catalog import ItemCatalog, LocationRegistry
from .models import (
    CONSUMED_TO_TRASH,
    Action,
    AdjustmentResult,
    Category,
    Item,
    ItemStatus,
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
from .seed import build_demo_ledger
from .service import InventoryLedger
from .stock import StockLedger
from .tags import TagDirectory
from .transactions import TransactionLog

__all__ = [
    # Models
    "Action",
    "AdjustmentResult",
    "Category",
    "CONSUMED_TO_TRASH",
    "Item",
    "ItemStatus",
    "Location",
    "LogEntry",
    "Mode",
    "ScanResult",
    "StockRow",
    "TagEntry",
    "UnknownScan",
    # Components
    "ItemCatalog",
    "LocationRegistry",
    "StockLedger",
    "TransactionLog",
    "TagDirectory",
    "UnknownScanQuarantine",
    "ScanRequest",
    "ScanResolver",
    # Ledger
    "InventoryLedger",
    "build_demo_ledger",
]
