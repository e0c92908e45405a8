"""Tests for the stock ledger and item catalog."""

from datetime import date

import pytest
from pytest_mock import MockerFixture

from tagledger.exceptions import InsufficientStockError, UnknownItemError, UnknownLocationError
from tagledger.ledger import Category, Item, ItemCatalog, ItemStatus, Location, LocationRegistry, Mode, StockLedger, StockRow


@pytest.fixture
def catalog() -> ItemCatalog:
    return ItemCatalog(
        [
            Item(id="ITEM-001", sku="WRENCH-SET", name="Wrench Set", reorder_point=5),
            Item(id="ITEM-002", sku="BOLT-M6", name="M6 Bolt", reorder_point=10),
        ]
    )


@pytest.fixture
def stock(catalog: ItemCatalog) -> StockLedger:
    return StockLedger(catalog, [StockRow(item_id="ITEM-001", location_id="LOC-A1", qty=1)])


class TestItemCatalog:
    """Tests for ItemCatalog."""

    def test_require_unknown_item(self, catalog: ItemCatalog) -> None:
        with pytest.raises(UnknownItemError) as exc_info:
            catalog.require("ITEM-999")
        assert exc_info.value.code == "UNKNOWN_ITEM"
        assert exc_info.value.details == {"itemId": "ITEM-999"}

    def test_paired_disposal(self) -> None:
        trash = Item(id="ITEM-081", sku="T", name="Wrapper", category=Category.TRASH)
        food = Item(id="ITEM-091", sku="F", name="Pasta", category=Category.FOOD, paired_disposal_id="ITEM-081")
        catalog = ItemCatalog([trash, food])
        assert catalog.paired_disposal(food) is trash
        assert catalog.paired_disposal(trash) is None

    def test_paired_disposal_missing_from_catalog(self) -> None:
        food = Item(id="ITEM-092", sku="F", name="Rice", category=Category.FOOD, paired_disposal_id="ITEM-089")
        assert ItemCatalog([food]).paired_disposal(food) is None

    def test_pairing_only_allowed_on_food(self) -> None:
        with pytest.raises(ValueError):
            ItemCatalog([Item(id="X", sku="X", name="X", category=Category.GEN, paired_disposal_id="Y")])


class TestLocationRegistry:
    """Tests for LocationRegistry."""

    def test_require_missing_location_id(self) -> None:
        registry = LocationRegistry([Location(id="LOC-A1", code="A1")])
        with pytest.raises(UnknownLocationError, match="locationId required"):
            registry.require(None)

    def test_require_unknown_location(self) -> None:
        registry = LocationRegistry([Location(id="LOC-A1", code="A1")])
        with pytest.raises(UnknownLocationError) as exc_info:
            registry.require("LOC-ZZ")
        assert exc_info.value.location_id == "LOC-ZZ"

    def test_disposal_location(self) -> None:
        registry = LocationRegistry(
            [Location(id="LOC-A1", code="A1"), Location(id="LOC-TRASH", code="TRASH")],
            disposal_location_id="LOC-TRASH",
        )
        assert registry.disposal().id == "LOC-TRASH"

    def test_disposal_location_not_registered(self) -> None:
        registry = LocationRegistry([Location(id="LOC-A1", code="A1")], disposal_location_id="LOC-TRASH")
        with pytest.raises(UnknownLocationError):
            registry.disposal()


class TestAdjust:
    """Tests for StockLedger.adjust."""

    def test_initial_recalculation(self, stock: StockLedger, catalog: ItemCatalog) -> None:
        wrench = catalog.get("ITEM-001")
        assert wrench.total == 1
        assert wrench.loc_qty == 1
        assert wrench.status is ItemStatus.RISK
        bolt = catalog.get("ITEM-002")
        assert bolt.total == 0
        assert bolt.status is ItemStatus.RISK

    def test_in_creates_row_lazily(self, stock: StockLedger, catalog: ItemCatalog) -> None:
        assert stock.get_row("ITEM-002", "LOC-R1") is None
        new_qty = stock.adjust("ITEM-002", "LOC-R1", Mode.IN, 12)
        assert new_qty == 12
        assert stock.get_row("ITEM-002", "LOC-R1").qty == 12
        assert catalog.get("ITEM-002").total == 12
        assert catalog.get("ITEM-002").status is ItemStatus.OK

    def test_out_to_zero_keeps_row(self, stock: StockLedger, catalog: ItemCatalog) -> None:
        assert stock.adjust("ITEM-001", "LOC-A1", Mode.OUT, 1) == 0
        row = stock.get_row("ITEM-001", "LOC-A1")
        assert row is not None
        assert row.qty == 0
        assert catalog.get("ITEM-001").total == 0

    def test_out_rejects_insufficient_stock(self, stock: StockLedger, catalog: ItemCatalog) -> None:
        with pytest.raises(InsufficientStockError) as exc_info:
            stock.adjust("ITEM-001", "LOC-A1", Mode.OUT, 2)
        assert exc_info.value.requested == 2
        assert exc_info.value.available == 1
        assert stock.get_row("ITEM-001", "LOC-A1").qty == 1
        assert catalog.get("ITEM-001").total == 1

    def test_out_from_missing_row_does_not_create_it(self, stock: StockLedger) -> None:
        with pytest.raises(InsufficientStockError):
            stock.adjust("ITEM-001", "LOC-R1", Mode.OUT, 1)
        assert stock.get_row("ITEM-001", "LOC-R1") is None

    def test_non_positive_qty_rejected(self, stock: StockLedger) -> None:
        with pytest.raises(ValueError):
            stock.adjust("ITEM-001", "LOC-A1", Mode.IN, 0)

    def test_expiry_lots_are_distinct_rows(self, stock: StockLedger, catalog: ItemCatalog) -> None:
        stock.adjust("ITEM-001", "LOC-A1", Mode.IN, 3, expires_at=date(2030, 1, 1))
        stock.adjust("ITEM-001", "LOC-A1", Mode.IN, 2, expires_at=date(2031, 1, 1))
        assert len(stock.rows_for("ITEM-001")) == 3
        assert stock.available("ITEM-001", "LOC-A1") == 1
        assert stock.available("ITEM-001", "LOC-A1", date(2030, 1, 1)) == 3
        assert catalog.get("ITEM-001").total == 6

    def test_status_flips_at_reorder_point(self, stock: StockLedger, catalog: ItemCatalog) -> None:
        stock.adjust("ITEM-001", "LOC-A1", Mode.IN, 4)
        assert catalog.get("ITEM-001").total == 5
        assert catalog.get("ITEM-001").status is ItemStatus.RISK
        stock.adjust("ITEM-001", "LOC-A1", Mode.IN, 1)
        assert catalog.get("ITEM-001").status is ItemStatus.OK

    def test_every_adjustment_recalculates(self, stock: StockLedger, mocker: MockerFixture) -> None:
        spy = mocker.spy(stock, "recalculate")
        stock.adjust("ITEM-001", "LOC-A1", Mode.IN, 1)
        stock.adjust("ITEM-001", "LOC-R1", Mode.IN, 1)
        stock.adjust("ITEM-001", "LOC-A1", Mode.OUT, 1)
        assert spy.call_count == 3
        spy.assert_called_with("ITEM-001")


class TestRecalculate:
    """Tests for StockLedger.recalculate."""

    def test_recomputes_from_rows_not_running_total(self, stock: StockLedger, catalog: ItemCatalog) -> None:
        item = catalog.get("ITEM-001")
        item.total = 999
        stock.recalculate("ITEM-001")
        assert item.total == 1

    def test_unknown_item_is_ignored(self, stock: StockLedger) -> None:
        assert stock.recalculate("ITEM-404") is None

    def test_item_without_reorder_point(self) -> None:
        catalog = ItemCatalog([Item(id="ITEM-010", sku="S", name="Spare")])
        stock = StockLedger(catalog)
        assert catalog.get("ITEM-010").status is ItemStatus.RISK
        stock.adjust("ITEM-010", "LOC-A1", Mode.IN, 1)
        assert catalog.get("ITEM-010").status is ItemStatus.OK
