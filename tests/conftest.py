"""Pytest configuration and shared fixtures."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tagledger.api import create_app
from tagledger.config import Settings
from tagledger.ledger import Category, InventoryLedger, Item, Location, StockRow


@pytest.fixture
def test_settings() -> Settings:
    """Settings for an app wired to the fixture ledger."""
    return Settings(
        seed_demo_data=False,
        default_location_id="LOC-A1",
        disposal_location_id="LOC-TRASH",
        cors_origins="http://localhost:5173",
        rate_limit="1000/minute",
    )


def make_items() -> list[Item]:
    return [
        Item(id="ITEM-001", sku="WRENCH-SET", name="Wrench Set", safety_stock=8, reorder_point=5),
        Item(id="ITEM-002", sku="BOLT-M6", name="M6 Bolt (stainless)", safety_stock=20, reorder_point=10),
        Item(id="ITEM-003", sku="SCREW-M6", name="Machine Screw (M6)", reorder_point=2, category=Category.GEN),
        Item(id="ITEM-081", sku="TRASH-PASTA", name="Pasta (empty packaging)", reorder_point=0,
             category=Category.TRASH),
        Item(id="ITEM-091", sku="FOOD-PASTA", name="Rehydratable Pasta", reorder_point=1,
             category=Category.FOOD, paired_disposal_id="ITEM-081"),
        # Paired disposal item deliberately absent from the catalog
        Item(id="ITEM-092", sku="FOOD-RICE", name="Thermostabilized Rice", reorder_point=1,
             category=Category.FOOD, paired_disposal_id="ITEM-089"),
    ]


def make_locations() -> list[Location]:
    return [
        Location(id="LOC-A1", code="A1", description="Main bench left drawer"),
        Location(id="LOC-R1", code="R1", description="Rack 1, Bin 3"),
        Location(id="LOC-C1", code="C1", description="Cold storage crate 1"),
        Location(id="LOC-TRASH", code="TRASH", description="Disposal bag"),
    ]


def make_rows() -> list[StockRow]:
    return [
        StockRow(item_id="ITEM-001", location_id="LOC-A1", qty=1),
        StockRow(item_id="ITEM-002", location_id="LOC-R1", qty=87),
        StockRow(item_id="ITEM-003", location_id="LOC-A1", qty=10),
        StockRow(item_id="ITEM-091", location_id="LOC-C1", qty=4),
        StockRow(item_id="ITEM-092", location_id="LOC-C1", qty=2),
    ]


TAGS = [
    ("3D00D51E2C", "ITEM-001", "LOC-A1"),
    ("3D00D51E2D", "ITEM-002", "LOC-R1"),
    ("A0000003", "ITEM-003", "LOC-A1"),
    ("F0000091", "ITEM-091", "LOC-C1"),
    ("F0000092", "ITEM-092", "LOC-C1"),
    ("E0000081", "ITEM-081", "LOC-C1"),
]

BADGES = ["BADGE-MAX-1A2B", "0004726482"]


def build_ledger(**overrides) -> InventoryLedger:
    """Small deterministic ledger; keyword arguments override constructor args."""
    kwargs = dict(
        items=make_items(),
        locations=make_locations(),
        rows=make_rows(),
        badges=BADGES,
        default_location_id="LOC-A1",
        disposal_location_id="LOC-TRASH",
        quarantine_capacity=200,
    )
    kwargs.update(overrides)
    ledger = InventoryLedger(**kwargs)
    for tag, item_id, location_id in TAGS:
        ledger.tags.set(tag, item_id, location_id)
    return ledger


@pytest.fixture
def ledger() -> InventoryLedger:
    return build_ledger()


def assert_totals_consistent(ledger: InventoryLedger) -> None:
    """total == sum of rows and status follows reorderPoint, for every item."""
    for item in ledger.items():
        rows = ledger.stock_rows(item.id)
        assert item.total == sum(row.qty for row in rows), item.id
        expected = "RISK" if item.total <= (item.reorder_point or 0) else "OK"
        assert item.status.value == expected, item.id


@pytest_asyncio.fixture
async def client(test_settings: Settings, ledger: InventoryLedger) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client wired to the fixture ledger."""
    app = create_app(test_settings, ledger)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
