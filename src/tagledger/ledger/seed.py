"""Demo reference data: locations, a 100-item catalog, stock, badges and tags.

Generated stock quantities come from a fixed-seed ``random.Random`` so every
start-up produces the same ledger.
"""

import logging
import random
from typing import Iterable, Optional

from ..utils import normalize_tag, utc_now_iso
from .models import Category, Item, Location, LogEntry, Mode, StockRow
from .service import InventoryLedger

logger = logging.getLogger(__name__)

SEED = 0xC0FFEE

LOCATIONS = [
    Location(id="LOC-A1", code="A1", description="Main bench left drawer"),
    Location(id="LOC-R1", code="R1", description="Rack 1, Bin 3"),
    Location(id="LOC-A2", code="A2", description="Main bench right drawer"),
    Location(id="LOC-B1", code="B1", description="Aux bench top shelf"),
    Location(id="LOC-B2", code="B2", description="Aux bench cabinet"),
    Location(id="LOC-R2", code="R2", description="Rack 1, Bin 4"),
    Location(id="LOC-R3", code="R3", description="Rack 2, Bin 1"),
    Location(id="LOC-R4", code="R4", description="Rack 2, Bin 2"),
    Location(id="LOC-R5", code="R5", description="Rack 3, Bin 1"),
    Location(id="LOC-C1", code="C1", description="Cold storage crate 1"),
    Location(id="LOC-C2", code="C2", description="Cold storage crate 2"),
    Location(id="LOC-S1", code="S1", description="Spare parts wall hooks"),
    Location(id="LOC-TRASH", code="TRASH", description="Disposal bag"),
]

# ITEM-001 and ITEM-002 stay uncategorized: their tags follow the plain
# directory rules (location falls back to where the tag was last seen).
NAMED_ITEMS = [
    ("ITEM-001", "WRENCH-SET", "Wrench Set", 8, 5, None),
    ("ITEM-002", "BOLT-M6", "M6 Bolt (stainless)", 20, 10, None),
    ("ITEM-003", "SCREW-M6", "Machine Screw (M6)", None, None, Category.GEN),
    ("ITEM-004", "WASHER-M8", "Flat Washer (M8)", None, None, Category.GEN),
    ("ITEM-005", "GASKET-M10", "Silicone Gasket (M10)", None, None, Category.GEN),
    ("ITEM-006", "O-RING-12", "O-Ring (12mm)", None, None, Category.GEN),
    ("ITEM-007", "CLAMP-16", "Hose Clamp (16mm)", None, None, Category.GEN),
    ("ITEM-008", "HOSE-1M", "Braided Hose (1m)", None, None, Category.GEN),
    ("ITEM-009", "VALVE-1/4", 'Check Valve (1/4")', None, None, Category.GEN),
    ("ITEM-010", "FILTER-10", "Inline Filter (10µm)", None, None, Category.GEN),
    ("ITEM-011", "CABLE-2M", "Shielded Cable (2m)", None, None, Category.GEN),
    ("ITEM-012", "TIE-100", "Cable Tie (100pcs)", None, None, Category.GEN),
    ("ITEM-013", "FUSE-5A", "Blade Fuse (5A)", None, None, Category.GEN),
    ("ITEM-014", "GAUGE-PSI", "Pressure Gauge (PSI)", None, None, Category.GEN),
    ("ITEM-015", "BOLT-M4", "Bolt M4", None, None, Category.GEN),
]

BASE_NAMES = [
    ("BOLT", "Bolt (stainless)"),
    ("NUT", "Hex Nut"),
    ("SCREW", "Machine Screw"),
    ("WASHER", "Flat Washer"),
    ("GASKET", "Silicone Gasket"),
    ("O-RING", "O-Ring"),
    ("CLAMP", "Hose Clamp"),
    ("HOSE", "Braided Hose"),
    ("VALVE", "Check Valve"),
    ("FILTER", "Inline Filter"),
    ("CABLE", "Shielded Cable"),
    ("TIE", "Cable Tie"),
    ("FUSE", "Blade Fuse"),
    ("GAUGE", "Pressure Gauge"),
    ("BRACKET", "Mount Bracket"),
    ("BEARING", "Ball Bearing"),
]

VARIANTS = [
    "M4", "M5", "M6", "M8", "M10", '1/4"', '3/8"', '1/2"',
    "Small", "Medium", "Large", "10mm", "12mm", "14mm", "16mm", "20mm",
]

# FOOD items ITEM-091..ITEM-100 pair with TRASH items ITEM-081..ITEM-090
FOODS = [
    ("PASTA", "Rehydratable Pasta"),
    ("RICE", "Thermostabilized Rice"),
    ("TORTILLA", "Tortilla Pack"),
    ("SOUP", "Vegetable Soup Pouch"),
    ("OATS", "Oatmeal Cup"),
    ("FRUIT", "Dried Fruit Mix"),
    ("NUTS", "Roasted Nuts"),
    ("BAR", "Protein Bar"),
    ("COFFEE", "Coffee Pouch"),
    ("JUICE", "Juice Drink Pouch"),
]
DISPOSAL_OFFSET = 10

BADGE_TAGS = [
    "BADGE-MAX-1A2B",
    "BADGE-JOSH-3C4D",
    "BADGE-BEN-5E6F",
    "BADGE-CREW4-7A8B",
    "BADGE-GROUND-9C0D",
    "0004726482",
    "0004704735",
    "0004661610",
    "0004721084",
]

# Physical card ids, assigned in order to ITEM-001..ITEM-100
ITEM_TAGS = """
0000939873 0021038140 0004647394 0004713968 0020963325 0004753912 0004557808 0004647914
0004745933 0004713796 0021062789 0004727638 0020956196 0004610500 0004559102 0004645381
0004757103 0004609889 0004646785 0004754438 0004630068 0004435432 0004425272 0004545073
0004634487 0004518470 0004435082 0004630838 0004411969 0004714575 0021100208 0020828300
0000826265 0004539060 0004719606 0004748442 0021004259 0004714026 0021028512 0021045757
0004705963 0004631172 0004753310 0004752080 0004553214 0004740067 0004719829 0004646391
0004747475 0004735058 0021018361 0020907723 0000718936 0021012850 0004755745 0020915771
0004726516 0020864329 0020963041 0021104587 0004531146 0004621363 0004537563 0004602736
0004706335 0008525594 0004550716 0004604353 0004560853 0004505020 0004617890 0004558495
0004622717 0004654992 0004614065 0004527093 0004533292 0004505655 0004602779 0004603948
0004715183 0004600596 0004544991 0004536987 0004713559 0004526322 0004436042 0004723996
0004646679 0004729656 0004530513 0004523569 0004562378 0004521124 0004515694 0004556655
0004756283 0020940074 0004352907 0020849167
""".split()

# Explicit mappings applied after the sequential assignment
EXTRA_TAGS = [
    ("3D00D51E2C", "ITEM-001", "LOC-A1"),
    ("3D00D51E2D", "ITEM-002", "LOC-R1"),
    ("0004706335", "ITEM-001", "LOC-A1"),
]


def _item_id(n: int) -> str:
    return f"ITEM-{n:03d}"


def _general_item(n: int, rng: random.Random) -> Item:
    sku_root, friendly = BASE_NAMES[(n - 1) % len(BASE_NAMES)]
    variant = VARIANTS[(n - 1) % len(VARIANTS)]
    safety_stock = rng.randint(2, 15)
    sku_variant = variant.replace('"', "").replace(" ", "").upper()
    return Item(
        id=_item_id(n),
        sku=f"{sku_root}-{sku_variant}",
        name=f"{friendly} ({variant})",
        description=f"Packaged {friendly.lower()}, {variant}, warehouse grade.",
        safety_stock=safety_stock,
        reorder_point=max(1, safety_stock // 2),
        category=Category.GEN,
    )


def _split_rows(item: Item, location_ids: list[str], rng: random.Random) -> list[StockRow]:
    """Spread a random total over 1-3 distinct locations."""
    chosen = rng.sample(location_ids, min(len(location_ids), rng.randint(1, 3)))
    remaining = max(0, rng.randint((item.reorder_point or 0) - 2, (item.safety_stock or 0) + 20))
    rows = []
    for index, location_id in enumerate(chosen):
        last = index == len(chosen) - 1
        chunk = remaining if last else rng.randint(0, -(-remaining * 7 // 10))
        chunk = min(chunk, remaining)
        rows.append(StockRow(item_id=item.id, location_id=location_id, qty=chunk))
        remaining -= chunk
    return rows


def demo_catalog() -> tuple[list[Item], list[StockRow]]:
    """The 100-item demo catalog and its stock rows."""
    rng = random.Random(SEED)
    storage_ids = [loc.id for loc in LOCATIONS if loc.id != "LOC-TRASH"]
    items: list[Item] = []
    rows: list[StockRow] = [
        StockRow(item_id="ITEM-001", location_id="LOC-A1", qty=1),
        StockRow(item_id="ITEM-002", location_id="LOC-R1", qty=87),
    ]

    for item_id, sku, name, safety, reorder, category in NAMED_ITEMS:
        if safety is None:
            safety = rng.randint(2, 15)
            reorder = max(1, safety // 2)
        items.append(
            Item(id=item_id, sku=sku, name=name, safety_stock=safety, reorder_point=reorder, category=category)
        )

    for n in range(len(NAMED_ITEMS) + 1, 81):
        items.append(_general_item(n, rng))

    for index, (code, food) in enumerate(FOODS):
        trash_n = 81 + index
        items.append(
            Item(
                id=_item_id(trash_n),
                sku=f"TRASH-{code}",
                name=f"{food} (empty packaging)",
                description=f"Disposal counterpart of {_item_id(trash_n + DISPOSAL_OFFSET)}.",
                reorder_point=0,
                category=Category.TRASH,
            )
        )
    for index, (code, food) in enumerate(FOODS):
        food_n = 91 + index
        safety = rng.randint(2, 15)
        items.append(
            Item(
                id=_item_id(food_n),
                sku=f"FOOD-{code}",
                name=food,
                description=f"Crew consumable, {food.lower()}.",
                safety_stock=safety,
                reorder_point=max(1, safety // 2),
                category=Category.FOOD,
                paired_disposal_id=_item_id(food_n - DISPOSAL_OFFSET),
            )
        )

    for item in items:
        if item.id in ("ITEM-001", "ITEM-002") or item.category is Category.TRASH:
            continue
        if item.category is Category.FOOD:
            rows.extend(_split_rows(item, ["LOC-C1", "LOC-C2"], rng))
        else:
            rows.extend(_split_rows(item, storage_ids, rng))
    return items, rows


def demo_log_entries() -> list[LogEntry]:
    now = utc_now_iso()
    return [
        LogEntry(
            id="LOG-1001",
            timestamp=now,
            item_id="ITEM-002",
            location_id="LOC-R1",
            mode=Mode.OUT,
            qty=5,
            actor="max",
            reason="prototype build",
            work_order="WO-17",
        ),
        LogEntry(
            id="LOG-1002",
            timestamp=now,
            item_id="ITEM-002",
            location_id="LOC-R1",
            mode=Mode.IN,
            qty=2,
            actor="max",
        ),
    ]


def build_demo_ledger(
    default_location_id: Optional[str] = "LOC-A1",
    disposal_location_id: Optional[str] = "LOC-TRASH",
    quarantine_capacity: int = 200,
    extra_badges: Iterable[str] = (),
) -> InventoryLedger:
    """Construct a ledger populated with the demo data set."""
    items, rows = demo_catalog()
    badges = list(BADGE_TAGS) + list(extra_badges)
    ledger = InventoryLedger(
        items=items,
        locations=LOCATIONS,
        rows=rows,
        badges=badges,
        log_entries=demo_log_entries(),
        default_location_id=default_location_id,
        disposal_location_id=disposal_location_id,
        quarantine_capacity=quarantine_capacity,
    )

    storage = [loc.id for loc in LOCATIONS if loc.id != disposal_location_id]
    tags = [t for t in ITEM_TAGS if not ledger.tags.is_badge(t)]
    for index, (tag, item) in enumerate(zip(tags, items)):
        ledger.tags.set(tag, item.id, storage[index % len(storage)])
    for tag, item_id, location_id in EXTRA_TAGS:
        if not ledger.tags.is_badge(tag):
            ledger.tags.set(normalize_tag(tag), item_id, location_id)

    logger.info(
        f"Loaded demo data: {len(ledger.catalog)} items, {len(ledger.locations)} locations, "
        f"{len(ledger.tags)} tags, {len(ledger.tags.badges)} badges"
    )
    return ledger
