"""Item catalog and location registry (read-mostly reference data)."""

import logging
from typing import Iterable, Optional

from ..exceptions import UnknownItemError, UnknownLocationError
from .models import Category, Item, Location

logger = logging.getLogger(__name__)


class ItemCatalog:
    """Registry of stock-keeping units, in insertion order."""

    def __init__(self, items: Iterable[Item] = ()):
        self._items: dict[str, Item] = {}
        for item in items:
            self.add(item)

    def add(self, item: Item) -> Item:
        """Register an item, replacing any previous item with the same id."""
        if item.paired_disposal_id is not None and item.category is not Category.FOOD:
            raise ValueError(f"Only FOOD items can have a paired disposal item ({item.id})")
        self._items[item.id] = item
        logger.debug(f"Catalog: added {item.id} ({item.sku})")
        return item

    def get(self, item_id: Optional[str]) -> Optional[Item]:
        if item_id is None:
            return None
        return self._items.get(item_id)

    def require(self, item_id: Optional[str]) -> Item:
        """Return the item or raise ``UnknownItemError``."""
        item = self.get(item_id)
        if item is None:
            raise UnknownItemError(item_id)
        return item

    def paired_disposal(self, item: Item) -> Optional[Item]:
        """The catalog's disposal counterpart of a FOOD item, if it exists."""
        if item.category is not Category.FOOD:
            return None
        return self.get(item.paired_disposal_id)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __iter__(self):
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)


class LocationRegistry:
    """Named physical storage bins, including the designated disposal location."""

    def __init__(self, locations: Iterable[Location] = (), disposal_location_id: Optional[str] = None):
        self._locations: dict[str, Location] = {}
        self.disposal_location_id = disposal_location_id
        for location in locations:
            self.add(location)

    def add(self, location: Location) -> Location:
        self._locations[location.id] = location
        return location

    def get(self, location_id: Optional[str]) -> Optional[Location]:
        if not location_id:
            return None
        return self._locations.get(location_id)

    def require(self, location_id: Optional[str]) -> Location:
        """Return the location or raise ``UnknownLocationError``."""
        if not location_id:
            raise UnknownLocationError(None, "locationId required")
        location = self._locations.get(location_id)
        if location is None:
            raise UnknownLocationError(location_id)
        return location

    def disposal(self) -> Location:
        """The location TRASH items are forced into."""
        location = self.get(self.disposal_location_id)
        if location is None:
            raise UnknownLocationError(
                self.disposal_location_id, "No disposal location configured in the registry"
            )
        return location

    def __contains__(self, location_id: object) -> bool:
        return location_id in self._locations

    def __iter__(self):
        return iter(self._locations.values())

    def __len__(self) -> int:
        return len(self._locations)
