"""Typed exceptions for the inventory ledger.

Every error carries a machine-readable ``code`` class attribute and the HTTP
``status_code`` the API layer answers with. Structured context is kept as
attributes and exposed through ``details`` so it survives serialization:

    try:
        ledger.scan(request)
    except CardNotMappedError as e:
        open_mapping_dialog(e.card_hex)

The API converts any ``LedgerError`` into ``{"ok": false, "error": code,
"message": str(e), **details}``.
"""

from typing import Any, Optional


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    code: str = "LEDGER_ERROR"
    status_code: int = 400

    def __init__(self, message: str, **details: Any):
        self.details = {k: v for k, v in details.items() if v is not None}
        super().__init__(message)


# Request-level errors


class PayloadTooLargeError(LedgerError):
    code = "PAYLOAD_TOO_LARGE"
    status_code = 413

    def __init__(self, limit_bytes: int):
        self.limit_bytes = limit_bytes
        super().__init__(f"Request body exceeds {limit_bytes} bytes")


class InvalidJsonError(LedgerError):
    code = "INVALID_JSON"

    def __init__(self, message: str = "Request body is not valid JSON"):
        super().__init__(message)


class InvalidRequestError(LedgerError):
    """Well-formed body that fails field validation."""

    code = "INVALID_REQUEST"


# Scan-resolution errors


class BadgeScanError(LedgerError):
    """An operator badge was presented on an inventory endpoint."""

    code = "BADGE_SCAN"

    def __init__(self, card_hex: str):
        self.card_hex = card_hex
        super().__init__("Badge scanned on inventory endpoint", cardHex=card_hex)


class FoodOnlyOutError(LedgerError):
    code = "FOOD_ONLY_OUT"

    def __init__(self, card_hex: str, item_id: str):
        self.card_hex = card_hex
        self.item_id = item_id
        super().__init__("Food items can only be checked OUT", cardHex=card_hex, itemId=item_id)


class TrashOnlyInError(LedgerError):
    code = "TRASH_ONLY_IN"

    def __init__(self, card_hex: str, item_id: str):
        self.card_hex = card_hex
        self.item_id = item_id
        super().__init__("Trash can only be checked IN", cardHex=card_hex, itemId=item_id)


class CardNotMappedError(LedgerError):
    """Tag has no directory entry."""

    code = "CARD_NOT_MAPPED"
    status_code = 404

    def __init__(self, card_hex: str):
        self.card_hex = card_hex
        super().__init__(f"Card {card_hex} is not mapped to an item", cardHex=card_hex)


class BadItemMappingError(LedgerError):
    """Directory entry points at an item the catalog does not know."""

    code = "BAD_ITEM_MAPPING"

    def __init__(self, card_hex: str, item_id: str):
        self.card_hex = card_hex
        self.item_id = item_id
        super().__init__(
            f"Card {card_hex} references unknown item {item_id}", cardHex=card_hex, itemId=item_id
        )


# Reference-data errors


class UnknownItemError(LedgerError):
    code = "UNKNOWN_ITEM"

    def __init__(self, item_id: Optional[str]):
        self.item_id = item_id
        super().__init__(f"Unknown item: {item_id}", itemId=item_id)


class UnknownLocationError(LedgerError):
    code = "UNKNOWN_LOCATION"

    def __init__(self, location_id: Optional[str], message: Optional[str] = None):
        self.location_id = location_id
        super().__init__(message or f"Unknown location: {location_id}", locationId=location_id)


# Ledger errors


class InsufficientStockError(LedgerError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, item_id: str, location_id: str, requested: int, available: int):
        self.item_id = item_id
        self.location_id = location_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot take {requested} of {item_id} from {location_id}: only {available} available",
            itemId=item_id,
            locationId=location_id,
            requested=requested,
            available=available,
        )
