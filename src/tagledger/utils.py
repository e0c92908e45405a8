"""Utility functions for tagledger."""

import re
from datetime import date, datetime, timezone
from typing import Optional

from dateutil import parser
from dateutil.relativedelta import relativedelta

_UNITS = {
    "day": "days",
    "week": "weeks",
    "month": "months",
    "year": "years",
}


def normalize_tag(raw: Optional[str]) -> str:
    """Canonical form of a tag identifier read from an RFID card.

    - Strip surrounding whitespace
    - Upper-case
    - Drop a leading ``0x`` prefix

    Examples:
        " 0x3d00d51e2c " -> "3D00D51E2C"
        "badge-max-1a2b" -> "BADGE-MAX-1A2B"
    """
    if raw is None:
        return ""
    return re.sub(r"^0X", "", str(raw).strip().upper())


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def _relative(num: int, unit: str, today: date) -> Optional[date]:
    key = _UNITS.get(unit.rstrip("s"))
    if key is None:
        return None
    return today + relativedelta(**{key: num})


def parse_flexible_date(date_str: str) -> Optional[date]:
    """
    Parse a flexible date string into a Python date object.

    Used for stock lot expiry dates. Supports:
    - ISO format: "2025-02-15", "2025/02/15"
    - Natural language: "today", "tomorrow", "next week"
    - Relative dates: "in 3 days", "2 weeks from now"
    - Month/Day: "April 15", "Dec 25"

    Args:
        date_str: String representation of a date

    Returns:
        date object if parsing succeeds, None if invalid
    """
    if not date_str or not date_str.strip():
        return None

    date_str = date_str.strip()
    today = datetime.now().date()
    lower_str = date_str.lower()

    if lower_str == "today":
        return today
    elif lower_str == "tomorrow":
        return today + relativedelta(days=1)
    elif lower_str == "yesterday":
        return today + relativedelta(days=-1)
    elif lower_str == "next week":
        return today + relativedelta(weeks=1)
    elif lower_str == "next month":
        return today + relativedelta(months=1)

    # "in X days/weeks/months"
    if lower_str.startswith("in "):
        parts = lower_str[3:].split()
        if len(parts) >= 2:
            try:
                result = _relative(int(parts[0]), parts[1], today)
            except ValueError:
                result = None
            if result is not None:
                return result

    # "X days/weeks/months from now"
    if "from now" in lower_str:
        parts = lower_str.replace("from now", "").strip().split()
        if len(parts) >= 2:
            try:
                result = _relative(int(parts[0]), parts[1], today)
            except ValueError:
                result = None
            if result is not None:
                return result

    try:
        parsed_dt = parser.parse(date_str, default=datetime(today.year, today.month, today.day))
        parsed_date = parsed_dt.date()

        # Month/day without a year that already passed means next year
        if parsed_date < today and str(parsed_dt.year) not in date_str:
            parsed_date = parsed_date.replace(year=today.year + 1)

        return parsed_date
    except (ValueError, OverflowError, parser.ParserError):
        return None
