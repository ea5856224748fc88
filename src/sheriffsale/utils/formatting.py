"""
Value Parsing and Formatting Utilities

Helpers shared by the normalizer, the enrichment passes and the KML renderer.
"""
import math
from datetime import date, datetime
from typing import Any, Optional, Union

from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)

DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y-%m-%d",
    "%b %d %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%B %d, %Y",
)


def parse_date_string(date_str: Any) -> Optional[datetime]:
    """
    Parse a document date in one of the known formats.

    Args:
        date_str: Raw date text (MM/DD/YYYY, YYYY-MM-DD, Mar 4 2019, ...)

    Returns:
        datetime, or None when the value is absent or unparsable
    """
    if isinstance(date_str, datetime):
        return date_str
    if not date_str or not isinstance(date_str, str):
        return None

    value = " ".join(date_str.split())
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    logger.debug("date_parse_failed", date_str=date_str)
    return None


def parse_amount(value: Any) -> Optional[float]:
    """
    Parse a currency amount such as "1,234.50" or "$ 12 000".

    Spaces, thousands separators and dollar signs are stripped.

    Returns:
        float, or None when the value is absent, unparsable or not finite
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        cleaned = value.replace(" ", "").replace(",", "").replace("$", "")
        if not cleaned:
            return None
        try:
            amount = float(cleaned)
        except ValueError:
            return None
    else:
        return None

    return amount if math.isfinite(amount) else None


def format_currency(amount: Optional[float]) -> str:
    """
    Format number as US currency.

    Returns:
        Formatted currency string (e.g., "$1,234.56"), empty when missing
    """
    if amount is None:
        return ""
    if amount < 0:
        return f"-${abs(amount):,.2f}"
    return f"${amount:,.2f}"


def format_number(value: Optional[float]) -> str:
    """Format with thousands separators, dropping a zero fraction."""
    if value is None:
        return ""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def format_short_date(value: Optional[Union[date, datetime, str]]) -> str:
    """
    Format a date as "Mar 4, 2019".

    ISO strings are accepted; anything unparsable is returned unchanged.
    """
    if value is None or value == "":
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return f"{value:%b} {value.day}, {value.year}"
