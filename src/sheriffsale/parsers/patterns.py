"""
Document Patterns

Regular expressions anchoring records inside the sheriff sale documents.
"""
import re
from typing import Optional

# Docket number, e.g. MG-19-001234. Marks the start of a record.
DOCKET_REGEX = re.compile(r"[A-Z]\w*-\d{2}-\d{6}")

_STATES = (
    r"AK|Alaska|AL|Alabama|AR|Arkansas|AZ|Arizona|CA|California|CO|Colorado|"
    r"CT|Connecticut|DC|Washington\sDC|Washington\D\.C\.|DE|Delaware|FL|Florida|"
    r"GA|Georgia|GU|Guam|HI|Hawaii|IA|Iowa|ID|Idaho|IL|Illinois|IN|Indiana|"
    r"KS|Kansas|KY|Kentucky|LA|Louisiana|MA|Massachusetts|MD|Maryland|ME|Maine|"
    r"MI|Michigan|MN|Minnesota|MO|Missouri|MS|Mississippi|MT|Montana|"
    r"NC|North\sCarolina|ND|North\sDakota|NE|New\sEngland|NH|New\sHampshire|"
    r"NJ|New\sJersey|NM|New\sMexico|NV|Nevada|NY|New\sYork|OH|Ohio|OK|Oklahoma|"
    r"OR|Oregon|PA|Pennsylvania|RI|Rhode\sIsland|SC|South\sCarolina|"
    r"SD|South\sDakota|TN|Tennessee|TX|Texas|UT|Utah|VA|Virginia|"
    r"VI|Virgin\sIslands|VT|Vermont|WA|Washington|WI|Wisconsin|"
    r"WV|West\sVirginia|WY|Wyoming"
)

# Street line + city + state + ZIP. Marks the end of a record.
ADDRESS_REGEX = re.compile(
    r"\b(p\.?\s?o\.?\b|post office|\d{1,5}|\s)\s*(?:\S\s*){8,50}"
    r"(" + _STATES + r")"
    r"(\s+|&nbsp;|<(\S|\s){1,10}>){1,5}\d{5}",
    re.IGNORECASE,
)

FREE_AND_CLEAR_REGEX = re.compile(
    r"F\s?&\s?C|\bFC\b|FREE\sAND\sCLEAR|FREE\s&\sCLEAR",
    re.IGNORECASE,
)

BANK_REGEX = re.compile(
    r"U\.?S\.?\sBANK|WELLS\sFARGO|DITECH\sFINANCIAL",
    re.IGNORECASE,
)

TAX_LIEN_REGEX = re.compile(r"LIEN", re.IGNORECASE)

HEADER_DATE_REGEX = re.compile(
    r"(Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?|"
    r"Aug(?:ust)?|Sep(?:tember)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
    r"\s+(\d{1,2})\s+(\d{4})",
    re.IGNORECASE,
)

ZIP_REGEX = re.compile(r"\b\d{5}\b")

AUCTION_HEADER_PHRASES = ("Master Bid List", "Postponement List Sale")
REPORT_HEADER_PHRASE = "Report Date:"
MUNICIPALITY_PREFIX = "Municipality: "

_MONTHS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")


def is_docket(text: str) -> bool:
    return bool(text) and DOCKET_REGEX.search(text) is not None


def is_address(text: str) -> bool:
    return bool(text) and ADDRESS_REGEX.search(text) is not None


def auction_id_from_header(text: str) -> Optional[str]:
    """
    Derive the MMYYYY auction code from a report header.

    Args:
        text: Header text, e.g. "Master Bid List Sale Date: March 4, 2019"

    Returns:
        Auction code such as "032019", or None if the header carries no date
    """
    if not any(phrase in text for phrase in AUCTION_HEADER_PHRASES):
        return None

    match = HEADER_DATE_REGEX.search(text.replace(",", "", 1))
    if not match:
        return None

    month = _MONTHS.index(match.group(1)[:3].lower()) + 1
    return f"{month:02d}{match.group(3)}"


def extract_zip(text: str) -> Optional[str]:
    """Return the first standalone 5-digit ZIP code in the text."""
    match = ZIP_REGEX.search(text or "")
    return match.group(0) if match else None
