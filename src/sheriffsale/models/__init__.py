"""
Models Package

Pydantic models for positional tokens and sheriff sale listings.
"""

from .listing import (
    CORE_FIELDS,
    Coordinates,
    EnrichmentState,
    EnrichmentStatus,
    Listing,
    ListingChecks,
    SaleType,
    ZillowData,
)
from .tokens import TextToken, TokenPage

__all__ = [
    "CORE_FIELDS",
    "Coordinates",
    "EnrichmentState",
    "EnrichmentStatus",
    "Listing",
    "ListingChecks",
    "SaleType",
    "ZillowData",
    "TextToken",
    "TokenPage",
]
