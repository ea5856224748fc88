"""
Parsers Package

Token loading, record anchoring and listing normalization for the sheriff
sale bid and postponement lists.
"""

from .bid_list_parser import (
    BidListParser,
    LayoutCompatibilityError,
    LayoutParameters,
    ParserState,
    ParseResult,
)
from .listing_normalizer import ListingNormalizer, RawFragment
from .token_loader import extract_pdf_tokens, load_pdf2json

__all__ = [
    "BidListParser",
    "LayoutCompatibilityError",
    "LayoutParameters",
    "ParserState",
    "ParseResult",
    "ListingNormalizer",
    "RawFragment",
    "extract_pdf_tokens",
    "load_pdf2json",
]
