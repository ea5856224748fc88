"""
Scrapers Package

HTTP clients for the sheriff sale documents, the judgment notices, the
valuation API and the geocoding API.
"""

from .document_scraper import DocumentScraper
from .geocoding_client import GeocodeCandidate, GeocodingClient
from .judgment_scraper import JudgmentScraper
from .valuation_client import ValuationBundle, ValuationClient, ValuationQuery

__all__ = [
    "DocumentScraper",
    "GeocodeCandidate",
    "GeocodingClient",
    "JudgmentScraper",
    "ValuationBundle",
    "ValuationClient",
    "ValuationQuery",
]
