"""
Enrichment Package

Valuation, judgment, law firm and geocoding passes plus the orchestrator
that runs them.
"""

from .base import EnrichmentPass, PassResult
from .credentials import CredentialPool
from .geocoding import GeocodingEnricher
from .judgments import JudgmentEnricher
from .law_firms import LawFirm, LawFirmEnricher, LawFirmTable
from .orchestrator import EnrichmentOrchestrator, EnrichmentReport
from .valuation import ValuationEnricher

__all__ = [
    "EnrichmentPass",
    "PassResult",
    "CredentialPool",
    "GeocodingEnricher",
    "JudgmentEnricher",
    "LawFirm",
    "LawFirmEnricher",
    "LawFirmTable",
    "EnrichmentOrchestrator",
    "EnrichmentReport",
    "ValuationEnricher",
]
