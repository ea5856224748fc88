"""
Enrichment Pass Base
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from src.sheriffsale.models.listing import Listing


@dataclass
class PassResult:
    """Per-pass counters reported by the orchestrator."""
    attempted: int = 0
    enriched: int = 0
    failed: int = 0
    skipped: int = 0


class EnrichmentPass:
    """
    One independently retryable enrichment source.

    Subclasses set ``source`` and implement ``enrich``. Results are written
    through ``reconciler.save_listing`` one listing at a time.
    """

    source: str = ""

    def __init__(self, reconciler, clock: Optional[Callable[[], datetime]] = None):
        self.reconciler = reconciler
        self.clock = clock or reconciler.clock

    def enrich(self, listings: List[Listing]) -> PassResult:
        raise NotImplementedError
