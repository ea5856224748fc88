"""
Enrichment Orchestrator

Runs the enrichment passes over the listings of one auction, in priority
order. Each pass reloads the listings so it sees what the previous pass
stored; a pass that raises is logged and the next pass still runs.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from src.sheriffsale.enrichment.base import EnrichmentPass, PassResult
from src.sheriffsale.enrichment.geocoding import GeocodingEnricher
from src.sheriffsale.enrichment.judgments import JudgmentEnricher
from src.sheriffsale.enrichment.law_firms import LawFirmEnricher
from src.sheriffsale.enrichment.valuation import ValuationEnricher
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class EnrichmentReport:
    """
    Outcome of one orchestrator run.

    Attributes:
        auction_id: Auction that was enriched
        passes: Result per pass source
        errors: Error message per pass source that raised
    """
    auction_id: str
    passes: Dict[str, PassResult] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)


class EnrichmentOrchestrator:
    """
    Drives valuation, judgments, law firms and geocoding.

    Example:
        >>> orchestrator = EnrichmentOrchestrator(reconciler)
        >>> report = orchestrator.run("032019")
    """

    def __init__(self, reconciler, passes: Optional[List[EnrichmentPass]] = None):
        self.reconciler = reconciler
        self.passes = passes if passes is not None else [
            ValuationEnricher(reconciler),
            JudgmentEnricher(reconciler),
            LawFirmEnricher(reconciler),
            GeocodingEnricher(reconciler),
        ]

    def run(self, auction_id: str) -> EnrichmentReport:
        report = EnrichmentReport(auction_id=auction_id)
        logger.info("enrichment_started", auction_id=auction_id, passes=len(self.passes))

        for enrichment_pass in self.passes:
            source = enrichment_pass.source
            try:
                listings = self.reconciler.listings_for_auction(auction_id)
                report.passes[source] = enrichment_pass.enrich(listings)
            except Exception as e:
                report.errors[source] = str(e)
                logger.error(
                    "enrichment_pass_failed",
                    source=source,
                    auction_id=auction_id,
                    error=str(e),
                    error_type=type(e).__name__
                )

        logger.info(
            "enrichment_complete",
            auction_id=auction_id,
            passes=list(report.passes),
            errors=list(report.errors)
        )
        return report
