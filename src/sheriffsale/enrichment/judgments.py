"""
Judgment Enrichment

Merges scraped judgment amounts into listings by docket number. Listings
without a matching docket are left as they are.
"""
from typing import List, Optional

from src.sheriffsale.enrichment.base import EnrichmentPass, PassResult
from src.sheriffsale.models.listing import Listing
from src.sheriffsale.scrapers.judgment_scraper import JudgmentScraper
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)


class JudgmentEnricher(EnrichmentPass):
    source = "judgments"

    def __init__(self, reconciler, scraper: Optional[JudgmentScraper] = None, clock=None):
        super().__init__(reconciler, clock)
        self.scraper = scraper or JudgmentScraper()

    def enrich(self, listings: List[Listing]) -> PassResult:
        result = PassResult()
        judgments = self.scraper.fetch_judgments()
        if not judgments:
            logger.warning("judgments_unavailable")
            result.skipped = len(listings)
            return result

        for listing in listings:
            amount = judgments.get(listing.docket_number or "")
            if amount is None:
                result.skipped += 1
                continue

            result.attempted += 1
            if listing.judgment == amount:
                continue

            updated = listing.model_copy(update={"judgment": amount})
            if self.reconciler.save_listing(updated, ("judgment",)) is None:
                result.failed += 1
            else:
                result.enriched += 1

        logger.info(
            "judgments_merged",
            matched=result.attempted,
            updated=result.enriched,
            failed=result.failed
        )
        return result
